"""Locale overlay normalization.

A block's ``locales`` map holds per-language overrides::

    {"fr": {"content": "**Bonjour** {{name}}"},
     "de": {"elements": [{"type": "string", "content": "Hallo"}]}}

Historically overrides were stored either as a marked-up ``content``
string or as structured ``elements`` runs.  Text blocks always persist
the ``elements`` form; quote blocks, whose default content is itself a
string, persist the ``content`` form.
"""

from __future__ import annotations

import copy
from typing import Any

from elementalify.converter.inline import parse_inline, serialize_inline
from elementalify.converter.runs import nodes_to_runs, runs_to_nodes


def _entries(locales: Any):
    if not isinstance(locales, dict):
        return
    for code, entry in locales.items():
        if isinstance(entry, dict):
            yield code, entry


def normalize_locales(locales: Any) -> dict[str, dict]:
    """Rewrite every locale entry into the structured ``elements`` form.

    Entries that already carry ``elements`` are copied unchanged.  Entries
    with only a ``content`` string have it parsed as inline markup and
    coalesced into runs.  Entries that are not objects are dropped; other
    keys on an entry (``href``, ``src``...) are kept.

    >>> normalize_locales({"fr": {"content": "Salut"}})
    {'fr': {'elements': [{'type': 'string', 'content': 'Salut'}]}}
    """
    result: dict[str, dict] = {}
    for code, entry in _entries(locales):
        normalized = copy.deepcopy(entry)
        if isinstance(entry.get("elements"), list):
            normalized.pop("content", None)
        elif isinstance(entry.get("content"), str):
            content = normalized.pop("content")
            normalized["elements"] = nodes_to_runs(parse_inline(content))
        result[code] = normalized
    return result


def locales_to_content(locales: Any) -> dict[str, dict]:
    """Rewrite every locale entry into the marked-up ``content`` form."""
    result: dict[str, dict] = {}
    for code, entry in _entries(locales):
        normalized = copy.deepcopy(entry)
        if not isinstance(entry.get("content"), str) and isinstance(entry.get("elements"), list):
            elements = normalized.pop("elements")
            normalized["content"] = serialize_inline(runs_to_nodes(elements)).strip()
        else:
            normalized.pop("elements", None)
        result[code] = normalized
    return result
