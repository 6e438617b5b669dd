"""Document-level helpers for Elemental content.

The converters work on one channel's block list at a time.  These helpers
cover the surrounding document: reading a title, listing the variables a
template uses, and writing a converted block list back into its channel.
"""

from __future__ import annotations

import copy
from typing import Any

from elementalify.converter.runs import runs_plain_text
from elementalify.converter.variables import PLACEHOLDER_RE, placeholder_name
from elementalify.schema import ELEMENTAL_VERSION

_HEADING_STYLES: tuple[str, ...] = ("h1", "h2")

# Block types whose ``content`` string may hold placeholders.
_CONTENT_TYPES: tuple[str, ...] = ("text", "string", "link", "quote", "action")

# Channel keys that updates may never overwrite.
_RESERVED_CHANNEL_KEYS: tuple[str, ...] = ("type", "channel", "elements")


# ---------------------------------------------------------------------------
# Titles
# ---------------------------------------------------------------------------

def _text_content(block: dict) -> str:
    if isinstance(block.get("content"), str):
        return block["content"]
    if isinstance(block.get("elements"), list):
        return runs_plain_text(block["elements"])
    return ""


def _raw_title(raw: Any) -> str:
    if not isinstance(raw, dict):
        return ""
    for key in ("subject", "title"):
        if isinstance(raw.get(key), str) and raw[key]:
            return raw[key]
    return ""


def get_title(elements: Any) -> str:
    """Extract a display title from an Elemental entry list.

    Lookup order:

    1. the first ``meta`` block with a non-empty ``title``;
    2. a channel's ``raw.subject`` then ``raw.title``;
    3. the same search inside each channel's own blocks;
    4. the first ``h1``/``h2`` text block, then the first text block.

    Entries with ``visible: False`` are ignored.  Returns ``""`` when
    nothing qualifies.
    """
    first_heading = ""
    first_text = ""

    for element in elements if isinstance(elements, list) else ():
        if not isinstance(element, dict) or element.get("visible") is False:
            continue
        element_type = element.get("type")

        if element_type == "meta" and isinstance(element.get("title"), str) and element["title"]:
            return element["title"]

        if element_type == "channel":
            title = _raw_title(element.get("raw"))
            if title:
                return title

        if element_type == "text":
            content = _text_content(element).strip()
            if content:
                if element.get("text_style") in _HEADING_STYLES:
                    first_heading = first_heading or content
                else:
                    first_text = first_text or content

        if element_type == "channel" and isinstance(element.get("elements"), list):
            title = get_title(element["elements"])
            if title:
                return title

    return first_heading or first_text


def get_title_for_channel(content: Any, channel: str) -> str:
    """Title of one channel of *content*.

    ``raw.subject`` / ``raw.title`` win.  Otherwise an ``email`` channel
    only reports its ``meta.title`` (body text is never a subject), while
    other channels fall back to :func:`get_title` over their blocks.
    """
    if not isinstance(content, dict) or not isinstance(content.get("elements"), list):
        return ""
    target = next(
        (
            entry for entry in content["elements"]
            if isinstance(entry, dict)
            and entry.get("type") == "channel"
            and entry.get("channel") == channel
        ),
        None,
    )
    if target is None:
        return ""

    title = _raw_title(target.get("raw"))
    if title:
        return title

    blocks = target.get("elements")
    if not isinstance(blocks, list):
        return ""
    if channel == "email":
        meta = next(
            (b for b in blocks if isinstance(b, dict) and b.get("type") == "meta"),
            None,
        )
        if meta is not None and isinstance(meta.get("title"), str):
            return meta["title"]
        return ""
    return get_title(blocks)


# ---------------------------------------------------------------------------
# Variables
# ---------------------------------------------------------------------------

def _scan(text: Any, names: set[str]) -> None:
    if not isinstance(text, str):
        return
    for match in PLACEHOLDER_RE.finditer(text):
        name = placeholder_name(match).strip()
        if name:
            names.add(name)


def _collect(node: Any, names: set[str]) -> None:
    if not isinstance(node, dict):
        return

    if node.get("type") in _CONTENT_TYPES:
        _scan(node.get("content"), names)

    if node.get("type") == "channel" and isinstance(node.get("raw"), dict):
        for value in node["raw"].values():
            _scan(value, names)

    if isinstance(node.get("elements"), list):
        for child in node["elements"]:
            _collect(child, names)

    if isinstance(node.get("locales"), dict):
        for entry in node["locales"].values():
            if not isinstance(entry, dict):
                continue
            _scan(entry.get("content"), names)
            for child in entry.get("elements") or []:
                _collect(child, names)


def extract_variables(elements: Any) -> list[str]:
    """Sorted, de-duplicated variable names used anywhere in *elements*.

    >>> extract_variables([{"type": "text", "content": "Hi {{ user.name }}"}])
    ['user.name']
    """
    names: set[str] = set()
    for element in elements if isinstance(elements, list) else ():
        _collect(element, names)
    return sorted(names)


# ---------------------------------------------------------------------------
# Writing blocks back
# ---------------------------------------------------------------------------

def _channel_blocks(elements: list, existing: list | None) -> list:
    """New channel block list holding exactly one ``meta`` block."""
    blocks = copy.deepcopy(elements)
    meta = next((b for b in blocks if isinstance(b, dict) and b.get("type") == "meta"), None)
    if meta is None and existing:
        meta = next(
            (copy.deepcopy(b) for b in existing if isinstance(b, dict) and b.get("type") == "meta"),
            None,
        )
    rest = [b for b in blocks if not (isinstance(b, dict) and b.get("type") == "meta")]
    return ([meta] if meta is not None else []) + rest


def update_elemental(
    content: Any,
    *,
    elements: list | None = None,
    channel: str | dict | None = None,
) -> dict:
    """Return a copy of *content* with one channel's blocks replaced.

    Parameters
    ----------
    content:
        The document to update.  ``None`` starts from an empty
        ``2022-01-01`` document.
    elements:
        New block list for the channel.  When ``None`` the channel's
        blocks are left untouched.  A ``meta`` block in the list replaces
        the channel's existing one; otherwise the existing one is kept.
    channel:
        Either a channel name, or a dict of channel attributes (``raw``,
        ``locales``...) optionally naming the channel under ``"channel"``.
        Without a name the first channel is updated.

    Returns
    -------
    dict
        A new document.  Top-level ``meta`` entries are dropped; a channel
        that does not exist yet is appended (named ``"email"`` when no
        name was given).
    """
    current = content if isinstance(content, dict) else {"version": ELEMENTAL_VERSION, "elements": []}
    result = {key: copy.deepcopy(value) for key, value in current.items() if key != "elements"}
    result.setdefault("version", ELEMENTAL_VERSION)
    result["elements"] = []

    if isinstance(channel, dict):
        target_name = channel.get("channel") if isinstance(channel.get("channel"), str) else None
        updates = {k: copy.deepcopy(v) for k, v in channel.items() if k not in _RESERVED_CHANNEL_KEYS}
    else:
        target_name = channel
        updates = {}

    handled = False
    entries = current.get("elements") if isinstance(current.get("elements"), list) else []
    for entry in entries:
        if isinstance(entry, dict) and entry.get("type") == "meta":
            continue
        is_channel = isinstance(entry, dict) and entry.get("type") == "channel"
        selected = is_channel and (
            entry.get("channel") == target_name if target_name is not None else not handled
        )
        if not selected:
            result["elements"].append(copy.deepcopy(entry))
            continue

        updated: dict[str, Any] = {"type": "channel", "channel": entry.get("channel")}
        updated.update(
            (k, copy.deepcopy(v)) for k, v in entry.items() if k not in _RESERVED_CHANNEL_KEYS
        )
        updated.update(updates)
        if elements is not None:
            updated["elements"] = _channel_blocks(elements, entry.get("elements"))
        elif "elements" in entry:
            updated["elements"] = copy.deepcopy(entry["elements"])
        result["elements"].append(updated)
        handled = True

    if not handled:
        created: dict[str, Any] = {"type": "channel", "channel": target_name or "email"}
        created.update(updates)
        if elements is not None:
            created["elements"] = _channel_blocks(elements, None)
        result["elements"].append(created)

    return result
