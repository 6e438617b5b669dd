"""Elemental ↔ editor ↔ Markdown conversion pipeline.

Public API:

- :class:`ElementalToEditorConverter` — Elemental document → editor ``doc``.
- :func:`convert_editor_to_elemental` — editor ``doc`` → Elemental blocks.
- :class:`MarkdownConverter` — flat Markdown ↔ editor ``doc``.
- :func:`parse_inline` / :func:`serialize_inline` — inline markup engine.
- :func:`normalize_locales` — locale overrides to structured runs.
- :func:`is_valid_variable_name` — placeholder name validation.
"""

from elementalify.converter.editor_to_elemental import build_elemental, convert_editor_to_elemental
from elementalify.converter.elemental_to_editor import (
    ElementalToEditorConverter,
    convert_elemental_to_editor,
)
from elementalify.converter.inline import InlineParser, parse_inline, serialize_inline
from elementalify.converter.locales import locales_to_content, normalize_locales
from elementalify.converter.markdown import (
    MarkdownConverter,
    convert_editor_to_markdown,
    convert_markdown_to_editor,
)
from elementalify.converter.runs import nodes_to_runs, runs_to_nodes
from elementalify.converter.variables import is_valid_variable_name

__all__ = [
    "ElementalToEditorConverter",
    "InlineParser",
    "MarkdownConverter",
    "build_elemental",
    "convert_editor_to_elemental",
    "convert_editor_to_markdown",
    "convert_elemental_to_editor",
    "convert_markdown_to_editor",
    "is_valid_variable_name",
    "locales_to_content",
    "nodes_to_runs",
    "normalize_locales",
    "parse_inline",
    "runs_to_nodes",
    "serialize_inline",
]
