"""elementalify — Bidirectional Elemental / editor / Markdown conversion.

Public re-exports
-----------------

* **Converters:** :class:`ElementalToEditorConverter`,
  :func:`convert_editor_to_elemental`, :class:`MarkdownConverter`
* **Configuration:** :class:`ElementalifyConfig`
* **Errors:** Every :class:`ElementalifyError` subclass and :class:`ErrorCode`
* **Schema & documents:** :func:`validate_elemental`, :func:`get_title`,
  :func:`extract_variables`, :func:`update_elemental`

Usage::

    from elementalify import convert_editor_to_elemental, convert_elemental_to_editor

    doc = convert_elemental_to_editor(content, channel="email")
    blocks = convert_editor_to_elemental(doc)
"""

from __future__ import annotations

# ── Configuration ───────────────────────────────────────────────────────
from elementalify.config import (
    DEFAULT_INBOX_CHANNELS,
    DEFAULT_TITLE_CHANNELS,
    ElementalifyConfig,
)

# ── Converters ──────────────────────────────────────────────────────────
from elementalify.converter import (
    ElementalToEditorConverter,
    InlineParser,
    MarkdownConverter,
    build_elemental,
    convert_editor_to_elemental,
    convert_editor_to_markdown,
    convert_elemental_to_editor,
    convert_markdown_to_editor,
    is_valid_variable_name,
    normalize_locales,
    parse_inline,
    serialize_inline,
)

# ── Documents ───────────────────────────────────────────────────────────
from elementalify.document import (
    extract_variables,
    get_title,
    get_title_for_channel,
    update_elemental,
)

# ── Errors ──────────────────────────────────────────────────────────────
from elementalify.errors import (
    ElementalifyConversionError,
    ElementalifyDepthError,
    ElementalifyError,
    ElementalifyUnsupportedNodeError,
    ElementalifyValidationError,
    ErrorCode,
)

# ── Models ──────────────────────────────────────────────────────────────
from elementalify.models import ConversionWarning, ListType, MarkType, WarningCode

# ── Schema ──────────────────────────────────────────────────────────────
from elementalify.schema import ElementalContent, is_valid_elemental, validate_elemental

# ── Public surface ──────────────────────────────────────────────────────

__all__ = [
    # Converters
    "ElementalToEditorConverter",
    "MarkdownConverter",
    "InlineParser",
    "convert_elemental_to_editor",
    "convert_editor_to_elemental",
    "build_elemental",
    "convert_markdown_to_editor",
    "convert_editor_to_markdown",
    "parse_inline",
    "serialize_inline",
    "normalize_locales",
    "is_valid_variable_name",
    # Configuration
    "ElementalifyConfig",
    "DEFAULT_INBOX_CHANNELS",
    "DEFAULT_TITLE_CHANNELS",
    # Documents
    "get_title",
    "get_title_for_channel",
    "extract_variables",
    "update_elemental",
    # Schema
    "ElementalContent",
    "validate_elemental",
    "is_valid_elemental",
    # Error base + code enum
    "ElementalifyError",
    "ErrorCode",
    # Errors
    "ElementalifyValidationError",
    "ElementalifyConversionError",
    "ElementalifyUnsupportedNodeError",
    "ElementalifyDepthError",
    # Models
    "ConversionWarning",
    "WarningCode",
    "MarkType",
    "ListType",
]
