"""Public data models for elementalify.

Trees themselves are plain JSON-shaped dicts; this module only holds the
small supporting types: the tag enums shared by both tree shapes and the
warning record converters accumulate.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class MarkType(str, Enum):
    """Inline marks carried by editor ``text`` and ``variable`` leaves."""

    BOLD = "bold"
    ITALIC = "italic"
    STRIKE = "strike"
    UNDERLINE = "underline"
    LINK = "link"
    TEXT_COLOR = "textColor"


class ListType(str, Enum):
    """Ordering of an Elemental ``list`` block."""

    ORDERED = "ordered"
    UNORDERED = "unordered"


class WarningCode(str, Enum):
    """Codes used for :class:`ConversionWarning`."""

    UNKNOWN_NODE = "UNKNOWN_NODE"
    """A node tag the converter does not know was dropped."""

    MALFORMED_NODE = "MALFORMED_NODE"
    """A value that is not a JSON object was found where a node belongs."""

    DEPTH_EXCEEDED = "DEPTH_EXCEEDED"
    """A subtree nested deeper than ``max_depth`` was dropped."""


# ---------------------------------------------------------------------------
# Conversion warnings
# ---------------------------------------------------------------------------

@dataclass
class ConversionWarning:
    """A non-fatal issue encountered during conversion.

    Warnings are accumulated on the converter so callers can inspect
    them after the call returns.

    Attributes
    ----------
    code:
        A machine-readable warning code (see :class:`WarningCode`).
    message:
        A human-readable description of the issue.
    context:
        Arbitrary structured data for diagnostics.
    """

    code: str
    message: str
    context: dict = field(default_factory=dict)
