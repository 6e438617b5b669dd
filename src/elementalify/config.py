"""Converter configuration for elementalify.

:class:`ElementalifyConfig` is a plain dataclass that captures every
tuneable knob of the conversion engine.  Instances are passed to the
Elemental, editor and Markdown converters.  The defaults reproduce the
behaviour the editor ships with, so ``ElementalifyConfig()`` is always a
valid starting point.

Two module-level constants name the channels with special handling:

* :data:`DEFAULT_INBOX_CHANNELS` -- button folding and default styling.
* :data:`DEFAULT_TITLE_CHANNELS` -- ``meta.title`` surfaced as a heading.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Literal

# ---------------------------------------------------------------------------
# Channel constants
# ---------------------------------------------------------------------------

DEFAULT_INBOX_CHANNELS: tuple[str, ...] = ("inbox",)
"""Channels whose adjacent buttons fold into a ``buttonRow`` and whose
buttons receive the black/white default styling."""

DEFAULT_TITLE_CHANNELS: tuple[str, ...] = ("push",)
"""Channels whose ``meta.title`` is shown in the editor as an ``h2``."""


# ---------------------------------------------------------------------------
# Configuration dataclass
# ---------------------------------------------------------------------------

@dataclass
class ElementalifyConfig:
    """Complete configuration for the elementalify converters.

    Parameters
    ----------
    default_button_label:
        Label given to a ``button`` node when the source ``action`` block
        carries no ``content``.
    html_placeholder:
        Code shown in a ``customCode`` node when the ``html`` block has no
        content.
    column_placeholder_text:
        Sentinel text stored for an empty column cell.  A text block with
        exactly this content becomes an empty cell on the way back in.
    button_row_channels:
        Channels in which every adjacent pair of buttons folds into one
        ``buttonRow`` node.
    styled_button_channels:
        Channels in which buttons without explicit colours get the
        black-background, white-text default styling.
    title_heading_channels:
        Channels whose ``meta.title`` is surfaced as a synthetic ``h2``
        text block for display in the editor.
    max_depth:
        Maximum nesting depth the block converters will descend into.
    depth_overflow_policy:
        Behaviour when a subtree is nested deeper than ``max_depth``.

        * ``"truncate"`` -- drop the subtree and record a warning.
        * ``"raise"`` -- raise :class:`ElementalifyDepthError`.
    unknown_node_policy:
        Behaviour for a storage block whose ``type`` tag is unknown.

        * ``"skip"`` -- contribute zero nodes and record a warning.
        * ``"raise"`` -- raise :class:`ElementalifyUnsupportedNodeError`.
    id_factory:
        Zero-argument callable returning a fresh identifier for each
        block-level editor node.  Defaults to ``node-<uuid4>``.
    metrics:
        A :class:`~elementalify.observability.MetricsHook`.  ``None``
        disables metrics.
    debug_dump_tree:
        Write every produced tree to *stderr* as JSON.
    """

    # ── Labels & placeholders ───────────────────────────────────────────
    default_button_label: str = "Button"

    html_placeholder: str = "<!-- Add your HTML code here -->"

    column_placeholder_text: str = "Drag and drop content blocks"

    # ── Channels ────────────────────────────────────────────────────────
    button_row_channels: tuple[str, ...] = field(
        default_factory=lambda: tuple(DEFAULT_INBOX_CHANNELS),
    )

    styled_button_channels: tuple[str, ...] = field(
        default_factory=lambda: tuple(DEFAULT_INBOX_CHANNELS),
    )

    title_heading_channels: tuple[str, ...] = field(
        default_factory=lambda: tuple(DEFAULT_TITLE_CHANNELS),
    )

    # ── Recursion ───────────────────────────────────────────────────────
    max_depth: int = 64

    depth_overflow_policy: Literal["truncate", "raise"] = "truncate"

    # ── Unknown input ───────────────────────────────────────────────────
    unknown_node_policy: Literal["skip", "raise"] = "skip"

    # ── Identifiers ─────────────────────────────────────────────────────
    id_factory: Callable[[], str] | None = None

    # ── Observability ──────────────────────────────────────────────────
    metrics: Any | None = None

    # ── Debug ───────────────────────────────────────────────────────────
    debug_dump_tree: bool = False

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.max_depth < 1:
            raise ValueError(f"max_depth must be >= 1, got {self.max_depth}")
        if self.depth_overflow_policy not in ("truncate", "raise"):
            raise ValueError(
                "depth_overflow_policy must be 'truncate' or 'raise', "
                f"got {self.depth_overflow_policy!r}"
            )
        if self.unknown_node_policy not in ("skip", "raise"):
            raise ValueError(
                f"unknown_node_policy must be 'skip' or 'raise', got {self.unknown_node_policy!r}"
            )
        if self.id_factory is not None and not callable(self.id_factory):
            raise ValueError("id_factory must be callable")

        # Channel collections are stored as tuples.
        for name in ("button_row_channels", "styled_button_channels", "title_heading_channels"):
            value = getattr(self, name)
            if isinstance(value, str):
                raise ValueError(f"{name} must be a collection of channel names, not a string")
            setattr(self, name, tuple(value))

    def __repr__(self) -> str:
        """Show the callable's name rather than its address."""
        parts: list[str] = []
        for f in dataclasses.fields(self):
            val = getattr(self, f.name)
            if f.name == "id_factory" and val is not None:
                parts.append(f"id_factory={getattr(val, '__name__', type(val).__name__)}")
            else:
                parts.append(f"{f.name}={val!r}")
        return f"ElementalifyConfig({', '.join(parts)})"
