"""Convert an editor document back into Elemental blocks.

This module handles every editor node kind:

- paragraph / heading -> text block with coalesced ``elements`` runs
- button -> action (alignment always written)
- buttonRow -> two left-aligned actions
- blockquote -> quote with marked-up ``content``
- imageBlock -> image with a percentage width
- divider -> divider
- customCode -> html
- column -> group (multi-block cells re-wrapped in a nested group)
- list / listItem -> list / list-item with structured runs
- anything else -> its children, flattened

The result is a bare block list; wrapping it in a channel and document
is left to the caller (see :func:`elementalify.document.update_elemental`).
"""

from __future__ import annotations

import copy
import json
import sys
import time
from collections.abc import Callable as _Callable
from typing import Any

from elementalify.config import ElementalifyConfig
from elementalify.converter.inline import hard_break, serialize_inline
from elementalify.converter.locales import locales_to_content, normalize_locales
from elementalify.converter.runs import nodes_to_runs
from elementalify.converter.styles import (
    align_to_elemental,
    attrs_to_border,
    format_padding,
    format_percent,
    format_px,
    parse_px,
)
from elementalify.errors import ElementalifyDepthError
from elementalify.models import ConversionWarning, ListType, WarningCode
from elementalify.observability import get_logger, resolve_metrics

log = get_logger("elementalify.converter")

_DIRECTION = "editor_to_elemental"

_TEXT_STYLES: dict[int, str] = {1: "h1", 2: "h2", 3: "subtext"}

_TEXT_NODE_TYPES: tuple[str, ...] = ("paragraph", "heading")


def convert_editor_to_elemental(
    doc: Any,
    config: ElementalifyConfig | None = None,
) -> list[dict]:
    """Convert an editor ``doc`` into a list of Elemental blocks.

    Parameters
    ----------
    doc:
        Editor root node ``{"type": "doc", "content": [...]}``.
    config:
        Converter configuration.  Defaults to ``ElementalifyConfig()``.

    Returns
    -------
    list[dict]
        The Elemental blocks, in document order.
    """
    blocks, _warnings = build_elemental(doc, config)
    return blocks


def build_elemental(
    doc: Any,
    config: ElementalifyConfig | None = None,
) -> tuple[list[dict], list[ConversionWarning]]:
    """Convert an editor ``doc`` and also return the warnings raised.

    Returns
    -------
    tuple[list[dict], list[ConversionWarning]]
        (blocks, warnings)
    """
    ctx = _BuildContext(config or ElementalifyConfig())
    started = time.perf_counter()

    content = doc.get("content") if isinstance(doc, dict) else None
    blocks = _process_nodes(content, ctx, 0)

    ctx.finish(blocks, started)
    return blocks, ctx.warnings


class _BuildContext:
    """Mutable accumulator for the reverse conversion pass."""

    __slots__ = ("config", "metrics", "warnings")

    def __init__(self, config: ElementalifyConfig) -> None:
        self.config = config
        self.metrics = resolve_metrics(config.metrics)
        self.warnings: list[ConversionWarning] = []

    def add_warning(self, code: WarningCode, message: str, *, reason: str, **context: object) -> None:
        self.warnings.append(ConversionWarning(
            code=code.value, message=message, context=dict(context),
        ))
        self.metrics.increment("elementalify.nodes_skipped_total", tags={"reason": reason})
        log.warning(
            message,
            extra={"extra_fields": {"op": _DIRECTION, "code": code.value, **context}},
        )

    def finish(self, blocks: list[dict], started: float) -> None:
        elapsed_ms = (time.perf_counter() - started) * 1000
        tags = {"direction": _DIRECTION}
        self.metrics.increment("elementalify.conversions_total", tags=tags)
        self.metrics.timing("elementalify.conversion_duration_ms", elapsed_ms, tags=tags)
        if self.warnings:
            self.metrics.increment(
                "elementalify.conversion_warnings_total", len(self.warnings), tags=tags,
            )
        log.debug(
            "Editor tree converted",
            extra={
                "extra_fields": {
                    "op": _DIRECTION,
                    "blocks": len(blocks),
                    "warnings": len(self.warnings),
                }
            },
        )
        if self.config.debug_dump_tree:
            print(
                "[elementalify] Elemental blocks:",
                json.dumps(blocks, indent=2, ensure_ascii=False),
                file=sys.stderr,
            )


# ---------------------------------------------------------------------------
# Node dispatch
# ---------------------------------------------------------------------------

def _process_nodes(nodes: Any, ctx: _BuildContext, depth: int) -> list[dict]:
    blocks: list[dict] = []
    if not isinstance(nodes, list):
        return blocks
    for node in nodes:
        blocks.extend(_process_node(node, ctx, depth))
    return blocks


def _process_node(node: Any, ctx: _BuildContext, depth: int) -> list[dict]:
    """Dispatch a single editor node to its handler."""
    if not isinstance(node, dict):
        ctx.add_warning(
            WarningCode.MALFORMED_NODE,
            "Dropped a value that is not an editor node",
            reason="malformed",
            value_type=type(node).__name__,
            depth=depth,
        )
        return []

    node_type = node.get("type")
    if depth > ctx.config.max_depth:
        if ctx.config.depth_overflow_policy == "raise":
            raise ElementalifyDepthError(
                message=f"Editor tree nesting exceeds max_depth={ctx.config.max_depth}",
                context={"max_depth": ctx.config.max_depth, "node_type": node_type},
            )
        ctx.add_warning(
            WarningCode.DEPTH_EXCEEDED,
            f"Dropped subtree nested deeper than {ctx.config.max_depth}",
            reason="depth",
            node_type=node_type,
            depth=depth,
        )
        return []

    handler = _NODE_HANDLERS.get(node_type) if isinstance(node_type, str) else None
    if handler is not None:
        return handler(node, ctx, depth)

    # Unknown wrappers contribute their children.
    return _process_nodes(node.get("content"), ctx, depth + 1)


def _attrs(node: dict) -> dict:
    attrs = node.get("attrs")
    return attrs if isinstance(attrs, dict) else {}


def _children(node: dict) -> list:
    content = node.get("content")
    return content if isinstance(content, list) else []


def _padding(attrs: dict) -> str | None:
    vertical = parse_px(attrs.get("paddingVertical"))
    horizontal = parse_px(attrs.get("paddingHorizontal"))
    if vertical is None or horizontal is None:
        return None
    return format_padding(vertical, horizontal)


# ---------------------------------------------------------------------------
# Text blocks
# ---------------------------------------------------------------------------

def _build_text(node: dict, ctx: _BuildContext, depth: int) -> list[dict]:
    attrs = _attrs(node)
    block: dict[str, Any] = {
        "type": "text",
        "align": align_to_elemental(attrs.get("textAlign")),
    }
    if node.get("type") == "heading":
        block["text_style"] = "h1" if attrs.get("level") == 1 else "h2"
    block["elements"] = nodes_to_runs(_children(node))

    padding = _padding(attrs)
    if padding is not None:
        block["padding"] = padding
    if attrs.get("textColor"):
        block["color"] = attrs["textColor"]
    if attrs.get("backgroundColor"):
        block["background_color"] = attrs["backgroundColor"]
    block.update(attrs_to_border(attrs))
    if attrs.get("locales"):
        block["locales"] = normalize_locales(attrs["locales"])
    return [block]


def _build_blockquote(node: dict, ctx: _BuildContext, depth: int) -> list[dict]:
    attrs = _attrs(node)
    children = [child for child in _children(node) if isinstance(child, dict)]

    parts: list[str] = []
    for child in children:
        if child.get("type") == "list":
            parts.extend(_list_lines(child))
        else:
            parts.append(serialize_inline(_children(child)))

    block: dict[str, Any] = {"type": "quote", "content": "\n".join(parts).strip()}

    first = children[0] if children else {}
    align = _attrs(first).get("textAlign")
    if align and align != "left":
        block["align"] = align_to_elemental(align)
    if first.get("type") == "heading":
        level = _attrs(first).get("level")
        text_style = _TEXT_STYLES.get(level) if isinstance(level, int) else None
        if text_style is not None:
            block["text_style"] = text_style
    elif first.get("type") == "list" and isinstance(attrs.get("textStyle"), str):
        block["text_style"] = attrs["textStyle"]

    if attrs.get("borderColor"):
        block["border_color"] = attrs["borderColor"]
    border_width = parse_px(attrs.get("borderWidth"))
    if border_width is not None:
        block["border_left_width"] = border_width
    for source, target in (
        ("paddingVertical", "padding_vertical"),
        ("paddingHorizontal", "padding_horizontal"),
    ):
        value = parse_px(attrs.get(source))
        if value is not None:
            block[target] = value
    if attrs.get("backgroundColor"):
        block["background_color"] = attrs["backgroundColor"]
    if attrs.get("locales"):
        block["locales"] = locales_to_content(attrs["locales"])
    return [block]


def _list_lines(node: dict, indent: str = "") -> list[str]:
    """Flatten a list node into ``• item`` / ``N. item`` lines."""
    ordered = _attrs(node).get("listType") == "ordered"
    lines: list[str] = []
    number = 0
    for item in _children(node):
        if not isinstance(item, dict):
            continue
        number += 1
        prefix = f"{number}. " if ordered else "• "
        texts: list[str] = []
        nested: list[str] = []
        for child in _children(item):
            if not isinstance(child, dict):
                continue
            if child.get("type") == "list":
                nested.extend(_list_lines(child, indent + "  "))
            else:
                texts.append(serialize_inline(_children(child)))
        lines.append(indent + prefix + " ".join(texts))
        lines.extend(nested)
    return lines


# ---------------------------------------------------------------------------
# Buttons
# ---------------------------------------------------------------------------

def _build_button(node: dict, ctx: _BuildContext, depth: int) -> list[dict]:
    attrs = _attrs(node)
    children = _children(node)
    label = serialize_inline(children) if children else attrs.get("label")
    if not isinstance(label, str):
        label = ""

    block: dict[str, Any] = {
        "type": "action",
        "content": label,
        "href": attrs.get("link") or "#",
    }
    if attrs.get("style"):
        block["style"] = attrs["style"]
    block["align"] = "full" if attrs.get("size") == "full" else (attrs.get("alignment") or "center")
    if attrs.get("backgroundColor"):
        block["background_color"] = attrs["backgroundColor"]
    if attrs.get("textColor"):
        block["color"] = attrs["textColor"]
    padding = parse_px(attrs.get("padding"))
    if padding is not None:
        block["padding"] = format_px(padding)
    if attrs.get("borderColor"):
        block["border_color"] = attrs["borderColor"]
    # Always present; "0px" overrides the renderer's default radius.
    block["border_radius"] = format_px(parse_px(attrs.get("borderRadius")) or 0)
    if attrs.get("locales"):
        block["locales"] = copy.deepcopy(attrs["locales"])
    return [block]


def _build_button_row(node: dict, ctx: _BuildContext, depth: int) -> list[dict]:
    attrs = _attrs(node)
    blocks: list[dict] = []
    for number in (1, 2):
        label = attrs.get(f"button{number}Label")
        block: dict[str, Any] = {
            "type": "action",
            "content": label if isinstance(label, str) else f"Button {number}",
            "href": attrs.get(f"button{number}Link") or "#",
            "align": "left",
        }
        if attrs.get(f"button{number}BackgroundColor"):
            block["background_color"] = attrs[f"button{number}BackgroundColor"]
        if attrs.get(f"button{number}TextColor"):
            block["color"] = attrs[f"button{number}TextColor"]
        blocks.append(block)
    return blocks


# ---------------------------------------------------------------------------
# Media and code
# ---------------------------------------------------------------------------

def _build_image(node: dict, ctx: _BuildContext, depth: int) -> list[dict]:
    attrs = _attrs(node)
    block: dict[str, Any] = {"type": "image", "src": attrs.get("sourcePath") or ""}
    if attrs.get("link"):
        block["href"] = attrs["link"]
    if attrs.get("alignment"):
        block["align"] = attrs["alignment"]
    if attrs.get("alt"):
        block["alt_text"] = attrs["alt"]
    width = parse_px(attrs.get("width"))
    if width is not None:
        block["width"] = format_percent(width)
    if attrs.get("imageNaturalWidth") is not None:
        block["image_natural_width"] = attrs["imageNaturalWidth"]
    block.update(attrs_to_border(attrs))
    if attrs.get("locales"):
        block["locales"] = copy.deepcopy(attrs["locales"])
    return [block]


def _build_divider(node: dict, ctx: _BuildContext, depth: int) -> list[dict]:
    attrs = _attrs(node)
    block: dict[str, Any] = {"type": "divider"}
    color = attrs.get("color")
    if not color and attrs.get("variant") == "spacer":
        color = "transparent"
    if color:
        block["color"] = color
    size = parse_px(attrs.get("size"))
    if size is not None:
        block["border_width"] = format_px(size)
    padding = parse_px(attrs.get("padding"))
    if padding is not None:
        block["padding"] = format_px(padding)
    return [block]


def _build_custom_code(node: dict, ctx: _BuildContext, depth: int) -> list[dict]:
    attrs = _attrs(node)
    block: dict[str, Any] = {"type": "html", "content": attrs.get("code") or ""}
    if attrs.get("locales"):
        block["locales"] = copy.deepcopy(attrs["locales"])
    return [block]


# ---------------------------------------------------------------------------
# Columns
# ---------------------------------------------------------------------------

def _build_column(node: dict, ctx: _BuildContext, depth: int) -> list[dict]:
    attrs = _attrs(node)
    cells = [
        cell
        for row in _children(node)
        if isinstance(row, dict) and row.get("type") == "columnRow"
        for cell in _children(row)
        if isinstance(cell, dict) and cell.get("type") == "columnCell"
    ]

    elements: list[dict] = []
    for cell in cells:
        inner = _process_nodes(_children(cell), ctx, depth + 2)
        if not inner:
            elements.append(_placeholder_block(ctx))
        elif len(inner) == 1:
            elements.append(inner[0])
        else:
            elements.append({"type": "group", "elements": inner})

    # Column attrs always carry defaults; only non-default values are written.
    block: dict[str, Any] = {"type": "group", "elements": elements}
    padding = _padding(attrs)
    if padding is not None and padding != format_padding(0, 0):
        block["padding"] = padding
    if attrs.get("backgroundColor") and attrs["backgroundColor"] != "transparent":
        block["background_color"] = attrs["backgroundColor"]
    if parse_px(attrs.get("borderWidth")):
        block.update(attrs_to_border(attrs))
    if attrs.get("locales"):
        block["locales"] = copy.deepcopy(attrs["locales"])
    return [block]


def _placeholder_block(ctx: _BuildContext) -> dict:
    return {
        "type": "text",
        "align": "left",
        "elements": [{"type": "string", "content": ctx.config.column_placeholder_text}],
    }


# ---------------------------------------------------------------------------
# Lists
# ---------------------------------------------------------------------------

def _build_list(node: dict, ctx: _BuildContext, depth: int) -> list[dict]:
    attrs = _attrs(node)
    items: list[dict] = []
    for item in _children(node):
        if not isinstance(item, dict):
            continue
        items.append(_build_list_item(item, ctx, depth + 1))

    block: dict[str, Any] = {
        "type": "list",
        "list_type": (
            ListType.ORDERED.value
            if attrs.get("listType") == ListType.ORDERED.value
            else ListType.UNORDERED.value
        ),
        "elements": items,
    }
    if attrs.get("borderColor"):
        block["border_color"] = attrs["borderColor"]
    border_width = parse_px(attrs.get("borderWidth"))
    if border_width:
        block["border_size"] = format_px(border_width)
    padding = _padding(attrs)
    if padding is not None:
        block["padding"] = padding
    return [block]


def _build_list_item(item: dict, ctx: _BuildContext, depth: int) -> dict:
    """Build a ``list-item``; consecutive paragraphs are joined by ``\\n``."""
    elements: list[dict] = []
    leaves: list[dict] = []

    for child in _children(item):
        if not isinstance(child, dict):
            continue
        if child.get("type") == "list":
            elements.extend(nodes_to_runs(leaves))
            leaves = []
            elements.extend(_process_node(child, ctx, depth + 1))
        elif child.get("type") in _TEXT_NODE_TYPES:
            if leaves:
                leaves.append(hard_break())
            leaves.extend(_children(child))
        else:
            # Unknown wrappers contribute their inline leaves.
            if leaves:
                leaves.append(hard_break())
            leaves.extend(
                leaf for leaf in _children(child)
                if isinstance(leaf, dict) and leaf.get("type") in ("text", "variable", "hardBreak")
            )
    elements.extend(nodes_to_runs(leaves))

    block: dict[str, Any] = {"type": "list-item", "elements": elements}
    attrs = _attrs(item)
    if attrs.get("backgroundColor"):
        block["background_color"] = attrs["backgroundColor"]
    return block


# ---------------------------------------------------------------------------
# Handler dispatch table
# ---------------------------------------------------------------------------

_NodeHandler = _Callable[[dict, _BuildContext, int], list[dict]]

_NODE_HANDLERS: dict[str, _NodeHandler] = {
    "paragraph": _build_text,
    "heading": _build_text,
    "blockquote": _build_blockquote,
    "button": _build_button,
    "buttonRow": _build_button_row,
    "imageBlock": _build_image,
    "divider": _build_divider,
    "customCode": _build_custom_code,
    "column": _build_column,
    "list": _build_list,
}
