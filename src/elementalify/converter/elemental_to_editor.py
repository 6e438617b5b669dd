"""Elemental storage tree to editor document.

Converts a versioned Elemental document (or one channel of it) into the
editor's ``doc`` tree.  Each storage block tag has one converter method,
registered in :data:`_BLOCK_CONVERTERS`; unknown tags and malformed
values contribute zero nodes and are recorded in :attr:`warnings`.

Usage::

    from elementalify.config import ElementalifyConfig
    from elementalify.converter.elemental_to_editor import ElementalToEditorConverter

    converter = ElementalToEditorConverter(ElementalifyConfig())
    doc = converter.convert(content, channel="email")
"""

from __future__ import annotations

import copy
import json
import re
import sys
import time
from collections.abc import Callable as _Callable
from typing import Any

from elementalify.config import ElementalifyConfig
from elementalify.converter.inline import parse_inline, split_variables
from elementalify.converter.runs import expand_run, runs_plain_text, runs_to_nodes
from elementalify.converter.styles import (
    align_to_editor,
    border_to_attrs,
    coalesce_border,
    normalize_image_width,
    parse_padding,
    parse_px,
)
from elementalify.errors import ElementalifyDepthError, ElementalifyUnsupportedNodeError
from elementalify.models import ConversionWarning, ListType, WarningCode
from elementalify.observability import get_logger, resolve_metrics
from elementalify.utils.ids import id_generator

log = get_logger("elementalify.converter")

_DIRECTION = "elemental_to_editor"

# Tags that carry metadata only and never produce visible nodes.
_SUPPRESSED_TYPES: frozenset[str] = frozenset({"meta", "comment"})

# Run tags that may appear directly inside a list item.
_RUN_TYPES: tuple[str, ...] = ("string", "link")

_HEADING_LEVELS: dict[str, int] = {"h1": 1, "h2": 2}
_QUOTE_HEADING_LEVELS: dict[str, int] = {"h1": 1, "h2": 2, "subtext": 3}

_BULLET_LINE_RE = re.compile(r"^\s*[•\-*]\s+(.*)$")
_NUMBERED_LINE_RE = re.compile(r"^\s*\d+[.)]\s+(.*)$")

# Styling applied to buttons in button-styled channels unless the block
# sets its own colours.
_STYLED_BUTTON_DEFAULTS: dict[str, Any] = {
    "backgroundColor": "#000000",
    "textColor": "#ffffff",
    "borderColor": "#000000",
    "borderWidth": 1,
    "borderRadius": 4,
}

_BUTTON_ROW_DEFAULT_PADDING = 6


def _strip_trailing_newline(text: str) -> str:
    return text[:-1] if text.endswith("\n") else text


def _level(table: dict[str, int], text_style: Any) -> int | None:
    return table.get(text_style) if isinstance(text_style, str) else None


def _elements(block: dict) -> list:
    elements = block.get("elements")
    return elements if isinstance(elements, list) else []


class ElementalToEditorConverter:
    """Stateful converter from Elemental content to an editor ``doc``.

    The converter accumulates :class:`ConversionWarning` instances in
    :attr:`warnings` during a :meth:`convert` call so that callers can
    inspect dropped nodes after conversion completes.

    Parameters
    ----------
    config:
        Converter configuration.  Defaults to ``ElementalifyConfig()``.
    """

    def __init__(self, config: ElementalifyConfig | None = None) -> None:
        self._config = config or ElementalifyConfig()
        self._new_id = id_generator(self._config.id_factory)
        self._metrics = resolve_metrics(self._config.metrics)
        self._channel: str | None = None
        self.warnings: list[ConversionWarning] = []

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def convert(self, content: Any, channel: str | None = None) -> dict:
        """Convert an Elemental document to an editor ``doc`` node.

        Parameters
        ----------
        content:
            An Elemental document ``{"version": ..., "elements": [...]}``.
            ``None`` and documents without elements yield an empty doc.
        channel:
            Name of the channel to convert.  When the document has no
            such channel the result is an empty doc.  When ``None``, the
            first channel is used, or the bare blocks of a channel-less
            document.

        Returns
        -------
        dict
            ``{"type": "doc", "content": [...]}``.
        """
        self.warnings = []
        self._channel = channel
        started = time.perf_counter()

        blocks = self._select_blocks(content, channel)
        nodes = self._convert_blocks(blocks, 0)
        if channel is not None and channel in self._config.button_row_channels:
            nodes = self._fold_button_rows(nodes)
        doc = {"type": "doc", "content": nodes}

        self._finish(doc, started)
        return doc

    # ------------------------------------------------------------------
    # Internal: channel selection
    # ------------------------------------------------------------------

    def _select_blocks(self, content: Any, channel: str | None) -> list:
        if not isinstance(content, dict):
            return []
        entries = content.get("elements")
        if not isinstance(entries, list) or not entries:
            return []

        channels = [
            entry for entry in entries
            if isinstance(entry, dict) and entry.get("type") == "channel"
        ]
        if channel is not None:
            target = next((c for c in channels if c.get("channel") == channel), None)
            if target is None:
                return []
        elif channels:
            target = channels[0]
        else:
            return entries

        blocks = target.get("elements")
        if not isinstance(blocks, list) or not blocks:
            return [{"type": "text", "content": "\n"}]

        if target.get("channel") in self._config.title_heading_channels:
            blocks = [self._title_block(block) for block in blocks]
        return blocks

    @staticmethod
    def _title_block(block: Any) -> Any:
        """Surface a ``meta.title`` as an ``h2`` text block."""
        if isinstance(block, dict) and block.get("type") == "meta" and "title" in block:
            return {"type": "text", "content": block.get("title") or "\n", "text_style": "h2"}
        return block

    # ------------------------------------------------------------------
    # Internal: dispatch
    # ------------------------------------------------------------------

    def _convert_blocks(self, blocks: Any, depth: int) -> list[dict]:
        nodes: list[dict] = []
        if not isinstance(blocks, list):
            return nodes
        for block in blocks:
            nodes.extend(self._convert_block(block, depth))
        return nodes

    def _convert_block(self, block: Any, depth: int) -> list[dict]:
        """Route a block to the converter for its ``type`` tag."""
        if not isinstance(block, dict):
            self._skip(
                WarningCode.MALFORMED_NODE,
                "Dropped a value that is not an Elemental block",
                reason="malformed",
                value_type=type(block).__name__,
                depth=depth,
            )
            return []

        block_type = block.get("type")
        if depth > self._config.max_depth:
            return self._overflow(block_type, depth)

        if not isinstance(block_type, str):
            return self._convert_unknown(block_type, depth)
        if block_type in _SUPPRESSED_TYPES:
            return []

        converter = _BLOCK_CONVERTERS.get(block_type)
        if converter is None:
            return self._convert_unknown(block_type, depth)
        return converter(self, block, depth)

    def _overflow(self, block_type: Any, depth: int) -> list[dict]:
        if self._config.depth_overflow_policy == "raise":
            raise ElementalifyDepthError(
                message=f"Block nesting exceeds max_depth={self._config.max_depth}",
                context={"max_depth": self._config.max_depth, "node_type": block_type},
            )
        self._skip(
            WarningCode.DEPTH_EXCEEDED,
            f"Dropped subtree nested deeper than {self._config.max_depth}",
            reason="depth",
            node_type=block_type,
            depth=depth,
        )
        return []

    def _convert_unknown(self, block_type: Any, depth: int) -> list[dict]:
        if self._config.unknown_node_policy == "raise":
            raise ElementalifyUnsupportedNodeError(
                message=f"Cannot convert Elemental block type: {block_type}",
                context={"node_type": block_type, "depth": depth},
            )
        self._skip(
            WarningCode.UNKNOWN_NODE,
            f"Dropped unknown Elemental block type: {block_type}",
            reason="unknown_node",
            node_type=block_type,
            depth=depth,
        )
        return []

    def _skip(self, code: WarningCode, message: str, *, reason: str, **context: Any) -> None:
        self.warnings.append(
            ConversionWarning(code=code.value, message=message, context=dict(context)),
        )
        self._metrics.increment("elementalify.nodes_skipped_total", tags={"reason": reason})
        log.warning(
            message,
            extra={"extra_fields": {"op": _DIRECTION, "code": code.value, **context}},
        )

    def _finish(self, doc: dict, started: float) -> None:
        elapsed_ms = (time.perf_counter() - started) * 1000
        tags = {"direction": _DIRECTION}
        self._metrics.increment("elementalify.conversions_total", tags=tags)
        self._metrics.timing("elementalify.conversion_duration_ms", elapsed_ms, tags=tags)
        if self.warnings:
            self._metrics.increment(
                "elementalify.conversion_warnings_total", len(self.warnings), tags=tags,
            )
        log.debug(
            "Elemental converted",
            extra={
                "extra_fields": {
                    "op": _DIRECTION,
                    "channel": self._channel,
                    "nodes": len(doc["content"]),
                    "warnings": len(self.warnings),
                }
            },
        )
        if self._config.debug_dump_tree:
            print(
                "[elementalify] Editor tree:",
                json.dumps(doc, indent=2, ensure_ascii=False),
                file=sys.stderr,
            )

    # ------------------------------------------------------------------
    # Shared node builders
    # ------------------------------------------------------------------

    def _paragraph(self, content: list[dict] | None = None, align: str = "left") -> dict:
        return {
            "type": "paragraph",
            "attrs": {"textAlign": align, "id": self._new_id()},
            "content": content or [],
        }

    @staticmethod
    def _inline_from_text(text: str) -> list[dict]:
        text = _strip_trailing_newline(text)
        return parse_inline(text) if text.strip() else []

    # ------------------------------------------------------------------
    # Block converters
    # ------------------------------------------------------------------

    def _convert_text(self, block: dict, depth: int) -> list[dict]:
        elements = block.get("elements")
        if isinstance(elements, list):
            content = runs_to_nodes(elements)
        elif isinstance(block.get("content"), str):
            content = self._inline_from_text(block["content"])
        else:
            content = []

        level = _level(_HEADING_LEVELS, block.get("text_style"))
        attrs: dict[str, Any] = {"textAlign": align_to_editor(block.get("align"))}
        if level is not None:
            attrs["level"] = level
        attrs["id"] = self._new_id()

        padding = parse_padding(block.get("padding"))
        if padding is not None:
            attrs["paddingVertical"], attrs["paddingHorizontal"] = padding
        if block.get("color"):
            attrs["textColor"] = block["color"]
        if block.get("background_color"):
            attrs["backgroundColor"] = block["background_color"]
        attrs.update(border_to_attrs(block))
        if isinstance(block.get("locales"), dict):
            attrs["locales"] = copy.deepcopy(block["locales"])

        return [{
            "type": "heading" if level is not None else "paragraph",
            "attrs": attrs,
            "content": content,
        }]

    def _convert_action(self, block: dict, depth: int) -> list[dict]:
        label = block.get("content")
        if not isinstance(label, str):
            label = self._config.default_button_label

        align = block.get("align")
        attrs: dict[str, Any] = {
            "label": label,
            "link": block.get("href") or "",
            "alignment": "center" if align == "full" else (align or "center"),
            "size": "full" if align == "full" else "default",
            "style": block.get("style") or "button",
            "id": self._new_id(),
        }
        if self._channel is not None and self._channel in self._config.styled_button_channels:
            attrs.update(_STYLED_BUTTON_DEFAULTS)
        if block.get("background_color"):
            attrs["backgroundColor"] = block["background_color"]
        if block.get("color"):
            attrs["textColor"] = block["color"]
        padding = parse_px(block.get("padding"))
        if padding is not None:
            attrs["padding"] = padding
        attrs.update(border_to_attrs(block))
        if isinstance(block.get("locales"), dict):
            attrs["locales"] = copy.deepcopy(block["locales"])

        return [{"type": "button", "attrs": attrs, "content": split_variables(label)}]

    def _convert_quote(self, block: dict, depth: int) -> list[dict]:
        content = block.get("content")
        text = _strip_trailing_newline(content) if isinstance(content, str) else ""
        align = align_to_editor(block.get("align"))

        child = self._quote_list(text, align)
        if child is None:
            child = self._quote_text(text, block.get("text_style"), align)

        attrs: dict[str, Any] = {"textAlign": align, "id": self._new_id()}
        # A list child has no heading level, so the style rides on the quote.
        if child["type"] == "list" and isinstance(block.get("text_style"), str):
            attrs["textStyle"] = block["text_style"]
        if block.get("border_color"):
            attrs["borderColor"] = block["border_color"]
        border_width = parse_px(block.get("border_left_width"))
        if border_width is not None:
            attrs["borderWidth"] = border_width
        for source, target in (
            ("padding_vertical", "paddingVertical"),
            ("padding_horizontal", "paddingHorizontal"),
        ):
            value = parse_px(block.get(source))
            if value is not None:
                attrs[target] = value
        if block.get("background_color"):
            attrs["backgroundColor"] = block["background_color"]
        if isinstance(block.get("locales"), dict):
            attrs["locales"] = copy.deepcopy(block["locales"])

        return [{"type": "blockquote", "attrs": attrs, "content": [child]}]

    def _quote_text(self, text: str, text_style: Any, align: str) -> dict:
        inline = parse_inline(text) if text.strip() else []
        level = _level(_QUOTE_HEADING_LEVELS, text_style)
        if level is None:
            return self._paragraph(inline, align)
        return {
            "type": "heading",
            "attrs": {"textAlign": align, "level": level, "id": self._new_id()},
            "content": inline,
        }

    def _quote_list(self, text: str, align: str) -> dict | None:
        """Build a list when every line of *text* is a list line of one kind."""
        lines = [line for line in text.split("\n") if line.strip()]
        if not lines:
            return None
        for list_type, pattern in (("unordered", _BULLET_LINE_RE), ("ordered", _NUMBERED_LINE_RE)):
            matches = [pattern.match(line) for line in lines]
            if all(matches):
                items = [
                    {
                        "type": "listItem",
                        "attrs": {"id": self._new_id()},
                        "content": [self._paragraph(parse_inline(m.group(1)), align)],
                    }
                    for m in matches
                ]
                return {
                    "type": "list",
                    "attrs": {"listType": list_type, "id": self._new_id()},
                    "content": items,
                }
        return None

    def _convert_image(self, block: dict, depth: int) -> list[dict]:
        attrs: dict[str, Any] = {"sourcePath": block.get("src") or "", "id": self._new_id()}
        if block.get("href"):
            attrs["link"] = block["href"]
        if block.get("align"):
            attrs["alignment"] = block["align"]
        if block.get("alt_text"):
            attrs["alt"] = block["alt_text"]
        natural_width = block.get("image_natural_width")
        width = normalize_image_width(block.get("width"), natural_width)
        if width is not None:
            attrs["width"] = width
        if natural_width is not None:
            attrs["imageNaturalWidth"] = natural_width
        attrs.update(border_to_attrs(block))
        if isinstance(block.get("locales"), dict):
            attrs["locales"] = copy.deepcopy(block["locales"])
        return [{"type": "imageBlock", "attrs": attrs}]

    def _convert_divider(self, block: dict, depth: int) -> list[dict]:
        attrs: dict[str, Any] = {"id": self._new_id()}
        color = block.get("color")
        if color:
            attrs["color"] = color
        size = parse_px(block.get("border_width"))
        if size is None:
            size = parse_px(block.get("width"))
        if size is not None:
            attrs["size"] = size
        padding = parse_px(block.get("padding"))
        if padding is not None:
            attrs["padding"] = padding
        attrs["variant"] = "spacer" if color == "transparent" else "divider"
        return [{"type": "divider", "attrs": attrs}]

    def _convert_html(self, block: dict, depth: int) -> list[dict]:
        attrs: dict[str, Any] = {
            "id": self._new_id(),
            "code": block.get("content") or self._config.html_placeholder,
        }
        if isinstance(block.get("locales"), dict):
            attrs["locales"] = copy.deepcopy(block["locales"])
        return [{"type": "customCode", "attrs": attrs}]

    # ------------------------------------------------------------------
    # Columns
    # ------------------------------------------------------------------

    def _convert_group(self, block: dict, depth: int) -> list[dict]:
        column_id = self._new_id()
        elements = block.get("elements")
        if isinstance(elements, list) and elements:
            cells = [
                self._cell(index, column_id, self._group_cell_content(element, depth))
                for index, element in enumerate(elements)
            ]
        else:
            cells = [
                self._cell(index, column_id, [self._paragraph()])
                for index in range(2)
            ]
        border = coalesce_border(block)
        return [self._column(block, column_id, cells, border)]

    def _convert_columns(self, block: dict, depth: int) -> list[dict]:
        column_id = self._new_id()
        cells: list[dict] = []
        for column in _elements(block):
            if isinstance(column, dict) and column.get("type") == "column":
                content = self._convert_blocks(column.get("elements"), depth + 2)
            else:
                content = self._convert_block(column, depth + 1)
            cells.append(self._cell(len(cells), column_id, content or [self._paragraph()]))
        if not cells:
            cells = [self._cell(index, column_id, [self._paragraph()]) for index in range(2)]

        border = coalesce_border(block)
        width = parse_px(block.get("border_width"))
        if width is not None:
            border["size"] = width
        return [self._column(block, column_id, cells, border)]

    def _group_cell_content(self, element: Any, depth: int) -> list[dict]:
        if self._is_placeholder(element):
            return []
        if (
            isinstance(element, dict)
            and element.get("type") == "group"
            and isinstance(element.get("elements"), list)
        ):
            # A nested group holds several blocks of one cell.
            content = self._convert_blocks(element["elements"], depth + 2)
        else:
            content = self._convert_block(element, depth + 1)
        return content or [self._paragraph()]

    def _is_placeholder(self, element: Any) -> bool:
        if not isinstance(element, dict) or element.get("type") != "text":
            return False
        if element.get("align", "left") != "left":
            return False
        if isinstance(element.get("content"), str):
            text = element["content"]
        elif isinstance(element.get("elements"), list):
            text = runs_plain_text(element["elements"])
        else:
            return False
        return text.strip() == self._config.column_placeholder_text

    def _cell(self, index: int, column_id: str, content: list[dict]) -> dict:
        return {
            "type": "columnCell",
            "attrs": {"index": index, "columnId": column_id, "id": self._new_id()},
            "content": content,
        }

    def _column(self, block: dict, column_id: str, cells: list[dict], border: dict) -> dict:
        vertical, horizontal = parse_padding(block.get("padding")) or (0, 0)
        attrs: dict[str, Any] = {
            "id": column_id,
            "columnsCount": min(max(len(cells), 1), 4),
            "paddingVertical": vertical,
            "paddingHorizontal": horizontal,
            "backgroundColor": block.get("background_color") or "transparent",
            "borderWidth": border.get("size", 0),
            "borderRadius": border.get("radius", 0),
            "borderColor": border.get("color", "#000000"),
        }
        if isinstance(block.get("locales"), dict):
            attrs["locales"] = copy.deepcopy(block["locales"])
        return {
            "type": "column",
            "attrs": attrs,
            "content": [{"type": "columnRow", "attrs": {"id": self._new_id()}, "content": cells}],
        }

    # ------------------------------------------------------------------
    # Lists
    # ------------------------------------------------------------------

    def _convert_list(self, block: dict, depth: int) -> list[dict]:
        items: list[dict] = []
        for item in _elements(block):
            items.extend(self._convert_list_item(item, depth + 1))

        attrs: dict[str, Any] = {
            "listType": (
                ListType.ORDERED.value
                if block.get("list_type") == ListType.ORDERED.value
                else ListType.UNORDERED.value
            ),
            "id": self._new_id(),
        }
        if block.get("border_color"):
            attrs["borderColor"] = block["border_color"]
        border_width = parse_px(block.get("border_size"))
        if border_width is not None:
            attrs["borderWidth"] = border_width
        padding = parse_padding(block.get("padding"))
        if padding is not None:
            attrs["paddingVertical"], attrs["paddingHorizontal"] = padding
        return [{"type": "list", "attrs": attrs, "content": items}]

    def _convert_list_item(self, item: Any, depth: int) -> list[dict]:
        if not isinstance(item, dict) or item.get("type") != "list-item":
            nodes = self._convert_block(item, depth)
            if not nodes:
                return []
            return [{"type": "listItem", "attrs": {"id": self._new_id()}, "content": nodes}]
        if depth > self._config.max_depth:
            return self._overflow("list-item", depth)

        children: list[dict] = []
        leaves: list[dict] = []

        def flush() -> None:
            if leaves:
                children.append(self._paragraph(list(leaves)))
                leaves.clear()

        elements = item.get("elements")
        if isinstance(elements, list):
            for element in elements:
                element_type = element.get("type") if isinstance(element, dict) else None
                if element_type in _RUN_TYPES:
                    leaves.extend(expand_run(element))
                elif element_type == "img":
                    continue
                else:
                    flush()
                    children.extend(self._convert_block(element, depth + 1))
        elif isinstance(item.get("content"), str):
            leaves.extend(self._inline_from_text(item["content"]))
        flush()

        attrs: dict[str, Any] = {"id": self._new_id()}
        if item.get("background_color"):
            attrs["backgroundColor"] = item["background_color"]
        return [{"type": "listItem", "attrs": attrs, "content": children or [self._paragraph()]}]

    # ------------------------------------------------------------------
    # Button rows
    # ------------------------------------------------------------------

    def _fold_button_rows(self, nodes: list[dict]) -> list[dict]:
        """Fold every adjacent pair of buttons into one ``buttonRow``."""
        folded: list[dict] = []
        index = 0
        while index < len(nodes):
            current = nodes[index]
            following = nodes[index + 1] if index + 1 < len(nodes) else None
            if (
                current.get("type") == "button"
                and following is not None
                and following.get("type") == "button"
            ):
                folded.append(self._button_row(current["attrs"], following["attrs"]))
                index += 2
            else:
                folded.append(current)
                index += 1
        return folded

    def _button_row(self, first: dict, second: dict) -> dict:
        return {
            "type": "buttonRow",
            "attrs": {
                "id": self._new_id(),
                "button1Label": first.get("label") or "Button 1",
                "button1Link": first.get("link") or "",
                "button1BackgroundColor": first.get("backgroundColor") or "#000000",
                "button1TextColor": first.get("textColor") or "#ffffff",
                "button2Label": second.get("label") or "Button 2",
                "button2Link": second.get("link") or "",
                "button2BackgroundColor": second.get("backgroundColor") or "#ffffff",
                "button2TextColor": second.get("textColor") or "#000000",
                "padding": first.get("padding") or _BUTTON_ROW_DEFAULT_PADDING,
            },
        }


# ------------------------------------------------------------------
# Block converter dispatch table
# ------------------------------------------------------------------

_BlockConverter = _Callable[["ElementalToEditorConverter", dict, int], list[dict]]

_BLOCK_CONVERTERS: dict[str, _BlockConverter] = {
    "text": ElementalToEditorConverter._convert_text,
    "action": ElementalToEditorConverter._convert_action,
    "quote": ElementalToEditorConverter._convert_quote,
    "image": ElementalToEditorConverter._convert_image,
    "divider": ElementalToEditorConverter._convert_divider,
    "html": ElementalToEditorConverter._convert_html,
    "group": ElementalToEditorConverter._convert_group,
    "columns": ElementalToEditorConverter._convert_columns,
    "list": ElementalToEditorConverter._convert_list,
}


def convert_elemental_to_editor(
    content: Any,
    channel: str | None = None,
    config: ElementalifyConfig | None = None,
) -> dict:
    """Convert an Elemental document to an editor ``doc`` in one call.

    >>> convert_elemental_to_editor(None)
    {'type': 'doc', 'content': []}
    """
    return ElementalToEditorConverter(config).convert(content, channel)
