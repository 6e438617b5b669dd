"""Flat Markdown to editor document and back.

An alternate entry point for content that arrives as plain Markdown text
rather than as a channel-structured Elemental document.  The grammar is
deliberately line based:

* ``# ...`` to ``###### ...`` -- heading
* ``> ...`` -- blockquote (one node per line; lines are never merged)
* ``---`` (three or more dashes) -- divider
* ``![alt](src "title")`` -- image
* anything else that is not blank -- paragraph

Inline text uses the same precedence parser as structured content, but
invalid placeholders stay literal text and variables carry only their
``id``.

Usage::

    from elementalify.converter.markdown import MarkdownConverter

    converter = MarkdownConverter()
    doc = converter.to_editor("# Hello {{name}}")
    text = converter.to_markdown(doc)
"""

from __future__ import annotations

import json
import re
import sys
import time
from typing import Any

from elementalify.config import ElementalifyConfig
from elementalify.converter.inline import InlineParser, serialize_inline
from elementalify.observability import get_logger, resolve_metrics
from elementalify.utils.ids import id_generator

log = get_logger("elementalify.converter")

_HEADING_RE = re.compile(r"^(#{1,6})\s+(.*)$")
_RULE_RE = re.compile(r"^-{3,}$")
_IMAGE_RE = re.compile(r'^!\[(.*?)\]\((.*?)(?:\s+"(.*?)")?\)$')

_PARSER = InlineParser(flag_invalid_variables=False, mark_url_context=False)


class MarkdownConverter:
    """Convert between flat Markdown and the editor ``doc`` tree.

    Parameters
    ----------
    config:
        Converter configuration; only ``id_factory``, ``metrics`` and
        ``debug_dump_tree`` apply here.
    """

    def __init__(self, config: ElementalifyConfig | None = None) -> None:
        self._config = config or ElementalifyConfig()
        self._new_id = id_generator(self._config.id_factory)
        self._metrics = resolve_metrics(self._config.metrics)

    # ------------------------------------------------------------------
    # Markdown -> editor
    # ------------------------------------------------------------------

    def to_editor(self, markdown: str) -> dict:
        """Parse *markdown* into an editor ``doc`` node.

        Examples
        --------
        >>> doc = MarkdownConverter().to_editor("---")
        >>> doc["content"][0]["type"]
        'divider'
        """
        started = time.perf_counter()
        nodes: list[dict] = []
        for line in (markdown if isinstance(markdown, str) else "").split("\n"):
            if not line.strip():
                continue
            nodes.append(self._parse_line(line))
        doc = {"type": "doc", "content": nodes}
        self._record("markdown_to_editor", started, nodes=len(nodes))
        if self._config.debug_dump_tree:
            print(
                "[elementalify] Editor tree:",
                json.dumps(doc, indent=2, ensure_ascii=False),
                file=sys.stderr,
            )
        return doc

    def _parse_line(self, line: str) -> dict:
        heading = _HEADING_RE.match(line)
        if heading:
            return {
                "type": "heading",
                "attrs": {"textAlign": "left", "level": len(heading.group(1)), "id": self._new_id()},
                "content": _PARSER.parse(heading.group(2)),
            }

        if line.startswith(">"):
            return {
                "type": "blockquote",
                "attrs": {"textAlign": "left", "id": self._new_id()},
                "content": [self._paragraph(line[1:].strip())],
            }

        if _RULE_RE.match(line):
            return {"type": "divider", "attrs": {"id": self._new_id()}}

        image = _IMAGE_RE.match(line)
        if image:
            attrs: dict[str, Any] = {
                "sourcePath": image.group(2),
                "alt": image.group(1) or "",
                "id": self._new_id(),
            }
            if image.group(3):
                attrs["title"] = image.group(3)
            return {"type": "imageBlock", "attrs": attrs}

        return self._paragraph(line)

    def _paragraph(self, text: str) -> dict:
        return {
            "type": "paragraph",
            "attrs": {"textAlign": "left", "id": self._new_id()},
            "content": _PARSER.parse(text),
        }

    # ------------------------------------------------------------------
    # Editor -> markdown
    # ------------------------------------------------------------------

    def to_markdown(self, doc: Any) -> str:
        """Serialize an editor ``doc`` node to Markdown.

        Blocks are separated by a blank line.  A blockquote's trailing
        paragraph separator is quoted as well, so it ends with two
        empty ``"> "`` lines unless it is the last block.
        """
        started = time.perf_counter()
        content = doc.get("content") if isinstance(doc, dict) else None
        if not isinstance(content, list):
            return ""
        text = "".join(_node_to_markdown(node) for node in content).strip()
        self._record("editor_to_markdown", started, chars=len(text))
        return text

    def _record(self, direction: str, started: float, **fields: Any) -> None:
        tags = {"direction": direction}
        self._metrics.increment("elementalify.conversions_total", tags=tags)
        self._metrics.timing(
            "elementalify.conversion_duration_ms",
            (time.perf_counter() - started) * 1000,
            tags=tags,
        )
        log.debug("Markdown converted", extra={"extra_fields": {"op": direction, **fields}})


# ---------------------------------------------------------------------------
# Node serializers
# ---------------------------------------------------------------------------

def _inline(node: dict) -> str:
    return "".join(_node_to_markdown(child) for child in _children(node))


def _children(node: dict) -> list:
    content = node.get("content")
    return content if isinstance(content, list) else []


def _attrs(node: dict) -> dict:
    attrs = node.get("attrs")
    return attrs if isinstance(attrs, dict) else {}


def _button_label(node: dict) -> str:
    children = _children(node)
    if children:
        return serialize_inline(children)
    label = _attrs(node).get("label")
    return label if isinstance(label, str) else ""


def _list_to_markdown(node: dict, indent: str = "") -> str:
    ordered = _attrs(node).get("listType") == "ordered"
    lines: list[str] = []
    number = 0
    for item in _children(node):
        if not isinstance(item, dict):
            continue
        number += 1
        prefix = f"{number}. " if ordered else "- "
        texts: list[str] = []
        nested: list[str] = []
        for child in _children(item):
            if not isinstance(child, dict):
                continue
            if child.get("type") == "list":
                nested.append(_list_to_markdown(child, indent + "  "))
            else:
                texts.append(_inline(child))
        lines.append(indent + prefix + " ".join(texts))
        lines.extend(nested)
    return "\n".join(lines)


def _node_to_markdown(node: Any) -> str:
    if not isinstance(node, dict):
        return ""
    node_type = node.get("type")
    attrs = _attrs(node)

    if node_type in ("text", "variable", "hardBreak"):
        return serialize_inline([node])

    if node_type == "paragraph":
        return _inline(node) + "\n\n"

    if node_type == "heading":
        level = attrs.get("level") if isinstance(attrs.get("level"), int) else 1
        return "#" * (level or 1) + " " + _inline(node) + "\n\n"

    if node_type == "blockquote":
        inner = _inline(node)
        return "\n".join(f"> {line}" for line in inner.split("\n")) + "\n\n"

    if node_type == "imageBlock":
        image = f"![{attrs.get('alt') or ''}]({attrs.get('sourcePath') or ''})"
        if attrs.get("link"):
            return f"[{image}]({attrs['link']})\n\n"
        return image + "\n\n"

    if node_type == "divider":
        return "---\n\n"

    if node_type == "button":
        return f"[{_button_label(node)}]({attrs.get('link') or '#'})\n\n"

    if node_type == "buttonRow":
        first = f"[{attrs.get('button1Label') or ''}]({attrs.get('button1Link') or '#'})"
        second = f"[{attrs.get('button2Label') or ''}]({attrs.get('button2Link') or '#'})"
        return f"{first}\n{second}\n\n"

    if node_type == "list":
        return _list_to_markdown(node) + "\n\n"

    return _inline(node)


# ---------------------------------------------------------------------------
# Convenience functions
# ---------------------------------------------------------------------------

def convert_markdown_to_editor(
    markdown: str,
    config: ElementalifyConfig | None = None,
) -> dict:
    """Parse flat Markdown into an editor ``doc`` node."""
    return MarkdownConverter(config).to_editor(markdown)


def convert_editor_to_markdown(
    doc: Any,
    config: ElementalifyConfig | None = None,
) -> str:
    """Serialize an editor ``doc`` node to flat Markdown."""
    return MarkdownConverter(config).to_markdown(doc)
