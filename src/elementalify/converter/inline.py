"""Inline markup: flat marked-up strings to editor leaves and back.

The lightweight markup understood here is the one stored in legacy
Elemental ``content`` strings and in locale overrides::

    **bold**  __bold__  *italic*  _italic_  ~strike~  +underline+
    [label](https://example.com)  {{variable}}  {}variable{}

Parsing produces a flat list of editor leaves, each carrying its marks::

    {"type": "text", "text": "Hi ", "marks": [{"type": "bold"}]}
    {"type": "variable", "attrs": {"id": "name", "isInvalid": False}}
    {"type": "hardBreak"}

Overlapping markup is resolved by a fixed precedence table plus a greedy
earliest-start rule, so unbalanced markers never raise; they simply stay
literal text.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from elementalify.converter.variables import (
    PLACEHOLDER_RE,
    format_placeholder,
    is_placeholder_valid,
    placeholder_name,
)

# Inline nesting never legitimately goes this deep; past it the matched
# span is kept as literal text.
MAX_INLINE_DEPTH = 32

# ---------------------------------------------------------------------------
# Pattern precedence table
# ---------------------------------------------------------------------------
# Order matters: when two matches start at the same offset the earlier
# entry wins.  Every emphasis pattern needs at least one non-marker
# character inside, so runs such as ``***`` or ``+++`` stay literal.  Bold
# may wrap a single same-character marker (``***both***``) so that
# bold+italic text written by :func:`serialize_leaf` parses back.

_BOLD_STAR = r"(?<!\*)\*\*(?=\*?[^*])(.+?)(?:(?<=[^*])|(?<=[^*]\*))\*\*(?!\*)"
_BOLD_UNDERSCORE = r"(?<!_)__(?=_?[^_])(.+?)(?:(?<=[^_])|(?<=[^_]_))__(?!_)"
_ITALIC_STAR = r"(?<!\*)\*(?!\*)(.+?)(?<!\*)\*(?!\*)"
_ITALIC_UNDERSCORE = r"(?<!_)_(?!_)(.+?)(?<!_)_(?!_)"

_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("variable", PLACEHOLDER_RE),
    ("link", re.compile(r"\[([^\]]+)\]\(([^)]+)\)")),
    ("bold", re.compile(f"{_BOLD_STAR}|{_BOLD_UNDERSCORE}")),
    ("italic", re.compile(f"{_ITALIC_STAR}|{_ITALIC_UNDERSCORE}")),
    ("strike", re.compile(r"(?<!~)~(?!~)(.+?)(?<!~)~(?!~)")),
    ("underline", re.compile(r"(?<!\+)\+(?!\+)(.+?)(?<!\+)\+(?!\+)")),
)

# Marker written for each mark on serialization, innermost first.
_MARK_MARKERS: dict[str, str] = {
    "bold": "**",
    "italic": "*",
    "strike": "~",
    "underline": "+",
}


@dataclass(frozen=True)
class _Match:
    """A candidate markup span found in a segment."""

    start: int
    end: int
    precedence: int
    kind: str
    match: re.Match[str]

    def inner(self) -> str:
        """Text between the markers (first non-``None`` group)."""
        return next(g for g in self.match.groups() if g is not None)


# ---------------------------------------------------------------------------
# Leaf helpers
# ---------------------------------------------------------------------------

def text_node(text: str, marks: Iterable[dict] | None = None) -> dict:
    """Build an editor ``text`` leaf, omitting an empty mark list."""
    node: dict = {"type": "text", "text": text}
    mark_list = [dict(m) for m in marks or ()]
    if mark_list:
        node["marks"] = mark_list
    return node


def variable_node(
    name: str,
    marks: Iterable[dict] | None = None,
    *,
    flag_invalid: bool = True,
    in_url_context: bool = False,
) -> dict:
    """Build an editor ``variable`` leaf for *name*."""
    attrs: dict = {"id": name}
    if flag_invalid:
        attrs["isInvalid"] = not is_placeholder_valid(name)
    if in_url_context:
        attrs["inUrlContext"] = True
    node: dict = {"type": "variable", "attrs": attrs}
    mark_list = [dict(m) for m in marks or ()]
    if mark_list:
        node["marks"] = mark_list
    return node


def hard_break() -> dict:
    """Build an editor ``hardBreak`` leaf."""
    return {"type": "hardBreak"}


def add_mark(node: dict, mark: dict) -> dict:
    """Return a copy of *node* carrying *mark* unless one of that type exists."""
    if node.get("type") == "hardBreak":
        return node
    marks = node.get("marks", [])
    if any(m.get("type") == mark["type"] for m in marks):
        return node
    return {**node, "marks": [*marks, dict(mark)]}


def map_leaves(nodes: list[dict], fn: Callable[[dict], dict]) -> list[dict]:
    """Apply *fn* to every leaf, returning a new list."""
    return [fn(node) for node in nodes]


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------

class InlineParser:
    """Parse flat marked-up text into editor leaves.

    Parameters
    ----------
    flag_invalid_variables:
        When ``True`` (structured-content behaviour) a placeholder with a
        malformed name becomes a ``variable`` leaf with
        ``isInvalid: True``.  When ``False`` (flat-Markdown behaviour) it
        is kept as literal text and valid variables carry only ``id``.
    mark_url_context:
        Tag variables found inside link text with ``inUrlContext: True``.
    """

    def __init__(
        self,
        *,
        flag_invalid_variables: bool = True,
        mark_url_context: bool = True,
    ) -> None:
        self._flag_invalid = flag_invalid_variables
        self._mark_url_context = mark_url_context

    def parse(self, text: str) -> list[dict]:
        """Parse *text*; each ``\\n`` becomes a ``hardBreak`` leaf."""
        nodes: list[dict] = []
        for index, segment in enumerate(text.split("\n")):
            if index > 0:
                nodes.append(hard_break())
            nodes.extend(self._parse_segment(segment, 0))
        return nodes

    def split_variables(self, text: str, marks: Iterable[dict] = ()) -> list[dict]:
        """Split *text* into text and variable leaves only, no other markup."""
        mark_list = list(marks)
        in_link = self._mark_url_context and any(m.get("type") == "link" for m in mark_list)
        nodes: list[dict] = []
        cursor = 0
        for match in PLACEHOLDER_RE.finditer(text):
            if match.start() > cursor:
                nodes.append(text_node(text[cursor:match.start()], mark_list))
            nodes.append(self._variable(match, mark_list, in_link))
            cursor = match.end()
        if cursor < len(text):
            nodes.append(text_node(text[cursor:], mark_list))
        return nodes

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _parse_segment(self, text: str, depth: int) -> list[dict]:
        if not text:
            return []

        nodes: list[dict] = []
        cursor = 0
        for match in self._select_matches(text):
            if match.start > cursor:
                nodes.extend(self.split_variables(text[cursor:match.start]))
            nodes.extend(self._convert_match(match, depth))
            cursor = match.end
        if cursor < len(text):
            nodes.extend(self.split_variables(text[cursor:]))
        return nodes

    def _select_matches(self, text: str) -> list[_Match]:
        """Collect every candidate, then keep the earliest non-overlapping ones."""
        candidates = [
            _Match(m.start(), m.end(), precedence, kind, m)
            for precedence, (kind, pattern) in enumerate(_PATTERNS)
            for m in pattern.finditer(text)
        ]
        candidates.sort(key=lambda c: (c.start, c.precedence))

        kept: list[_Match] = []
        cursor = 0
        for candidate in candidates:
            if candidate.start >= cursor:
                kept.append(candidate)
                cursor = candidate.end
        return kept

    def _convert_match(self, match: _Match, depth: int) -> list[dict]:
        if match.kind == "variable":
            return [self._variable(match.match, [], False)]

        if depth >= MAX_INLINE_DEPTH:
            return [text_node(match.match.group(0))]

        if match.kind == "link":
            label, href = match.match.group(1), match.match.group(2)
            inner = self._parse_segment(label, depth + 1)
            link_mark = {"type": "link", "attrs": {"href": href}}
            return map_leaves(inner, lambda n: self._in_link(add_mark(n, link_mark)))

        inner = self._parse_segment(match.inner(), depth + 1)
        mark = {"type": match.kind}
        return map_leaves(inner, lambda n: add_mark(n, mark))

    def _variable(self, match: re.Match[str], marks: list[dict], in_link: bool) -> dict:
        name = placeholder_name(match)
        if not self._flag_invalid and not is_placeholder_valid(name):
            return text_node(match.group(0), marks)
        return variable_node(
            name,
            marks,
            flag_invalid=self._flag_invalid,
            in_url_context=in_link,
        )

    def _in_link(self, node: dict) -> dict:
        if not self._mark_url_context or node.get("type") != "variable":
            return node
        return {**node, "attrs": {**node["attrs"], "inUrlContext": True}}


_DEFAULT_PARSER = InlineParser()


def parse_inline(text: str) -> list[dict]:
    """Parse *text* with the structured-content rules.

    Examples
    --------
    >>> parse_inline("Hello {{name}}")
    [{'type': 'text', 'text': 'Hello '}, {'type': 'variable', 'attrs': {'id': 'name', 'isInvalid': False}}]
    """
    return _DEFAULT_PARSER.parse(text)


def split_variables(text: str, marks: Iterable[dict] = ()) -> list[dict]:
    """Split *text* into text and variable leaves with the default rules."""
    return _DEFAULT_PARSER.split_variables(text, marks)


# ---------------------------------------------------------------------------
# Serializer
# ---------------------------------------------------------------------------

def _leaf_attrs(item: dict) -> dict:
    attrs = item.get("attrs")
    return attrs if isinstance(attrs, dict) else {}


def _leaf_marks(node: dict) -> list[dict]:
    """Well-formed marks of *node*; anything without a string ``type`` is ignored."""
    marks = node.get("marks")
    if not isinstance(marks, list):
        return []
    return [m for m in marks if isinstance(m, dict) and isinstance(m.get("type"), str)]


def serialize_leaf(node: dict) -> str:
    """Serialize a single editor leaf back to inline markup."""
    if not isinstance(node, dict):
        return ""
    node_type = node.get("type")
    if node_type == "variable":
        return format_placeholder(str(_leaf_attrs(node).get("id", "")))
    if node_type == "hardBreak":
        return "\n"
    if node_type != "text":
        return ""

    text = node.get("text")
    if not isinstance(text, str) or not text:
        return ""

    marks = _leaf_marks(node)
    markers = [_MARK_MARKERS[m["type"]] for m in marks if m["type"] in _MARK_MARKERS]
    text = "".join(markers) + text + "".join(reversed(markers))

    link = next((m for m in marks if m.get("type") == "link"), None)
    if link is not None:
        text = f"[{text}]({_leaf_attrs(link).get('href') or ''})"
    return text


def serialize_inline(nodes: Iterable[dict]) -> str:
    """Serialize editor leaves back to a flat marked-up string."""
    return "".join(serialize_leaf(node) for node in nodes)
