"""Elemental text runs to editor leaves and back.

A run is the inline unit of structured Elemental text::

    {"type": "string", "content": "Hello {{name}}\\n", "bold": True}
    {"type": "link", "content": "docs", "href": "https://example.com"}

Placeholders and hard line breaks live *inside* run content in storage
form but are separate ``variable`` / ``hardBreak`` leaves in the editor,
so both directions have to split or re-embed them.  On the way back,
adjacent leaves with identical formatting are merged into one run.
"""

from __future__ import annotations

from collections.abc import Iterable

from elementalify.converter.inline import hard_break, split_variables
from elementalify.converter.variables import format_placeholder
from elementalify.models import MarkType

# Run flag -> editor mark type, in the order marks are attached.
_FLAG_MARKS: tuple[tuple[str, str], ...] = (
    ("bold", MarkType.BOLD.value),
    ("italic", MarkType.ITALIC.value),
    ("strikethrough", MarkType.STRIKE.value),
    ("underline", MarkType.UNDERLINE.value),
)

_MARK_FLAGS: dict[str, str] = {mark: flag for flag, mark in _FLAG_MARKS}

_RUN_TYPES: tuple[str, ...] = ("string", "link")


# ---------------------------------------------------------------------------
# Runs -> leaves
# ---------------------------------------------------------------------------

def run_marks(run: dict) -> list[dict]:
    """Return the editor marks equivalent to *run*'s formatting."""
    marks = [{"type": mark} for flag, mark in _FLAG_MARKS if run.get(flag)]
    if run.get("color"):
        marks.append({"type": MarkType.TEXT_COLOR.value, "attrs": {"color": run["color"]}})
    if run.get("type") == "link":
        marks.append({"type": MarkType.LINK.value, "attrs": {"href": run.get("href", "")}})
    return marks


def expand_run(run: dict) -> list[dict]:
    """Expand one run into editor leaves.

    Unknown run types (for instance inline ``img`` runs) and runs without
    string content contribute no leaves.
    """
    if not isinstance(run, dict) or run.get("type") not in _RUN_TYPES:
        return []
    content = run.get("content", "")
    if not isinstance(content, str):
        return []

    marks = run_marks(run)
    nodes: list[dict] = []
    for index, segment in enumerate(content.split("\n")):
        if index > 0:
            nodes.append(hard_break())
        if segment:
            nodes.extend(split_variables(segment, marks))
    return nodes


def runs_to_nodes(runs: Iterable[dict]) -> list[dict]:
    """Expand a run list into a flat list of editor leaves."""
    nodes: list[dict] = []
    for run in runs or ():
        nodes.extend(expand_run(run))
    return nodes


# ---------------------------------------------------------------------------
# Leaves -> runs
# ---------------------------------------------------------------------------

def _attrs(item: dict) -> dict:
    attrs = item.get("attrs")
    return attrs if isinstance(attrs, dict) else {}


def _marks(node: dict) -> list:
    marks = node.get("marks")
    return marks if isinstance(marks, list) else []


def _leaf_flags(node: dict) -> dict:
    flags: dict = {}
    for mark in _marks(node):
        if not isinstance(mark, dict) or not isinstance(mark.get("type"), str):
            continue
        mark_type = mark["type"]
        if mark_type in _MARK_FLAGS:
            flags[_MARK_FLAGS[mark_type]] = True
        elif mark_type == MarkType.TEXT_COLOR:
            color = _attrs(mark).get("color")
            if color:
                flags["color"] = color
        elif mark_type == MarkType.LINK:
            flags["href"] = _attrs(mark).get("href") or ""
    return flags


def _flags_key(flags: dict) -> tuple:
    return (
        tuple(bool(flags.get(flag)) for flag, _ in _FLAG_MARKS),
        flags.get("color"),
        flags.get("href"),
    )


def _new_run(flags: dict, content: str) -> dict:
    if "href" in flags:
        run: dict = {"type": "link", "content": content, "href": flags["href"]}
    else:
        run = {"type": "string", "content": content}
    for flag, _ in _FLAG_MARKS:
        if flags.get(flag):
            run[flag] = True
    if flags.get("color"):
        run["color"] = flags["color"]
    return run


def nodes_to_runs(nodes: Iterable[dict]) -> list[dict]:
    """Coalesce editor leaves into a minimal run list.

    * Adjacent ``text`` leaves with the same formatting share one run.
    * ``hardBreak`` appends ``"\\n"`` to the current run (or starts a
      plain one).
    * ``variable`` leaves are embedded as ``{{id}}`` text and inherit the
      current run's colour when they have none of their own.
    """
    runs: list[dict] = []
    current: dict | None = None
    current_key: tuple | None = None

    for node in nodes or ():
        if not isinstance(node, dict):
            continue
        node_type = node.get("type")

        if node_type == "hardBreak":
            if current is None:
                current = _new_run({}, "")
                current_key = _flags_key({})
                runs.append(current)
            current["content"] += "\n"
            continue

        if node_type == "text":
            text = node.get("text")
            if not isinstance(text, str) or not text:
                continue
            flags = _leaf_flags(node)
        elif node_type == "variable":
            text = format_placeholder(str(_attrs(node).get("id", "")))
            flags = _leaf_flags(node)
            if "color" not in flags and current is not None and current.get("color"):
                flags["color"] = current["color"]
        else:
            continue

        key = _flags_key(flags)
        if current is not None and key == current_key:
            current["content"] += text
        else:
            current = _new_run(flags, text)
            current_key = key
            runs.append(current)

    return runs


def runs_plain_text(runs: Iterable[dict]) -> str:
    """Concatenate the raw ``content`` of every run, ignoring formatting."""
    return "".join(
        run["content"]
        for run in runs or ()
        if isinstance(run, dict) and isinstance(run.get("content"), str)
    )
