"""Tests for run expansion and coalescing (converter/runs.py)."""

from elementalify.converter.runs import (
    expand_run,
    nodes_to_runs,
    run_marks,
    runs_plain_text,
    runs_to_nodes,
)

BOLD = {"type": "bold"}


def _text(text, *marks):
    node = {"type": "text", "text": text}
    if marks:
        node["marks"] = list(marks)
    return node


def _var(name, *marks):
    node = {"type": "variable", "attrs": {"id": name, "isInvalid": False}}
    if marks:
        node["marks"] = list(marks)
    return node


class TestRunMarks:
    def test_flags_in_fixed_order(self):
        run = {"type": "string", "content": "x", "underline": True, "bold": True, "strikethrough": True}
        assert run_marks(run) == [BOLD, {"type": "strike"}, {"type": "underline"}]

    def test_color_and_link(self):
        run = {"type": "link", "content": "x", "href": "https://x.com", "color": "#f00"}
        assert run_marks(run) == [
            {"type": "textColor", "attrs": {"color": "#f00"}},
            {"type": "link", "attrs": {"href": "https://x.com"}},
        ]

    def test_false_flags_ignored(self):
        assert run_marks({"type": "string", "content": "x", "bold": False}) == []


class TestExpandRun:
    def test_plain_string(self):
        assert expand_run({"type": "string", "content": "hi"}) == [_text("hi")]

    def test_embedded_variable_and_break(self):
        nodes = expand_run({"type": "string", "content": "Hi {{name}}\nBye", "bold": True})
        assert nodes == [
            _text("Hi ", BOLD),
            _var("name", BOLD),
            {"type": "hardBreak"},
            _text("Bye", BOLD),
        ]

    def test_trailing_newline_keeps_break(self):
        assert expand_run({"type": "string", "content": "a\n"}) == [_text("a"), {"type": "hardBreak"}]

    def test_markup_in_run_content_is_literal(self):
        assert expand_run({"type": "string", "content": "**x**"}) == [_text("**x**")]

    def test_link_variable_in_url_context(self):
        nodes = expand_run({"type": "link", "content": "{{url}}", "href": "#"})
        assert nodes[0]["attrs"]["inUrlContext"] is True

    def test_image_run_dropped(self):
        assert expand_run({"type": "img", "src": "a.png"}) == []

    def test_non_string_content_dropped(self):
        assert expand_run({"type": "string", "content": 3}) == []
        assert expand_run("nope") == []

    def test_runs_to_nodes_concatenates(self):
        runs = [{"type": "string", "content": "a"}, {"type": "string", "content": "b", "italic": True}]
        assert runs_to_nodes(runs) == [_text("a"), _text("b", {"type": "italic"})]

    def test_runs_to_nodes_none(self):
        assert runs_to_nodes(None) == []


class TestNodesToRuns:
    def test_adjacent_same_flags_coalesce(self):
        assert nodes_to_runs([_text("a", BOLD), _text("b", BOLD)]) == [
            {"type": "string", "content": "ab", "bold": True},
        ]

    def test_different_flags_split(self):
        assert nodes_to_runs([_text("a"), _text("b", BOLD)]) == [
            {"type": "string", "content": "a"},
            {"type": "string", "content": "b", "bold": True},
        ]

    def test_hard_break_appends_newline(self):
        assert nodes_to_runs([_text("a"), {"type": "hardBreak"}, _text("b")]) == [
            {"type": "string", "content": "a\nb"},
        ]

    def test_leading_hard_break_starts_plain_run(self):
        assert nodes_to_runs([{"type": "hardBreak"}, _text("b", BOLD)]) == [
            {"type": "string", "content": "\n"},
            {"type": "string", "content": "b", "bold": True},
        ]

    def test_variable_embedded_as_placeholder(self):
        assert nodes_to_runs([_text("Hi "), _var("name"), _text("!")]) == [
            {"type": "string", "content": "Hi {{name}}!"},
        ]

    def test_variable_inherits_current_color(self):
        color = {"type": "textColor", "attrs": {"color": "#f00"}}
        assert nodes_to_runs([_text("Hi ", color), _var("name")]) == [
            {"type": "string", "content": "Hi {{name}}", "color": "#f00"},
        ]

    def test_link_mark_becomes_link_run(self):
        link = {"type": "link", "attrs": {"href": "https://x.com"}}
        assert nodes_to_runs([_text("go", BOLD, link)]) == [
            {"type": "link", "content": "go", "href": "https://x.com", "bold": True},
        ]

    def test_different_hrefs_do_not_merge(self):
        first = {"type": "link", "attrs": {"href": "https://a"}}
        second = {"type": "link", "attrs": {"href": "https://b"}}
        runs = nodes_to_runs([_text("a", first), _text("b", second)])
        assert [r["href"] for r in runs] == ["https://a", "https://b"]

    def test_empty_text_and_junk_skipped(self):
        assert nodes_to_runs([_text(""), "junk", {"type": "image"}, _text("x")]) == [
            {"type": "string", "content": "x"},
        ]

    def test_non_string_text_skipped(self):
        assert nodes_to_runs([{"type": "text", "text": 5}, {"type": "text", "text": None}, _text("a")]) == [
            {"type": "string", "content": "a"},
        ]

    def test_missing_attrs_tolerated(self):
        nodes = [
            {"type": "variable", "attrs": None},
            _text("go", {"type": "link", "attrs": None}, {"type": "textColor", "attrs": "red"}),
        ]
        assert nodes_to_runs(nodes) == [
            {"type": "string", "content": "{{}}"},
            {"type": "link", "content": "go", "href": ""},
        ]

    def test_non_list_marks_ignored(self):
        nodes = [{"type": "text", "text": "a", "marks": 5}, {"type": "text", "text": "b", "marks": {"type": "bold"}}]
        assert nodes_to_runs(nodes) == [{"type": "string", "content": "ab"}]

    def test_unhashable_mark_type_ignored(self):
        assert nodes_to_runs([_text("a", {"type": ["bold"]}, BOLD)]) == [
            {"type": "string", "content": "a", "bold": True},
        ]

    def test_mark_order_does_not_matter(self):
        italic = {"type": "italic"}
        assert len(nodes_to_runs([_text("a", BOLD, italic), _text("b", italic, BOLD)])) == 1

    def test_expand_then_coalesce(self):
        runs = [
            {"type": "string", "content": "Hello {{name}}\n", "bold": True},
            {"type": "link", "content": "docs", "href": "https://x.com"},
        ]
        assert nodes_to_runs(runs_to_nodes(runs)) == runs


class TestRunsPlainText:
    def test_concatenates_content(self):
        runs = [{"type": "string", "content": "a"}, {"type": "img", "src": "x"}, {"type": "link", "content": "b"}]
        assert runs_plain_text(runs) == "ab"
