"""Tests for the editor -> Elemental converter (converter/editor_to_elemental.py)."""

import copy

import pytest

from elementalify.config import ElementalifyConfig
from elementalify.converter.editor_to_elemental import build_elemental, convert_editor_to_elemental
from elementalify.errors import ElementalifyDepthError
from elementalify.models import WarningCode

BOLD = {"type": "bold"}


def _doc(*nodes):
    return {"type": "doc", "content": list(nodes)}


def _text(text, *marks):
    node = {"type": "text", "text": text}
    if marks:
        node["marks"] = list(marks)
    return node


def _paragraph(*leaves, **attrs):
    return {"type": "paragraph", "attrs": {"textAlign": "left", **attrs}, "content": list(leaves)}


def _heading(level, *leaves):
    return {"type": "heading", "attrs": {"textAlign": "left", "level": level}, "content": list(leaves)}


# =========================================================================
# Paragraphs and headings
# =========================================================================

class TestTextBlocks:
    def test_empty_doc(self):
        assert convert_editor_to_elemental(_doc()) == []
        assert convert_editor_to_elemental(None) == []

    def test_paragraph_becomes_text_with_runs(self):
        blocks = convert_editor_to_elemental(_doc(_paragraph(_text("Hello "), _text("world", BOLD))))
        assert blocks == [
            {
                "type": "text",
                "align": "left",
                "elements": [
                    {"type": "string", "content": "Hello "},
                    {"type": "string", "content": "world", "bold": True},
                ],
            }
        ]

    def test_variables_and_breaks_embedded(self):
        paragraph = _paragraph(
            _text("Hi "),
            {"type": "variable", "attrs": {"id": "name", "isInvalid": False}},
            {"type": "hardBreak"},
            _text("Bye"),
        )
        block = convert_editor_to_elemental(_doc(paragraph))[0]
        assert block["elements"] == [{"type": "string", "content": "Hi {{name}}\nBye"}]

    @pytest.mark.parametrize(("level", "style"), [(1, "h1"), (2, "h2"), (3, "h2")])
    def test_heading_styles(self, level, style):
        block = convert_editor_to_elemental(_doc(_heading(level, _text("T"))))[0]
        assert block["text_style"] == style

    def test_justify_maps_to_full(self):
        block = convert_editor_to_elemental(_doc(_paragraph(_text("x"), textAlign="justify")))[0]
        assert block["align"] == "full"

    def test_style_attributes_flattened(self):
        paragraph = _paragraph(
            _text("x"),
            paddingVertical=6,
            paddingHorizontal=12,
            textColor="#111111",
            backgroundColor="#eeeeee",
            borderColor="#000000",
            borderWidth=2,
        )
        block = convert_editor_to_elemental(_doc(paragraph))[0]
        assert block["padding"] == "6px 12px"
        assert block["color"] == "#111111"
        assert block["background_color"] == "#eeeeee"
        assert block["border_color"] == "#000000"
        assert block["border_size"] == "2px"
        assert "border" not in block

    def test_locales_normalized_to_elements(self):
        paragraph = _paragraph(_text("Hi"), locales={"fr": {"content": "**Salut**"}})
        block = convert_editor_to_elemental(_doc(paragraph))[0]
        assert block["locales"] == {"fr": {"elements": [{"type": "string", "content": "Salut", "bold": True}]}}


# =========================================================================
# Buttons
# =========================================================================

class TestButtons:
    def test_button(self):
        button = {
            "type": "button",
            "attrs": {
                "label": "ignored",
                "link": "https://x.com",
                "alignment": "right",
                "size": "default",
                "style": "link",
                "backgroundColor": "#000000",
                "textColor": "#ffffff",
                "padding": 8,
                "borderColor": "#111111",
                "borderRadius": 4,
            },
            "content": [_text("Go "), {"type": "variable", "attrs": {"id": "x"}}],
        }
        assert convert_editor_to_elemental(_doc(button)) == [
            {
                "type": "action",
                "content": "Go {{x}}",
                "href": "https://x.com",
                "style": "link",
                "align": "right",
                "background_color": "#000000",
                "color": "#ffffff",
                "padding": "8px",
                "border_color": "#111111",
                "border_radius": "4px",
            }
        ]

    def test_label_attr_used_without_content(self):
        button = {"type": "button", "attrs": {"label": "Fallback"}}
        block = convert_editor_to_elemental(_doc(button))[0]
        assert block["content"] == "Fallback"
        assert block["href"] == "#"
        assert block["align"] == "center"
        assert block["border_radius"] == "0px"

    def test_full_size(self):
        button = {"type": "button", "attrs": {"label": "Go", "size": "full", "alignment": "left"}}
        assert convert_editor_to_elemental(_doc(button))[0]["align"] == "full"

    def test_button_row_becomes_two_left_actions(self):
        row = {
            "type": "buttonRow",
            "attrs": {
                "button1Label": "Yes",
                "button1Link": "https://yes",
                "button1BackgroundColor": "#000000",
                "button1TextColor": "#ffffff",
                "button2Label": "No",
                "button2Link": "",
            },
        }
        blocks = convert_editor_to_elemental(_doc(row))
        assert len(blocks) == 2
        assert all(b["type"] == "action" and b["align"] == "left" for b in blocks)
        assert blocks[0]["content"] == "Yes"
        assert blocks[0]["background_color"] == "#000000"
        assert blocks[1]["href"] == "#"

    def test_button_row_default_labels(self):
        blocks = convert_editor_to_elemental(_doc({"type": "buttonRow", "attrs": {}}))
        assert [b["content"] for b in blocks] == ["Button 1", "Button 2"]


# =========================================================================
# Blockquotes
# =========================================================================

class TestBlockquotes:
    def test_children_joined_and_trimmed(self):
        quote = {
            "type": "blockquote",
            "attrs": {"borderColor": "#cccccc", "borderWidth": 4, "paddingVertical": 2, "paddingHorizontal": 8},
            "content": [_paragraph(_text("one ", BOLD)), _paragraph(_text("two"))],
        }
        assert convert_editor_to_elemental(_doc(quote)) == [
            {
                "type": "quote",
                "content": "**one **\ntwo",
                "border_color": "#cccccc",
                "border_left_width": 4,
                "padding_vertical": 2,
                "padding_horizontal": 8,
            }
        ]

    def test_heading_child_sets_text_style(self):
        quote = {"type": "blockquote", "attrs": {}, "content": [_heading(3, _text("small"))]}
        assert convert_editor_to_elemental(_doc(quote))[0]["text_style"] == "subtext"

    def test_alignment_read_from_child(self):
        quote = {
            "type": "blockquote",
            "attrs": {"textAlign": "right"},
            "content": [_paragraph(_text("x"), textAlign="center")],
        }
        assert convert_editor_to_elemental(_doc(quote))[0]["align"] == "center"

    def test_list_child_becomes_lines(self):
        items = [
            {"type": "listItem", "content": [_paragraph(_text("a"))]},
            {"type": "listItem", "content": [_paragraph(_text("b"))]},
        ]
        for list_type, expected in (("unordered", "• a\n• b"), ("ordered", "1. a\n2. b")):
            quote = {
                "type": "blockquote",
                "content": [{"type": "list", "attrs": {"listType": list_type}, "content": items}],
            }
            assert convert_editor_to_elemental(_doc(quote))[0]["content"] == expected

    def test_list_child_reads_text_style_from_quote(self):
        items = [{"type": "listItem", "content": [_paragraph(_text("a"))]}]
        quote = {
            "type": "blockquote",
            "attrs": {"textStyle": "subtext"},
            "content": [{"type": "list", "attrs": {"listType": "unordered"}, "content": items}],
        }
        assert convert_editor_to_elemental(_doc(quote)) == [
            {"type": "quote", "content": "• a", "text_style": "subtext"},
        ]

    def test_paragraph_child_ignores_quote_text_style(self):
        quote = {"type": "blockquote", "attrs": {"textStyle": "subtext"}, "content": [_paragraph(_text("a"))]}
        assert "text_style" not in convert_editor_to_elemental(_doc(quote))[0]

    def test_locales_written_as_content(self):
        quote = {
            "type": "blockquote",
            "attrs": {"locales": {"fr": {"elements": [{"type": "string", "content": "Salut", "italic": True}]}}},
            "content": [_paragraph(_text("Hi"))],
        }
        assert convert_editor_to_elemental(_doc(quote))[0]["locales"] == {"fr": {"content": "*Salut*"}}


# =========================================================================
# Media, dividers, code
# =========================================================================

class TestLeafNodes:
    def test_image(self):
        image = {
            "type": "imageBlock",
            "attrs": {
                "sourcePath": "a.png",
                "link": "https://x.com",
                "alignment": "center",
                "alt": "A",
                "width": 50,
                "imageNaturalWidth": 600,
                "borderColor": "#000000",
                "borderWidth": 1,
            },
        }
        assert convert_editor_to_elemental(_doc(image)) == [
            {
                "type": "image",
                "src": "a.png",
                "href": "https://x.com",
                "align": "center",
                "alt_text": "A",
                "width": "50%",
                "image_natural_width": 600,
                "border_color": "#000000",
                "border_size": "1px",
            }
        ]

    def test_divider(self):
        divider = {"type": "divider", "attrs": {"color": "#dddddd", "size": 2, "padding": 10}}
        assert convert_editor_to_elemental(_doc(divider)) == [
            {"type": "divider", "color": "#dddddd", "border_width": "2px", "padding": "10px"},
        ]

    def test_spacer_is_transparent(self):
        divider = {"type": "divider", "attrs": {"variant": "spacer"}}
        assert convert_editor_to_elemental(_doc(divider))[0]["color"] == "transparent"

    def test_custom_code(self):
        code = {"type": "customCode", "attrs": {"code": "<b>x</b>"}}
        assert convert_editor_to_elemental(_doc(code)) == [{"type": "html", "content": "<b>x</b>"}]


# =========================================================================
# Columns
# =========================================================================

def _column(*cells, **attrs):
    return {
        "type": "column",
        "attrs": attrs,
        "content": [
            {
                "type": "columnRow",
                "content": [{"type": "columnCell", "content": list(cell)} for cell in cells],
            }
        ],
    }


class TestColumns:
    def test_column_becomes_group(self):
        column = _column([_paragraph(_text("a"))], [_paragraph(_text("b"))])
        block = convert_editor_to_elemental(_doc(column))[0]
        assert block["type"] == "group"
        assert [e["type"] for e in block["elements"]] == ["text", "text"]

    def test_empty_cell_becomes_placeholder(self):
        block = convert_editor_to_elemental(_doc(_column([])))[0]
        assert block["elements"] == [
            {
                "type": "text",
                "align": "left",
                "elements": [{"type": "string", "content": "Drag and drop content blocks"}],
            }
        ]

    def test_multi_block_cell_rewrapped_in_group(self):
        column = _column([_paragraph(_text("a")), {"type": "divider", "attrs": {}}])
        inner = convert_editor_to_elemental(_doc(column))[0]["elements"][0]
        assert inner["type"] == "group"
        assert [e["type"] for e in inner["elements"]] == ["text", "divider"]

    def test_column_styles(self):
        column = _column(
            [_paragraph(_text("a"))],
            paddingVertical=4,
            paddingHorizontal=8,
            backgroundColor="#ffffff",
            borderColor="#000000",
            borderWidth=0,
        )
        block = convert_editor_to_elemental(_doc(column))[0]
        assert block["padding"] == "4px 8px"
        assert block["background_color"] == "#ffffff"
        assert "border_color" not in block
        assert "border_size" not in block

    def test_column_defaults_not_written(self):
        column = _column(
            [_paragraph(_text("a"))],
            paddingVertical=0,
            paddingHorizontal=0,
            backgroundColor="transparent",
            borderColor="#000000",
            borderWidth=0,
            borderRadius=0,
        )
        block = convert_editor_to_elemental(_doc(column))[0]
        assert set(block) == {"type", "elements"}

    def test_column_border_written_when_visible(self):
        column = _column([_paragraph(_text("a"))], borderColor="#ff0000", borderWidth=2, borderRadius=3)
        block = convert_editor_to_elemental(_doc(column))[0]
        assert block["border_color"] == "#ff0000"
        assert block["border_size"] == "2px"
        assert block["border_radius"] == "3px"


# =========================================================================
# Lists
# =========================================================================

class TestLists:
    def test_list(self):
        node = {
            "type": "list",
            "attrs": {"listType": "ordered"},
            "content": [
                {"type": "listItem", "content": [_paragraph(_text("one"))]},
                {"type": "listItem", "content": [_paragraph(_text("two")), _paragraph(_text("more"))]},
            ],
        }
        assert convert_editor_to_elemental(_doc(node)) == [
            {
                "type": "list",
                "list_type": "ordered",
                "elements": [
                    {"type": "list-item", "elements": [{"type": "string", "content": "one"}]},
                    {"type": "list-item", "elements": [{"type": "string", "content": "two\nmore"}]},
                ],
            }
        ]

    def test_nested_list(self):
        inner = {
            "type": "list",
            "attrs": {"listType": "unordered"},
            "content": [{"type": "listItem", "content": [_paragraph(_text("child"))]}],
        }
        node = {
            "type": "list",
            "attrs": {"listType": "unordered"},
            "content": [{"type": "listItem", "content": [_paragraph(_text("parent")), inner]}],
        }
        item = convert_editor_to_elemental(_doc(node))[0]["elements"][0]
        assert item["elements"][0] == {"type": "string", "content": "parent"}
        assert item["elements"][1]["type"] == "list"


# =========================================================================
# Unknown input and policies
# =========================================================================

class TestUnknownInput:
    def test_unknown_wrapper_flattened(self):
        wrapper = {"type": "section", "content": [_paragraph(_text("inside"))]}
        blocks = convert_editor_to_elemental(_doc(wrapper))
        assert [b["type"] for b in blocks] == ["text"]

    def test_non_dict_nodes_warned(self):
        blocks, warnings = build_elemental(_doc("junk", _paragraph(_text("ok"))))
        assert len(blocks) == 1
        assert warnings[0].code == WarningCode.MALFORMED_NODE.value

    def test_depth_truncated(self):
        deep = _paragraph(_text("x"))
        for _ in range(5):
            deep = {"type": "wrapper", "content": [deep]}
        blocks, warnings = build_elemental(_doc(deep), ElementalifyConfig(max_depth=3))
        assert blocks == []
        assert warnings[0].code == WarningCode.DEPTH_EXCEEDED.value

    def test_depth_raise(self):
        deep = _paragraph(_text("x"))
        for _ in range(5):
            deep = {"type": "wrapper", "content": [deep]}
        config = ElementalifyConfig(max_depth=3, depth_overflow_policy="raise")
        with pytest.raises(ElementalifyDepthError):
            build_elemental(_doc(deep), config)

    def test_non_string_text_leaf_skipped(self):
        blocks = convert_editor_to_elemental(_doc(_paragraph({"type": "text", "text": 5}, _text("a"))))
        assert blocks[0]["elements"] == [{"type": "string", "content": "a"}]

    def test_variable_without_attrs(self):
        blocks = convert_editor_to_elemental(_doc(_paragraph({"type": "variable", "attrs": None})))
        assert blocks[0]["elements"] == [{"type": "string", "content": "{{}}"}]

    def test_link_mark_without_attrs(self):
        leaf = _text("go", {"type": "link", "attrs": None})
        blocks = convert_editor_to_elemental(_doc(_paragraph(leaf)))
        assert blocks[0]["elements"] == [{"type": "link", "content": "go", "href": ""}]

    def test_quote_with_malformed_leaves(self):
        quote = {
            "type": "blockquote",
            "content": [_paragraph({"type": "text", "text": 5}, {"type": "variable", "attrs": None}, _text("x", {"type": "link", "attrs": None}))],
        }
        assert convert_editor_to_elemental(_doc(quote))[0]["content"] == "{{}}[x]()"

    def test_quote_with_non_string_text_only(self):
        quote = {"type": "blockquote", "content": [_paragraph({"type": "text", "text": 5})]}
        assert convert_editor_to_elemental(_doc(quote))[0]["content"] == ""

    def test_input_not_mutated(self):
        doc = _doc(
            _paragraph(_text("a", BOLD), locales={"fr": {"content": "x"}}),
            _column([_paragraph(_text("b"))]),
        )
        snapshot = copy.deepcopy(doc)
        convert_editor_to_elemental(doc)
        assert doc == snapshot

    def test_metrics(self, metrics):
        build_elemental(_doc("junk"), ElementalifyConfig(metrics=metrics))
        assert metrics.count("elementalify.conversions_total") == 1
        assert metrics.count("elementalify.nodes_skipped_total") == 1
