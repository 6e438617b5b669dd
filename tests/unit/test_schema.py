"""Tests for the Elemental content schema (schema.py)."""

import pytest
from pydantic import ValidationError

from elementalify.errors import ElementalifyValidationError, ErrorCode
from elementalify.schema import ElementalContent, is_valid_elemental, validate_elemental


def _content(*blocks, channel="email"):
    return {
        "version": "2022-01-01",
        "elements": [{"type": "channel", "channel": channel, "elements": list(blocks)}],
    }


FULL_DOCUMENT = _content(
    {"type": "meta", "title": "Subject"},
    {"type": "text", "content": "Hello {{name}}", "text_style": "h1", "align": "center"},
    {
        "type": "text",
        "elements": [
            {"type": "string", "content": "Hi ", "bold": True},
            {"type": "link", "content": "docs", "href": "https://x.com"},
        ],
        "border": {"enabled": True, "color": "#000000", "size": "1px", "radius": 4},
    },
    {"type": "action", "content": "Go", "href": "https://x.com", "style": "button", "align": "full"},
    {"type": "image", "src": "a.png", "width": "50%", "image_natural_width": 600},
    {"type": "divider", "color": "#dddddd", "border_width": "1px"},
    {"type": "quote", "content": "q", "border_left_width": 4, "text_style": "subtext"},
    {"type": "html", "content": "<b>x</b>"},
    {"type": "comment", "comment": "note"},
    {"type": "group", "elements": [{"type": "text", "content": "cell"}]},
    {
        "type": "columns",
        "elements": [{"type": "column", "elements": [{"type": "text", "content": "a"}]}],
    },
    {
        "type": "list",
        "list_type": "ordered",
        "elements": [
            {
                "type": "list-item",
                "elements": [
                    {"type": "string", "content": "one"},
                    {
                        "type": "list",
                        "list_type": "unordered",
                        "elements": [{"type": "list-item", "elements": [{"type": "string", "content": "x"}]}],
                    },
                ],
            }
        ],
    },
)


class TestValidDocuments:
    def test_full_document(self):
        model = validate_elemental(FULL_DOCUMENT)
        assert isinstance(model, ElementalContent)
        assert model.elements[0].channel == "email"

    def test_bare_blocks(self):
        assert is_valid_elemental({"version": "2022-01-01", "elements": [{"type": "text", "content": "x"}]})

    def test_extra_keys_preserved(self):
        content = _content({"type": "text", "content": "x", "custom_key": 1})
        dumped = validate_elemental(content).model_dump(by_alias=True, exclude_none=True)
        assert dumped["elements"][0]["elements"][0]["custom_key"] == 1

    def test_if_alias_round_trips(self):
        content = _content({"type": "text", "content": "x", "if": "data.show"})
        dumped = validate_elemental(content).model_dump(by_alias=True, exclude_none=True)
        assert dumped["elements"][0]["elements"][0]["if"] == "data.show"

    def test_dump_matches_input(self):
        dumped = validate_elemental(FULL_DOCUMENT).model_dump(by_alias=True, exclude_none=True)
        assert dumped == FULL_DOCUMENT


class TestInvalidDocuments:
    @pytest.mark.parametrize(
        "content",
        [
            None,
            {"elements": []},
            {"version": "2020-01-01", "elements": []},
            _content({"type": "mystery"}),
            _content({"type": "text"}),
            _content({"type": "text", "content": "x", "elements": []}),
            _content({"type": "text", "content": "x", "align": "middle"}),
            _content({"type": "action", "content": "Go"}),
            _content({"type": "list", "list_type": "bulleted", "elements": []}),
            _content({"type": "text", "elements": [{"type": "emoji", "content": "x"}]}),
        ],
    )
    def test_rejected(self, content):
        assert is_valid_elemental(content) is False

    def test_error_context(self):
        with pytest.raises(ElementalifyValidationError) as exc_info:
            validate_elemental(_content({"type": "text"}))
        err = exc_info.value
        assert err.code == ErrorCode.VALIDATION_ERROR
        assert err.context["error_count"] >= 1
        assert isinstance(err.context["errors"], list)
        assert isinstance(err.cause, ValidationError)
        assert err.__cause__ is err.cause
