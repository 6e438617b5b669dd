"""Structural schema for Elemental documents.

The pydantic models below describe the storage tree: a versioned
document whose entries are channels or blocks, blocks discriminated by
their ``type`` tag, and text runs discriminated the same way.  Unknown
keys are preserved (``extra="allow"``), so validating a document never
loses data.

Only the *shape* is checked here.  Whether a document makes sense for a
given channel (a subject is present, a link is reachable...) is outside
the scope of this module.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from elementalify.errors import ElementalifyValidationError

ELEMENTAL_VERSION = "2022-01-01"

Align = Literal["left", "center", "right", "full"]
TextStyle = Literal["text", "h1", "h2", "subtext"]
ActionStyle = Literal["button", "link"]
VerticalAlign = Literal["top", "middle", "bottom"]

Locales = dict[str, dict[str, Any]]


class _ElementalModel(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)


class _Node(_ElementalModel):
    """Fields every Elemental node may carry."""

    channels: list[str] | None = None
    ref: str | None = None
    if_: str | None = Field(default=None, alias="if")
    loop: str | None = None
    data: dict[str, Any] | None = None


class LegacyBorder(_ElementalModel):
    enabled: bool | None = None
    color: str | None = None
    size: str | None = None
    radius: int | str | None = None


# ---------------------------------------------------------------------------
# Text runs
# ---------------------------------------------------------------------------

class _Run(_Node):
    color: str | None = None
    highlight: str | None = None
    bold: bool | None = None
    italic: bool | None = None
    strikethrough: bool | None = None
    underline: bool | None = None


class StringRun(_Run):
    type: Literal["string"]
    content: str


class LinkRun(_Run):
    type: Literal["link"]
    content: str
    href: str | None = None
    disable_tracking: bool | None = None


class ImageRun(_Run):
    type: Literal["img"]
    src: str
    href: str | None = None
    alt_text: str | None = None
    width: str | None = None
    disable_tracking: bool | None = None


Run = Annotated[Union[StringRun, LinkRun, ImageRun], Field(discriminator="type")]


# ---------------------------------------------------------------------------
# Blocks
# ---------------------------------------------------------------------------

class TextBlock(_Node):
    """A paragraph or heading: exactly one of ``content`` / ``elements``."""

    type: Literal["text"]
    content: str | None = None
    elements: list[Run] | None = None
    align: Align | None = None
    text_style: TextStyle | None = None
    background_color: str | None = None
    color: str | None = None
    format: Literal["markdown"] | None = None
    padding: str | None = None
    border_color: str | None = None
    border_size: str | None = None
    border: LegacyBorder | None = None
    locales: Locales | None = None

    @model_validator(mode="after")
    def _content_or_elements(self) -> TextBlock:
        if (self.content is None) == (self.elements is None):
            raise ValueError("text block needs exactly one of 'content' or 'elements'")
        return self


class MetaBlock(_Node):
    type: Literal["meta"]
    title: str | None = None
    locales: Locales | None = None


class ChannelEntry(_Node):
    type: Literal["channel"]
    channel: str
    elements: list[ElementalNode] | None = None
    raw: dict[str, Any] | None = None
    locales: Locales | None = None


class ImageBlock(_Node):
    type: Literal["image"]
    src: str
    href: str | None = None
    align: Align | None = None
    alt_text: str | None = None
    width: str | None = None
    image_natural_width: int | float | None = None
    border_color: str | None = None
    border_size: str | None = None
    border: LegacyBorder | None = None
    locales: Locales | None = None


class ActionBlock(_Node):
    type: Literal["action"]
    content: str
    href: str
    action_id: str | None = None
    style: ActionStyle | None = None
    align: Align | None = None
    background_color: str | None = None
    color: str | None = None
    border_radius: str | None = None
    border_size: str | None = None
    padding: str | None = None
    disable_tracking: bool | None = None
    border: LegacyBorder | None = None
    locales: Locales | None = None


class DividerBlock(_Node):
    type: Literal["divider"]
    color: str | None = None
    border_width: str | None = None
    width: str | None = None
    padding: str | None = None


class GroupBlock(_Node):
    type: Literal["group"]
    elements: list[ElementalNode]
    padding: str | None = None
    background_color: str | None = None
    border: LegacyBorder | None = None
    locales: Locales | None = None


class ColumnBlock(_Node):
    type: Literal["column"]
    elements: list[ElementalNode]
    background_color: str | None = None
    border_color: str | None = None
    border_radius: str | None = None
    border_width: str | None = None
    padding: str | None = None
    vertical_align: VerticalAlign | None = None
    width: str | None = None
    locales: Locales | None = None


class ColumnsBlock(_Node):
    type: Literal["columns"]
    elements: list[ColumnBlock]
    background_color: str | None = None
    border_color: str | None = None
    border_radius: str | None = None
    border_width: str | None = None
    gap: str | None = None
    padding: str | None = None
    vertical_align: VerticalAlign | None = None
    locales: Locales | None = None


class QuoteBlock(_Node):
    type: Literal["quote"]
    content: str
    align: Align | None = None
    border_color: str | None = None
    border_left_width: int | None = None
    padding_horizontal: int | None = None
    padding_vertical: int | None = None
    background_color: str | None = None
    text_style: TextStyle | None = None
    locales: Locales | None = None


class HtmlBlock(_Node):
    type: Literal["html"]
    content: str
    locales: Locales | None = None


class CommentBlock(_Node):
    type: Literal["comment"]
    comment: str | None = None
    object: Any = None


class ListBlock(_Node):
    type: Literal["list"]
    list_type: Literal["ordered", "unordered"]
    elements: list[ListItemBlock]
    imgSrc: str | None = None
    imgHref: str | None = None
    border_color: str | None = None
    border_size: str | None = None
    padding: str | None = None


ListItemElement = Annotated[
    Union[StringRun, LinkRun, ImageRun, ListBlock],
    Field(discriminator="type"),
]


class ListItemBlock(_Node):
    type: Literal["list-item"]
    elements: list[ListItemElement]
    background_color: str | None = None


ElementalNode = Annotated[
    Union[
        TextBlock,
        MetaBlock,
        ChannelEntry,
        ImageBlock,
        ActionBlock,
        DividerBlock,
        GroupBlock,
        ColumnsBlock,
        ColumnBlock,
        QuoteBlock,
        HtmlBlock,
        CommentBlock,
        ListBlock,
        ListItemBlock,
    ],
    Field(discriminator="type"),
]


class ElementalContent(_ElementalModel):
    """A complete Elemental document."""

    version: Literal["2022-01-01"]
    elements: list[ElementalNode]


for _model in (ChannelEntry, GroupBlock, ColumnBlock, ColumnsBlock, ListBlock, ListItemBlock, ElementalContent):
    _model.model_rebuild()


# ---------------------------------------------------------------------------
# Validation entry points
# ---------------------------------------------------------------------------

def validate_elemental(content: Any) -> ElementalContent:
    """Validate *content* against the Elemental schema.

    Parameters
    ----------
    content:
        A JSON-shaped document ``{"version": "2022-01-01", "elements": [...]}``.

    Returns
    -------
    ElementalContent
        The parsed document.  ``model_dump(by_alias=True,
        exclude_none=True)`` gives back the input shape.

    Raises
    ------
    ElementalifyValidationError
        When the document does not match.  ``context["errors"]`` holds
        pydantic's error dicts.
    """
    try:
        return ElementalContent.model_validate(content)
    except ValidationError as exc:
        raise ElementalifyValidationError(
            message=f"Elemental content is invalid ({exc.error_count()} error(s))",
            context={
                "errors": exc.errors(include_url=False),
                "error_count": exc.error_count(),
            },
            cause=exc,
        ) from exc


def is_valid_elemental(content: Any) -> bool:
    """Return ``True`` when *content* passes :func:`validate_elemental`."""
    try:
        validate_elemental(content)
    except ElementalifyValidationError:
        return False
    return True
