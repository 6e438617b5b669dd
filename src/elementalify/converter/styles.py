"""Style attribute normalization shared by both tree directions.

Elemental stores sizes as CSS-ish strings (``"6px 12px"``, ``"2px"``,
``"50%"``) and accepts borders in two shapes::

    {"border_color": "#000", "border_size": "1px", "border_radius": "4px"}
    {"border": {"enabled": True, "color": "#000", "size": "1px", "radius": 4}}

The editor stores plain numbers (``paddingVertical``, ``borderWidth``,
``width``...).  The helpers here convert between the two and always write
the flat border form.
"""

from __future__ import annotations

import math
import re
from typing import Any

_NUMBER_RE = re.compile(r"^\s*(-?\d+(?:\.\d+)?)\s*(px|%)?\s*$")

# Elemental ``full`` alignment is the editor's ``justify``.
_ALIGN_TO_EDITOR: dict[str, str] = {"full": "justify"}
_ALIGN_TO_ELEMENTAL: dict[str, str] = {"justify": "full"}


# ---------------------------------------------------------------------------
# Numbers and pixel strings
# ---------------------------------------------------------------------------

def _parse_number(value: Any) -> tuple[float, str] | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value), ""
    if isinstance(value, str):
        match = _NUMBER_RE.match(value)
        if match:
            return float(match.group(1)), match.group(2) or ""
    return None


def parse_px(value: Any) -> int | None:
    """Parse ``"12px"``, ``"12"`` or ``12`` to an ``int``; ``None`` otherwise.

    >>> parse_px("12px"), parse_px(3), parse_px("auto")
    (12, 3, None)
    """
    parsed = _parse_number(value)
    if parsed is None:
        return None
    return int(parsed[0])


def format_px(value: Any) -> str:
    """Format a number as a pixel string (``4`` -> ``"4px"``)."""
    return f"{int(value)}px"


def parse_padding(value: Any) -> tuple[int, int] | None:
    """Split ``"Vpx Hpx"`` into ``(vertical, horizontal)``.

    A single value applies to both axes.  Returns ``None`` when either
    part is unparseable.
    """
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return int(value), int(value)
    if not isinstance(value, str):
        return None
    parts = value.split()
    if not parts:
        return None
    vertical = parse_px(parts[0])
    horizontal = parse_px(parts[1]) if len(parts) > 1 else vertical
    if vertical is None or horizontal is None:
        return None
    return vertical, horizontal


def format_padding(vertical: Any, horizontal: Any) -> str:
    return f"{int(vertical)}px {int(horizontal)}px"


# ---------------------------------------------------------------------------
# Borders
# ---------------------------------------------------------------------------

def coalesce_border(block: dict) -> dict[str, Any]:
    """Merge flat and legacy nested border fields into one dict.

    Returns a dict with any of ``color`` (str), ``size`` (int) and
    ``radius`` (int).  Flat ``border_*`` fields take precedence; the
    legacy ``border`` object fills the gaps unless it is explicitly
    ``enabled: False``.
    """
    result: dict[str, Any] = {}

    legacy = block.get("border")
    if isinstance(legacy, dict) and legacy.get("enabled", True) is not False:
        if legacy.get("color"):
            result["color"] = legacy["color"]
        size = parse_px(legacy.get("size"))
        if size is not None:
            result["size"] = size
        radius = parse_px(legacy.get("radius"))
        if radius is not None:
            result["radius"] = radius

    if block.get("border_color"):
        result["color"] = block["border_color"]
    size = parse_px(block.get("border_size"))
    if size is not None:
        result["size"] = size
    radius = parse_px(block.get("border_radius"))
    if radius is not None:
        result["radius"] = radius

    return result


def border_to_attrs(block: dict) -> dict[str, Any]:
    """Editor ``borderColor`` / ``borderWidth`` / ``borderRadius`` attrs."""
    border = coalesce_border(block)
    attrs: dict[str, Any] = {}
    if "color" in border:
        attrs["borderColor"] = border["color"]
    if "size" in border:
        attrs["borderWidth"] = border["size"]
    if "radius" in border:
        attrs["borderRadius"] = border["radius"]
    return attrs


def attrs_to_border(attrs: dict) -> dict[str, Any]:
    """Flat Elemental border fields from editor attrs.

    Zero widths and radii are treated as "no border" and omitted.
    """
    border: dict[str, Any] = {}
    if attrs.get("borderColor"):
        border["border_color"] = attrs["borderColor"]
    width = parse_px(attrs.get("borderWidth"))
    if width:
        border["border_size"] = format_px(width)
    radius = parse_px(attrs.get("borderRadius"))
    if radius:
        border["border_radius"] = format_px(radius)
    return border


# ---------------------------------------------------------------------------
# Image width
# ---------------------------------------------------------------------------

def _clamp_percent(value: float) -> int:
    return max(1, min(100, int(value)))


def normalize_image_width(width: Any, natural_width: Any = None) -> int | None:
    """Convert an Elemental image width to an editor percentage.

    * ``"Npx"`` with a known natural width -> ``N / natural * 100``,
      rounded half-up and clamped to 1-100.
    * ``"Npx"`` without a natural width -> ``100``.
    * ``"N%"`` or a bare number -> clamped to 1-100.
    * Missing or unparseable -> ``None``.

    >>> normalize_image_width("300px", 600)
    50
    >>> normalize_image_width("300px")
    100
    >>> normalize_image_width("500%")
    100
    """
    parsed = _parse_number(width)
    if parsed is None:
        return None
    number, unit = parsed

    if unit == "px":
        natural = _parse_number(natural_width)
        if natural is None or natural[0] <= 0:
            return 100
        return _clamp_percent(math.floor(number / natural[0] * 100 + 0.5))
    return _clamp_percent(number)


def format_percent(width: Any) -> str:
    return f"{int(width)}%"


# ---------------------------------------------------------------------------
# Alignment
# ---------------------------------------------------------------------------

def align_to_editor(align: Any, default: str = "left") -> str:
    if not isinstance(align, str) or not align:
        return default
    return _ALIGN_TO_EDITOR.get(align, align)


def align_to_elemental(align: Any, default: str = "left") -> str:
    if not isinstance(align, str) or not align:
        return default
    return _ALIGN_TO_ELEMENTAL.get(align, align)
