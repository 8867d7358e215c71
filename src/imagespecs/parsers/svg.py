"""SVG: attribute scan over the opening ``<svg>`` tag."""

from __future__ import annotations

import math
import re
from typing import NamedTuple

from imagespecs.constants import DEFAULT_UNITS, ImageType
from imagespecs.models import ParseResult
from imagespecs.utils import round_half_up

from .base import decoder

MIN_BUFFER = 4
DEFAULT_WIDTH = 300
DEFAULT_HEIGHT = 150

SVG_TAG = re.compile(r"<svg[^>]*>", re.IGNORECASE)
# the lookbehind keeps ``stroke-width`` and ``data-height`` from matching
WIDTH_ATTR = re.compile(r"""(?<![\w:-])width\s*=\s*["']([^"']+)["']""", re.IGNORECASE)
HEIGHT_ATTR = re.compile(r"""(?<![\w:-])height\s*=\s*["']([^"']+)["']""", re.IGNORECASE)
VIEWBOX_ATTR = re.compile(r"""(?<![\w:-])viewBox\s*=\s*["']([^"']+)["']""", re.IGNORECASE)
DIMENSION = re.compile(r"^([0-9]*\.?[0-9]+)(.*)$", re.DOTALL)
VIEWBOX_SEPARATOR = re.compile(r"[\s,]+")

# approximate CSS pixels per unit at 96 DPI
PIXELS_PER_UNIT = {
    "px": 1.0,
    "in": 96.0,
    "cm": 37.8,
    "mm": 3.78,
    "pt": 1.33,
    "pc": 16.0,
    "em": 16.0,
    "rem": 16.0,
    "ex": 8.0,
}


class Dimension(NamedTuple):
    value: float
    unit: str

    @property
    def pixels(self) -> float:
        return self.value * PIXELS_PER_UNIT.get(self.unit, 1.0)


def parse_dimension(text: str) -> Dimension | None:
    """Split ``"10cm"`` into ``Dimension(10.0, "cm")``; an empty unit means px."""
    match = DIMENSION.match(text.strip())
    if match is None:
        return None
    unit = match.group(2).strip() or DEFAULT_UNITS
    return Dimension(float(match.group(1)), unit)


def parse_view_box(text: str) -> tuple[float, float] | None:
    parts = [p for p in VIEWBOX_SEPARATOR.split(text.strip()) if p]
    if len(parts) != 4:
        return None
    try:
        _min_x, _min_y, width, height = (float(p) for p in parts)
    except ValueError:
        return None
    return width, height


@decoder
def decode_svg(data: bytes) -> ParseResult | None:
    """Decode the outer dimensions of an SVG document.

    Explicit ``width``/``height`` win; a missing one is taken from the
    ``viewBox`` and anything still missing falls back to 300x150. Reported
    units keep the attribute's own unit even though the numbers are
    converted to pixels.
    """
    if len(data) < MIN_BUFFER:
        return None
    content = data.decode("utf-8", errors="replace")
    if "<svg" not in content:
        return None
    tag_match = SVG_TAG.search(content)
    if tag_match is None:
        return None
    tag = tag_match.group(0)

    width: float | None = None
    height: float | None = None
    w_units = h_units = DEFAULT_UNITS

    if (m := WIDTH_ATTR.search(tag)) and (dim := parse_dimension(m.group(1))):
        width, w_units = dim.pixels, dim.unit
    if (m := HEIGHT_ATTR.search(tag)) and (dim := parse_dimension(m.group(1))):
        height, h_units = dim.pixels, dim.unit

    if (width is None or height is None) and (m := VIEWBOX_ATTR.search(tag)):
        if (box := parse_view_box(m.group(1))) is not None:
            if width is None:
                width, w_units = box[0], DEFAULT_UNITS
            if height is None:
                height, h_units = box[1], DEFAULT_UNITS

    if width is None:
        width, w_units = DEFAULT_WIDTH, DEFAULT_UNITS
    if height is None:
        height, h_units = DEFAULT_HEIGHT, DEFAULT_UNITS

    if not (math.isfinite(width) and math.isfinite(height)) or width <= 0 or height <= 0:
        return None
    return ParseResult(
        width=round_half_up(width),
        height=round_half_up(height),
        type=ImageType.SVG,
        mime=ImageType.SVG.mime,
        w_units=w_units,
        h_units=h_units,
    )
