"""ICO: icon directory; the largest, deepest entry stands for the file."""

from __future__ import annotations

from dataclasses import dataclass

from imagespecs.constants import ImageType
from imagespecs.cursor import ByteCursor
from imagespecs.models import ParseResult

from .base import decoder

MIN_BUFFER = 6
ICON_TYPE = 1
ENTRY_SIZE = 16
ZERO_MEANS = 256


@dataclass(frozen=True, slots=True)
class IconEntry:
    width: int
    height: int
    color_count: int
    planes: int
    bit_count: int
    size: int
    offset: int

    @property
    def rank(self) -> tuple[int, int, int]:
        return self.width, self.height, self.bit_count


def _read_entry(cursor: ByteCursor) -> IconEntry:
    width = cursor.read_uint8() or ZERO_MEANS
    height = cursor.read_uint8() or ZERO_MEANS
    color_count = cursor.read_uint8()
    cursor.skip(1)  # reserved
    return IconEntry(
        width=width,
        height=height,
        color_count=color_count,
        planes=cursor.read_uint16(),
        bit_count=cursor.read_uint16(),
        size=cursor.read_uint32(),
        offset=cursor.read_uint32(),
    )


def best_entry(entries: list[IconEntry]) -> IconEntry | None:
    """Pick the widest entry, then the tallest, then the deepest; first wins on ties."""
    best: IconEntry | None = None
    for entry in entries:
        if entry.width <= 0 or entry.height <= 0:
            continue
        if best is None or entry.rank > best.rank:
            best = entry
    return best


@decoder
def decode_ico(data: bytes) -> ParseResult | None:
    if len(data) < MIN_BUFFER:
        return None
    cursor = ByteCursor(data, "little")
    reserved = cursor.read_uint16()
    kind = cursor.read_uint16()
    count = cursor.read_uint16()
    if reserved != 0 or kind != ICON_TYPE or count == 0:
        return None
    if not cursor.can_read(count * ENTRY_SIZE):
        return None

    entry = best_entry([_read_entry(cursor) for _ in range(count)])
    if entry is None:
        return None
    return ParseResult(width=entry.width, height=entry.height, type=ImageType.ICO, mime=ImageType.ICO.mime)
