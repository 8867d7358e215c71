"""WebP: RIFF container with VP8X / VP8 / VP8L / ICCP sub-chunks."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from imagespecs.color_space import ICC_EMBEDDED, color_space_from_string, sniff_icc_profile
from imagespecs.constants import ImageType
from imagespecs.cursor import ByteCursor
from imagespecs.models import ParseResult

from .base import decoder

MIN_BUFFER = 12
CHUNK_HEADER = 8
FIRST_CHUNK = 12

VP8X_ALPHA = 0x10
VP8X_ICC = 0x20
VP8_START_CODE = b"\x9d\x01\x2a"
VP8L_SIGNATURE = 0x2F
DIMENSION_MASK = 0x3FFF


@dataclass(frozen=True, slots=True)
class Canvas:
    width: int
    height: int
    has_alpha: bool = False
    has_icc: bool = False

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0


def _read_uint24(cursor: ByteCursor) -> int:
    return int.from_bytes(cursor.read_bytes(3), "little")


def _read_vp8x(cursor: ByteCursor) -> Canvas | None:
    if not cursor.can_read(10):
        return None
    flags = cursor.read_uint8()
    cursor.skip(3)  # reserved
    width = _read_uint24(cursor) + 1
    height = _read_uint24(cursor) + 1
    return Canvas(width, height, has_alpha=bool(flags & VP8X_ALPHA), has_icc=bool(flags & VP8X_ICC))


def _read_vp8(cursor: ByteCursor) -> Canvas | None:
    """Lossy bitstream: 14-bit dimensions after the key-frame start code."""
    if not cursor.can_read(10):
        return None
    cursor.skip(3)  # frame tag
    if cursor.read_bytes(3) != VP8_START_CODE:
        return None
    size = cursor.read_uint32()
    return Canvas(size & DIMENSION_MASK, (size >> 16) & DIMENSION_MASK)


def _read_vp8l(cursor: ByteCursor) -> Canvas | None:
    """Lossless bitstream: packed (width-1, height-1); always alpha capable."""
    if not cursor.can_read(5):
        return None
    if cursor.read_uint8() != VP8L_SIGNATURE:
        return None
    bits = cursor.read_uint32()
    return Canvas((bits & DIMENSION_MASK) + 1, ((bits >> 14) & DIMENSION_MASK) + 1, has_alpha=True)


def _chunks(cursor: ByteCursor) -> Iterator[tuple[str, int, int]]:
    """Yield ``(fourcc, size, start)`` for each complete chunk, realigning to even offsets."""
    cursor.seek(FIRST_CHUNK)
    while cursor.can_read(CHUNK_HEADER):
        fourcc = cursor.read_string(4, "latin-1")
        size = cursor.read_uint32()
        if not cursor.can_read(size):
            return
        start = cursor.position
        yield fourcc, size, start
        following = start + ((size + 1) & ~1)
        if following > len(cursor):
            return
        cursor.seek(following)


@decoder
def decode_webp(data: bytes) -> ParseResult | None:
    """Decode a WebP header.

    The first pass only looks for VP8X, whose canvas size wins over the
    bitstream's. The second pass fills dimensions from VP8/VP8L when VP8X did
    not, and sniffs the ICC profile name from ICCP.
    """
    if len(data) < MIN_BUFFER:
        return None
    cursor = ByteCursor(data, "little")
    if cursor.read_string(4, "latin-1") != "RIFF":
        return None
    cursor.skip(4)  # file size
    if cursor.read_string(4, "latin-1") != "WEBP":
        return None

    canvas: Canvas | None = None
    has_alpha = False
    for fourcc, _size, _start in _chunks(cursor):
        if fourcc == "VP8X":
            canvas = _read_vp8x(cursor)
            if canvas is not None:
                has_alpha = canvas.has_alpha
            break

    color_space = icc_profile = None
    for fourcc, size, _start in _chunks(cursor):
        if fourcc == "VP8 " and (canvas is None or canvas.is_empty):
            canvas = _read_vp8(cursor)
        elif fourcc == "VP8L" and (canvas is None or canvas.is_empty):
            canvas = _read_vp8l(cursor)
            if canvas is not None:
                has_alpha = True
        elif fourcc == "ICCP" and size > 0:
            info = sniff_icc_profile(cursor.read_bytes(size))
            icc_profile = info.profile_name or ICC_EMBEDDED
            color_space = info.color_space or color_space_from_string(icc_profile)

    if canvas is None or canvas.is_empty:
        return None
    return ParseResult(
        width=canvas.width,
        height=canvas.height,
        type=ImageType.WEBP,
        mime=ImageType.WEBP.mime,
        color_space=color_space,
        icc_profile=icc_profile,
        channels=4 if has_alpha else 3,
    )
