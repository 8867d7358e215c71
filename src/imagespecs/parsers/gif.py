"""GIF: fixed six-byte signature plus the logical screen descriptor."""

from __future__ import annotations

from imagespecs.constants import ImageType
from imagespecs.cursor import ByteCursor
from imagespecs.models import ParseResult

from .base import decoder

GIF_SIGNATURES = frozenset({"GIF87a", "GIF89a"})
MIN_BUFFER = 10


@decoder
def decode_gif(data: bytes) -> ParseResult | None:
    if len(data) < MIN_BUFFER:
        return None
    cursor = ByteCursor(data, "little")
    if cursor.read_string(6, "latin-1") not in GIF_SIGNATURES:
        return None
    width = cursor.read_uint16()
    height = cursor.read_uint16()
    if width == 0 or height == 0:
        return None
    return ParseResult(width=width, height=height, type=ImageType.GIF, mime=ImageType.GIF.mime)
