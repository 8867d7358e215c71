"""BMP: file header followed by a DIB header whose size selects its layout."""

from __future__ import annotations

from imagespecs.constants import ImageType
from imagespecs.cursor import ByteCursor
from imagespecs.models import ParseResult
from imagespecs.utils import ppm_to_dpi

from .base import decoder

MIN_BUFFER = 26
BITMAPCOREHEADER = 12
BITMAPINFOHEADER = 40

# bits per pixel -> channels
BIT_DEPTH_CHANNELS = {1: 1, 4: 1, 8: 1, 16: 3, 24: 3, 32: 4}


@decoder
def decode_bmp(data: bytes) -> ParseResult | None:
    """Decode a Windows/OS2 bitmap header.

    A 12-byte core header stores unsigned 16-bit dimensions; anything larger
    stores signed 32-bit ones, where a negative height marks a top-down
    bitmap. Resolution is read from headers of at least 40 bytes.
    """
    if len(data) < MIN_BUFFER:
        return None
    cursor = ByteCursor(data, "little")
    if cursor.read_string(2, "latin-1") != "BM":
        return None
    cursor.skip(8)  # file size, reserved words
    cursor.skip(4)  # pixel data offset

    header_size = cursor.read_uint32()
    if header_size < BITMAPCOREHEADER or not cursor.can_read(header_size - 4):
        return None

    w_res = h_res = None
    if header_size == BITMAPCOREHEADER:
        width = cursor.read_uint16()
        height = cursor.read_uint16()
        cursor.skip(2)  # planes
        bit_depth = cursor.read_uint16()
    else:
        width = cursor.read_int32()
        height = abs(cursor.read_int32())
        cursor.skip(2)  # planes
        bit_depth = cursor.read_uint16()
        cursor.skip(8)  # compression, image size
        if header_size >= BITMAPINFOHEADER:
            x_ppm = cursor.read_int32()
            y_ppm = cursor.read_int32()
            if x_ppm > 0 and y_ppm > 0:
                w_res, h_res = ppm_to_dpi(x_ppm), ppm_to_dpi(y_ppm)

    if width <= 0 or height <= 0:
        return None
    return ParseResult(
        width=width,
        height=height,
        type=ImageType.BMP,
        mime=ImageType.BMP.mime,
        w_resolution=w_res,
        h_resolution=h_res,
        bit_depth=bit_depth,
        channels=BIT_DEPTH_CHANNELS.get(bit_depth),
    )
