"""PNG: signature check followed by a walk over length-prefixed chunks."""

from __future__ import annotations

from imagespecs.constants import ImageType
from imagespecs.cursor import ByteCursor
from imagespecs.models import ParseResult
from imagespecs.utils import ppm_to_dpi

from .base import decoder

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"
MIN_BUFFER = 24
CHUNK_OVERHEAD = 12  # length(4) + type(4) + crc(4)
CRC_SIZE = 4

IHDR_LENGTH = 13
PHYS_LENGTH = 9
GAMA_LENGTH = 4
ICCP_MAX_NAME = 79

PHYS_UNIT_UNKNOWN = 0
PHYS_UNIT_METER = 1
GAMMA_SCALE = 100000

# colour type -> samples per pixel
COLOR_TYPE_CHANNELS = {0: 1, 2: 3, 3: 1, 4: 2, 6: 4}
DEFAULT_CHANNELS = 3


def channels_for_color_type(color_type: int) -> int:
    return COLOR_TYPE_CHANNELS.get(color_type, DEFAULT_CHANNELS)


@decoder
def decode_png(data: bytes) -> ParseResult | None:  # noqa: C901
    """Decode a PNG header.

    Only IHDR is mandatory. pHYs, sRGB, iCCP and gAMA are attached when
    present and well formed; CRCs are skipped, never checked. After each
    chunk the cursor is put back at ``data start + length + CRC`` whatever
    the chunk handler consumed. Unit-less pHYs values are kept as the raw
    pixel aspect pair rather than DPI.
    """
    if len(data) < MIN_BUFFER or not data.startswith(PNG_SIGNATURE):
        return None

    cursor = ByteCursor(data)
    cursor.seek(len(PNG_SIGNATURE))

    width = height = None
    bit_depth = channels = None
    w_res = h_res = None
    color_space = icc_profile = None
    gamma = None

    while cursor.remaining >= CHUNK_OVERHEAD:
        length = cursor.read_uint32()
        chunk_type = cursor.read_string(4, "latin-1")
        if not cursor.can_read(length + CRC_SIZE):
            break
        data_start = cursor.position

        if chunk_type == "IHDR":
            if length == IHDR_LENGTH:
                width = cursor.read_uint32()
                height = cursor.read_uint32()
                bit_depth = cursor.read_uint8()
                channels = channels_for_color_type(cursor.read_uint8())
                cursor.skip(3)  # compression, filter, interlace
        elif chunk_type == "pHYs":
            if length == PHYS_LENGTH:
                x_ppu = cursor.read_uint32()
                y_ppu = cursor.read_uint32()
                unit = cursor.read_uint8()
                if unit == PHYS_UNIT_METER:
                    w_res, h_res = ppm_to_dpi(x_ppu), ppm_to_dpi(y_ppu)
                elif unit == PHYS_UNIT_UNKNOWN:
                    w_res, h_res = x_ppu, y_ppu
        elif chunk_type == "sRGB":
            if length >= 1:
                color_space = "sRGB"
        elif chunk_type == "iCCP":
            if length > 0:
                name = cursor.read_null_terminated_string(min(length, ICCP_MAX_NAME), "latin-1")
                if name:
                    icc_profile = name
        elif chunk_type == "gAMA":
            if length == GAMA_LENGTH:
                gamma = cursor.read_uint32() / GAMMA_SCALE

        cursor.seek(data_start + length + CRC_SIZE)
        if chunk_type == "IEND":
            break

    if not width or not height:
        return None
    return ParseResult(
        width=width,
        height=height,
        type=ImageType.PNG,
        mime=ImageType.PNG.mime,
        w_resolution=w_res,
        h_resolution=h_res,
        color_space=color_space,
        icc_profile=icc_profile,
        gamma=gamma,
        bit_depth=bit_depth,
        channels=channels,
    )
