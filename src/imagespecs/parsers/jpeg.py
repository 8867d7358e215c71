"""JPEG: walk the marker segment stream up to the first Start-of-Frame."""

from __future__ import annotations

from dataclasses import dataclass

from imagespecs.color_space import color_space_from_string, color_space_from_tag
from imagespecs.constants import ImageType
from imagespecs.cursor import ByteCursor
from imagespecs.models import ParseResult
from imagespecs.utils import per_cm_to_dpi, round_half_up

from .base import decoder

MARKER_PREFIX = 0xFF
SOI = 0xD8
EOI = 0xD9
TEM = 0x01
RST_MARKERS = frozenset(range(0xD0, 0xD8))
BARE_MARKERS = frozenset({SOI, EOI, TEM}) | RST_MARKERS

APP0 = 0xE0
APP1 = 0xE1
APP2 = 0xE2
APP14 = 0xEE

# Every Start-of-Frame variant; C4 (DHT), C8 (JPG) and CC (DAC) are excluded.
SOF_MARKERS = frozenset({0xC0, 0xC1, 0xC2, 0xC3, 0xC5, 0xC6, 0xC7, 0xC9, 0xCA, 0xCB, 0xCD, 0xCE, 0xCF})

MIN_SEGMENT_LENGTH = 2
MIN_BUFFER = 4

JFIF_ID = "JFIF\x00"
JFIF_MIN_PAYLOAD = 14
JFIF_UNITS_DPI = 1
JFIF_UNITS_DPCM = 2

EXIF_ID = "Exif\x00\x00"
TIFF_LITTLE_ENDIAN = "II"
TAG_X_RESOLUTION = 0x011A
TAG_Y_RESOLUTION = 0x011B
TAG_RESOLUTION_UNIT = 0x0128
TIFF_TYPE_SHORT = 3
TIFF_TYPE_RATIONAL = 5
TIFF_ENTRY_SIZE = 12
EXIF_UNIT_INCH = 2
EXIF_UNIT_CM = 3

ICC_ID = "ICC_PROFILE\x00"
ICC_MIN_SEGMENT = 14
ICC_HEADER_SIZE = 18  # segment bytes not handed to the profile sniffer
ICC_TAG_OFFSET = 16

ADOBE_ID = "Adobe"
ADOBE_MIN_SEGMENT = 12
ADOBE_TRANSFORM_UNKNOWN = 0
ADOBE_TRANSFORM_YCBCR = 1
ADOBE_TRANSFORM_YCCK = 2

COMPONENT_SPACES = {1: "Grayscale", 3: "RGB", 4: "CMYK"}


@dataclass(slots=True)
class _JpegState:
    """Metadata accumulated across segments until the frame header is reached."""

    w_resolution: int | None = None
    h_resolution: int | None = None
    color_space: str | None = None
    icc_profile: str | None = None


def _read_jfif(cursor: ByteCursor) -> tuple[int, int] | None:
    if not cursor.can_read(JFIF_MIN_PAYLOAD) or cursor.read_string(5, "latin-1") != JFIF_ID:
        return None
    cursor.skip(2)  # version
    units = cursor.read_uint8()
    x_density = cursor.read_uint16()
    y_density = cursor.read_uint16()
    if units == JFIF_UNITS_DPI:
        return x_density, y_density
    if units == JFIF_UNITS_DPCM:
        return per_cm_to_dpi(x_density), per_cm_to_dpi(y_density)
    return None


def _read_rational(tiff: ByteCursor, offset: int) -> float | None:
    if offset + 8 > len(tiff):
        return None
    saved = tiff.position
    tiff.seek(offset)
    numerator = tiff.read_uint32()
    denominator = tiff.read_uint32()
    tiff.seek(saved)
    return numerator / denominator if denominator > 0 else None


def _read_exif(cursor: ByteCursor) -> tuple[int, int] | None:
    """Pull X/Y resolution out of IFD0 of an embedded TIFF structure."""
    if not cursor.can_read(6) or cursor.read_string(6, "latin-1") != EXIF_ID:
        return None
    tiff_start = cursor.position
    if not cursor.can_read(8):
        return None

    little = cursor.read_string(2, "latin-1") == TIFF_LITTLE_ENDIAN
    tiff = cursor.fork("little" if little else "big")
    tiff.skip(2)  # magic 42

    ifd_offset = tiff.read_uint32() + tiff_start
    if ifd_offset + 2 > len(tiff):
        return None
    tiff.seek(ifd_offset)
    entries = tiff.read_uint16()

    x_res: float | None = None
    y_res: float | None = None
    unit = EXIF_UNIT_INCH
    for _ in range(entries):
        if not tiff.can_read(TIFF_ENTRY_SIZE):
            break
        tag = tiff.read_uint16()
        kind = tiff.read_uint16()
        count = tiff.read_uint32()
        value = tiff.read_uint32()
        if count != 1:
            continue
        if tag == TAG_X_RESOLUTION and kind == TIFF_TYPE_RATIONAL:
            x_res = _read_rational(tiff, value + tiff_start)
        elif tag == TAG_Y_RESOLUTION and kind == TIFF_TYPE_RATIONAL:
            y_res = _read_rational(tiff, value + tiff_start)
        elif tag == TAG_RESOLUTION_UNIT and kind == TIFF_TYPE_SHORT:
            # SHORT values sit in the first two bytes of the value field
            unit = value & 0xFFFF if little else value >> 16

    if not x_res or not y_res:
        return None
    if unit == EXIF_UNIT_CM:
        return per_cm_to_dpi(x_res), per_cm_to_dpi(y_res)
    if unit == EXIF_UNIT_INCH:
        return round_half_up(x_res), round_half_up(y_res)
    return None


def _read_icc(cursor: ByteCursor, segment_length: int, state: _JpegState) -> bool:
    """Sniff the first ICC_PROFILE chunk; return False if this APP2 is something else."""
    if cursor.read_string(12, "latin-1") != ICC_ID:
        return False
    if state.icc_profile is None:
        state.icc_profile = "Embedded"
    cursor.skip(2)  # chunk index, chunk count

    data_length = segment_length - ICC_HEADER_SIZE
    if data_length <= 0 or not cursor.can_read(data_length):
        return True
    profile = cursor.read_bytes(data_length)

    if detected := color_space_from_string(profile.decode("latin-1")):
        state.color_space = detected
        state.icc_profile = detected
    if state.color_space is None and len(profile) >= ICC_TAG_OFFSET + 4:
        tag = profile[ICC_TAG_OFFSET : ICC_TAG_OFFSET + 4].decode("ascii", errors="replace")
        if tagged := color_space_from_tag(tag):
            state.color_space = tagged
    return True


def _read_adobe(cursor: ByteCursor, state: _JpegState) -> bool:
    """Apply the APP14 colour transform; return False if this APP14 is not Adobe's."""
    if cursor.read_string(5, "latin-1") != ADOBE_ID:
        return False
    cursor.skip(6)  # version, flags0, flags1
    transform = cursor.read_uint8()
    # An ICC-derived colour space wins; a bare "RGB" guess may still be refined.
    if state.color_space is not None and state.color_space != "RGB":
        return True
    if transform == ADOBE_TRANSFORM_UNKNOWN:
        if state.icc_profile is None:
            state.color_space = "Adobe RGB"
    elif transform == ADOBE_TRANSFORM_YCBCR:
        if state.icc_profile is None:
            state.color_space = "YCbCr"
    elif transform == ADOBE_TRANSFORM_YCCK:
        state.color_space = "YCCK"
    return True


def _read_frame(cursor: ByteCursor, state: _JpegState) -> ParseResult | None:
    if not cursor.can_read(6):
        return None
    precision = cursor.read_uint8()
    height = cursor.read_uint16()
    width = cursor.read_uint16()
    components = cursor.read_uint8()
    if width <= 0 or height <= 0:
        return None
    color_space = state.color_space
    if components and color_space is None:
        color_space = COMPONENT_SPACES.get(components)
    return ParseResult(
        width=width,
        height=height,
        type=ImageType.JPG,
        mime=ImageType.JPG.mime,
        w_resolution=state.w_resolution,
        h_resolution=state.h_resolution,
        color_space=color_space,
        icc_profile=state.icc_profile,
        bit_depth=precision or None,
        channels=components or None,
    )


@decoder
def decode_jpeg(data: bytes) -> ParseResult | None:  # noqa: C901, PLR0912
    """Decode a JPEG header.

    Segments are processed in file order; JFIF density only fills an empty
    resolution while EXIF always overrides it. The first Start-of-Frame with
    positive dimensions ends the walk. Running out of bytes, or a segment
    length that is shorter than its own length field or longer than the
    remaining buffer, means the file is truncated and nothing is reported.
    """
    if len(data) < MIN_BUFFER:
        return None
    cursor = ByteCursor(data)
    if cursor.read_uint8() != MARKER_PREFIX or cursor.read_uint8() != SOI:
        return None

    state = _JpegState()
    while cursor.remaining > 1:
        if cursor.read_uint8() != MARKER_PREFIX:
            continue
        marker = cursor.read_uint8()
        while marker == MARKER_PREFIX and cursor.remaining > 0:
            marker = cursor.read_uint8()  # fill bytes
        if marker in BARE_MARKERS or marker == MARKER_PREFIX:
            continue

        if not cursor.can_read(2):
            break
        segment_length = cursor.read_uint16()
        if segment_length < MIN_SEGMENT_LENGTH or not cursor.can_read(segment_length - 2):
            break
        segment_start = cursor.position

        if marker == APP0:
            jfif = _read_jfif(cursor)
            if jfif is not None and state.w_resolution is None:
                state.w_resolution, state.h_resolution = jfif
        elif marker == APP1:
            exif = _read_exif(cursor)
            if exif is not None:
                state.w_resolution, state.h_resolution = exif
        elif marker == APP2 and segment_length > ICC_MIN_SEGMENT:
            if not _read_icc(cursor, segment_length, state):
                cursor.seek(segment_start)
        elif marker == APP14 and segment_length >= ADOBE_MIN_SEGMENT:
            if not _read_adobe(cursor, state):
                cursor.seek(segment_start)
        elif marker in SOF_MARKERS:
            if not cursor.can_read(6):
                break
            if (result := _read_frame(cursor, state)) is not None:
                return result

        cursor.seek(segment_start + segment_length - 2)

    return None
