"""AVIF: ISO-BMFF box walk down to the ``ipco`` item properties."""

from __future__ import annotations

from dataclasses import dataclass

from imagespecs.color_space import ICC_EMBEDDED, sniff_icc_profile
from imagespecs.constants import ImageType
from imagespecs.cursor import ByteCursor
from imagespecs.models import ParseResult

from .base import decoder

MIN_BUFFER = 12
BOX_HEADER = 8
EXTENDED_SIZE = 1
SIZE_TO_END = 0
FULL_BOX_HEADER = 4  # version + flags

AVIF_BRANDS = frozenset({"avif", "avis"})
ICC_COLOR_TYPES = frozenset({"prof", "rICC"})
NCLX = "nclx"
ICC_DEFAULT_SPACE = "ICC Profile"

# nclx colour_primaries code points (ITU-T H.273)
PRIMARIES_SPACES = {1: "sRGB", 9: "Rec. 2020", 11: "DCI-P3", 12: "Display P3"}


@dataclass(frozen=True, slots=True)
class Box:
    type: str
    start: int
    size: int
    data_offset: int

    @property
    def end(self) -> int:
        return self.start + self.size

    @property
    def data_size(self) -> int:
        return self.size - (self.data_offset - self.start)


@dataclass(slots=True)
class _Properties:
    width: int | None = None
    height: int | None = None
    color_space: str | None = None
    icc_profile: str | None = None
    bit_depth: int | None = None
    channels: int | None = None
    color_primaries: int | None = None
    transfer_characteristics: int | None = None


def read_box(cursor: ByteCursor) -> Box | None:
    """Read one box header at the cursor; None when no usable header is there."""
    start = cursor.position
    if not cursor.can_read(BOX_HEADER):
        return None
    size = cursor.read_uint32()
    box_type = cursor.read_string(4, "latin-1")
    if size == EXTENDED_SIZE:
        if not cursor.can_read(8):
            return None
        cursor.skip(4)  # high 32 bits
        size = cursor.read_uint32()
    elif size == SIZE_TO_END:
        size = len(cursor) - start
    box = Box(box_type, start, size, cursor.position)
    if box.data_size < 0:
        return None
    return box


def find_box(cursor: ByteCursor, end: int, box_type: str) -> Box | None:
    """Scan sibling boxes from the cursor up to ``end`` for the first ``box_type``."""
    while cursor.position < end:
        box = read_box(cursor)
        if box is None:
            return None
        if box.type == box_type:
            return box
        if box.end > len(cursor):
            return None
        cursor.seek(box.end)
    return None


def _is_avif_brand(cursor: ByteCursor, box: Box) -> bool:
    if box.data_size < 8 or not cursor.can_read(8):
        return False
    if cursor.read_string(4, "latin-1") == "avif":
        return True
    cursor.skip(4)  # minor version
    for _ in range((box.data_size - 8) // 4):
        if not cursor.can_read(4):
            break
        if cursor.read_string(4, "latin-1") in AVIF_BRANDS:
            return True
    return False


def _read_colr(cursor: ByteCursor, box: Box, props: _Properties) -> None:
    if not cursor.can_read(4):
        return
    color_type = cursor.read_string(4, "latin-1")
    if color_type in ICC_COLOR_TYPES:
        size = box.data_size - 4
        if size < 0 or not cursor.can_read(size):
            return
        info = sniff_icc_profile(cursor.read_bytes(size))
        props.color_space = info.color_space or ICC_DEFAULT_SPACE
        props.icc_profile = info.profile_name or ICC_EMBEDDED
    elif color_type == NCLX and cursor.can_read(7):
        primaries = cursor.read_uint16()
        transfer = cursor.read_uint16()
        cursor.skip(3)  # matrix coefficients, full-range flag
        props.color_space = PRIMARIES_SPACES.get(primaries)
        props.color_primaries = primaries
        props.transfer_characteristics = transfer


def _read_pixi(cursor: ByteCursor, props: _Properties) -> None:
    if not cursor.can_read(FULL_BOX_HEADER + 1):
        return
    cursor.skip(FULL_BOX_HEADER)
    count = cursor.read_uint8()
    props.channels = count
    if count > 0 and cursor.can_read(count):
        props.bit_depth = cursor.read_uint8()


def _read_ipco(cursor: ByteCursor, ipco: Box, props: _Properties) -> None:
    """Each property is looked up independently from the start of ``ipco``."""
    end = min(ipco.end, len(cursor))

    cursor.seek(ipco.data_offset)
    if (ispe := find_box(cursor, end, "ispe")) is not None:
        cursor.seek(ispe.data_offset)
        if cursor.can_read(FULL_BOX_HEADER + 8):
            cursor.skip(FULL_BOX_HEADER)
            props.width = cursor.read_uint32()
            props.height = cursor.read_uint32()

    cursor.seek(ipco.data_offset)
    if (colr := find_box(cursor, end, "colr")) is not None:
        cursor.seek(colr.data_offset)
        _read_colr(cursor, colr, props)

    cursor.seek(ipco.data_offset)
    if (pixi := find_box(cursor, end, "pixi")) is not None:
        cursor.seek(pixi.data_offset)
        _read_pixi(cursor, props)


def _read_meta(cursor: ByteCursor, meta: Box, props: _Properties) -> None:
    cursor.seek(meta.data_offset)
    cursor.skip(FULL_BOX_HEADER)
    iprp = find_box(cursor, min(meta.end, len(cursor)), "iprp")
    if iprp is None:
        return
    cursor.seek(iprp.data_offset)
    ipco = find_box(cursor, min(iprp.end, len(cursor)), "ipco")
    if ipco is not None:
        _read_ipco(cursor, ipco, props)


@decoder
def decode_avif(data: bytes) -> ParseResult | None:
    """Decode an AVIF header.

    ``ftyp`` must name ``avif`` as major brand or ``avif``/``avis`` among the
    compatible brands before any ``meta`` box is looked at. The top-level
    walk stops as soon as ``ispe`` has supplied both dimensions. nclx colour
    primaries outside the known set leave the colour space unset but the raw
    code points are still reported.
    """
    if len(data) < MIN_BUFFER:
        return None
    cursor = ByteCursor(data)
    is_avif = False
    props = _Properties()

    while cursor.remaining > 0:
        box = read_box(cursor)
        if box is None:
            break
        if box.type == "ftyp":
            is_avif = _is_avif_brand(cursor, box)
        elif box.type == "meta" and is_avif:
            _read_meta(cursor, box, props)

        if props.width is not None and props.height is not None:
            break
        if box.end > len(cursor):
            break
        cursor.seek(box.end)

    if not is_avif or not props.width or not props.height:
        return None
    return ParseResult(
        width=props.width,
        height=props.height,
        type=ImageType.AVIF,
        mime=ImageType.AVIF.mime,
        color_space=props.color_space,
        icc_profile=props.icc_profile,
        bit_depth=props.bit_depth or None,
        channels=props.channels or None,
        color_primaries=props.color_primaries,
        transfer_characteristics=props.transfer_characteristics,
    )
