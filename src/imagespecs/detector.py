"""Signature table and format detection over a byte prefix."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from .constants import SNIFF_BYTES, ImageType
from .parsers.avif import decode_avif
from .parsers.bmp import decode_bmp
from .parsers.gif import decode_gif
from .parsers.ico import decode_ico
from .parsers.jpeg import decode_jpeg
from .parsers.png import PNG_SIGNATURE, decode_png
from .parsers.svg import decode_svg
from .parsers.webp import decode_webp

if TYPE_CHECKING:
    from collections.abc import Callable

    from .parsers.base import Decoder

AVIF_BRAND_WINDOW = slice(8, 100)
SVG_MARKERS = ("<svg", "<!DOCTYPE svg")


def _is_jpeg(data: bytes) -> bool:
    return data[:2] == b"\xff\xd8"


def _is_png(data: bytes) -> bool:
    return data[:8] == PNG_SIGNATURE


def _is_gif(data: bytes) -> bool:
    return data[:6] in (b"GIF87a", b"GIF89a")


def _is_webp(data: bytes) -> bool:
    return len(data) >= 12 and data[:4] == b"RIFF" and data[8:12] == b"WEBP"


def _is_bmp(data: bytes) -> bool:
    return data[:2] == b"BM"


def _is_ico(data: bytes) -> bool:
    return data[:4] == b"\x00\x00\x01\x00"


def _is_avif(data: bytes) -> bool:
    if len(data) < 12 or data[4:8] != b"ftyp":
        return False
    brands = data[AVIF_BRAND_WINDOW]
    return b"avif" in brands or b"avis" in brands


def _is_svg(data: bytes) -> bool:
    text = data[:SNIFF_BYTES].decode("utf-8", errors="replace")
    return any(marker in text for marker in SVG_MARKERS)


@dataclass(frozen=True, slots=True)
class Signature:
    """One row of the detection table."""

    type: ImageType
    matches: Callable[[bytes], bool]
    decode: Decoder


# Binary signatures first; SVG is a substring match on arbitrary text so it goes last.
SIGNATURES: tuple[Signature, ...] = (
    Signature(ImageType.JPG, _is_jpeg, decode_jpeg),
    Signature(ImageType.PNG, _is_png, decode_png),
    Signature(ImageType.GIF, _is_gif, decode_gif),
    Signature(ImageType.WEBP, _is_webp, decode_webp),
    Signature(ImageType.BMP, _is_bmp, decode_bmp),
    Signature(ImageType.ICO, _is_ico, decode_ico),
    Signature(ImageType.AVIF, _is_avif, decode_avif),
    Signature(ImageType.SVG, _is_svg, decode_svg),
)


def match_signature(data: bytes) -> Signature | None:
    for signature in SIGNATURES:
        if signature.matches(data):
            return signature
    return None


def detect(data: bytes) -> Decoder | None:
    """Return the decoder whose signature matches ``data``, if any."""
    signature = match_signature(bytes(data))
    return signature.decode if signature is not None else None


def classify(data: bytes) -> ImageType | None:
    """Return the format ``data`` looks like without decoding it."""
    if len(data) < 2:
        return None
    signature = match_signature(bytes(data))
    return signature.type if signature is not None else None


def all_decoders() -> tuple[Decoder, ...]:
    """Every decoder in fallback order."""
    return tuple(signature.decode for signature in SIGNATURES)


# first byte -> required second byte; None accepts any second byte
_SNIFF_PAIRS: dict[int, int | None] = {
    0xFF: 0xD8,  # JPEG
    0x89: 0x50,  # PNG
    ord("G"): ord("I"),  # GIF
    ord("R"): ord("I"),  # RIFF/WebP
    ord("B"): ord("M"),  # BMP
    0x00: None,  # ICO, or an AVIF box size
    ord("<"): None,  # SVG/XML
    0xEF: None,  # UTF-8 BOM ahead of SVG
}
_SNIFF_WHITESPACE = frozenset(b" \t\r\n")


def quick_sniff(data: bytes) -> bool:
    """Cheap yes/no on the first bytes; false positives are allowed, false negatives are not.

    Text formats preceded by something other than whitespace or a BOM are
    not recognised here even though :func:`decode_svg` would accept them.
    """
    if len(data) < 2:
        return False
    first, second = data[0], data[1]
    if first in _SNIFF_PAIRS:
        expected = _SNIFF_PAIRS[first]
        return expected is None or second == expected
    if first in _SNIFF_WHITESPACE:
        return True
    return len(data) >= 8 and data[4:8] == b"ftyp"


__all__ = [
    "SIGNATURES",
    "Signature",
    "all_decoders",
    "classify",
    "detect",
    "match_signature",
    "quick_sniff",
]
