"""Per-format header decoders sharing the :class:`~.base.Decoder` contract."""

from .avif import decode_avif
from .base import Decoder, decoder
from .bmp import decode_bmp
from .gif import decode_gif
from .ico import decode_ico
from .jpeg import decode_jpeg
from .png import decode_png
from .svg import decode_svg
from .webp import decode_webp

__all__ = [
    "Decoder",
    "decode_avif",
    "decode_bmp",
    "decode_gif",
    "decode_ico",
    "decode_jpeg",
    "decode_png",
    "decode_svg",
    "decode_webp",
    "decoder",
]
