"""Byte builders for minimal image headers used across the test suite."""

from __future__ import annotations

import zlib
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from collections.abc import Iterable

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


# --- PNG ---------------------------------------------------------------------
def png_chunk(kind: bytes, payload: bytes) -> bytes:
    crc = zlib.crc32(kind + payload).to_bytes(4, "big")
    return len(payload).to_bytes(4, "big") + kind + payload + crc


def phys_chunk(x: int, y: int, unit: int = 1) -> bytes:
    return png_chunk(b"pHYs", x.to_bytes(4, "big") + y.to_bytes(4, "big") + bytes([unit]))


def gama_chunk(value: int) -> bytes:
    return png_chunk(b"gAMA", value.to_bytes(4, "big"))


def srgb_chunk() -> bytes:
    return png_chunk(b"sRGB", b"\x00")


def iccp_chunk(name: str) -> bytes:
    # profile name, NUL, compression method, then (fake) compressed data
    return png_chunk(b"iCCP", name.encode("latin-1") + b"\x00\x00" + b"x\x9c")


def build_png(
    width: int,
    height: int,
    *,
    bit_depth: int = 8,
    color_type: int = 6,
    chunks: Iterable[bytes] = (),
    iend: bool = True,
) -> bytes:
    ihdr = width.to_bytes(4, "big") + height.to_bytes(4, "big") + bytes([bit_depth, color_type, 0, 0, 0])
    body = png_chunk(b"IHDR", ihdr) + b"".join(chunks)
    if iend:
        body += png_chunk(b"IEND", b"")
    return PNG_SIGNATURE + body


# --- JPEG --------------------------------------------------------------------
def jpeg_segment(marker: int, payload: bytes) -> bytes:
    return bytes([0xFF, marker]) + (len(payload) + 2).to_bytes(2, "big") + payload


def sof_segment(width: int, height: int, *, precision: int = 8, components: int = 3, marker: int = 0xC0) -> bytes:
    payload = bytes([precision]) + height.to_bytes(2, "big") + width.to_bytes(2, "big") + bytes([components])
    payload += b"\x01\x11\x00" * components
    return jpeg_segment(marker, payload)


def jfif_segment(units: int, x_density: int, y_density: int) -> bytes:
    payload = b"JFIF\x00" + b"\x01\x02" + bytes([units])
    payload += x_density.to_bytes(2, "big") + y_density.to_bytes(2, "big") + b"\x00\x00"
    return jpeg_segment(0xE0, payload)


def exif_segment(
    x_res: tuple[int, int],
    y_res: tuple[int, int],
    unit: int = 2,
    *,
    byteorder: Literal["little", "big"] = "little",
) -> bytes:
    """APP1 with a TIFF IFD0 holding XResolution, YResolution and ResolutionUnit."""

    def u16(v: int) -> bytes:
        return v.to_bytes(2, byteorder)

    def u32(v: int) -> bytes:
        return v.to_bytes(4, byteorder)

    def entry(tag: int, kind: int, value: bytes) -> bytes:
        return u16(tag) + u16(kind) + u32(1) + value

    ifd_offset = 8
    data_offset = ifd_offset + 2 + 3 * 12 + 4
    tiff = (b"II" if byteorder == "little" else b"MM") + u16(42) + u32(ifd_offset)
    tiff += u16(3)
    tiff += entry(0x011A, 5, u32(data_offset))
    tiff += entry(0x011B, 5, u32(data_offset + 8))
    tiff += entry(0x0128, 3, u16(unit) + b"\x00\x00")
    tiff += u32(0)  # next IFD
    tiff += u32(x_res[0]) + u32(x_res[1]) + u32(y_res[0]) + u32(y_res[1])
    return jpeg_segment(0xE1, b"Exif\x00\x00" + tiff)


def icc_segment(profile: bytes) -> bytes:
    return jpeg_segment(0xE2, b"ICC_PROFILE\x00" + b"\x01\x01" + profile)


def adobe_segment(transform: int) -> bytes:
    return jpeg_segment(0xEE, b"Adobe" + b"\x00\x64" + b"\x00\x00" + b"\x00\x00" + bytes([transform]))


def build_jpeg(width: int, height: int, *, segments: Iterable[bytes] = (), components: int = 3) -> bytes:
    return b"\xff\xd8" + b"".join(segments) + sof_segment(width, height, components=components) + b"\xff\xd9"


# --- GIF / BMP / ICO ---------------------------------------------------------
def build_gif(width: int, height: int, *, version: bytes = b"89a") -> bytes:
    return b"GIF" + version + width.to_bytes(2, "little") + height.to_bytes(2, "little") + b"\x00" * 3


def build_bmp(
    width: int,
    height: int,
    *,
    bit_depth: int = 24,
    x_ppm: int = 0,
    y_ppm: int = 0,
    core: bool = False,
) -> bytes:
    if core:
        dib = (12).to_bytes(4, "little")
        dib += width.to_bytes(2, "little") + height.to_bytes(2, "little")
        dib += (1).to_bytes(2, "little") + bit_depth.to_bytes(2, "little")
    else:
        dib = (40).to_bytes(4, "little")
        dib += width.to_bytes(4, "little", signed=True) + height.to_bytes(4, "little", signed=True)
        dib += (1).to_bytes(2, "little") + bit_depth.to_bytes(2, "little")
        dib += b"\x00" * 8  # compression, image size
        dib += x_ppm.to_bytes(4, "little", signed=True) + y_ppm.to_bytes(4, "little", signed=True)
        dib += b"\x00" * 8  # colours used, important
    offset = 14 + len(dib)
    return b"BM" + (offset).to_bytes(4, "little") + b"\x00" * 4 + offset.to_bytes(4, "little") + dib


def ico_entry(width: int, height: int, *, bit_count: int = 32) -> bytes:
    return (
        bytes([width % 256, height % 256, 0, 0])
        + (1).to_bytes(2, "little")
        + bit_count.to_bytes(2, "little")
        + (0).to_bytes(4, "little")
        + (0).to_bytes(4, "little")
    )


def build_ico(entries: Iterable[bytes]) -> bytes:
    items = list(entries)
    return b"\x00\x00\x01\x00" + len(items).to_bytes(2, "little") + b"".join(items)


# --- WebP --------------------------------------------------------------------
def riff_chunk(fourcc: bytes, payload: bytes) -> bytes:
    pad = b"\x00" if len(payload) % 2 else b""
    return fourcc + len(payload).to_bytes(4, "little") + payload + pad


def vp8x_chunk(width: int, height: int, *, alpha: bool = False, icc: bool = False) -> bytes:
    flags = (0x10 if alpha else 0) | (0x20 if icc else 0)
    payload = bytes([flags]) + b"\x00" * 3 + (width - 1).to_bytes(3, "little") + (height - 1).to_bytes(3, "little")
    return riff_chunk(b"VP8X", payload)


def vp8_chunk(width: int, height: int) -> bytes:
    payload = b"\x10\x02\x00" + b"\x9d\x01\x2a" + width.to_bytes(2, "little") + height.to_bytes(2, "little")
    return riff_chunk(b"VP8 ", payload + b"\x00" * 4)


def vp8l_chunk(width: int, height: int) -> bytes:
    bits = (width - 1) | ((height - 1) << 14) | (1 << 28)
    return riff_chunk(b"VP8L", b"\x2f" + bits.to_bytes(4, "little") + b"\x00")


def build_webp(*chunks: bytes) -> bytes:
    body = b"WEBP" + b"".join(chunks)
    return b"RIFF" + len(body).to_bytes(4, "little") + body


# --- ICC profiles ------------------------------------------------------------
def icc_profile(description: str, *, color_space: bytes = b"RGB ") -> bytes:
    """A minimal profile: 128-byte header, a one-entry tag table and a ``desc`` tag."""
    text = description.encode("ascii") + b"\x00"
    desc_offset = 128 + 4 + 12
    desc = b"desc" + b"\x00" * 4 + len(text).to_bytes(4, "big") + text
    header = bytearray(128)
    header[16:20] = color_space
    header[36:40] = b"acsp"
    table = (1).to_bytes(4, "big") + b"desc" + desc_offset.to_bytes(4, "big") + len(desc).to_bytes(4, "big")
    profile = bytes(header) + table + desc
    return (len(profile) + 4).to_bytes(4, "big") + profile[4:] + b"\x00" * 4


# --- AVIF --------------------------------------------------------------------
def box(kind: bytes, payload: bytes) -> bytes:
    return (8 + len(payload)).to_bytes(4, "big") + kind + payload


def full_box(kind: bytes, payload: bytes, *, version: int = 0, flags: int = 0) -> bytes:
    return box(kind, bytes([version]) + flags.to_bytes(3, "big") + payload)


def ftyp_box(major: bytes = b"avif", compatible: Iterable[bytes] = (b"mif1", b"miaf")) -> bytes:
    return box(b"ftyp", major + b"\x00\x00\x00\x00" + b"".join(compatible))


def ispe_box(width: int, height: int) -> bytes:
    return full_box(b"ispe", width.to_bytes(4, "big") + height.to_bytes(4, "big"))


def pixi_box(channels: int, depth: int) -> bytes:
    return full_box(b"pixi", bytes([channels]) + bytes([depth]) * channels)


def nclx_box(primaries: int, transfer: int, matrix: int = 6) -> bytes:
    payload = b"nclx" + primaries.to_bytes(2, "big") + transfer.to_bytes(2, "big") + matrix.to_bytes(2, "big")
    return box(b"colr", payload + b"\x80")


def prof_box(profile: bytes) -> bytes:
    return box(b"colr", b"prof" + profile)


def build_avif(
    properties: Iterable[bytes],
    *,
    major: bytes = b"avif",
    compatible: Iterable[bytes] = (b"mif1", b"miaf"),
) -> bytes:
    ipco = box(b"ipco", b"".join(properties))
    iprp = box(b"iprp", ipco + full_box(b"ipma", b"\x00\x00\x00\x00"))
    hdlr = full_box(b"hdlr", b"\x00\x00\x00\x00pict" + b"\x00" * 13)
    meta = full_box(b"meta", hdlr + iprp)
    return ftyp_box(major, compatible) + meta + box(b"mdat", b"\x00" * 16)


# --- SVG ---------------------------------------------------------------------
def build_svg(attrs: str = "", *, prolog: str = "") -> bytes:
    return f'{prolog}<svg xmlns="http://www.w3.org/2000/svg" {attrs}><rect/></svg>'.encode()
