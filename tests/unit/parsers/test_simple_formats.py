from __future__ import annotations

import pytest

from imagespecs.constants import ImageType
from imagespecs.parsers import decode_bmp, decode_gif, decode_ico
from imagespecs.parsers.ico import IconEntry, best_entry
from tests.support import build_bmp, build_gif, build_ico, ico_entry

pytestmark = pytest.mark.small


@pytest.mark.parametrize("version", [b"87a", b"89a"])
def test_gif_logical_screen(version: bytes) -> None:
    res = decode_gif(build_gif(320, 200, version=version))
    assert res is not None
    assert (res.width, res.height) == (320, 200)
    assert res.type is ImageType.GIF
    assert res.mime == "image/gif"
    assert res.bit_depth is None


@pytest.mark.parametrize("data", [b"GIF89a\x01\x00", b"GIF90a" + b"\x01\x00" * 3, build_gif(0, 5)])
def test_gif_rejects(data: bytes) -> None:
    assert decode_gif(data) is None


def test_bmp_info_header() -> None:
    res = decode_bmp(build_bmp(800, 600, bit_depth=32, x_ppm=3780, y_ppm=2835))
    assert res is not None
    assert (res.width, res.height) == (800, 600)
    assert res.type is ImageType.BMP
    assert res.mime == "image/bmp"
    assert res.bit_depth == 32
    assert res.channels == 4
    assert (res.w_resolution, res.h_resolution) == (96, 72)


def test_bmp_top_down_height_is_absolute() -> None:
    res = decode_bmp(build_bmp(16, -9))
    assert res is not None
    assert res.height == 9


def test_bmp_without_resolution() -> None:
    res = decode_bmp(build_bmp(4, 4, bit_depth=8))
    assert res is not None
    assert res.w_resolution is None
    assert res.channels == 1


def test_bmp_core_header() -> None:
    res = decode_bmp(build_bmp(64, 32, bit_depth=24, core=True))
    assert res is not None
    assert (res.width, res.height) == (64, 32)
    assert res.bit_depth == 24
    assert res.channels == 3


def test_bmp_unknown_bit_depth_has_no_channels() -> None:
    res = decode_bmp(build_bmp(4, 4, bit_depth=2))
    assert res is not None
    assert res.channels is None


@pytest.mark.parametrize(
    "data",
    [
        b"BM" + b"\x00" * 10,
        build_bmp(0, 4),
        build_bmp(-3, 4),
        build_bmp(4, 4)[:30],
        b"MB" + build_bmp(4, 4)[2:],
    ],
)
def test_bmp_rejects(data: bytes) -> None:
    assert decode_bmp(data) is None


def test_ico_picks_largest_entry() -> None:
    data = build_ico([ico_entry(16, 16), ico_entry(48, 48, bit_count=8), ico_entry(32, 32)])
    res = decode_ico(data)
    assert res is not None
    assert (res.width, res.height) == (48, 48)
    assert res.type is ImageType.ICO
    assert res.mime == "image/x-icon"


def test_ico_zero_means_256() -> None:
    res = decode_ico(build_ico([ico_entry(16, 16), ico_entry(256, 256)]))
    assert res is not None
    assert (res.width, res.height) == (256, 256)


def test_ico_tie_broken_by_bit_count_then_order() -> None:
    low = IconEntry(32, 32, 0, 1, 8, 0, 0)
    high = IconEntry(32, 32, 0, 1, 32, 0, 1)
    same = IconEntry(32, 32, 0, 1, 32, 0, 2)
    assert best_entry([low, high, same]) is high
    assert best_entry([]) is None


@pytest.mark.parametrize(
    "data",
    [
        b"\x00\x00\x01\x00\x00\x00",  # no entries
        b"\x00\x00\x02\x00\x01\x00" + ico_entry(16, 16),  # cursor file
        b"\x00\x00\x01\x00\x02\x00" + ico_entry(16, 16),  # directory cut short
    ],
)
def test_ico_rejects(data: bytes) -> None:
    assert decode_ico(data) is None
