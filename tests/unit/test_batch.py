from __future__ import annotations

import io
from typing import TYPE_CHECKING

import httpx
import pytest

from imagespecs.core import get_image_specs_batch, is_image_source
from imagespecs.errors import ErrorCode
from imagespecs.models import FetchOptions
from tests.support import build_bmp, build_gif, build_png, build_svg

if TYPE_CHECKING:
    from pathlib import Path

pytestmark = pytest.mark.small


def test_batch_keeps_input_order_and_isolates_failures(tmp_path: Path) -> None:
    p = tmp_path / "icon.bmp"
    p.write_bytes(build_bmp(16, 16))
    results = get_image_specs_batch([build_png(1, 2), b"garbage", p, build_gif(3, 4)], max_workers=2)
    assert [r.index for r in results] == [0, 1, 2, 3]
    assert [r.success for r in results] == [True, False, True, True]
    assert results[0].specs is not None
    assert results[0].specs.height == 2
    assert results[1].error is not None
    assert results[1].error.code is ErrorCode.UNSUPPORTED_FORMAT
    assert results[1].source == "<7 bytes>"
    assert results[2].specs is not None
    assert results[2].specs.filename == "icon.bmp"
    assert results[3].specs is not None
    assert results[3].specs.width == 3


def test_batch_of_nothing() -> None:
    assert get_image_specs_batch([]) == []


def test_batch_result_payloads() -> None:
    ok, bad = get_image_specs_batch([build_gif(2, 2), b""])
    assert ok.to_dict() == {
        "success": True,
        "specs": {"width": 2, "height": 2, "type": "gif", "mime": "image/gif", "w_units": "px", "h_units": "px"},
    }
    assert bad.to_dict() == {"success": False, "error": {"code": "INSUFFICIENT_DATA", "message": "No data received"}}


def test_batch_shares_transport() -> None:
    transport = httpx.MockTransport(lambda _request: httpx.Response(200, content=build_png(9, 9)))
    results = get_image_specs_batch(
        ["https://img.test/a.png", "https://img.test/b.png"],
        FetchOptions(max_bytes=1024),
        transport=transport,
    )
    assert [r.specs.filename for r in results if r.specs is not None] == ["a.png", "b.png"]


@pytest.mark.parametrize("data", [build_png(1, 1), build_gif(1, 1), build_svg()])
def test_is_image_source_true(data: bytes) -> None:
    assert is_image_source(data)


def test_is_image_source_does_not_parse() -> None:
    # a signature is enough, even if the header is unusable
    assert is_image_source(b"\xff\xd8\xff\xe0")


def test_is_image_source_false(tmp_path: Path) -> None:
    assert not is_image_source(b"plain text")
    assert not is_image_source(b"")
    assert not is_image_source(tmp_path / "missing.png")
    assert not is_image_source(object())  # type: ignore[arg-type]


def test_is_image_source_reads_at_most_one_kilobyte() -> None:
    stream = io.BytesIO(build_png(1, 1) + b"\x00" * 5000)
    assert is_image_source(stream)
    assert stream.tell() == 1024


def test_is_image_source_url_uses_small_range() -> None:
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.headers["range"])
        return httpx.Response(206, content=build_gif(1, 1))

    assert is_image_source("https://img.test/a.gif", transport=httpx.MockTransport(handler))
    assert seen == ["bytes=0-1023"]


def test_is_image_source_network_failure_is_false() -> None:
    transport = httpx.MockTransport(lambda _request: httpx.Response(404))
    assert not is_image_source("https://img.test/a.gif", transport=transport)
