from __future__ import annotations

import pytest

from imagespecs import __version__
from imagespecs.constants import ImageType
from imagespecs.errors import ErrorCode, ImageSpecsError
from imagespecs.models import DEFAULT_USER_AGENT, BatchResult, FetchOptions, ImageSpecs, ParseResult

pytestmark = pytest.mark.small


def _result(**overrides: object) -> ParseResult:
    values: dict[str, object] = {"width": 4, "height": 3, "type": ImageType.PNG, "mime": "image/png"}
    values.update(overrides)
    return ParseResult(**values)  # type: ignore[arg-type]


def test_parse_result_defaults_and_validity() -> None:
    res = _result()
    assert (res.w_units, res.h_units) == ("px", "px")
    assert res.is_valid
    assert not _result(width=0).is_valid
    assert not _result(height=0).is_valid


def test_parse_result_to_dict_drops_unset_fields() -> None:
    assert _result(gamma=0.5, bit_depth=8).to_dict() == {
        "width": 4,
        "height": 3,
        "type": "png",
        "mime": "image/png",
        "w_units": "px",
        "h_units": "px",
        "gamma": 0.5,
        "bit_depth": 8,
    }


def test_image_specs_from_result_keeps_fields() -> None:
    res = _result(color_space="sRGB")
    specs = ImageSpecs.from_result(res, url="https://x/a.png", filename="a.png")
    assert specs.color_space == "sRGB"
    assert specs.url == "https://x/a.png"
    assert specs.path is None
    assert specs.to_dict()["filename"] == "a.png"
    assert "path" not in specs.to_dict()


def test_batch_result_success_flag() -> None:
    specs = ImageSpecs.from_result(_result())
    assert BatchResult(index=0, source="a", specs=specs).success
    failed = BatchResult(index=1, source="b", error=ImageSpecsError("nope", ErrorCode.TIMEOUT))
    assert not failed.success
    assert failed.to_dict() == {"success": False, "error": {"code": "TIMEOUT", "message": "nope"}}


def test_batch_result_without_specs_or_error_cannot_serialize() -> None:
    empty = BatchResult(index=3, source="c")
    with pytest.raises(ValueError, match="neither specs nor an error"):
        empty.to_dict()


def test_fetch_options_defaults() -> None:
    opts = FetchOptions()
    assert opts.timeout == 10.0
    assert opts.max_bytes == 65536
    assert opts.user_agent == f"image-specs/{__version__}" == DEFAULT_USER_AGENT
    assert dict(opts.headers) == {}
    assert opts.with_max_bytes(1024).max_bytes == 1024
    assert opts.max_bytes == 65536


@pytest.mark.parametrize(("timeout", "max_bytes"), [(0, 10), (-1.0, 10), (1.0, 0), (1.0, -5)])
def test_fetch_options_reject_non_positive(timeout: float, max_bytes: int) -> None:
    with pytest.raises(ValueError, match="must be positive"):
        FetchOptions(timeout=timeout, max_bytes=max_bytes)


def test_fetch_options_from_config() -> None:
    opts = FetchOptions.from_config({"timeout": 3, "max_bytes": 2048, "user_agent": "", "headers": {"X-A": "1"}})
    assert opts.timeout == 3.0
    assert opts.max_bytes == 2048
    assert opts.user_agent == DEFAULT_USER_AGENT
    assert dict(opts.headers) == {"X-A": "1"}
    assert FetchOptions.from_config({}) == FetchOptions()
