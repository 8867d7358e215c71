"""Normalized result types shared by every decoder and the acquisition layer."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, fields, replace
from typing import Any

from imagespecs import __version__

from .constants import (
    CONFIG_HEADERS,
    CONFIG_MAX_BYTES,
    CONFIG_TIMEOUT,
    CONFIG_USER_AGENT,
    DEFAULT_MAX_BYTES,
    DEFAULT_TIMEOUT,
    DEFAULT_UNITS,
    ImageType,
)
from .errors import ImageSpecsError

DEFAULT_USER_AGENT = f"image-specs/{__version__}"


def _compact(obj: object) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for f in fields(obj):  # type: ignore[arg-type]
        value = getattr(obj, f.name)
        if value is None:
            continue
        out[f.name] = value.value if isinstance(value, ImageType) else value
    return out


@dataclass(frozen=True, slots=True)
class ParseResult:
    """Dimensions and optional metadata produced by one successful decode."""

    width: int
    height: int
    type: ImageType
    mime: str
    w_units: str = DEFAULT_UNITS
    h_units: str = DEFAULT_UNITS
    w_resolution: int | float | None = None
    h_resolution: int | float | None = None
    color_space: str | None = None
    icc_profile: str | None = None
    gamma: float | None = None
    bit_depth: int | None = None
    channels: int | None = None
    color_primaries: int | None = None
    transfer_characteristics: int | None = None

    @property
    def is_valid(self) -> bool:
        return self.width > 0 and self.height > 0

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-friendly mapping without unset optional fields."""
        return _compact(self)


@dataclass(frozen=True, slots=True)
class ImageSpecs(ParseResult):
    """A parse result annotated with where the bytes came from."""

    url: str | None = None
    path: str | None = None
    filename: str | None = None

    @classmethod
    def from_result(
        cls,
        result: ParseResult,
        *,
        url: str | None = None,
        path: str | None = None,
        filename: str | None = None,
    ) -> ImageSpecs:
        values = {f.name: getattr(result, f.name) for f in fields(ParseResult)}
        return cls(**values, url=url, path=path, filename=filename)


@dataclass(frozen=True, slots=True)
class BatchResult:
    """Outcome for one source of a batch run: exactly one of ``specs``/``error`` is set."""

    index: int
    source: str
    specs: ImageSpecs | None = None
    error: ImageSpecsError | None = field(default=None, compare=False)

    @property
    def success(self) -> bool:
        return self.specs is not None

    def to_dict(self) -> dict[str, Any]:
        if self.specs is not None:
            return {"success": True, "specs": self.specs.to_dict()}
        if self.error is None:
            msg = f"batch result {self.index} has neither specs nor an error"
            raise ValueError(msg)
        return {"success": False, "error": self.error.to_dict()}


@dataclass(frozen=True, slots=True)
class FetchOptions:
    """How much to read from a source and how to talk to HTTP servers."""

    timeout: float = DEFAULT_TIMEOUT
    max_bytes: int = DEFAULT_MAX_BYTES
    user_agent: str = DEFAULT_USER_AGENT
    headers: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.timeout <= 0:
            msg = f"timeout must be positive, got {self.timeout!r}"
            raise ValueError(msg)
        if self.max_bytes <= 0:
            msg = f"max_bytes must be positive, got {self.max_bytes!r}"
            raise ValueError(msg)

    def with_max_bytes(self, max_bytes: int) -> FetchOptions:
        return replace(self, max_bytes=max_bytes)

    @classmethod
    def from_config(cls, cfg: Mapping[str, Any]) -> FetchOptions:
        """Build options from a merged configuration mapping; missing keys keep defaults."""
        headers = cfg.get(CONFIG_HEADERS) or {}
        return cls(
            timeout=float(cfg.get(CONFIG_TIMEOUT, DEFAULT_TIMEOUT)),
            max_bytes=int(cfg.get(CONFIG_MAX_BYTES, DEFAULT_MAX_BYTES)),
            user_agent=str(cfg.get(CONFIG_USER_AGENT) or DEFAULT_USER_AGENT),
            headers={str(k): str(v) for k, v in headers.items()},
        )
