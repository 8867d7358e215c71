"""Shared decoder contract and the boundary every decoder runs behind."""

from __future__ import annotations

import functools
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from imagespecs.errors import OutOfRangeError
from imagespecs.logging_utils import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable

    from imagespecs.models import ParseResult

logger = get_logger(__name__)


@runtime_checkable
class Decoder(Protocol):
    """Strategy for decoding the header of one image format."""

    def __call__(self, data: bytes, /) -> ParseResult | None: ...


def decoder(func: Callable[[bytes], ParseResult | None]) -> Callable[[bytes], ParseResult | None]:
    """Turn truncation into a no-match and drop results without positive dimensions."""

    @functools.wraps(func)
    def wrapper(data: bytes, /) -> ParseResult | None:
        try:
            result = func(bytes(data))
        except OutOfRangeError:
            logger.debug("%s: buffer ended inside a declared structure", func.__name__)
            return None
        if result is None or not result.is_valid:
            return None
        return result

    return wrapper
