"""Detector first, then every decoder in table order."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .detector import all_decoders, detect
from .logging_utils import get_logger

if TYPE_CHECKING:
    from .models import ParseResult
    from .parsers.base import Decoder

logger = get_logger(__name__)


def _attempt(decode: Decoder, data: bytes) -> ParseResult | None:
    try:
        return decode(data)
    except Exception:  # noqa: BLE001
        logger.debug("decoder %s raised", getattr(decode, "__name__", decode), exc_info=True)
        return None


def parse(data: bytes) -> ParseResult | None:
    """Decode ``data`` with the detected decoder, falling back to all the others.

    Detection only orders the attempts; a buffer whose signature decoder
    fails still gets a try from every other decoder. The first valid result
    wins.
    """
    data = bytes(data)
    detected = detect(data)
    if detected is not None and (result := _attempt(detected, data)) is not None:
        return result
    for decode in all_decoders():
        if decode is detected:
            continue
        if (result := _attempt(decode, data)) is not None:
            return result
    return None


__all__ = ["parse"]
