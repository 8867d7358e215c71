"""Turning local sources into a bounded byte prefix."""

from __future__ import annotations

import base64
import binascii
from typing import TYPE_CHECKING
from urllib.parse import unquote_to_bytes

from .errors import ERROR_MSG_NO_DATA, ErrorCode, ImageSpecsError

if TYPE_CHECKING:
    from os import PathLike
    from typing import BinaryIO

READ_CHUNK = 16384
DATA_URL_PREFIX = "data:"
BASE64_SUFFIX = ";base64"
# URL-safe alphabet folded onto the standard one
_URLSAFE = bytes.maketrans(b"-_", b"+/")


def read_limited(stream: BinaryIO, max_bytes: int) -> bytes:
    """Read up to ``max_bytes`` from ``stream``.

    Raises:
        ImageSpecsError: INSUFFICIENT_DATA when the stream is already at EOF,
            INVALID_STREAM when reading fails.
    """
    chunks: list[bytes] = []
    total = 0
    try:
        while total < max_bytes:
            chunk = stream.read(min(READ_CHUNK, max_bytes - total))
            if not chunk:
                break
            chunks.append(bytes(chunk))
            total += len(chunk)
    except OSError as err:
        msg = f"Stream error: {err}"
        raise ImageSpecsError(msg, ErrorCode.INVALID_STREAM) from err
    if total == 0:
        raise ImageSpecsError("Stream ended without data", ErrorCode.INSUFFICIENT_DATA)
    return b"".join(chunks)[:max_bytes]


def is_data_url(source: str) -> bool:
    return source[: len(DATA_URL_PREFIX)].lower() == DATA_URL_PREFIX


def decode_data_url(url: str) -> bytes:
    """Return the payload of a ``data:`` URL.

    Base64 payloads are decoded leniently: whitespace, URL-safe characters and
    missing padding are accepted.
    """
    if not is_data_url(url):
        msg = "Invalid data URL format"
        raise ImageSpecsError(msg, ErrorCode.INVALID_URL)
    header, sep, payload = url[len(DATA_URL_PREFIX) :].partition(",")
    if not sep:
        msg = "Invalid data URL format: missing ','"
        raise ImageSpecsError(msg, ErrorCode.INVALID_URL)
    raw = unquote_to_bytes(payload)
    if not header.lower().endswith(BASE64_SUFFIX):
        return raw
    compact = b"".join(raw.split()).translate(_URLSAFE).rstrip(b"=")
    try:
        return base64.b64decode(compact + b"=" * (-len(compact) % 4), validate=True)
    except (binascii.Error, ValueError) as err:
        msg = f"Invalid data URL format: {err}"
        raise ImageSpecsError(msg, ErrorCode.INVALID_URL) from err


def read_file_prefix(path: str | PathLike[str], max_bytes: int) -> bytes:
    """Read the first ``max_bytes`` of a local file; ``OSError`` propagates."""
    with open(path, "rb") as fh:  # noqa: PTH123
        data = fh.read(max_bytes)
    if not data:
        raise ImageSpecsError(ERROR_MSG_NO_DATA, ErrorCode.INSUFFICIENT_DATA)
    return data


__all__ = ["decode_data_url", "is_data_url", "read_file_prefix", "read_limited"]
