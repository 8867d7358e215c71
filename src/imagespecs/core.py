"""Top-level entry points: one source, many sources, or a cheap format check."""

from __future__ import annotations

import logging
import os
import posixpath
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import TYPE_CHECKING, BinaryIO
from urllib.parse import urlsplit

from .constants import MAX_RETRY_BYTES, SNIFF_BYTES
from .detector import classify, detect
from .dispatch import parse
from .errors import (
    ERROR_MSG_CORRUPTED,
    ERROR_MSG_INVALID_SOURCE,
    ERROR_MSG_NO_DATA,
    ERROR_MSG_UNSUPPORTED,
    ErrorCode,
    ImageSpecsError,
)
from .http import fetch_prefix, is_http_url
from .logging_utils import StructuredLogEvent, get_logger, log_event
from .models import BatchResult, FetchOptions, ImageSpecs
from .sources import decode_data_url, is_data_url, read_file_prefix, read_limited

if TYPE_CHECKING:
    from collections.abc import Iterable

    import httpx

    from .models import ParseResult

type ImageSource = str | os.PathLike[str] | bytes | bytearray | memoryview | BinaryIO

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class LoadedSource:
    """A byte prefix and the provenance reported alongside the parse result."""

    data: bytes
    url: str | None = None
    path: str | None = None
    filename: str | None = None


def _url_filename(url: str) -> str | None:
    path = urlsplit(url).path
    if not path or path == "/":
        return None
    return posixpath.basename(path) or None


def _load(source: ImageSource, options: FetchOptions, transport: httpx.BaseTransport | None) -> LoadedSource:
    budget = options.max_bytes
    if isinstance(source, (bytes, bytearray, memoryview)):
        data = bytes(source[:budget])
        if not data:
            raise ImageSpecsError(ERROR_MSG_NO_DATA, ErrorCode.INSUFFICIENT_DATA)
        return LoadedSource(data)
    if isinstance(source, str) and is_data_url(source):
        data = decode_data_url(source)[:budget]
        if not data:
            raise ImageSpecsError(ERROR_MSG_NO_DATA, ErrorCode.INSUFFICIENT_DATA)
        return LoadedSource(data)
    if isinstance(source, str) and is_http_url(source):
        fetched = fetch_prefix(source, options, transport=transport)
        if not fetched.data:
            raise ImageSpecsError(ERROR_MSG_NO_DATA, ErrorCode.INSUFFICIENT_DATA)
        return LoadedSource(fetched.data, url=source, filename=_url_filename(source))
    if isinstance(source, (str, os.PathLike)):
        path = os.fspath(source)
        return LoadedSource(
            read_file_prefix(path, budget),
            path=path,
            filename=os.path.basename(path) or None,  # noqa: PTH119
        )
    if callable(getattr(source, "read", None)):
        return LoadedSource(read_limited(source, budget))
    raise ImageSpecsError(ERROR_MSG_INVALID_SOURCE, ErrorCode.INVALID_STREAM)


def _retry_budgets(max_bytes: int) -> list[int]:
    """Larger budgets to try, in increasing order, never repeating a size."""
    budgets: list[int] = []
    for budget in (max_bytes * 2, max_bytes * 4, MAX_RETRY_BYTES):
        if budget > max(budgets, default=max_bytes):
            budgets.append(budget)
    return budgets


def _retry_url(url: str, options: FetchOptions, transport: httpx.BaseTransport | None) -> ParseResult | None:
    """Re-fetch ``url`` with growing budgets until something parses."""
    for budget in _retry_budgets(options.max_bytes):
        log_event(
            logger,
            StructuredLogEvent(
                name="specs.retry",
                message="header not found in prefix; retrying with a larger budget",
                level=logging.DEBUG,
                context={"url": url, "max_bytes": budget},
            ),
        )
        try:
            data = fetch_prefix(url, options.with_max_bytes(budget), transport=transport).data
        except ImageSpecsError as err:
            logger.debug("retry with %d bytes failed: %s", budget, err)
            continue
        if (result := parse(data)) is not None:
            return result
        if len(data) < budget:
            break  # whole body seen
    return None


def _parse_failure(data: bytes) -> ImageSpecsError:
    kind = classify(data)
    if kind is None:
        return ImageSpecsError(ERROR_MSG_UNSUPPORTED, ErrorCode.UNSUPPORTED_FORMAT)
    return ImageSpecsError(ERROR_MSG_CORRUPTED.format(kind=kind.value.upper()), ErrorCode.CORRUPTED_IMAGE)


def get_image_specs(
    source: ImageSource,
    options: FetchOptions | None = None,
    *,
    transport: httpx.BaseTransport | None = None,
) -> ImageSpecs:
    """Read the header of ``source`` and return its dimensions and metadata.

    ``source`` may be a file path, a ``data:`` URL, an ``http(s)://`` URL,
    a bytes-like object or a readable binary stream. Only the first
    ``options.max_bytes`` are read. When a URL's prefix filled the whole
    budget without yielding a header, the URL is fetched again with 2x, 4x
    and 1 MiB budgets.

    Raises:
        ImageSpecsError: for every failure; unexpected errors are wrapped as
            CORRUPTED_IMAGE.
    """
    opts = options or FetchOptions()
    try:
        loaded = _load(source, opts, transport)
        result = parse(loaded.data)
        if result is None and loaded.url is not None and len(loaded.data) >= opts.max_bytes:
            result = _retry_url(loaded.url, opts, transport)
        if result is None:
            raise _parse_failure(loaded.data)
    except ImageSpecsError:
        raise
    except Exception as err:  # noqa: BLE001
        msg = f"Failed to extract image specifications: {err}"
        raise ImageSpecsError(msg, ErrorCode.CORRUPTED_IMAGE) from err

    log_event(
        logger,
        StructuredLogEvent(
            name="specs.parsed",
            message="parsed image header",
            level=logging.DEBUG,
            context={"type": result.type.value, "width": result.width, "height": result.height},
        ),
    )
    return ImageSpecs.from_result(result, url=loaded.url, path=loaded.path, filename=loaded.filename)


def describe_source(source: ImageSource) -> str:
    """Short human-readable label for ``source`` used in batch results."""
    if isinstance(source, (bytes, bytearray, memoryview)):
        return f"<{len(source)} bytes>"
    if isinstance(source, str):
        return source if not is_data_url(source) else f"{source[:32]}..."
    if isinstance(source, os.PathLike):
        return os.fspath(source)
    return str(getattr(source, "name", "<stream>"))


def get_image_specs_batch(
    sources: Iterable[ImageSource],
    options: FetchOptions | None = None,
    *,
    max_workers: int | None = None,
    transport: httpx.BaseTransport | None = None,
) -> list[BatchResult]:
    """Process ``sources`` concurrently; one :class:`BatchResult` per source, in input order."""
    items = list(sources)

    def run(index: int, source: ImageSource) -> BatchResult:
        label = describe_source(source)
        try:
            specs = get_image_specs(source, options, transport=transport)
        except ImageSpecsError as err:
            return BatchResult(index=index, source=label, error=err)
        return BatchResult(index=index, source=label, specs=specs)

    if not items:
        return []
    with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="imagespecs") as pool:
        return list(pool.map(run, range(len(items)), items))


def is_image_source(
    source: ImageSource,
    options: FetchOptions | None = None,
    *,
    transport: httpx.BaseTransport | None = None,
) -> bool:
    """Return True if the first bytes of ``source`` match a known signature.

    Nothing is parsed. Streams are consumed by up to 1 KiB. Any failure to
    read the source counts as "not an image".
    """
    opts = (options or FetchOptions()).with_max_bytes(SNIFF_BYTES)
    try:
        loaded = _load(source, opts, transport)
    except Exception:  # noqa: BLE001
        logger.debug("could not read %s", describe_source(source), exc_info=True)
        return False
    return detect(loaded.data) is not None


__all__ = [
    "ImageSource",
    "LoadedSource",
    "describe_source",
    "get_image_specs",
    "get_image_specs_batch",
    "is_image_source",
]
