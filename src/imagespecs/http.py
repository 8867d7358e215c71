"""Ranged HTTP fetch of an image's leading bytes."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

import httpx

from .constants import MAX_REDIRECTS
from .errors import ErrorCode, ImageSpecsError
from .logging_utils import StructuredLogEvent, get_logger, log_event

if TYPE_CHECKING:
    from .models import FetchOptions

logger = get_logger(__name__)

ACCEPTED_STATUS = frozenset({httpx.codes.OK, httpx.codes.PARTIAL_CONTENT})
ACCEPT_HEADER = "image/*,*/*;q=0.8"
HTTP_SCHEMES = frozenset({"http", "https"})


@dataclass(frozen=True, slots=True)
class FetchResult:
    """Leading bytes of a response body plus where they finally came from."""

    data: bytes
    status_code: int
    url: str


def is_http_url(source: str) -> bool:
    return source.lower().startswith(("http://", "https://"))


def validate_url(url: str) -> httpx.URL:
    try:
        parsed = httpx.URL(url)
    except (httpx.InvalidURL, TypeError) as err:
        msg = f"Invalid URL: {err}"
        raise ImageSpecsError(msg, ErrorCode.INVALID_URL) from err
    if parsed.scheme not in HTTP_SCHEMES:
        msg = "Invalid URL: Only HTTP and HTTPS protocols are supported"
        raise ImageSpecsError(msg, ErrorCode.INVALID_URL)
    if not parsed.host:
        msg = "Invalid URL: missing host"
        raise ImageSpecsError(msg, ErrorCode.INVALID_URL)
    return parsed


def request_headers(options: FetchOptions) -> dict[str, str]:
    """Default request headers; caller-supplied headers win on conflict."""
    headers = {
        "User-Agent": options.user_agent,
        "Accept": ACCEPT_HEADER,
        "Accept-Encoding": "identity",
        "Range": f"bytes=0-{options.max_bytes - 1}",
    }
    headers.update(options.headers)
    return headers


def _read_body(response: httpx.Response, max_bytes: int) -> bytes:
    chunks: list[bytes] = []
    total = 0
    for chunk in response.iter_raw():
        chunks.append(chunk)
        total += len(chunk)
        if total >= max_bytes:
            break
    return b"".join(chunks)[:max_bytes]


def fetch_prefix(
    url: str,
    options: FetchOptions,
    *,
    transport: httpx.BaseTransport | None = None,
) -> FetchResult:
    """GET at most ``options.max_bytes`` of ``url``.

    A ``Range`` request is sent but servers that ignore it and answer 200 are
    accepted too; the body is cut off once the budget is reached. Redirects
    are followed up to five times.

    Raises:
        ImageSpecsError: INVALID_URL, TIMEOUT or NETWORK_ERROR.
    """
    parsed = validate_url(url)
    headers = request_headers(options)
    log_event(
        logger,
        StructuredLogEvent(
            name="http.fetch",
            message="fetching image prefix",
            level=logging.DEBUG,
            context={"url": str(parsed), "max_bytes": options.max_bytes, "headers": headers},
        ),
    )
    try:
        with (
            httpx.Client(
                timeout=httpx.Timeout(options.timeout),
                follow_redirects=True,
                max_redirects=MAX_REDIRECTS,
                transport=transport,
            ) as client,
            client.stream("GET", parsed, headers=headers) as response,
        ):
            if response.status_code not in ACCEPTED_STATUS:
                reason = response.reason_phrase or "Unknown error"
                msg = f"HTTP {response.status_code}: {reason}"
                raise ImageSpecsError(msg, ErrorCode.NETWORK_ERROR)
            data = _read_body(response, options.max_bytes)
            final_url = str(response.url)
            status = response.status_code
    except httpx.TimeoutException as err:
        msg = "Request timeout"
        raise ImageSpecsError(msg, ErrorCode.TIMEOUT) from err
    except httpx.TooManyRedirects as err:
        msg = "Too many redirects"
        raise ImageSpecsError(msg, ErrorCode.NETWORK_ERROR) from err
    except httpx.HTTPError as err:
        msg = f"Request error: {err}"
        raise ImageSpecsError(msg, ErrorCode.NETWORK_ERROR) from err

    log_event(
        logger,
        StructuredLogEvent(
            name="http.fetched",
            message="received image prefix",
            level=logging.DEBUG,
            context={"url": final_url, "status": status, "bytes": len(data)},
        ),
    )
    return FetchResult(data=data, status_code=status, url=final_url)


__all__ = ["FetchResult", "fetch_prefix", "is_http_url", "request_headers", "validate_url"]
