from __future__ import annotations

import logging
from pathlib import Path

import pytest

from imagespecs.logging_utils import StructuredLogEvent, get_logger, log_event

pytestmark = pytest.mark.small


def test_sanitised_context_masks_credentials() -> None:
    event = StructuredLogEvent(
        name="http.fetch",
        message="fetching",
        context={
            "url": "https://x/a.png",
            "headers": {"Authorization": "Bearer secret", "Cookie": "a=b", "Accept": "image/*"},
            "api_key": "123",
        },
    )
    ctx = event.sanitised_context()
    assert ctx["url"] == "https://x/a.png"
    assert ctx["headers"] == {"Authorization": "***", "Cookie": "***", "Accept": "image/*"}
    assert ctx["api_key"] == "***"


def test_sanitised_context_summarises_large_values() -> None:
    event = StructuredLogEvent(
        name="x",
        message="y",
        context={"data": b"\x00" * 10, "path": Path("/tmp/a.png"), "long": "d" * 500, "items": (1, 2)},  # noqa: S108
    )
    ctx = event.sanitised_context()
    assert ctx["data"] == "<10 bytes>"
    assert ctx["path"] == "/tmp/a.png"  # noqa: S108
    assert isinstance(ctx["long"], str)
    assert ctx["long"].endswith("...")
    assert len(ctx["long"]) == 203
    assert ctx["items"] == [1, 2]


def test_log_event_attaches_structured_fields(caplog: pytest.LogCaptureFixture) -> None:
    logger = get_logger("imagespecs.test")
    event = StructuredLogEvent(name="specs.parsed", message="parsed", context={"width": 3}, level=logging.DEBUG)
    with caplog.at_level(logging.DEBUG, logger="imagespecs.test"):
        log_event(logger, event)
    (record,) = caplog.records
    assert record.getMessage() == "parsed"
    assert record.event == "specs.parsed"  # type: ignore[attr-defined]
    assert record.context == {"width": 3}  # type: ignore[attr-defined]


def test_log_event_skips_disabled_levels(caplog: pytest.LogCaptureFixture) -> None:
    logger = get_logger("imagespecs.quiet")
    with caplog.at_level(logging.WARNING, logger="imagespecs.quiet"):
        log_event(logger, StructuredLogEvent(name="n", message="m", level=logging.DEBUG))
    assert caplog.records == []
