"""Output strategies for writing rendered results."""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, Protocol

from imagespecs.logging_utils import StructuredLogEvent, get_logger, log_event

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

logger = get_logger(__name__)


class OutputStrategy(Protocol):
    """Write-only sink for the final payload."""

    def write(self, content: str) -> None: ...


class FileOutput:
    """Output strategy that writes to a file path."""

    def __init__(self, path: Path) -> None:
        self._path = path

    def write(self, content: str) -> None:
        self._path.write_text(content, encoding="utf-8")
        log_event(
            logger,
            StructuredLogEvent(
                name="output.file",
                message="wrote output file",
                level=logging.INFO,
                context={"path": self._path, "chars": len(content)},
            ),
        )


class StdoutOutput:
    """Output strategy that prints to stdout."""

    @staticmethod
    def write(content: str) -> None:
        sys.stdout.write(content)
        sys.stdout.flush()


def build_writer(*, output: Path | None) -> Callable[[str], None]:
    """Return a writer targeting ``output`` when given, stdout otherwise."""
    strategy: OutputStrategy = FileOutput(output) if output is not None else StdoutOutput()

    def write(content: str) -> None:
        if content:
            strategy.write(content)

    return write
