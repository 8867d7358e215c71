"""Structured logging with sanitised context payloads."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from os import PathLike, fspath

type LogValue = str | int | float | bool | list[LogValue] | dict[str, LogValue] | None

SENSITIVE_TOKENS = ("authorization", "cookie", "secret", "token", "password", "api-key", "api_key")
MAX_LOGGED_TEXT = 200


def _serialise_value(value: object) -> LogValue:
    """Convert ``value`` into a log-friendly representation."""
    if isinstance(value, (bytes, bytearray, memoryview)):
        return f"<{len(value)} bytes>"
    if isinstance(value, PathLike):
        return fspath(value)  # type: ignore[return-value]
    if isinstance(value, str):
        # data: URLs can be enormous; keep the prefix only
        return value if len(value) <= MAX_LOGGED_TEXT else f"{value[:MAX_LOGGED_TEXT]}..."
    if isinstance(value, Mapping):
        return {str(k): _mask_if_secret(str(k), v) for k, v in value.items()}
    if isinstance(value, (set, frozenset)):
        return sorted(str(_serialise_value(v)) for v in value)
    if isinstance(value, Sequence):
        return [_serialise_value(v) for v in value]
    if isinstance(value, (int, float, bool)) or value is None:
        return value
    return str(value)


def _mask_if_secret(key: str, value: object) -> LogValue:
    """Return ``value`` unless ``key`` names a credential-bearing field or header."""
    lowered = key.lower()
    if any(token in lowered for token in SENSITIVE_TOKENS):
        return "***"
    return _serialise_value(value)


@dataclass(frozen=True, slots=True)
class StructuredLogEvent:
    """A named log event with context for downstream handlers."""

    name: str
    message: str
    context: dict[str, object] = field(default_factory=dict)
    level: int = logging.INFO

    def sanitised_context(self) -> dict[str, LogValue]:
        return {str(k): _mask_if_secret(str(k), v) for k, v in self.context.items()}


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def log_event(logger: logging.Logger, event: StructuredLogEvent) -> None:
    """Emit ``event`` to ``logger`` with structured metadata."""
    if not logger.isEnabledFor(event.level):
        return
    logger.log(event.level, event.message, extra={"event": event.name, "context": event.sanitised_context()})


__all__ = ["StructuredLogEvent", "get_logger", "log_event"]
