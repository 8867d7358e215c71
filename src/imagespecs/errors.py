"""Custom exception classes and error messages."""

from __future__ import annotations

from enum import StrEnum

ERROR_MSG_UNSUPPORTED = "Unsupported or corrupted image format"
ERROR_MSG_NO_DATA = "No data received"
ERROR_MSG_CORRUPTED = "Corrupted or truncated {kind} image"
ERROR_MSG_INVALID_SOURCE = "Invalid source type"
ERROR_MSG_READ_PAST_END = "Attempt to read past buffer"
ERROR_MSG_INVALID_SEEK = "Invalid seek position"


class ErrorCode(StrEnum):
    """Failure categories surfaced to callers of the acquisition layer."""

    UNSUPPORTED_FORMAT = "UNSUPPORTED_FORMAT"
    INVALID_URL = "INVALID_URL"
    NETWORK_ERROR = "NETWORK_ERROR"
    TIMEOUT = "TIMEOUT"
    CORRUPTED_IMAGE = "CORRUPTED_IMAGE"
    INSUFFICIENT_DATA = "INSUFFICIENT_DATA"
    INVALID_STREAM = "INVALID_STREAM"


class ImageSpecsError(Exception):
    """Raised when a source cannot be turned into image specifications."""

    def __init__(self, message: str, code: ErrorCode) -> None:
        super().__init__(message)
        self.message = message
        self.code = code

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> dict[str, str]:
        return {"code": self.code.value, "message": self.message}


class OutOfRangeError(IndexError):
    """Raised by :class:`~imagespecs.cursor.ByteCursor` on reads past the buffer."""


class ConfigLoadError(Exception):
    """Raised when a configuration file cannot be loaded."""
