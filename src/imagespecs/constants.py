"""Project-wide constants, enums, and small helpers."""

from __future__ import annotations

from enum import StrEnum


class ImageType(StrEnum):
    """Format tags reported in parse results."""

    JPG = "jpg"
    PNG = "png"
    GIF = "gif"
    WEBP = "webp"
    BMP = "bmp"
    SVG = "svg"
    AVIF = "avif"
    ICO = "ico"

    @property
    def mime(self) -> str:
        return MIME_TYPES[self]


MIME_TYPES: dict[ImageType, str] = {
    ImageType.JPG: "image/jpeg",
    ImageType.PNG: "image/png",
    ImageType.GIF: "image/gif",
    ImageType.WEBP: "image/webp",
    ImageType.BMP: "image/bmp",
    ImageType.SVG: "image/svg+xml",
    ImageType.AVIF: "image/avif",
    ImageType.ICO: "image/x-icon",
}


class OutputFormat(StrEnum):
    """Valid output formats for the CLI."""

    TEXT = "text"
    JSON = "json"


class DisplayStyle(StrEnum):
    """How much detail text output shows."""

    AUTO = "auto"
    FULL = "full"
    COMPACT = "compact"


DEFAULT_UNITS = "px"

# Byte budgets
DEFAULT_MAX_BYTES = 65536
MAX_RETRY_BYTES = 1048576
SNIFF_BYTES = 1024

# Network defaults
DEFAULT_TIMEOUT = 10.0
MAX_REDIRECTS = 5

CONFIG_TIMEOUT = "timeout"
CONFIG_MAX_BYTES = "max_bytes"
CONFIG_USER_AGENT = "user_agent"
CONFIG_HEADERS = "headers"

# Exit codes
EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2
EXIT_CONFIG = 3
EXIT_INTERRUPT = 130
