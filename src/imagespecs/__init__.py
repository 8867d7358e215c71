"""Read image dimensions and header metadata without decoding pixels."""

import contextlib
from importlib.metadata import PackageNotFoundError, version

__version__ = "0.0.0"
with contextlib.suppress(PackageNotFoundError):
    __version__ = version("imagespecs")

from .constants import ImageType  # noqa: E402
from .core import get_image_specs, get_image_specs_batch, is_image_source  # noqa: E402
from .detector import classify, detect, quick_sniff  # noqa: E402
from .dispatch import parse  # noqa: E402
from .errors import ErrorCode, ImageSpecsError  # noqa: E402
from .models import BatchResult, FetchOptions, ImageSpecs, ParseResult  # noqa: E402

__all__ = [
    "BatchResult",
    "ErrorCode",
    "FetchOptions",
    "ImageSpecs",
    "ImageSpecsError",
    "ImageType",
    "ParseResult",
    "__version__",
    "classify",
    "detect",
    "get_image_specs",
    "get_image_specs_batch",
    "is_image_source",
    "parse",
    "quick_sniff",
]
