"""Generic numeric helpers used by several decoders."""

from __future__ import annotations

import math

INCH_PER_METER = 0.0254
CM_PER_INCH = 2.54


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up (not banker's rounding)."""
    return math.floor(value + 0.5)


def ppm_to_dpi(pixels_per_meter: float) -> int:
    """Convert pixels per metre to dots per inch."""
    return round_half_up(pixels_per_meter * INCH_PER_METER)


def per_cm_to_dpi(per_cm: float) -> int:
    """Convert dots per centimetre to dots per inch."""
    return round_half_up(per_cm * CM_PER_INCH)
