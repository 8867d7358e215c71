from __future__ import annotations

import pytest

from imagespecs.constants import MIME_TYPES, ImageType
from imagespecs.utils import per_cm_to_dpi, ppm_to_dpi, round_half_up

pytestmark = pytest.mark.small


@pytest.mark.parametrize(("value", "expected"), [(0.5, 1), (1.5, 2), (2.5, 3), (2.4999, 2), (-0.5, 0)])
def test_round_half_up(value: float, expected: int) -> None:
    assert round_half_up(value) == expected


def test_density_conversions() -> None:
    assert ppm_to_dpi(2835) == 72
    assert ppm_to_dpi(3780) == 96
    assert per_cm_to_dpi(118) == 300
    assert per_cm_to_dpi(28) == 71


def test_every_type_has_a_mime() -> None:
    assert set(MIME_TYPES) == set(ImageType)
    assert ImageType.SVG.mime == "image/svg+xml"
    assert ImageType.ICO.mime == "image/x-icon"
