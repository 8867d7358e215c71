"""Colour-space heuristics shared by the JPEG, WebP and AVIF decoders.

These are best-effort lookups over ICC profile fragments, not a tag-table
parser. Priority order of the checks matters and must not be reshuffled.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

ICC_DESC_TAG = b"desc"
ICC_SEARCH_LIMIT = 512
ICC_EMBEDDED = "Embedded ICC Profile"

MIN_PRINTABLE_RUN = 5
PRINTABLE_SCAN_WINDOW = 200
PRINTABLE_MIN, PRINTABLE_MAX = 0x20, 0x7E
PRINTABLE_EXCLUDES = ("text", "Copyright")

# (pattern, profile name, colour space)
KNOWN_PROFILES: tuple[tuple[re.Pattern[str], str, str], ...] = (
    (re.compile(r"Adobe RGB \(1998\)"), "Adobe RGB (1998)", "Adobe RGB"),
    (re.compile(r"sRGB IEC61966-2\.1"), "sRGB IEC61966-2.1", "sRGB"),
    (re.compile(r"Display P3"), "Display P3", "Display P3"),
    (re.compile(r"ProPhoto RGB"), "ProPhoto RGB", "ProPhoto RGB"),
    (re.compile(r"Rec\. 2020"), "Rec. 2020", "Rec. 2020"),
    (re.compile(r"DCI-P3"), "DCI-P3", "DCI-P3"),
)

_TAG_SPACES = {
    "RGB": "RGB",
    "GRAY": "Grayscale",
    "CMYK": "CMYK",
    "Lab": "Lab",
}


def color_space_from_string(text: str) -> str | None:
    """Map an ICC profile name (or any text containing one) to a colour-space label."""
    lowered = text.lower()
    if "srgb" in lowered or "s_rgb" in lowered:
        return "sRGB"
    if "adobe" in lowered and "rgb" in lowered:
        return "Adobe RGB"
    if "display" in lowered and "p3" in lowered:
        return "Display P3"
    if "prophoto" in lowered:
        return "ProPhoto RGB"
    if any(token in lowered for token in ("rec2020", "rec.2020", "rec_2020")):
        return "Rec. 2020"
    return None


def color_space_from_tag(tag: str) -> str | None:
    """Map a 4-character ICC colour-space signature to a label."""
    return _TAG_SPACES.get(tag.strip())


@dataclass(frozen=True, slots=True)
class IccInfo:
    profile_name: str | None = None
    color_space: str | None = None


def _read_u32(data: bytes, offset: int) -> int | None:
    if offset < 0 or offset + 4 > len(data):
        return None
    return int.from_bytes(data[offset : offset + 4], "big")


def _desc_name(data: bytes, desc_index: int) -> str | None:
    """Follow a ``desc`` tag-table entry to its ASCII profile description."""
    if desc_index + 12 >= len(data):
        return None
    offset = _read_u32(data, desc_index + 4)
    size = _read_u32(data, desc_index + 8)
    if offset is None or size is None or offset >= len(data) or size == 0:
        return None
    if data[offset : offset + 4] != ICC_DESC_TAG or offset + 12 >= len(data):
        return None
    ascii_len = _read_u32(data, offset + 8)
    if not ascii_len or offset + 12 + ascii_len > len(data):
        return None
    raw = data[offset + 12 : offset + 12 + ascii_len]
    return raw.decode("ascii", errors="replace").replace("\x00", "").strip() or None


def _named_profile(data: bytes) -> IccInfo | None:
    text = data.decode("latin-1").replace("\x00", " ")
    for pattern, name, space in KNOWN_PROFILES:
        if pattern.search(text):
            return IccInfo(profile_name=name, color_space=space)
    return None


def _printable_run(data: bytes, start: int) -> str | None:
    """Return the first printable ASCII run after ``start`` that looks like a name."""
    if start >= len(data) - 20:
        return None
    stop = min(start + PRINTABLE_SCAN_WINDOW, len(data) - 1)
    i = start
    while i < stop:
        if not PRINTABLE_MIN <= data[i] <= PRINTABLE_MAX:
            i += 1
            continue
        end = i
        while end < len(data) and PRINTABLE_MIN <= data[end] <= PRINTABLE_MAX:
            end += 1
        if end - i >= MIN_PRINTABLE_RUN:
            candidate = data[i:end].decode("ascii").strip()
            if candidate and not any(word in candidate for word in PRINTABLE_EXCLUDES):
                return candidate
        i = end
    return None


def sniff_icc_profile(profile: bytes) -> IccInfo:
    """Best-effort profile name and colour space from raw ICC bytes.

    Tries, in order: the ``desc`` tag's ASCII description, a set of well-known
    profile names, and finally the first plausible printable run after the
    ``desc`` tag. An unidentifiable profile yields an empty :class:`IccInfo`.
    """
    data = profile[:ICC_SEARCH_LIMIT]
    desc_index = data.find(ICC_DESC_TAG)

    if desc_index > 0 and (name := _desc_name(data, desc_index)):
        return IccInfo(profile_name=name, color_space=color_space_from_string(name))

    if (named := _named_profile(data)) is not None:
        return named

    if desc_index > 0 and (name := _printable_run(data, desc_index + 12)):
        return IccInfo(profile_name=name, color_space=color_space_from_string(name))

    return IccInfo()
