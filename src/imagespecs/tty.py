"""Helpers for TTY detection and output decisions."""

from __future__ import annotations

import sys

from .constants import DisplayStyle


def stdout_is_tty() -> bool:
    """Return True if stdout is a TTY. Isolated for testability."""
    try:
        return sys.stdout.isatty()
    except AttributeError:
        # stdout replaced with an object lacking isatty(); treat as non-TTY
        return False


def resolve_display_style(requested: DisplayStyle, *, to_file: bool = False) -> DisplayStyle:
    """Resolve 'auto' to a concrete style; explicit styles are returned unchanged.

    The rich detail table is only chosen for a terminal: output redirected
    with ``--output`` or piped elsewhere gets the one-line summaries.
    """
    if requested is not DisplayStyle.AUTO:
        return requested
    if to_file or not stdout_is_tty():
        return DisplayStyle.COMPACT
    return DisplayStyle.FULL
