"""CLI exports.

This package exposes ``cli`` and ``main`` from ``root.py`` so that
``python -m imagespecs`` and the console entry point share one group.
"""

from .root import cli, main

__all__ = ["cli", "main"]
