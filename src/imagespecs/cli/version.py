"""CLI command reporting the installed image-specs version."""

from __future__ import annotations

import click

from imagespecs import __version__


@click.command()
def version() -> None:
    """Print version and exit."""
    print(__version__)
