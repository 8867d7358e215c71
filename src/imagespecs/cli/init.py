"""CLI command that bootstraps a default configuration file."""

from __future__ import annotations

import sys
from pathlib import Path

import click

from imagespecs.config import TOML_CONFIG, write_default_config
from imagespecs.constants import EXIT_FAILURE
from imagespecs.errors import ConfigLoadError


@click.command()
@click.option(
    "--path",
    "target",
    type=click.Path(path_type=Path, file_okay=False),
    default=Path(),
    help="Directory to initialize",
)
@click.option("--force", is_flag=True, help="Overwrite an existing config file")
def init(*, target: Path, force: bool) -> None:
    """Create a default .imagespecs.toml in the target directory."""
    target = target.resolve()
    try:
        written = write_default_config(target, force=force)
    except ConfigLoadError as e:
        print(e, file=sys.stderr)
        raise SystemExit(EXIT_FAILURE) from e
    except OSError as e:
        print(f"Failed to write '{TOML_CONFIG}': {e}", file=sys.stderr)
        raise SystemExit(EXIT_FAILURE) from e
    print(f"Wrote default config to {written}")
