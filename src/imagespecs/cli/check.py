"""CLI command implementation for ``image-specs check``."""

from __future__ import annotations

from typing import Any

import click

from imagespecs.constants import OutputFormat
from imagespecs.core import is_image_source
from imagespecs.formatter import render_check, to_json
from imagespecs.output import build_writer

from .common import build_params, load_fetch_options, open_source, source_options


@click.command()
@source_options
def check(**kwargs: Any) -> None:
    """Report whether each SOURCE starts with a known image signature, without parsing it."""
    params = build_params(**kwargs)
    options = load_fetch_options(params)
    write = build_writer(output=params.output)

    flags = [is_image_source(open_source(source), options) for source in params.sources]
    if params.fmt is OutputFormat.JSON:
        write(to_json(flags[0] if len(flags) == 1 else flags))
    else:
        write(render_check(flags))
