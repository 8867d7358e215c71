"""CLI command implementation for ``image-specs inspect`` (the default command)."""

from __future__ import annotations

from typing import Any

import click

from imagespecs.constants import EXIT_FAILURE, OutputFormat
from imagespecs.core import get_image_specs, get_image_specs_batch
from imagespecs.errors import ImageSpecsError
from imagespecs.formatter import render_batch, render_specs, to_json
from imagespecs.output import build_writer
from imagespecs.tty import resolve_display_style

from .common import build_params, load_fetch_options, open_source, report_error, source_options


@click.command()
@source_options
def inspect(**kwargs: Any) -> None:
    """Print dimensions and header metadata for each SOURCE (file, URL, data: URL or - for stdin)."""
    params = build_params(**kwargs)
    options = load_fetch_options(params)
    write = build_writer(output=params.output)
    style = resolve_display_style(params.style, to_file=params.output is not None)

    if len(params.sources) == 1:
        try:
            specs = get_image_specs(open_source(params.sources[0]), options)
        except ImageSpecsError as err:
            report_error(err, silent=params.silent)
            raise SystemExit(EXIT_FAILURE) from err
        write(to_json(specs.to_dict()) if params.fmt is OutputFormat.JSON else render_specs(specs, style))
        return

    results = get_image_specs_batch([open_source(s) for s in params.sources], options)
    if params.fmt is OutputFormat.JSON:
        write(to_json([result.to_dict() for result in results]))
    else:
        write(render_batch(results, style))
    if not all(result.success for result in results):
        raise SystemExit(EXIT_FAILURE)
