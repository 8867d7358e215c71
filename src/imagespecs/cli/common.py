"""Shared CLI helpers used by multiple subcommands."""

from __future__ import annotations

import contextlib
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

import click

from imagespecs.config import load_and_adjust_config, parse_header
from imagespecs.constants import EXIT_CONFIG, EXIT_OK, DisplayStyle, OutputFormat
from imagespecs.errors import ConfigLoadError
from imagespecs.models import FetchOptions

if TYPE_CHECKING:
    from collections.abc import Callable

    from imagespecs.core import ImageSource
    from imagespecs.errors import ImageSpecsError

STDIN_SOURCE = "-"


@dataclass(frozen=True, slots=True)
class SourceParams:
    """Options shared by ``inspect`` and ``check``."""

    sources: tuple[str, ...]
    fmt: OutputFormat
    style: DisplayStyle
    timeout: float | None
    max_bytes: int | None
    user_agent: str | None
    headers: tuple[tuple[str, str], ...]
    config_path: Path | None
    output: Path | None
    silent: bool


def _parse_headers(_ctx: click.Context, _param: click.Parameter, values: tuple[str, ...]) -> tuple[tuple[str, str], ...]:
    parsed: list[tuple[str, str]] = []
    for value in values:
        try:
            parsed.append(parse_header(value))
        except ValueError as err:
            raise click.BadParameter(str(err)) from err
    return tuple(parsed)


def source_options[F: Callable[..., Any]](func: F) -> F:
    """Attach the options shared by commands that read image sources."""
    decorators = (
        click.option(
            "--format",
            "fmt",
            type=click.Choice([f.value for f in OutputFormat], case_sensitive=False),
            default=OutputFormat.TEXT.value,
            help="Output format",
        ),
        click.option(
            "--style",
            type=click.Choice([s.value for s in DisplayStyle], case_sensitive=False),
            default=DisplayStyle.AUTO.value,
            help="Text detail level (auto = full on a TTY, compact otherwise)",
        ),
        click.option("--timeout", type=click.FloatRange(min=0, min_open=True), help="HTTP timeout in seconds"),
        click.option("--max-bytes", type=click.IntRange(min=1), help="Bytes to read from each source"),
        click.option("--user-agent", help="User-Agent header for HTTP requests"),
        click.option(
            "--header",
            "headers",
            multiple=True,
            callback=_parse_headers,
            metavar="NAME:VALUE",
            help="Extra HTTP request header (repeatable)",
        ),
        click.option("--config", "config_path", type=click.Path(path_type=Path), help="Explicit config file path"),
        click.option("--output", type=click.Path(path_type=Path), help="Write output to a file"),
        click.option("--silent", is_flag=True, help="Suppress error messages"),
        click.argument("sources", nargs=-1, required=True),
    )
    for decorator in reversed(decorators):
        func = decorator(func)
    return func


def build_params(**kwargs: Any) -> SourceParams:
    return SourceParams(
        sources=tuple(kwargs["sources"]),
        fmt=OutputFormat(kwargs["fmt"].lower()),
        style=DisplayStyle(kwargs["style"].lower()),
        timeout=kwargs["timeout"],
        max_bytes=kwargs["max_bytes"],
        user_agent=kwargs["user_agent"],
        headers=kwargs["headers"],
        config_path=kwargs["config_path"],
        output=kwargs["output"],
        silent=kwargs["silent"],
    )


def load_fetch_options(params: SourceParams) -> FetchOptions:
    """Merge config files with command-line overrides; exit 3 on config errors."""
    try:
        cfg = load_and_adjust_config(
            base_path=Path(),
            explicit_config=params.config_path,
            timeout=params.timeout,
            max_bytes=params.max_bytes,
            user_agent=params.user_agent,
            headers=params.headers,
        )
    except ConfigLoadError as err:
        print(err, file=sys.stderr)
        raise SystemExit(EXIT_CONFIG) from err
    return FetchOptions.from_config(cfg)


def open_source(source: str) -> ImageSource:
    """Map ``-`` to binary stdin; everything else is handed over as is."""
    if source == STDIN_SOURCE:
        return click.get_binary_stream("stdin")
    return source


def report_error(err: ImageSpecsError, *, silent: bool) -> None:
    if not silent:
        print(f"Error [{err.code.value}]: {err.message}", file=sys.stderr)


def exit_on_broken_pipe() -> None:
    """Point stdout at devnull so interpreter shutdown does not raise again, then exit."""
    devnull = os.open(os.devnull, os.O_WRONLY)
    with contextlib.suppress(OSError, ValueError):
        os.dup2(devnull, sys.stdout.fileno())
    os.close(devnull)
    raise SystemExit(EXIT_OK)
