"""Top-level Click group wiring together all image-specs commands."""

from __future__ import annotations

import io
import logging
import sys
from typing import TYPE_CHECKING

import click
from rich.console import Console
from rich.table import Table

from imagespecs import __version__
from imagespecs.constants import EXIT_INTERRUPT

from .common import exit_on_broken_pipe

if TYPE_CHECKING:
    from collections.abc import Iterable

DEFAULT_COMMAND = "inspect"

# Threshold for -vv to map to DEBUG
VERBOSE_DEBUG_THRESHOLD = 2

CLI_CONTEXT_SETTINGS = {
    "help_option_names": ["-h", "--help"],
    "ignore_unknown_options": True,
    "allow_extra_args": True,
}


def _options_table(params: Iterable[click.Parameter], ctx: click.Context) -> Table:
    table = Table(show_header=False, show_edge=False, box=None, pad_edge=False, expand=False)
    table.add_column(style="cyan", no_wrap=True)
    table.add_column(style="default")
    for param in params:
        if not isinstance(param, click.Option):
            continue
        record = param.get_help_record(ctx)
        if not record:
            continue
        opts, help_text = record
        if opts.lstrip().startswith("-h, --help"):
            continue
        table.add_row(opts, help_text or "")
    return table


class _DefaultInspectGroup(click.Group):
    """Click group that falls back to ``inspect`` when the first token is not a command."""

    def resolve_command(
        self,
        ctx: click.Context,
        args: list[str],
    ) -> tuple[str | None, click.Command | None, list[str]]:
        try:
            return super().resolve_command(ctx, args)
        except click.UsageError:
            default = self.get_command(ctx, DEFAULT_COMMAND)
            if default is None:
                raise
            return DEFAULT_COMMAND, default, list(args)

    def get_help(self, ctx: click.Context) -> str:  # type: ignore[override]
        """Return rich-formatted help listing global options, inspect options and commands."""
        console = Console(record=True, file=io.StringIO())
        console.print("[bold]Usage:[/bold] image-specs [GLOBAL OPTIONS] [INSPECT OPTIONS] SOURCE...")
        console.print("       image-specs [GLOBAL OPTIONS] COMMAND [ARGS...]")
        console.print()
        console.print("  Read image dimensions and header metadata from files, URLs, data: URLs or stdin (-).")
        console.print(f"  If no COMMAND is given, the default command is: [bold]{DEFAULT_COMMAND}[/bold].")
        console.print()

        console.print("[bold]Global Options:[/bold]")
        console.print(_options_table(self.params, ctx))
        console.print()

        default = self.get_command(ctx, DEFAULT_COMMAND)
        if isinstance(default, click.Command):
            sub_ctx = click.Context(default, info_name=DEFAULT_COMMAND, parent=ctx)
            console.print(f"[bold]{DEFAULT_COMMAND.capitalize()} options (default when no command is specified):[/bold]")
            console.print(_options_table(default.params, sub_ctx))
            console.print()

        console.print("[bold]Commands:[/bold]")
        cmd_table = Table(show_header=False, show_edge=False, box=None, pad_edge=False, expand=False)
        cmd_table.add_column(style="cyan", no_wrap=True)
        cmd_table.add_column(style="default")
        for name in sorted(self.commands):
            command = self.commands[name]
            help_text = command.get_short_help_str(limit=80)
            if name == DEFAULT_COMMAND:
                help_text = f"{help_text} (default)"
            cmd_table.add_row(name, help_text)
        console.print(cmd_table)
        return console.export_text()


@click.group(cls=_DefaultInspectGroup, context_settings=CLI_CONTEXT_SETTINGS)
@click.option("-v", "--verbose", count=True, help="Increase verbosity (use -vv for debug)")
@click.option(
    "--log-level",
    type=click.Choice(["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"], case_sensitive=False),
    help="Set log level explicitly",
)
@click.version_option(__version__, "-V", "--version")
def cli(verbose: int, log_level: str | None) -> None:
    """Read image dimensions and header metadata without decoding pixels.

    If no COMMAND is given, this behaves like: image-specs inspect SOURCE...
    """
    if log_level:
        level = getattr(logging, log_level.upper())
    elif verbose >= VERBOSE_DEBUG_THRESHOLD:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, force=True)


# Import subcommands and register them
from .check import check  # noqa: E402
from .init import init  # noqa: E402
from .inspect import inspect  # noqa: E402
from .version import version  # noqa: E402

cli.add_command(inspect)
cli.add_command(check)
cli.add_command(init)
cli.add_command(version)


# Flags handled by the root command itself; encountering them means we should
# not inject the default command.
_HELP_FLAGS = {"-h", "--help", "-V", "--version"}
_VERBOSE_FLAGS = {"--verbose"}


def _is_verbose_flag(flag: str) -> bool:
    """Return ``True`` if the token is a root-level verbosity flag."""
    if flag in _VERBOSE_FLAGS:
        return True
    if flag == "-":
        return False
    stripped = flag.lstrip("-")
    return flag.startswith("-") and not flag.startswith("--") and bool(stripped) and set(stripped) == {"v"}


def _log_level_skip(flag: str) -> int:
    """Return how many tokens a log-level flag consumes (1 for inline)."""
    if flag == "--log-level":
        return 2
    if flag.startswith("--log-level="):
        return 1
    return 0


def _inject_default_command(args: list[str], *, commands: Iterable[str]) -> list[str]:
    """Insert ``inspect`` after the root options when no command was named."""
    normalized = list(args)
    command_names = set(commands)
    idx = 0
    while idx < len(normalized):
        current = normalized[idx]
        if current in _HELP_FLAGS or current in command_names:
            return normalized
        if _is_verbose_flag(current):
            idx += 1
            continue
        if skip := _log_level_skip(current):
            idx += skip
            continue
        break
    if idx >= len(normalized):
        return normalized
    normalized.insert(idx, DEFAULT_COMMAND)
    return normalized


def main(argv: list[str] | None = None) -> None:
    """Console entry point: run the group with ``inspect`` injected when omitted."""
    argv = list(sys.argv[1:] if argv is None else argv)
    argv = _inject_default_command(argv, commands=cli.commands)
    try:
        rv = cli.main(args=argv, prog_name="image-specs", standalone_mode=False)
    except BrokenPipeError:
        exit_on_broken_pipe()
    except click.ClickException as err:
        err.show()
        raise SystemExit(err.exit_code) from err
    except click.Abort as err:
        click.echo("Aborted!", err=True)
        raise SystemExit(EXIT_INTERRUPT) from err
    if isinstance(rv, int) and rv:
        raise SystemExit(rv)
