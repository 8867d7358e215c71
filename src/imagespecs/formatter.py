"""Text and JSON rendering of results for the CLI."""

from __future__ import annotations

import io
import json
from typing import TYPE_CHECKING, Any

from rich.console import Console
from rich.table import Table

from .constants import DisplayStyle

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .models import BatchResult, ImageSpecs

RENDER_WIDTH = 100
NOT_AVAILABLE = "N/A"


def summary_line(specs: ImageSpecs) -> str:
    """``WxH type (mime)``."""
    return f"{specs.width}x{specs.height} {specs.type.value} ({specs.mime})"


def detail_rows(specs: ImageSpecs) -> list[tuple[str, str]]:
    """Label/value pairs for every populated optional field, in display order."""
    rows = [("Units", f"{specs.w_units} x {specs.h_units}")]
    if specs.w_resolution is not None or specs.h_resolution is not None:
        w_res = NOT_AVAILABLE if specs.w_resolution is None else specs.w_resolution
        h_res = NOT_AVAILABLE if specs.h_resolution is None else specs.h_resolution
        rows.append(("Resolution", f"{w_res} x {h_res} DPI"))
    optional: tuple[tuple[str, object], ...] = (
        ("Color Space", specs.color_space),
        ("ICC Profile", specs.icc_profile),
        ("Bit Depth", specs.bit_depth),
        ("Channels", specs.channels),
        ("Gamma", specs.gamma),
        ("Color Primaries", specs.color_primaries),
        ("Transfer Characteristics", specs.transfer_characteristics),
        ("URL", specs.url),
        ("Path", specs.path),
        ("Filename", specs.filename),
    )
    rows.extend((label, str(value)) for label, value in optional if value is not None)
    return rows


def _render_table(table: Table) -> str:
    buffer = io.StringIO()
    console = Console(file=buffer, width=RENDER_WIDTH, force_terminal=False, color_system=None)
    console.print(table)
    return buffer.getvalue()


def details_table(specs: ImageSpecs) -> str:
    """Render :func:`detail_rows` as a borderless two-column rich table."""
    table = Table(show_header=False, show_edge=False, box=None, pad_edge=False, expand=False)
    table.add_column(style="cyan", no_wrap=True)
    table.add_column(style="default")
    for label, value in detail_rows(specs):
        table.add_row(label, value)
    return _render_table(table)


def render_specs(specs: ImageSpecs, style: DisplayStyle) -> str:
    text = summary_line(specs) + "\n"
    if style is DisplayStyle.FULL:
        text += details_table(specs)
    return text


def batch_line(result: BatchResult) -> str:
    if result.specs is not None:
        suffix = f" - {result.specs.url}" if result.specs.url else ""
        return f"[{result.index}] {summary_line(result.specs)}{suffix}"
    message = result.error.message if result.error is not None else "Unknown error"
    return f"[{result.index}] Error: {message}"


def batch_table(results: Sequence[BatchResult]) -> str:
    table = Table(title="Image specs", expand=False)
    table.add_column("#", justify="right")
    table.add_column("Source", overflow="fold")
    table.add_column("Size", justify="right")
    table.add_column("Type")
    table.add_column("Details", overflow="fold")
    for result in results:
        if result.specs is not None:
            specs = result.specs
            extras = ", ".join(f"{label}: {value}" for label, value in detail_rows(specs)[1:] if label != "URL")
            table.add_row(str(result.index), result.source, f"{specs.width}x{specs.height}", specs.mime, extras)
        else:
            message = result.error.message if result.error is not None else "Unknown error"
            table.add_row(str(result.index), result.source, "-", "error", message)
    return _render_table(table)


def render_batch(results: Sequence[BatchResult], style: DisplayStyle) -> str:
    if style is DisplayStyle.FULL:
        return batch_table(results)
    return "".join(batch_line(result) + "\n" for result in results)


def render_check(flags: Sequence[bool]) -> str:
    if len(flags) == 1:
        return ("true" if flags[0] else "false") + "\n"
    return "".join(f"[{i}] {'true' if flag else 'false'}\n" for i, flag in enumerate(flags))


def to_json(payload: Any) -> str:
    return json.dumps(payload, indent=2, sort_keys=True) + "\n"
