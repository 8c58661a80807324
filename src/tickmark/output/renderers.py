"""Operation-specific Rich renderers for ServiceResult.

Renderers are dispatched by ``result.op``; unknown ops fall through to a
generic key-value renderer.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from tickmark.output.console import create_console, get_output, style_for_type

if TYPE_CHECKING:
    from collections.abc import Callable

    from rich.console import Console

    from tickmark.services.result import ServiceResult

    Renderer = Callable[[ServiceResult, Console], None]


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render *result* to a string (plain text when not on a terminal)."""
    console = create_console()
    if result.ok:
        _OP_RENDERERS.get(result.op, _render_generic)(result, console)
    else:
        _render_error(result, console, verbose=verbose)
    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Minimal output for ``--quiet``: the new mark, or the status line."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op}: {msg}"
    for key in ("new_mark", "next_mark"):
        if key in result.data:
            value = result.data[key]
            return "" if value is None else value
    return f"OK: {result.op}"


def _status_line(console: Console, result: ServiceResult) -> None:
    console.print(Text.assemble(("OK", "tm.ok"), "  ", (result.op, "tm.op")))


def _field(console: Console, key: str, value: Any, style: str = "") -> None:
    if isinstance(value, (dict, list)):
        value = json.dumps(value, separators=(",", ":"), ensure_ascii=False)
    console.print(Text.assemble((f"  {key}: ", "tm.key"), (str(value), style)))


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    console.print(Text.assemble(("ERROR", "tm.error"), "  ", (result.op, "tm.op"), f": {msg}"))
    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(Text(f"    {k}: {v}"))


def _render_change(result: ServiceResult, console: Console) -> None:
    """cycle / set_status: the line before and after."""
    d = result.data
    _status_line(console, result)
    _field(console, "file", f"{d['path']}:{d['line']}")
    _field(console, "before", d["before"], "tm.before")
    _field(console, "after", d["after"])
    if d.get("status"):
        _field(console, "status", f"{d['status']} ({d.get('type')})", style_for_type(d.get("type")))


def _render_next(result: ServiceResult, console: Console) -> None:
    d = result.data
    _status_line(console, result)
    if d.get("next_mark") is None:
        _field(console, "next", "none")
        return
    _field(console, "next", f"[{d['mark']}] -> [{d['next_mark']}] {d['status']}", style_for_type(d.get("type")))
    if d.get("cycle"):
        _field(console, "cycle", d["cycle"])


def _render_statuses(result: ServiceResult, console: Console) -> None:
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Mark", style="tm.mark", no_wrap=True)
    table.add_column("Status")
    table.add_column("Type")
    table.add_column("Cycle")
    for row in result.data.get("statuses", []):
        table.add_row(
            Text(f"[{row['mark']}]" if row["mark"] is not None else ""),
            Text(row["name"]),
            Text(row["type"] or "", style=style_for_type(row["type"])),
            "yes" if row["in_cycle"] else "no",
        )
    console.print(table)
    for cycle in result.data.get("cycles", []):
        state = "" if cycle["enabled"] else " (disabled)"
        console.print(
            Text.assemble(
                (f"{cycle['id']}{state}", "tm.op"),
                (f"  priority {cycle['priority']}: ", "tm.key"),
                " -> ".join(cycle["cycle"]),
            )
        )


def _render_generic(result: ServiceResult, console: Console) -> None:
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)


_OP_RENDERERS: dict[str, Renderer] = {
    "cycle": _render_change,
    "set_status": _render_change,
    "next_status": _render_next,
    "list_statuses": _render_statuses,
}
