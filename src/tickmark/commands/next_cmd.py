"""Command: show which status a marker advances to."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from tickmark.commands._base import TickmarkCommand

if TYPE_CHECKING:
    from tickmark.commands._context import AppContext


@click.command(
    "next",
    cls=TickmarkCommand,
    examples="""\
  tickmark next " "
  tickmark next x
  tickmark --json next /""",
)
@click.argument("mark")
@click.pass_obj
def next_cmd(app: AppContext, mark: str) -> None:
    """Show the status MARK advances to."""
    app.emit(app.service.next_status(mark))
