"""Command: list configured statuses and cycles."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from tickmark.commands._base import TickmarkCommand

if TYPE_CHECKING:
    from tickmark.commands._context import AppContext


@click.command(
    cls=TickmarkCommand,
    examples="""\
  tickmark statuses
  tickmark --json statuses
  tickmark -c ./tickmark.toml statuses""",
)
@click.pass_obj
def statuses(app: AppContext) -> None:
    """List statuses, their markers and types, and any cycles."""
    app.emit(app.service.list_statuses())
