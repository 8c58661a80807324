"""Command: set a task's status by name."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from tickmark.commands._base import TickmarkCommand

if TYPE_CHECKING:
    from tickmark.commands._context import AppContext


@click.command(
    "set",
    cls=TickmarkCommand,
    examples="""\
  tickmark set todo.md 3 "In Progress"
  tickmark set todo.md 3 completed
  tickmark set todo.md 3 x""",
)
@click.argument("file", type=click.Path(path_type=Path, dir_okay=False))
@click.argument("line", type=int)
@click.argument("status")
@click.pass_obj
def set_cmd(app: AppContext, file: Path, line: int, status: str) -> None:
    """Set the task on LINE of FILE to STATUS (a status name or marker)."""
    app.emit(app.service.set_status(file, line, status))
