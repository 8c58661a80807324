"""Command: click a task's checkbox."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from tickmark.commands._base import TickmarkCommand

if TYPE_CHECKING:
    from tickmark.commands._context import AppContext


@click.command(
    cls=TickmarkCommand,
    examples="""\
  tickmark cycle todo.md 3
  tickmark --json cycle notes/project.md 12
  tickmark -q cycle todo.md 3""",
)
@click.argument("file", type=click.Path(path_type=Path, dir_okay=False))
@click.argument("line", type=int)
@click.pass_obj
def cycle(app: AppContext, file: Path, line: int) -> None:
    """Advance the task on LINE of FILE to its next status.

    Behaves like clicking the checkbox in an editor: the marker moves one
    step through the configured cycle and lifecycle dates follow.
    """
    app.emit(app.service.cycle(file, line))
