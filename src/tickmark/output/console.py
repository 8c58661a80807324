"""Rich Console factory and theme for tickmark output.

Consoles render to a StringIO buffer so formatting stays a pure
``result -> str`` function. In non-TTY environments (tests, pipes) Rich
disables color codes on its own.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

from tickmark.domain.statuses import StatusType

TICKMARK_THEME = Theme(
    {
        "tm.ok": "bold green",
        "tm.error": "bold red",
        "tm.warning": "bold yellow",
        "tm.op": "bold cyan",
        "tm.key": "dim",
        "tm.mark": "bold",
        "tm.before": "dim",
        "tm.type.completed": "green",
        "tm.type.in_progress": "yellow",
        "tm.type.abandoned": "red",
        "tm.type.planned": "blue",
        "tm.type.not_started": "",
        "tm.type.unknown": "magenta",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer."""
    return Console(
        file=StringIO(),
        theme=TICKMARK_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_type(status_type: str | None) -> str:
    if status_type is None or status_type not in {t.value for t in StatusType}:
        return "tm.type.unknown"
    return f"tm.type.{status_type}"
