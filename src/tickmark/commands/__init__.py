"""Subcommand modules for tickmark.

register_commands() uses deferred imports to keep ``tickmark --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register the standalone commands on the root CLI group."""
    from tickmark.commands.cycle import cycle
    from tickmark.commands.next_cmd import next_cmd
    from tickmark.commands.set_cmd import set_cmd
    from tickmark.commands.statuses import statuses

    cli.add_command(cycle)
    cli.add_command(set_cmd)
    cli.add_command(next_cmd)
    cli.add_command(statuses)
