"""Root CLI group for tickmark with global flags and command registration."""

from __future__ import annotations

import click

from tickmark import __version__
from tickmark.commands import register_commands
from tickmark.commands._base import TickmarkGroup
from tickmark.commands._context import AppContext
from tickmark.config.settings import TickmarkSettings


@click.group(
    cls=TickmarkGroup,
    invoke_without_command=True,
    examples="""\
  tickmark cycle todo.md 3
  tickmark set todo.md 3 "Abandoned"
  tickmark --json statuses""",
)
@click.version_option(version=__version__, prog_name="tickmark")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-q", "--quiet", is_flag=True, help="Minimal output.")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging of pipeline decisions.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
) -> None:
    """tickmark — cycle Markdown task statuses and keep their dates in step."""
    settings = TickmarkSettings.from_cli(
        config_path=config_path,
        json_output=json_output,
        quiet=quiet,
        verbose=verbose,
        log_json=log_json,
    )
    ctx.obj = AppContext(settings)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
