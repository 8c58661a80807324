"""AppContext — shared Click context for all commands.

Created once by the root CLI group and passed to subcommands via
``@click.pass_obj``. Builds the task service lazily and owns result
emission (stdout/stderr routing and exit codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from tickmark.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from tickmark.config.settings import TickmarkSettings
    from tickmark.services.result import ServiceResult
    from tickmark.services.tasks import TaskService


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    The service (and with it plugin discovery) is created on first use so
    ``--help`` and ``--examples`` never load plugins.
    """

    def __init__(self, settings: TickmarkSettings) -> None:
        self.settings = settings
        self._service: TaskService | None = None

        from tickmark.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

    @property
    def service(self) -> TaskService:
        if self._service is None:
            from tickmark.plugins.manager import PluginManager
            from tickmark.services.tasks import TaskService

            plugins = None
            if self.settings.plugins.enabled:
                plugins = PluginManager()
                plugins.discover_and_load()
            self._service = TaskService(self.settings, plugins=plugins)
        return self._service

    def emit(self, result: ServiceResult) -> None:
        """Output *result*; failures go to stderr and exit with code 1.

        Warnings go to stderr so they never pollute piped output (in JSON
        mode they are already part of the payload).
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            if not settings.json_output and not settings.quiet:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
