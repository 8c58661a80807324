"""Unified settings — CLI flags, env vars, and TOML config in one object.

Priority chain (highest to lowest):
  1. Init kwargs  — CLI flags passed by Click
  2. Env vars     — ``TICKMARK_*`` prefix, ``__`` for nested fields
  3. TOML file    — ``tickmark.toml`` discovered via walk-up
  4. Code defaults — baked into the section models
"""

from __future__ import annotations

import threading
import tomllib
from pathlib import Path
from typing import Any

import click
from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from tickmark.config.discovery import find_config
from tickmark.config.models import CycleConfig, PipelineConfig, PluginsConfig
from tickmark.domain.dates import DateSettings
from tickmark.domain.statuses import StatusModel


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Read settings from a ``tickmark.toml`` file."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        if toml_path and toml_path.is_file():
            try:
                self._data = tomllib.loads(toml_path.read_text(encoding="utf-8"))
            except tomllib.TOMLDecodeError as exc:
                msg = f"Invalid TOML in {toml_path}: {exc}"
                raise click.ClickException(msg) from exc

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        return self._data.get(field_name), field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        return self._data


# TOML path for the settings object under construction.
_tls = threading.local()


class TickmarkSettings(BaseSettings):
    """Unified settings for the tickmark CLI.

    Stored on the click context at the CLI root. ``config_path`` is the
    TOML file actually read, or None when running on defaults.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "TICKMARK_",
        "env_nested_delimiter": "__",
    }

    config_path: Path | None = None

    # --- CLI flags ---
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False

    # --- TOML sections ---
    statuses: StatusModel = Field(default_factory=StatusModel)
    dates: DateSettings = Field(default_factory=DateSettings)
    cycle: CycleConfig = Field(default_factory=CycleConfig)
    plugins: PluginsConfig = Field(default_factory=PluginsConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert the TOML source between env vars and defaults."""
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, getattr(_tls, "toml_path", None)),
        )

    @property
    def pipeline(self) -> PipelineConfig:
        return PipelineConfig(statuses=self.statuses, dates=self.dates, cycle=self.cycle)

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        start: Path | None = None,
        **cli_flags: Any,
    ) -> TickmarkSettings:
        """Construct settings from a CLI invocation.

        Uses *config_path* when given (a missing file means defaults),
        otherwise discovers ``tickmark.toml`` by walking up from *start*.
        """
        toml_path: Path | None
        if config_path:
            p = Path(config_path)
            toml_path = p if p.is_file() else None
        else:
            toml_path = find_config(start)

        _tls.toml_path = toml_path
        try:
            return cls(config_path=toml_path, **cli_flags)
        finally:
            _tls.toml_path = None
