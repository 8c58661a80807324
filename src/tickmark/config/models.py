"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, tickmark.toml only contains
overrides. An empty file (or none at all) gives the stock five statuses,
a single legacy cycle, and emoji start/completion/cancellation dates.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from tickmark.domain.dates import DateSettings
from tickmark.domain.statuses import StatusModel


class CycleConfig(BaseModel):
    """[cycle] section."""

    model_config = {"frozen": True}

    enabled: bool = True


class PluginsConfig(BaseModel):
    """[plugins] section."""

    model_config = {"frozen": True}

    enabled: bool = True


class PipelineConfig(BaseModel):
    """Everything the transaction filters read, as one frozen object."""

    model_config = {"frozen": True}

    statuses: StatusModel = Field(default_factory=StatusModel)
    dates: DateSettings = Field(default_factory=DateSettings)
    cycle: CycleConfig = Field(default_factory=CycleConfig)
