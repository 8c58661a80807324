"""Shared pytest fixtures and test helpers for tickmark tests."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import datetime
from pathlib import Path

import pytest
from click.testing import CliRunner

from tickmark.config.models import CycleConfig, PipelineConfig
from tickmark.domain.dates import DateSettings, MetadataFormat
from tickmark.domain.statuses import StatusModel
from tickmark.editor.changes import ChangeSpec
from tickmark.editor.commands import toggle_checkbox
from tickmark.editor.state import EditorState, Transaction, TransactionFilter, TransactionSpec
from tickmark.pipeline.chain import build_transaction_filters

FIXED_NOW = datetime(2024, 1, 1, 9, 30, 15)


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's own TICKMARK_* environment out of every test."""
    import os

    for name in list(os.environ):
        if name.startswith("TICKMARK_"):
            monkeypatch.delenv(name)


@pytest.fixture
def cli_runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def clock() -> Callable[[], datetime]:
    """A clock frozen at 2024-01-01 09:30:15."""
    return lambda: FIXED_NOW


@pytest.fixture
def model() -> StatusModel:
    return StatusModel()


@pytest.fixture
def three_step_model() -> StatusModel:
    """Not Started -> In Progress -> Completed."""
    return StatusModel(statuses=["Not Started", "In Progress", "Completed"])


@pytest.fixture
def date_settings() -> DateSettings:
    return DateSettings()


@pytest.fixture
def bracketed_settings() -> DateSettings:
    return DateSettings(metadata_format=MetadataFormat.BRACKETED)


@pytest.fixture
def filters(
    three_step_model: StatusModel,
    date_settings: DateSettings,
    clock: Callable[[], datetime],
) -> list[TransactionFilter]:
    config = PipelineConfig(statuses=three_step_model, dates=date_settings, cycle=CycleConfig())
    return build_transaction_filters(config, clock=clock)


@pytest.fixture
def _in_tmp(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Run with CWD in an empty temp dir so no tickmark.toml is discovered."""
    monkeypatch.chdir(tmp_path)


# ---------------------------------------------------------------------------
# Shared test helpers
# ---------------------------------------------------------------------------


def edit(
    content: str,
    changes: Sequence[tuple[int, int, str]],
    *,
    user_event: str | None = "input.type",
    annotations: Sequence = (),
) -> Transaction:
    """Build (without filtering) a transaction of *changes* against *content*."""
    state = EditorState.create(content)
    return state.build(
        TransactionSpec(
            changes=[ChangeSpec(*c) for c in changes],
            annotations=annotations,
            user_event=user_event,
        )
    )


def run(
    content: str,
    changes: Sequence[tuple[int, int, str]],
    filters: Sequence[TransactionFilter],
    *,
    user_event: str | None = "input.type",
) -> str:
    """Dispatch *changes* through *filters*; return the resulting document."""
    state = EditorState.create(content)
    spec = TransactionSpec(changes=[ChangeSpec(*c) for c in changes], user_event=user_event)
    return str(state.update(spec, filters).new_doc)


def click(content: str, line: int, filters: Sequence[TransactionFilter]) -> str:
    """Click the checkbox on *line*; return the resulting document."""
    state = EditorState.create(content)
    spec = toggle_checkbox(state, line)
    assert spec is not None
    return str(state.update(spec, filters).new_doc)
