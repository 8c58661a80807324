"""Tests for structlog configuration."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Generator
from datetime import datetime
from pathlib import Path

import pytest
import structlog

from tickmark.config.logging import configure_logging
from tickmark.config.settings import TickmarkSettings
from tickmark.services.tasks import TaskService


@pytest.fixture(autouse=True)
def _restore_logging() -> Generator[None]:
    """Restore root logger state after each test."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    tickmark = logging.getLogger("tickmark")
    tickmark_level = tickmark.level
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
    tickmark.setLevel(tickmark_level)


class TestConfigureLogging:
    def test_verbose_enables_debug(self) -> None:
        configure_logging(verbose=True, log_json=False)
        assert logging.getLogger("tickmark").level == logging.DEBUG
        assert logging.getLogger().level == logging.WARNING

    def test_non_verbose_sets_warning(self) -> None:
        configure_logging(verbose=False, log_json=False)
        assert logging.getLogger("tickmark").level == logging.WARNING

    def test_json_mode_output(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging(verbose=True, log_json=True)
        log = structlog.get_logger("tickmark.test")
        log.warning("json test", answer=42)
        parsed = json.loads(capfd.readouterr().err.strip())
        assert parsed["event"] == "json test"
        assert parsed["answer"] == 42
        assert parsed["level"] == "warning"
        assert parsed["logger"] == "tickmark.test"
        assert "timestamp" in parsed

    def test_pipeline_debug_records_are_structured(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging(verbose=True, log_json=True)

        logging.getLogger("tickmark.pipeline.detector").debug("Transaction rejected: %s", "move")

        parsed = json.loads(capfd.readouterr().err.strip())
        assert parsed["event"] == "Transaction rejected: move"
        assert parsed["level"] == "debug"
        assert parsed["logger"] == "tickmark.pipeline.detector"

    def test_debug_hidden_without_verbose(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging(verbose=False, log_json=True)
        logging.getLogger("tickmark.pipeline.committer").debug("noise")
        assert capfd.readouterr().err == ""

    def test_third_party_debug_is_suppressed(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging(verbose=True, log_json=True)
        logging.getLogger("pluggy").debug("hook noise")
        assert capfd.readouterr().err == ""

    def test_file_write_and_dates_logged(
        self,
        capfd: pytest.CaptureFixture[str],
        tmp_path: Path,
        clock: Callable[[], datetime],
    ) -> None:
        path = tmp_path / "tasks.md"
        path.write_text("- [ ] a\n", encoding="utf-8")
        configure_logging(verbose=True, log_json=True)
        TaskService(TickmarkSettings.from_cli(start=tmp_path), clock=clock).cycle(path, 1)

        records = [json.loads(line) for line in capfd.readouterr().err.splitlines() if line.strip()]
        by_logger = {r["logger"]: r["event"] for r in records}
        assert by_logger["tickmark.services.tasks"].startswith(f"Wrote {path} line 1")
        assert "Lifecycle dates on line 1" in by_logger["tickmark.pipeline.date_manager"]

    def test_idempotent_calls(self) -> None:
        """Multiple configure_logging calls don't stack handlers."""
        configure_logging(verbose=True, log_json=False)
        configure_logging(verbose=True, log_json=True)
        assert len(logging.getLogger().handlers) == 1
