"""Tests for TaskService — status changes applied to Markdown files."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from pathlib import Path

import pytest

from tickmark.config.models import CycleConfig
from tickmark.config.settings import TickmarkSettings
from tickmark.domain.dates import DateSettings
from tickmark.domain.statuses import DEFAULT_STATUSES, StatusCycle, StatusModel
from tickmark.editor.state import Transaction
from tickmark.plugins import PluginManager, hookimpl
from tickmark.services.tasks import TaskService


@pytest.fixture
def settings(tmp_path: Path) -> TickmarkSettings:
    return TickmarkSettings.from_cli(start=tmp_path)


@pytest.fixture
def service(settings: TickmarkSettings, clock: Callable[[], datetime]) -> TaskService:
    return TaskService(settings, clock=clock)


def _write(tmp_path: Path, content: str) -> Path:
    path = tmp_path / "tasks.md"
    path.write_text(content, encoding="utf-8")
    return path


class TestCycle:
    def test_click_advances_and_stamps(self, service: TaskService, tmp_path: Path) -> None:
        path = _write(tmp_path, "# Today\n- [ ] Buy milk\n")
        result = service.cycle(path, 2)
        assert result.ok
        assert result.op == "cycle"
        assert result.data["before"] == "- [ ] Buy milk"
        assert result.data["after"] == "- [/] Buy milk 🛫 2024-01-01"
        assert result.data["old_mark"] == " "
        assert result.data["new_mark"] == "/"
        assert result.data["status"] == "In Progress"
        assert result.data["type"] == "in_progress"
        assert path.read_text(encoding="utf-8") == "# Today\n- [/] Buy milk 🛫 2024-01-01\n"

    def test_repeated_clicks(self, service: TaskService, tmp_path: Path) -> None:
        path = _write(tmp_path, "- [ ] Task ^ref1")
        service.cycle(path, 1)
        result = service.cycle(path, 1)
        assert result.data["after"] == "- [x] Task ✅ 2024-01-01 ^ref1"

    def test_pool_released(self, service: TaskService, tmp_path: Path) -> None:
        path = _write(tmp_path, "- [ ] a")
        service.cycle(path, 1)
        assert len(service.pool) == 0

    def test_cycling_disabled_uses_native_toggle(self, tmp_path: Path, clock) -> None:
        settings = TickmarkSettings.from_cli(start=tmp_path, cycle=CycleConfig(enabled=False))
        path = _write(tmp_path, "- [ ] a")
        result = TaskService(settings, clock=clock).cycle(path, 1)
        assert result.data["after"] == "- [x] a ✅ 2024-01-01"

    def test_dates_disabled(self, tmp_path: Path, clock) -> None:
        settings = TickmarkSettings.from_cli(start=tmp_path, dates=DateSettings(enabled=False))
        path = _write(tmp_path, "- [ ] a")
        result = TaskService(settings, clock=clock).cycle(path, 1)
        assert result.data["after"] == "- [/] a"

    def test_plugin_filter_runs(self, settings: TickmarkSettings, tmp_path: Path, clock) -> None:
        seen: list[str] = []

        def record(tr: Transaction) -> Transaction:
            seen.append(str(tr.new_doc))
            return tr

        class _Recorder:
            @hookimpl
            def register_transaction_filters(self, config):
                return [record]

        plugins = PluginManager()
        plugins.register_plugin(_Recorder())
        path = _write(tmp_path, "- [ ] a")
        TaskService(settings, plugins=plugins, clock=clock).cycle(path, 1)
        assert seen == ["- [/] a 🛫 2024-01-01"]


class TestSetStatus:
    @pytest.mark.parametrize(
        ("status", "expected"),
        [
            ("Completed", "- [x] Buy milk ✅ 2024-01-01"),
            ("in progress", "- [/] Buy milk 🛫 2024-01-01"),
            ("-", "- [-] Buy milk ❌ 2024-01-01"),
            ("Planned", "- [?] Buy milk"),
        ],
    )
    def test_set(self, service: TaskService, tmp_path: Path, status: str, expected: str) -> None:
        path = _write(tmp_path, "- [ ] Buy milk")
        result = service.set_status(path, 1, status)
        assert result.ok
        assert result.op == "set_status"
        assert result.data["after"] == expected
        assert path.read_text(encoding="utf-8") == expected

    def test_replaces_start_date(self, service: TaskService, tmp_path: Path) -> None:
        path = _write(tmp_path, "- [/] Write report 🛫 2023-12-20")
        result = service.set_status(path, 1, "Completed")
        assert result.data["after"] == "- [x] Write report ✅ 2024-01-01"

    def test_unknown_status(self, service: TaskService, tmp_path: Path) -> None:
        path = _write(tmp_path, "- [ ] a")
        result = service.set_status(path, 1, "Someday")
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "UNKNOWN_STATUS"
        assert result.error.detail["known"] == DEFAULT_STATUSES
        assert path.read_text(encoding="utf-8") == "- [ ] a"

    def test_same_status_is_unchanged(self, service: TaskService, tmp_path: Path) -> None:
        path = _write(tmp_path, "- [ ] a")
        result = service.set_status(path, 1, "Not Started")
        assert result.ok
        assert result.warnings == ["Document unchanged"]


class TestMutationErrors:
    def test_missing_file(self, service: TaskService, tmp_path: Path) -> None:
        result = service.cycle(tmp_path / "missing.md", 1)
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "NOT_FOUND"

    @pytest.mark.parametrize("line", [0, 3])
    def test_out_of_range(self, service: TaskService, tmp_path: Path, line: int) -> None:
        path = _write(tmp_path, "- [ ] a\n- [ ] b")
        result = service.cycle(path, line)
        assert result.error is not None
        assert result.error.code == "OUT_OF_RANGE"
        assert result.error.detail == {"line": line, "lines": 2}
        assert len(service.pool) == 0

    def test_not_a_task(self, service: TaskService, tmp_path: Path) -> None:
        path = _write(tmp_path, "# Heading\n")
        result = service.set_status(path, 1, "Completed")
        assert result.error is not None
        assert result.error.code == "NOT_A_TASK"
        assert path.read_text(encoding="utf-8") == "# Heading\n"


class TestNextStatus:
    def test_legacy_cycle(self, service: TaskService) -> None:
        result = service.next_status(" ")
        assert result.ok
        assert result.data == {
            "mark": " ",
            "next_mark": "/",
            "status": "In Progress",
            "type": "in_progress",
            "cycle": None,
        }

    def test_wraps(self, service: TaskService) -> None:
        assert service.next_status("?").data["next_mark"] == " "

    def test_multi_cycle(self, tmp_path: Path) -> None:
        model = StatusModel(
            cycles=[
                StatusCycle(id="review", cycle=["Draft", "Reviewed"], marks={"Draft": "d", "Reviewed": "r"}),
            ]
        )
        service = TaskService(TickmarkSettings.from_cli(start=tmp_path, statuses=model))
        result = service.next_status("d")
        assert result.data["next_mark"] == "r"
        assert result.data["cycle"] == "review"

    def test_invalid_mark(self, service: TaskService) -> None:
        result = service.next_status("xx")
        assert result.error is not None
        assert result.error.code == "INVALID_MARK"

    def test_everything_excluded(self, tmp_path: Path) -> None:
        model = StatusModel(excluded_from_cycle=list(DEFAULT_STATUSES))
        service = TaskService(TickmarkSettings.from_cli(start=tmp_path, statuses=model))
        result = service.next_status(" ")
        assert result.ok
        assert result.data["next_mark"] is None
        assert result.warnings


class TestListStatuses:
    def test_defaults(self, service: TaskService) -> None:
        result = service.list_statuses()
        assert result.op == "list_statuses"
        statuses = result.data["statuses"]
        assert [s["name"] for s in statuses] == DEFAULT_STATUSES
        assert statuses[2] == {"name": "Completed", "mark": "x", "type": "completed", "in_cycle": True}
        assert result.data["cycles"] == []
        assert result.data["options"][0] == {"mark": " ", "status": "Not Started"}

    def test_exclusions_and_cycles(self, tmp_path: Path) -> None:
        model = StatusModel(
            excluded_from_cycle=["Planned"],
            cycles=[
                StatusCycle(
                    id="review",
                    name="Review",
                    priority=1,
                    cycle=["Draft", "Reviewed"],
                    marks={"Draft": "d", "Reviewed": "r"},
                ),
            ],
        )
        service = TaskService(TickmarkSettings.from_cli(start=tmp_path, statuses=model))
        result = service.list_statuses()
        planned = next(s for s in result.data["statuses"] if s["name"] == "Planned")
        assert planned["in_cycle"] is False
        assert result.data["cycles"] == [
            {"id": "review", "name": "Review", "priority": 1, "enabled": True, "cycle": ["d:Draft", "r:Reviewed"]}
        ]
        assert result.data["options"] == [{"mark": "d", "status": "Draft"}, {"mark": "r", "status": "Reviewed"}]


class TestFileHandling:
    def test_crlf_line_endings_preserved(self, service: TaskService, tmp_path: Path) -> None:
        path = tmp_path / "tasks.md"
        path.write_bytes(b"# Title\r\n- [ ] Buy milk\r\nnotes\r\n")
        result = service.cycle(path, 2)
        assert result.ok
        assert path.read_bytes() == "# Title\r\n- [/] Buy milk 🛫 2024-01-01\r\nnotes\r\n".encode()

    def test_invalid_utf8_is_a_read_error(self, service: TaskService, tmp_path: Path) -> None:
        path = tmp_path / "tasks.md"
        path.write_bytes(b"- [ ] caf\xe9\n")
        result = service.cycle(path, 1)
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "READ_ERROR"
        assert path.read_bytes() == b"- [ ] caf\xe9\n"

    def test_unreadable_file(self, service: TaskService, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = _write(tmp_path, "- [ ] a")

        def deny(_path: Path) -> None:
            raise PermissionError("permission denied")

        monkeypatch.setattr("tickmark.services.tasks.read_document", deny)
        result = service.set_status(path, 1, "Completed")
        assert result.error is not None
        assert result.error.code == "READ_ERROR"
        assert "permission denied" in result.error.message

    def test_unwritable_file(self, service: TaskService, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = _write(tmp_path, "- [ ] a")

        def deny(_path: Path, _document: object) -> None:
            raise PermissionError("read-only file system")

        monkeypatch.setattr("tickmark.services.tasks.write_document", deny)
        result = service.cycle(path, 1)
        assert result.error is not None
        assert result.error.code == "WRITE_ERROR"
        assert path.read_text(encoding="utf-8") == "- [ ] a"
        assert len(service.pool) == 0
