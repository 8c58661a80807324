"""Tests for the status model — marks, types, and validation."""

import pytest
from pydantic import ValidationError

from tickmark.domain.statuses import StatusCycle, StatusModel, StatusType


def _cycle(**kwargs) -> StatusCycle:
    defaults = {
        "id": "work",
        "cycle": ["Todo", "Doing", "Done"],
        "marks": {"Todo": " ", "Doing": ">", "Done": "x"},
    }
    defaults.update(kwargs)
    return StatusCycle(**defaults)


class TestStatusTypes:
    @pytest.mark.parametrize(
        ("mark", "expected"),
        [
            ("x", StatusType.COMPLETED),
            ("X", StatusType.COMPLETED),
            ("/", StatusType.IN_PROGRESS),
            (">", StatusType.IN_PROGRESS),
            ("-", StatusType.ABANDONED),
            ("?", StatusType.PLANNED),
            (" ", StatusType.NOT_STARTED),
            ("!", StatusType.UNKNOWN),
        ],
    )
    def test_default_types(self, mark: str, expected: StatusType) -> None:
        assert StatusModel().type_of(mark) == expected

    def test_custom_types(self) -> None:
        model = StatusModel(types={StatusType.COMPLETED: "v", StatusType.NOT_STARTED: " "})
        assert model.type_of("v") == StatusType.COMPLETED
        assert model.type_of("x") == StatusType.UNKNOWN

    def test_types_from_plain_strings(self) -> None:
        model = StatusModel.model_validate({"types": {"abandoned": "~|-"}})
        assert model.type_of("~") == StatusType.ABANDONED


class TestLookups:
    def test_legacy_mark_and_name(self) -> None:
        model = StatusModel()
        assert model.mark_for("Completed") == "x"
        assert model.status_for("/") == "In Progress"
        assert model.mark_for("Nope") is None
        assert model.status_for("!") is None

    def test_remaining_cycle_excludes(self) -> None:
        model = StatusModel(excluded_from_cycle=["Abandoned", "Planned"])
        assert model.remaining_cycle() == ["Not Started", "In Progress", "Completed"]

    def test_enabled_cycles_sorted_by_priority(self) -> None:
        low = _cycle(id="low", priority=5)
        high = _cycle(id="high", priority=1)
        off = _cycle(id="off", priority=0, enabled=False)
        model = StatusModel(cycles=[low, high, off])
        assert [c.id for c in model.enabled_cycles()] == ["high", "low"]
        assert model.is_multi_cycle

    def test_valid_marks_unions_enabled_cycles(self) -> None:
        model = StatusModel(cycles=[_cycle(), _cycle(id="off", enabled=False, marks={"Todo": "t", "Doing": "d", "Done": "D"})])
        marks = model.valid_marks()
        assert ">" in marks
        assert "x" in marks
        assert "t" not in marks

    def test_cycle_marks_win_over_legacy(self) -> None:
        model = StatusModel(cycles=[_cycle()])
        assert model.mark_for("Doing") == ">"
        assert model.status_for("x") == "Done"


class TestValidation:
    def test_multi_char_legacy_mark_rejected(self) -> None:
        with pytest.raises(ValidationError, match="exactly one character"):
            StatusModel(marks={"Not Started": "  "})

    def test_duplicate_legacy_marks_rejected(self) -> None:
        with pytest.raises(ValidationError, match="unique"):
            StatusModel(marks={"Not Started": " ", "In Progress": " ", "Completed": "x"})

    def test_duplicate_cycle_mark_rejected(self) -> None:
        with pytest.raises(ValidationError, match="used by both"):
            _cycle(marks={"Todo": " ", "Doing": "x", "Done": "x"})

    def test_cycle_missing_mark_rejected(self) -> None:
        with pytest.raises(ValidationError, match="no mark configured"):
            _cycle(marks={"Todo": " ", "Doing": ">"})

    def test_duplicate_cycle_ids_rejected(self) -> None:
        with pytest.raises(ValidationError, match="cycle ids"):
            StatusModel(cycles=[_cycle(), _cycle()])

    def test_frozen(self) -> None:
        model = StatusModel()
        with pytest.raises(ValidationError):
            model.statuses = []  # type: ignore[misc]
