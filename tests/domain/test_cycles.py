"""Tests for the cycle resolver."""

import pytest

from tickmark.domain.cycles import (
    find_applicable_cycles,
    find_primary_cycle,
    next_status,
    previous_status,
    status_options,
)
from tickmark.domain.statuses import StatusCycle, StatusModel

WORK = StatusCycle(
    id="work",
    priority=1,
    cycle=["Todo", "Doing", "Done"],
    marks={"Todo": " ", "Doing": ">", "Done": "x"},
)
REVIEW = StatusCycle(
    id="review",
    priority=2,
    cycle=["Draft", "Review", "Approved"],
    marks={"Draft": "d", "Review": "r", "Approved": "x"},
)


class TestLegacyCycle:
    def test_advances_in_order(self) -> None:
        model = StatusModel()
        assert next_status(" ", model).mark == "/"
        assert next_status("/", model).mark == "x"
        assert next_status("x", model).mark == "-"

    def test_wraps_around(self) -> None:
        nxt = next_status("?", StatusModel())
        assert nxt.mark == " "
        assert nxt.status_name == "Not Started"
        assert nxt.cycle is None

    def test_unknown_marker_treated_as_first(self) -> None:
        assert next_status("!", StatusModel()).mark == "/"

    def test_excluded_statuses_skipped(self) -> None:
        model = StatusModel(excluded_from_cycle=["Abandoned", "Planned"])
        assert next_status("x", model).mark == " "

    def test_disabled_cycling_returns_none(self) -> None:
        model = StatusModel(excluded_from_cycle=list(StatusModel().statuses))
        assert next_status(" ", model) is None

    @pytest.mark.parametrize(
        "excluded",
        [[], ["Planned"], ["Abandoned", "Planned"], ["In Progress", "Abandoned", "Planned"]],
    )
    def test_cycle_closure(self, excluded: list[str]) -> None:
        model = StatusModel(excluded_from_cycle=excluded)
        for name in model.remaining_cycle():
            start = model.marks[name]
            mark = start
            for _ in model.remaining_cycle():
                mark = next_status(mark, model).mark
            assert mark == start

    def test_deterministic(self) -> None:
        model = StatusModel()
        assert next_status("/", model) == next_status("/", model)

    def test_previous_is_inverse(self) -> None:
        model = StatusModel()
        for mark in model.marks.values():
            assert previous_status(next_status(mark, model).mark, model).mark == mark


class TestMultiCycle:
    def test_primary_cycle_decides(self) -> None:
        model = StatusModel(cycles=[REVIEW, WORK])
        nxt = next_status("x", model)
        assert nxt.cycle.id == "work"
        assert nxt.mark == " "

    def test_lower_priority_cycle_does_not_matter(self) -> None:
        altered = REVIEW.model_copy(update={"cycle": ["Approved", "Draft", "Review"]})
        a = StatusModel(cycles=[WORK, REVIEW])
        b = StatusModel(cycles=[WORK, altered])
        for mark in (" ", ">", "x"):
            assert next_status(mark, a) == next_status(mark, b)

    def test_disabled_cycle_ignored(self) -> None:
        off = WORK.model_copy(update={"enabled": False})
        model = StatusModel(cycles=[off, REVIEW])
        assert next_status("x", model).mark == "d"

    def test_marker_in_no_cycle_falls_back(self) -> None:
        model = StatusModel(cycles=[WORK])
        nxt = next_status("?", model)
        assert nxt.status_name == "Not Started"
        assert nxt.mark == " "

    def test_applicable_cycles_ordered(self) -> None:
        model = StatusModel(cycles=[REVIEW, WORK])
        assert [c.id for c in find_applicable_cycles("x", model)] == ["work", "review"]
        assert find_primary_cycle("r", model).id == "review"
        assert find_primary_cycle("!", model) is None


class TestStatusOptions:
    def test_legacy_options(self) -> None:
        assert status_options(StatusModel()) == [
            (" ", "Not Started"),
            ("/", "In Progress"),
            ("x", "Completed"),
            ("-", "Abandoned"),
            ("?", "Planned"),
        ]

    def test_cycles_deduplicated_by_mark(self) -> None:
        options = status_options(StatusModel(cycles=[WORK, REVIEW]))
        assert options == [(" ", "Todo"), (">", "Doing"), ("x", "Done"), ("d", "Draft"), ("r", "Review")]
