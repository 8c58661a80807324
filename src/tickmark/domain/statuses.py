"""Status model — status names, marker characters, types, and cycles.

Read-only configuration shared by every interceptor. A marker is the
single character inside a task's ``[ ]``. Status *types* are the coarse
categories lifecycle dates key off; several markers may share one type.

INVARIANT: Within any single cycle, every marker is unique. Different
cycles may reuse a marker; the highest-priority enabled cycle containing
it wins at resolution time.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, Field, model_validator


class StatusType(StrEnum):
    """Coarse classification of a marker."""

    COMPLETED = "completed"
    IN_PROGRESS = "in_progress"
    ABANDONED = "abandoned"
    PLANNED = "planned"
    NOT_STARTED = "not_started"
    UNKNOWN = "unknown"


# Lookup order when a marker is listed under more than one type.
STATUS_TYPE_ORDER: tuple[StatusType, ...] = (
    StatusType.COMPLETED,
    StatusType.IN_PROGRESS,
    StatusType.ABANDONED,
    StatusType.PLANNED,
    StatusType.NOT_STARTED,
)

DEFAULT_STATUSES: list[str] = [
    "Not Started",
    "In Progress",
    "Completed",
    "Abandoned",
    "Planned",
]

DEFAULT_MARKS: dict[str, str] = {
    "Not Started": " ",
    "In Progress": "/",
    "Completed": "x",
    "Abandoned": "-",
    "Planned": "?",
}

DEFAULT_TYPE_MARKS: dict[StatusType, str] = {
    StatusType.COMPLETED: "x|X",
    StatusType.IN_PROGRESS: ">|/",
    StatusType.ABANDONED: "-",
    StatusType.PLANNED: "?",
    StatusType.NOT_STARTED: " ",
}


def _check_single_chars(marks: dict[str, str], where: str) -> None:
    for name, mark in marks.items():
        if len(mark) != 1:
            msg = f"{where}: mark for {name!r} must be exactly one character, got {mark!r}"
            raise ValueError(msg)


class StatusCycle(BaseModel):
    """One independent cycling scheme."""

    model_config = {"frozen": True}

    id: str
    name: str = ""
    description: str = ""
    priority: int = 0  # lower = higher precedence
    enabled: bool = True
    cycle: list[str] = Field(default_factory=list)
    marks: dict[str, str] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _validate_marks(self) -> StatusCycle:
        where = f"cycle {self.id!r}"
        _check_single_chars(self.marks, where)
        seen: dict[str, str] = {}
        for name, mark in self.marks.items():
            if mark in seen:
                msg = f"{where}: mark {mark!r} used by both {seen[mark]!r} and {name!r}"
                raise ValueError(msg)
            seen[mark] = name
        missing = [name for name in self.cycle if name not in self.marks]
        if missing:
            msg = f"{where}: no mark configured for {', '.join(missing)}"
            raise ValueError(msg)
        return self

    def has_mark(self, mark: str) -> bool:
        return mark in self.marks.values()


class StatusModel(BaseModel):
    """Complete status configuration.

    When ``cycles`` is empty the legacy single cycle (``statuses`` minus
    ``excluded_from_cycle``) drives cycling.
    """

    model_config = {"frozen": True}

    statuses: list[str] = Field(default_factory=lambda: list(DEFAULT_STATUSES))
    marks: dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_MARKS))
    excluded_from_cycle: list[str] = Field(default_factory=list)
    cycles: list[StatusCycle] = Field(default_factory=list)
    types: dict[StatusType, str] = Field(default_factory=lambda: dict(DEFAULT_TYPE_MARKS))

    @model_validator(mode="after")
    def _validate_marks(self) -> StatusModel:
        _check_single_chars(self.marks, "statuses")
        legacy = [self.marks[name] for name in self.statuses if name in self.marks]
        if len(legacy) != len(set(legacy)):
            msg = "statuses: marks in the default cycle must be unique"
            raise ValueError(msg)
        ids = [cycle.id for cycle in self.cycles]
        if len(ids) != len(set(ids)):
            msg = "statuses: cycle ids must be unique"
            raise ValueError(msg)
        return self

    @property
    def is_multi_cycle(self) -> bool:
        return bool(self.cycles)

    def remaining_cycle(self) -> list[str]:
        """Legacy cycle order with excluded statuses removed."""
        excluded = set(self.excluded_from_cycle)
        return [name for name in self.statuses if name not in excluded]

    def enabled_cycles(self) -> list[StatusCycle]:
        """Enabled cycles in ascending priority (stable for ties)."""
        return sorted((c for c in self.cycles if c.enabled), key=lambda c: c.priority)

    def valid_marks(self) -> frozenset[str]:
        """Every marker the detector treats as a status marker."""
        marks = set(self.marks.values())
        for cycle in self.enabled_cycles():
            marks.update(cycle.marks.values())
        return frozenset(marks)

    def mark_for(self, status_name: str) -> str | None:
        """Marker for *status_name*, preferring enabled cycles by priority."""
        for cycle in self.enabled_cycles():
            if status_name in cycle.marks:
                return cycle.marks[status_name]
        return self.marks.get(status_name)

    def status_for(self, mark: str) -> str | None:
        """Status name for *mark*, preferring enabled cycles by priority."""
        for cycle in self.enabled_cycles():
            for name, cycle_mark in cycle.marks.items():
                if cycle_mark == mark:
                    return name
        for name, legacy_mark in self.marks.items():
            if legacy_mark == mark:
                return name
        return None

    def type_of(self, mark: str) -> StatusType:
        """Classify *mark* into its status type."""
        for status_type in STATUS_TYPE_ORDER:
            if mark in self.types.get(status_type, "").split("|"):
                return status_type
        return StatusType.UNKNOWN
