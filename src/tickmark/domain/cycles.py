"""Cycle resolver — what status a marker advances to.

Pure functions over a :class:`StatusModel`. Deterministic and idempotent:
identical inputs always give identical results. Consumed by the status
mutation committer and by any UI that offers click-to-advance or a status
menu.
"""

from __future__ import annotations

from dataclasses import dataclass

from tickmark.domain.statuses import StatusCycle, StatusModel

_FALLBACK_MARK = " "


@dataclass(frozen=True)
class NextStatus:
    """Result of resolving a marker against the status model."""

    status_name: str
    mark: str
    cycle: StatusCycle | None = None  # None for the legacy single cycle


def find_applicable_cycles(mark: str, model: StatusModel) -> list[StatusCycle]:
    """Enabled cycles containing *mark*, highest priority first."""
    return [cycle for cycle in model.enabled_cycles() if cycle.has_mark(mark)]


def find_primary_cycle(mark: str, model: StatusModel) -> StatusCycle | None:
    """The highest-priority enabled cycle containing *mark*, if any."""
    applicable = find_applicable_cycles(mark, model)
    return applicable[0] if applicable else None


def _step_in_cycle(mark: str, cycle: StatusCycle, step: int) -> NextStatus | None:
    order = cycle.cycle
    for index, name in enumerate(order):
        if cycle.marks.get(name) == mark:
            target = order[(index + step) % len(order)]
            return NextStatus(status_name=target, mark=cycle.marks[target], cycle=cycle)
    return None


def _step_legacy(mark: str, model: StatusModel, remaining: list[str], step: int) -> NextStatus:
    index = 0
    for i, name in enumerate(remaining):
        if model.marks.get(name) == mark:
            index = i
            break
    target = remaining[(index + step) % len(remaining)]
    return NextStatus(status_name=target, mark=model.marks.get(target, _FALLBACK_MARK))


def _resolve(mark: str, model: StatusModel, step: int) -> NextStatus | None:
    remaining = model.remaining_cycle()
    if not remaining:
        return None
    if model.cycles:
        primary = find_primary_cycle(mark, model)
        if primary is not None:
            result = _step_in_cycle(mark, primary, step)
            if result is not None:
                return result
        first = remaining[0]
        return NextStatus(status_name=first, mark=model.marks.get(first, _FALLBACK_MARK))
    return _step_legacy(mark, model, remaining, step)


def next_status(current_mark: str, model: StatusModel) -> NextStatus | None:
    """Status that *current_mark* advances to.

    With cycles configured, the first enabled cycle (by priority) that
    contains the marker decides; a marker found in no cycle falls back to
    the first status of the default cycle. Without cycles, the default
    cycle is used with wraparound, treating an unknown marker as index 0.

    Returns None only when cycling is disabled (the default cycle is empty
    after exclusions).
    """
    return _resolve(current_mark, model, 1)


def previous_status(current_mark: str, model: StatusModel) -> NextStatus | None:
    """Inverse of :func:`next_status` (same cycle selection rules)."""
    return _resolve(current_mark, model, -1)


def status_options(model: StatusModel) -> list[tuple[str, str]]:
    """``(mark, status_name)`` pairs for menus, de-duplicated by mark.

    Enabled cycles contribute in priority order; without cycles the legacy
    marks are used in status order.
    """
    options: list[tuple[str, str]] = []
    seen: set[str] = set()
    enabled = model.enabled_cycles()
    if enabled:
        sources = [(cycle.cycle, cycle.marks) for cycle in enabled]
    else:
        sources = [(model.statuses, model.marks)]
    for names, marks in sources:
        for name in names:
            mark = marks.get(name)
            if mark is None or mark in seen:
                continue
            seen.add(mark)
            options.append((mark, name))
    return options
