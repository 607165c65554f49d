"""Plan availability changes for a calendar cell selection.

The planner is pure: it reads a snapshot of one user's intervals for one day
and returns the row-level deletes and inserts that realise the toggle. Every
hour is judged against that snapshot, so the same snapshot and selection
always yield the same plan.
"""
from __future__ import annotations

import enum
import uuid
from dataclasses import dataclass
from typing import Iterable, Protocol, Sequence

MINUTES_PER_HOUR = 60
HOURS_PER_DAY = 24
DAYS_PER_WEEK = 7
MINUTES_PER_DAY = MINUTES_PER_HOUR * HOURS_PER_DAY


class IntervalLike(Protocol):
    id: uuid.UUID
    day_of_week: int
    start_minute: int
    end_minute: int


class ToggleAction(str, enum.Enum):
    add = "add"
    remove = "remove"


@dataclass(frozen=True)
class Cell:
    day: int
    hour: int


@dataclass(frozen=True)
class Selection:
    day: int
    hours: tuple[int, ...]

    @property
    def start_minute(self) -> int:
        return self.hours[0] * MINUTES_PER_HOUR

    @property
    def end_minute(self) -> int:
        return (self.hours[-1] + 1) * MINUTES_PER_HOUR


@dataclass(frozen=True)
class PlannedInsert:
    day_of_week: int
    start_minute: int
    end_minute: int


@dataclass(frozen=True)
class PlanStep:
    """One unit of application: an optional delete plus the rows replacing it."""

    delete_id: uuid.UUID | None
    inserts: tuple[PlannedInsert, ...] = ()


@dataclass(frozen=True)
class TogglePlan:
    action: ToggleAction
    selection: Selection
    steps: tuple[PlanStep, ...]


def _check_cell(cell: Cell) -> None:
    if not 0 <= cell.day < DAYS_PER_WEEK:
        raise ValueError(f"day must be between 0 and {DAYS_PER_WEEK - 1}")
    if not 0 <= cell.hour < HOURS_PER_DAY:
        raise ValueError(f"hour must be between 0 and {HOURS_PER_DAY - 1}")


def resolve_selection(start: Cell, end: Cell | None = None) -> Selection:
    """Turn a drag from ``start`` to ``end`` into an hour run on one day.

    A drag that crosses into another column collapses to the start cell.
    """
    _check_cell(start)
    if end is None:
        return Selection(day=start.day, hours=(start.hour,))
    _check_cell(end)

    if end.day != start.day:
        return Selection(day=start.day, hours=(start.hour,))

    low, high = sorted((start.hour, end.hour))
    return Selection(day=start.day, hours=tuple(range(low, high + 1)))


def _hour_bounds(hour: int) -> tuple[int, int]:
    start = hour * MINUTES_PER_HOUR
    return start, start + MINUTES_PER_HOUR


def _sorted_for_day(intervals: Iterable[IntervalLike], day: int) -> list[IntervalLike]:
    rows = [i for i in intervals if i.day_of_week == day]
    rows.sort(key=lambda i: (i.start_minute, i.end_minute, str(i.id)))
    return rows


def covering_interval(intervals: Iterable[IntervalLike], day: int, hour: int) -> IntervalLike | None:
    """Return the interval whose range contains the whole hour, if any."""
    hour_start, hour_end = _hour_bounds(hour)
    for interval in _sorted_for_day(intervals, day):
        if interval.start_minute <= hour_start and hour_end <= interval.end_minute:
            return interval
    return None


def _uncovered_gaps(rows: Sequence[IntervalLike], start: int, end: int) -> list[tuple[int, int]]:
    # rows must be sorted by start_minute
    gaps: list[tuple[int, int]] = []
    cursor = start
    for row in rows:
        if row.end_minute <= cursor or row.start_minute >= end:
            continue
        if row.start_minute > cursor:
            gaps.append((cursor, row.start_minute))
        cursor = max(cursor, row.end_minute)
        if cursor >= end:
            break
    if cursor < end:
        gaps.append((cursor, end))
    return gaps


def _plan_add(rows: Sequence[IntervalLike], selection: Selection) -> list[PlanStep]:
    steps: list[PlanStep] = []
    for hour in selection.hours:
        if covering_interval(rows, selection.day, hour) is not None:
            continue
        hour_start, hour_end = _hour_bounds(hour)
        # Partially covered hours only get the missing minutes so rows never overlap.
        for gap_start, gap_end in _uncovered_gaps(rows, hour_start, hour_end):
            steps.append(
                PlanStep(
                    delete_id=None,
                    inserts=(PlannedInsert(selection.day, gap_start, gap_end),),
                )
            )
    return steps


def _plan_remove(rows: Sequence[IntervalLike], selection: Selection) -> list[PlanStep]:
    cut_start, cut_end = selection.start_minute, selection.end_minute
    steps: list[PlanStep] = []
    for row in rows:
        if row.end_minute <= cut_start or row.start_minute >= cut_end:
            continue
        remainders: list[PlannedInsert] = []
        if row.start_minute < cut_start:
            remainders.append(PlannedInsert(selection.day, row.start_minute, cut_start))
        if cut_end < row.end_minute:
            remainders.append(PlannedInsert(selection.day, cut_end, row.end_minute))
        steps.append(PlanStep(delete_id=row.id, inserts=tuple(remainders)))
    return steps


def decide_action(intervals: Iterable[IntervalLike], selection: Selection) -> ToggleAction:
    rows = _sorted_for_day(intervals, selection.day)
    if all(covering_interval(rows, selection.day, hour) is not None for hour in selection.hours):
        return ToggleAction.remove
    return ToggleAction.add


def plan_toggle(intervals: Iterable[IntervalLike], selection: Selection) -> TogglePlan:
    """Plan the toggle of ``selection`` against a snapshot of intervals.

    If every selected hour is already free the hours are removed, splitting
    any interval that extends past the selection. Otherwise each hour that is
    not free gets its own one-hour row; free hours are left alone.
    """
    if not selection.hours:
        raise ValueError("selection must contain at least one hour")

    rows = _sorted_for_day(intervals, selection.day)
    action = decide_action(rows, selection)
    if action is ToggleAction.remove:
        steps = _plan_remove(rows, selection)
    else:
        steps = _plan_add(rows, selection)
    return TogglePlan(action=action, selection=selection, steps=tuple(steps))


def format_minute(minute: int) -> str:
    hours, minutes = divmod(minute, MINUTES_PER_HOUR)
    return f"{hours:02d}:{minutes:02d}"


def parse_minute(value: str) -> int:
    """Parse ``"HH:MM"`` into minutes after midnight; ``"24:00"`` is allowed."""
    raw = value.strip()
    hours_text, sep, minutes_text = raw.partition(":")
    if not sep or not hours_text.isdigit() or not minutes_text.isdigit() or len(minutes_text) != 2:
        raise ValueError(f"invalid time {value!r}, expected HH:MM")
    hours, minutes = int(hours_text), int(minutes_text)
    if minutes >= MINUTES_PER_HOUR:
        raise ValueError(f"invalid time {value!r}, expected HH:MM")
    total = hours * MINUTES_PER_HOUR + minutes
    if total > MINUTES_PER_DAY:
        raise ValueError(f"invalid time {value!r}, must not be after 24:00")
    return total
