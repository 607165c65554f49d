from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field

import sqlalchemy as sa
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from hangtime.core.errors import Conflict, ValidationError, error_code
from hangtime.models.availability_interval import AvailabilityInterval
from hangtime.services.toggle_planner import (
    DAYS_PER_WEEK,
    HOURS_PER_DAY,
    MINUTES_PER_DAY,
    MINUTES_PER_HOUR,
    Cell,
    PlanStep,
    ToggleAction,
    TogglePlan,
    plan_toggle,
    resolve_selection,
)

logger = logging.getLogger(__name__)

# (day_of_week, start_minute, end_minute); Sunday first.
DEFAULT_WEEKLY_AVAILABILITY: tuple[tuple[int, int, int], ...] = (
    (0, 9 * 60, 22 * 60),
    (1, 17 * 60, 20 * 60),
    (2, 17 * 60, 20 * 60),
    (3, 17 * 60, 20 * 60),
    (4, 17 * 60, 20 * 60),
    (5, 17 * 60, 20 * 60),
    (6, 9 * 60, 22 * 60),
)


@dataclass(frozen=True)
class DayWindow:
    day_of_week: int
    start_minute: int
    end_minute: int
    enabled: bool = True


@dataclass
class StepFailure:
    step: PlanStep
    error: str


@dataclass
class ToggleResult:
    action: ToggleAction
    day: int
    hours: tuple[int, ...]
    applied: list[PlanStep] = field(default_factory=list)
    failed: list[StepFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


def _validate_window(day_of_week: int, start_minute: int, end_minute: int) -> None:
    if not 0 <= day_of_week < DAYS_PER_WEEK:
        raise ValidationError("invalid_day_of_week")
    if start_minute < 0 or end_minute > MINUTES_PER_DAY:
        raise ValidationError("time_out_of_range")
    if start_minute >= end_minute:
        raise ValidationError("start_not_before_end")


async def list_intervals(db: AsyncSession, user_id: uuid.UUID) -> list[AvailabilityInterval]:
    q = (
        select(AvailabilityInterval)
        .where(AvailabilityInterval.user_id == user_id)
        .order_by(
            AvailabilityInterval.day_of_week.asc(),
            AvailabilityInterval.start_minute.asc(),
            AvailabilityInterval.end_minute.asc(),
        )
    )
    return list((await db.execute(q)).scalars())


async def list_intervals_for_day(db: AsyncSession, user_id: uuid.UUID, day_of_week: int) -> list[AvailabilityInterval]:
    q = select(AvailabilityInterval).where(
        AvailabilityInterval.user_id == user_id,
        AvailabilityInterval.day_of_week == day_of_week,
    )
    return list((await db.execute(q)).scalars())


async def is_hour_free(
    db: AsyncSession,
    user_id: uuid.UUID,
    day_of_week: int,
    hour: int,
) -> AvailabilityInterval | None:
    if not 0 <= day_of_week < DAYS_PER_WEEK:
        raise ValidationError("invalid_day_of_week")
    if not 0 <= hour < HOURS_PER_DAY:
        raise ValidationError("invalid_hour")

    hour_start = hour * MINUTES_PER_HOUR
    hour_end = hour_start + MINUTES_PER_HOUR
    q = (
        select(AvailabilityInterval)
        .where(
            AvailabilityInterval.user_id == user_id,
            AvailabilityInterval.day_of_week == day_of_week,
            AvailabilityInterval.start_minute <= hour_start,
            AvailabilityInterval.end_minute >= hour_end,
        )
        .order_by(AvailabilityInterval.start_minute.asc(), AvailabilityInterval.id.asc())
        .limit(1)
    )
    return (await db.execute(q)).scalar_one_or_none()


async def insert_interval(
    db: AsyncSession,
    user_id: uuid.UUID,
    day_of_week: int,
    start_minute: int,
    end_minute: int,
) -> AvailabilityInterval:
    # Bounds only; keeping rows disjoint is the toggle planner's job.
    _validate_window(day_of_week, start_minute, end_minute)

    interval = AvailabilityInterval(
        user_id=user_id,
        day_of_week=day_of_week,
        start_minute=start_minute,
        end_minute=end_minute,
    )
    db.add(interval)
    await db.flush()
    return interval


async def delete_interval(db: AsyncSession, user_id: uuid.UUID, interval_id: uuid.UUID) -> bool:
    """Delete one of the user's intervals. Unknown ids are a no-op."""
    result = await db.execute(
        sa.delete(AvailabilityInterval).where(
            AvailabilityInterval.id == interval_id,
            AvailabilityInterval.user_id == user_id,
        )
    )
    return bool(result.rowcount)


async def _apply_step(db: AsyncSession, user_id: uuid.UUID, step: PlanStep) -> None:
    if step.delete_id is not None:
        await delete_interval(db, user_id, step.delete_id)
    for row in step.inserts:
        await insert_interval(db, user_id, row.day_of_week, row.start_minute, row.end_minute)


async def apply_toggle_plan(
    db: AsyncSession,
    user_id: uuid.UUID,
    plan: TogglePlan,
    *,
    atomic: bool = False,
) -> ToggleResult:
    """Apply a toggle plan.

    Best-effort by default: each step runs in its own SAVEPOINT and a failing
    step is recorded and skipped. With ``atomic=True`` the first failure
    propagates and the caller's transaction should be rolled back.
    """
    result = ToggleResult(action=plan.action, day=plan.selection.day, hours=plan.selection.hours)

    for step in plan.steps:
        if atomic:
            await _apply_step(db, user_id, step)
            result.applied.append(step)
            continue

        try:
            async with db.begin_nested():
                await _apply_step(db, user_id, step)
        except (SQLAlchemyError, ValidationError) as exc:
            logger.warning(
                "availability step failed user_id=%s delete_id=%s inserts=%d",
                user_id,
                step.delete_id,
                len(step.inserts),
                exc_info=exc,
            )
            result.failed.append(StepFailure(step=step, error=error_code(exc)))
            continue
        result.applied.append(step)

    logger.info(
        "availability toggle user_id=%s day=%s hours=%s action=%s applied=%d failed=%d",
        user_id,
        plan.selection.day,
        list(plan.selection.hours),
        plan.action.value,
        len(result.applied),
        len(result.failed),
    )
    return result


async def toggle_cells(
    db: AsyncSession,
    user_id: uuid.UUID,
    start: Cell,
    end: Cell | None = None,
    *,
    atomic: bool = False,
) -> ToggleResult:
    try:
        selection = resolve_selection(start, end)
    except ValueError as exc:
        raise ValidationError("invalid_cell") from exc

    snapshot = await list_intervals_for_day(db, user_id, selection.day)
    plan = plan_toggle(snapshot, selection)
    return await apply_toggle_plan(db, user_id, plan, atomic=atomic)


async def seed_default_availability(db: AsyncSession, user_id: uuid.UUID) -> list[AvailabilityInterval]:
    existing = (
        await db.execute(
            select(AvailabilityInterval.id).where(AvailabilityInterval.user_id == user_id).limit(1)
        )
    ).scalar_one_or_none()
    if existing is not None:
        raise Conflict("availability_exists")

    for day_of_week, start_minute, end_minute in DEFAULT_WEEKLY_AVAILABILITY:
        db.add(
            AvailabilityInterval(
                user_id=user_id,
                day_of_week=day_of_week,
                start_minute=start_minute,
                end_minute=end_minute,
            )
        )
    await db.flush()
    return await list_intervals(db, user_id)


async def replace_weekly_availability(
    db: AsyncSession,
    user_id: uuid.UUID,
    windows: list[DayWindow],
) -> list[AvailabilityInterval]:
    seen: set[int] = set()
    for window in windows:
        if window.day_of_week in seen:
            raise ValidationError("duplicate_day_of_week")
        seen.add(window.day_of_week)
        if window.enabled:
            _validate_window(window.day_of_week, window.start_minute, window.end_minute)

    await db.execute(sa.delete(AvailabilityInterval).where(AvailabilityInterval.user_id == user_id))
    for window in windows:
        if not window.enabled:
            continue
        db.add(
            AvailabilityInterval(
                user_id=user_id,
                day_of_week=window.day_of_week,
                start_minute=window.start_minute,
                end_minute=window.end_minute,
            )
        )
    await db.flush()
    return await list_intervals(db, user_id)
