from __future__ import annotations

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from hangtime.api.deps import get_current_user, get_db
from hangtime.api.http_errors import domain_error
from hangtime.api.presenters.scheduling import build_toggle_response
from hangtime.core.errors import Conflict, ValidationError
from hangtime.models.user import User
from hangtime.schemas.availability import (
    HourFreeResponse,
    IntervalItem,
    ToggleRequest,
    ToggleResponse,
    WeeklyAvailabilityRequest,
)
from hangtime.services.availability import (
    DayWindow,
    delete_interval,
    is_hour_free,
    list_intervals,
    replace_weekly_availability,
    seed_default_availability,
    toggle_cells,
)
from hangtime.services.toggle_planner import Cell

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/availability", tags=["availability"])

_DETAILS = {
    "availability_exists": "Availability already set",
    "duplicate_day_of_week": "Each day may appear only once",
    "invalid_day_of_week": "Day must be between 0 (Sunday) and 6 (Saturday)",
    "time_out_of_range": "Times must be between 00:00 and 24:00",
    "start_not_before_end": "Start time must be before end time",
}


@router.get("", response_model=list[IntervalItem])
async def get_availability(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    rows = await list_intervals(db, user.id)
    return [IntervalItem.from_model(r) for r in rows]


@router.put("/weekly", response_model=list[IntervalItem])
async def put_weekly(
    payload: WeeklyAvailabilityRequest,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    windows = [
        DayWindow(
            day_of_week=d.day_of_week,
            start_minute=d.start_time,
            end_minute=d.end_time,
            enabled=d.enabled,
        )
        for d in payload.days
    ]
    try:
        rows = await replace_weekly_availability(db, user.id, windows)
        await db.commit()
    except ValidationError as e:
        await db.rollback()
        raise domain_error(e, detail_overrides=_DETAILS) from e
    return [IntervalItem.from_model(r) for r in rows]


@router.post("/defaults", response_model=list[IntervalItem], status_code=201)
async def post_defaults(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    try:
        rows = await seed_default_availability(db, user.id)
        await db.commit()
    except Conflict as e:
        await db.rollback()
        raise domain_error(e, detail_overrides=_DETAILS) from e
    return [IntervalItem.from_model(r) for r in rows]


@router.post("/toggle", response_model=ToggleResponse)
async def post_toggle(
    payload: ToggleRequest,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    start = Cell(day=payload.start.day, hour=payload.start.hour)
    end = Cell(day=payload.end.day, hour=payload.end.hour) if payload.end is not None else None
    user_id = user.id
    try:
        result = await toggle_cells(db, user_id, start, end, atomic=payload.atomic)
        await db.commit()
    except ValidationError as e:
        await db.rollback()
        raise domain_error(e, detail_overrides=_DETAILS) from e
    except SQLAlchemyError as e:
        await db.rollback()
        logger.warning("atomic toggle rolled back user_id=%s", user_id, exc_info=e)
        raise HTTPException(status_code=409, detail="Availability changed, please retry") from e

    # Re-read so the client reconciles against what actually landed.
    rows = await list_intervals(db, user_id)
    return build_toggle_response(result, rows)


@router.get("/free", response_model=HourFreeResponse)
async def get_free(
    day: int = Query(ge=0, le=6),
    hour: int = Query(ge=0, le=23),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    interval = await is_hour_free(db, user.id, day, hour)
    return HourFreeResponse(
        day=day,
        hour=hour,
        free=interval is not None,
        interval=IntervalItem.from_model(interval) if interval is not None else None,
    )


@router.delete("/{interval_id}", status_code=204)
async def delete_availability(
    interval_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    await delete_interval(db, user.id, interval_id)
    await db.commit()
    return Response(status_code=204)
