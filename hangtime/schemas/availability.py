from __future__ import annotations

from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from hangtime.services.toggle_planner import format_minute, parse_minute


class IntervalItem(BaseModel):
    id: UUID
    day_of_week: int
    start_time: str
    end_time: str

    @classmethod
    def from_model(cls, interval) -> "IntervalItem":
        return cls(
            id=interval.id,
            day_of_week=interval.day_of_week,
            start_time=format_minute(interval.start_minute),
            end_time=format_minute(interval.end_minute),
        )


class DayWindowIn(BaseModel):
    day_of_week: int = Field(ge=0, le=6)
    enabled: bool = True
    start_time: int
    end_time: int

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def parse_times(cls, value: object) -> object:
        if isinstance(value, str):
            return parse_minute(value)
        return value


class WeeklyAvailabilityRequest(BaseModel):
    days: list[DayWindowIn] = Field(max_length=7)


class CellIn(BaseModel):
    day: int = Field(ge=0, le=6)
    hour: int = Field(ge=0, le=23)


class ToggleRequest(BaseModel):
    start: CellIn
    end: CellIn | None = None
    atomic: bool = False


class ToggleStepOut(BaseModel):
    delete_id: UUID | None = None
    inserts: list[tuple[int, str, str]]


class ToggleFailureOut(BaseModel):
    step: ToggleStepOut
    error: str


class ToggleResponse(BaseModel):
    action: str
    day: int
    hours: list[int]
    ok: bool
    applied: list[ToggleStepOut]
    failed: list[ToggleFailureOut]
    intervals: list[IntervalItem]


class HourFreeResponse(BaseModel):
    day: int
    hour: int
    free: bool
    interval: IntervalItem | None = None
