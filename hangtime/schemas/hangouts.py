from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from hangtime.schemas.users import UserSummary
from hangtime.services.hangouts import Decision


class ProposeHangoutRequest(BaseModel):
    recipient_id: UUID
    proposed_at: datetime
    interest_id: UUID | None = None
    location: str | None = Field(default=None, max_length=255)
    message: str | None = Field(default=None, max_length=2000)
    description: str | None = Field(default=None, max_length=4000)


class RespondHangoutRequest(BaseModel):
    decision: Decision


class HangoutInterest(BaseModel):
    id: UUID
    title: str


class HangoutItem(BaseModel):
    id: UUID
    status: str
    proposed_at: datetime
    location: str | None = None
    message: str | None = None
    description: str | None = None
    created_at: datetime
    responded_at: datetime | None = None
    sender: UserSummary
    recipient: UserSummary
    interest: HangoutInterest | None = None
