from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from hangtime.schemas.users import UserSummary


class FriendRequestCreate(BaseModel):
    recipient_ids: list[UUID] = Field(min_length=1, max_length=50)


class FriendRequestResult(BaseModel):
    recipient_id: UUID
    ok: bool
    link_id: UUID | None = None
    error: str | None = None


class FriendRequestBatchResponse(BaseModel):
    results: list[FriendRequestResult]


class FriendLinkItem(BaseModel):
    id: UUID
    status: str
    created_at: datetime
    accepted_at: datetime | None = None
    user: UserSummary


class FriendActionResponse(BaseModel):
    ok: bool


class UnfriendRequest(BaseModel):
    user_id: UUID


class UnfriendResponse(BaseModel):
    ok: bool
    removed: bool
