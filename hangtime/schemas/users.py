from __future__ import annotations

from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class OnboardingProfileRequest(BaseModel):
    email: EmailStr
    display_name: str = Field(min_length=1, max_length=120)
    username: str = Field(min_length=3, max_length=50)
    avatar_url: str | None = Field(default=None, max_length=500)


class UserSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    username: str
    display_name: str
    avatar_url: str | None = None


class MeResponse(UserSummary):
    email: EmailStr


class UsernameAvailabilityResponse(BaseModel):
    username: str
    available: bool


class UserSearchResponse(BaseModel):
    # Echo of the client's request counter so stale responses can be dropped.
    seq: int | None = None
    query: str
    results: list[UserSummary]
