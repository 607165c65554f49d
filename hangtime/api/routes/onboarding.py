from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from hangtime.api.deps import get_current_identity, get_db
from hangtime.api.http_errors import domain_error
from hangtime.core.errors import Conflict, ValidationError
from hangtime.schemas.users import MeResponse, OnboardingProfileRequest
from hangtime.services.users import create_profile

router = APIRouter(prefix="/onboarding", tags=["onboarding"])


@router.post("/profile", response_model=MeResponse, status_code=201)
async def create_profile_route(
    payload: OnboardingProfileRequest,
    db: AsyncSession = Depends(get_db),
    identity: uuid.UUID = Depends(get_current_identity),
):
    try:
        user = await create_profile(
            db,
            user_id=identity,
            email=payload.email,
            display_name=payload.display_name,
            username=payload.username,
            avatar_url=payload.avatar_url,
        )
        await db.commit()
    except (Conflict, ValidationError) as e:
        await db.rollback()
        raise domain_error(
            e,
            detail_overrides={
                "profile_exists": "Profile already created",
                "username_taken": "Username taken",
                "profile_conflict": "Email or username already in use",
                "invalid_username_length": "Username must be 3-50 characters",
                "invalid_username_characters": "Username may only contain a-z, 0-9 and _",
                "display_name_required": "Display name is required",
            },
        ) from e
    return MeResponse.model_validate(user)
