from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from hangtime.api.deps import get_current_user, get_db
from hangtime.api.http_errors import domain_error
from hangtime.core.errors import Conflict, NotFound, ValidationError
from hangtime.models.user import User
from hangtime.schemas.interests import AddInterestsRequest, InterestItem
from hangtime.schemas.users import MeResponse
from hangtime.services.interests import add_interests, list_interests, remove_interest

router = APIRouter(prefix="/me", tags=["me"])


@router.get("", response_model=MeResponse)
async def me(user: User = Depends(get_current_user)):
    return MeResponse.model_validate(user)


@router.get("/interests", response_model=list[InterestItem])
async def get_interests(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    rows = await list_interests(db, user.id)
    return [InterestItem.model_validate(r) for r in rows]


@router.post("/interests", response_model=list[InterestItem], status_code=201)
async def post_interests(
    payload: AddInterestsRequest,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    try:
        created = await add_interests(db, user.id, payload.titles)
        await db.commit()
    except (Conflict, ValidationError) as e:
        await db.rollback()
        raise domain_error(
            e,
            detail_overrides={
                "interest_exists": "Interest already added",
                "title_required": "Interest title is required",
                "title_too_long": "Interest title is too long",
            },
        ) from e
    return [InterestItem.model_validate(r) for r in created]


@router.delete("/interests/{interest_id}", status_code=204)
async def delete_interest(
    interest_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    try:
        await remove_interest(db, user.id, interest_id)
        await db.commit()
    except NotFound as e:
        await db.rollback()
        raise domain_error(e, detail_overrides={"interest_not_found": "Interest not found"}) from e
    return Response(status_code=204)
