from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from hangtime.api.deps import get_current_identity, get_current_user, get_db
from hangtime.models.user import User
from hangtime.schemas.users import UsernameAvailabilityResponse, UserSearchResponse, UserSummary
from hangtime.services.users import normalize_username, search_users, username_exists

router = APIRouter(prefix="/users", tags=["users"])


@router.get(
    "/username-available",
    response_model=UsernameAvailabilityResponse,
    dependencies=[Depends(get_current_identity)],
)
async def username_available(
    username: str = Query(min_length=3, max_length=50),
    db: AsyncSession = Depends(get_db),
):
    normalized = normalize_username(username)
    taken = await username_exists(db, normalized)
    return UsernameAvailabilityResponse(username=normalized, available=not taken)


@router.get("/search", response_model=UserSearchResponse)
async def search(
    q: str = Query(default="", max_length=100),
    seq: int | None = Query(default=None, ge=0),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    rows = await search_users(db, user.id, q)
    return UserSearchResponse(
        seq=seq,
        query=q,
        results=[UserSummary.model_validate(r) for r in rows],
    )
