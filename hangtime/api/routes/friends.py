from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from hangtime.api.deps import get_current_user, get_db
from hangtime.api.http_errors import domain_error
from hangtime.models.user import User
from hangtime.schemas.friends import (
    FriendActionResponse,
    FriendLinkItem,
    FriendRequestBatchResponse,
    FriendRequestCreate,
    FriendRequestResult,
    UnfriendRequest,
    UnfriendResponse,
)
from hangtime.schemas.users import UserSummary
from hangtime.services.friends import (
    accept_friend,
    decline_friend,
    list_accepted_friends,
    list_pending_incoming,
    list_pending_outgoing,
    request_friends_batch,
    unfriend,
)

router = APIRouter(prefix="/friends", tags=["friends"])

_DETAILS = {
    "request_not_found": "Friend request not found",
    "not_recipient": "Only the recipient can respond to this request",
    "not_pending": "Friend request is no longer pending",
    "friendship_not_found": "Friendship not found",
    "cannot_unfriend_self": "You cannot unfriend yourself",
}


def _link_items(rows) -> list[FriendLinkItem]:
    return [
        FriendLinkItem(
            id=link.id,
            status=link.status,
            created_at=link.created_at,
            accepted_at=link.accepted_at,
            user=UserSummary.model_validate(other),
        )
        for link, other in rows
    ]


@router.get("", response_model=list[UserSummary])
async def get_friends(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    friends = await list_accepted_friends(db, user.id)
    return [UserSummary.model_validate(f) for f in friends]


@router.get("/requests/incoming", response_model=list[FriendLinkItem])
async def get_incoming(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return _link_items(await list_pending_incoming(db, user.id))


@router.get("/requests/outgoing", response_model=list[FriendLinkItem])
async def get_outgoing(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return _link_items(await list_pending_outgoing(db, user.id))


@router.post("/requests", response_model=FriendRequestBatchResponse, status_code=201)
async def post_requests(
    payload: FriendRequestCreate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    outcomes = await request_friends_batch(db, user.id, payload.recipient_ids)
    await db.commit()
    return FriendRequestBatchResponse(
        results=[
            FriendRequestResult(
                recipient_id=o.recipient_id,
                ok=o.error is None,
                link_id=o.link.id if o.link is not None else None,
                error=o.error,
            )
            for o in outcomes
        ]
    )


@router.post("/requests/{link_id}/accept", response_model=FriendActionResponse)
async def accept_request(
    link_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    try:
        await accept_friend(db, link_id, user.id)
        await db.commit()
        return FriendActionResponse(ok=True)
    except (ValueError, PermissionError) as e:
        await db.rollback()
        raise domain_error(e, detail_overrides=_DETAILS, default_detail="Could not accept request") from e


@router.post("/requests/{link_id}/decline", response_model=FriendActionResponse)
async def decline_request(
    link_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    try:
        await decline_friend(db, link_id, user.id)
        await db.commit()
        return FriendActionResponse(ok=True)
    except (ValueError, PermissionError) as e:
        await db.rollback()
        raise domain_error(e, detail_overrides=_DETAILS, default_detail="Could not decline request") from e


@router.post("/unfriend", response_model=UnfriendResponse, status_code=200)
async def unfriend_route(
    payload: UnfriendRequest,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    try:
        await unfriend(db, user.id, payload.user_id)
        await db.commit()
        return UnfriendResponse(ok=True, removed=True)
    except ValueError as e:
        await db.rollback()
        raise domain_error(e, detail_overrides=_DETAILS, default_detail="Could not unfriend user") from e
