from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from hangtime.api.deps import get_current_user, get_db
from hangtime.api.http_errors import domain_error
from hangtime.api.presenters.scheduling import build_hangout_item
from hangtime.models.user import User
from hangtime.schemas.hangouts import HangoutItem, ProposeHangoutRequest, RespondHangoutRequest
from hangtime.services.hangouts import (
    list_pending_incoming,
    list_sent,
    list_upcoming_accepted,
    propose,
    respond,
)

router = APIRouter(prefix="/hangouts", tags=["hangouts"])

_DETAILS = {
    "recipient_not_friend": "You can only invite accepted friends",
    "cannot_propose_to_self": "You cannot invite yourself",
    "interest_not_found": "Interest not found",
    "interest_not_shared": "Interest must belong to you or the recipient",
    "proposal_not_found": "Hangout not found",
    "not_recipient": "Only the recipient can respond to this hangout",
    "not_pending": "Hangout was already answered",
}


@router.post("", response_model=HangoutItem, status_code=201)
async def create_hangout(
    payload: ProposeHangoutRequest,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    try:
        proposal = await propose(
            db,
            sender_id=user.id,
            recipient_id=payload.recipient_id,
            proposed_at=payload.proposed_at,
            interest_id=payload.interest_id,
            location=payload.location,
            message=payload.message,
            description=payload.description,
        )
        await db.commit()
    except ValueError as e:
        await db.rollback()
        raise domain_error(e, detail_overrides=_DETAILS, default_detail="Could not create hangout") from e
    return build_hangout_item(proposal)


@router.post("/{proposal_id}/respond", response_model=HangoutItem)
async def respond_hangout(
    proposal_id: uuid.UUID,
    payload: RespondHangoutRequest,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    try:
        proposal = await respond(db, proposal_id, user.id, payload.decision)
        await db.commit()
    except (ValueError, PermissionError) as e:
        await db.rollback()
        raise domain_error(e, detail_overrides=_DETAILS, default_detail="Could not respond to hangout") from e
    return build_hangout_item(proposal)


@router.get("/upcoming", response_model=list[HangoutItem])
async def get_upcoming(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    rows = await list_upcoming_accepted(db, user.id)
    return [build_hangout_item(p) for p in rows]


@router.get("/incoming", response_model=list[HangoutItem])
async def get_incoming(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    rows = await list_pending_incoming(db, user.id)
    return [build_hangout_item(p) for p in rows]


@router.get("/sent", response_model=list[HangoutItem])
async def get_sent(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    rows = await list_sent(db, user.id)
    return [build_hangout_item(p) for p in rows]
