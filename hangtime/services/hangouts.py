from __future__ import annotations

import enum
import logging
import uuid
from datetime import datetime, timezone

import sqlalchemy as sa
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from hangtime.core.errors import Forbidden, InvalidState, NotFound, ValidationError
from hangtime.models.hangout_proposal import TERMINAL_STATUSES, HangoutProposal, ProposalStatus
from hangtime.models.interest import Interest
from hangtime.services.friends import are_friends

logger = logging.getLogger(__name__)


class Decision(str, enum.Enum):
    accept = "accept"
    decline = "decline"


_DECISION_STATUS = {
    Decision.accept: ProposalStatus.accepted,
    Decision.decline: ProposalStatus.declined,
}


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _clean_text(value: str | None) -> str | None:
    if value is None:
        return None
    normalized = value.strip()
    return normalized or None


async def fetch_proposals_with_relations(
    db: AsyncSession,
    *where,
    order_by=None,
    refresh: bool = False,
) -> list[HangoutProposal]:
    """Load proposals with sender, recipient and interest in one round of queries."""
    q = (
        select(HangoutProposal)
        .options(
            selectinload(HangoutProposal.sender),
            selectinload(HangoutProposal.recipient),
            selectinload(HangoutProposal.interest),
        )
        .where(*where)
    )
    if order_by is not None:
        q = q.order_by(*order_by)
    if refresh:
        q = q.execution_options(populate_existing=True)
    return list((await db.execute(q)).scalars())


async def get_proposal(db: AsyncSession, proposal_id: uuid.UUID) -> HangoutProposal:
    rows = await fetch_proposals_with_relations(db, HangoutProposal.id == proposal_id, refresh=True)
    if not rows:
        raise NotFound("proposal_not_found")
    return rows[0]


async def propose(
    db: AsyncSession,
    *,
    sender_id: uuid.UUID,
    recipient_id: uuid.UUID | None,
    proposed_at: datetime | None,
    interest_id: uuid.UUID | None = None,
    location: str | None = None,
    message: str | None = None,
    description: str | None = None,
) -> HangoutProposal:
    if recipient_id is None:
        raise ValidationError("recipient_required")
    if not isinstance(proposed_at, datetime):
        raise ValidationError("invalid_datetime")
    if recipient_id == sender_id:
        raise ValidationError("cannot_propose_to_self")

    if not await are_friends(db, sender_id, recipient_id):
        raise ValidationError("recipient_not_friend")

    if interest_id is not None:
        interest = (await db.execute(select(Interest).where(Interest.id == interest_id))).scalar_one_or_none()
        if interest is None:
            raise NotFound("interest_not_found")
        if interest.user_id not in (sender_id, recipient_id):
            raise ValidationError("interest_not_shared")

    proposal = HangoutProposal(
        sender_id=sender_id,
        recipient_id=recipient_id,
        interest_id=interest_id,
        proposed_at=_as_utc(proposed_at),
        location=_clean_text(location),
        message=_clean_text(message),
        description=_clean_text(description),
        status=ProposalStatus.pending.value,
    )
    db.add(proposal)
    await db.flush()
    logger.info("hangout proposed proposal_id=%s sender=%s recipient=%s", proposal.id, sender_id, recipient_id)
    return await get_proposal(db, proposal.id)


async def respond(
    db: AsyncSession,
    proposal_id: uuid.UUID,
    by_user_id: uuid.UUID,
    decision: Decision,
) -> HangoutProposal:
    proposal = await get_proposal(db, proposal_id)
    if proposal.recipient_id != by_user_id:
        raise Forbidden("not_recipient")
    if proposal.status in TERMINAL_STATUSES:
        raise InvalidState("not_pending")

    proposal.status = _DECISION_STATUS[Decision(decision)].value
    proposal.responded_at = _now_utc()
    await db.flush()
    logger.info("hangout %s proposal_id=%s", proposal.status, proposal.id)
    return proposal


def _involves(user_id: uuid.UUID):
    return sa.or_(HangoutProposal.sender_id == user_id, HangoutProposal.recipient_id == user_id)


async def list_upcoming_accepted(
    db: AsyncSession,
    user_id: uuid.UUID,
    now: datetime | None = None,
) -> list[HangoutProposal]:
    cutoff = _as_utc(now) if now is not None else _now_utc()
    return await fetch_proposals_with_relations(
        db,
        _involves(user_id),
        HangoutProposal.status == ProposalStatus.accepted.value,
        HangoutProposal.proposed_at >= cutoff,
        order_by=(HangoutProposal.proposed_at.asc(), HangoutProposal.id.asc()),
    )


async def list_pending_incoming(db: AsyncSession, user_id: uuid.UUID) -> list[HangoutProposal]:
    return await fetch_proposals_with_relations(
        db,
        HangoutProposal.recipient_id == user_id,
        HangoutProposal.status == ProposalStatus.pending.value,
        order_by=(HangoutProposal.proposed_at.asc(),),
    )


async def list_sent(db: AsyncSession, user_id: uuid.UUID) -> list[HangoutProposal]:
    return await fetch_proposals_with_relations(
        db,
        HangoutProposal.sender_id == user_id,
        order_by=(HangoutProposal.created_at.desc(),),
    )
