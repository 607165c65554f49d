from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone

import sqlalchemy as sa
from sqlalchemy import select, and_, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from hangtime.core.errors import Conflict, Forbidden, InvalidState, NotFound, ValidationError, error_code
from hangtime.models.friend_link import FriendLink, FriendLinkStatus
from hangtime.models.user import User

logger = logging.getLogger(__name__)


@dataclass
class FriendRequestOutcome:
    recipient_id: uuid.UUID
    link: FriendLink | None = None
    error: str | None = None


def _pair_clause(a: uuid.UUID, b: uuid.UUID):
    # A link in either direction is the same relationship.
    return or_(
        and_(FriendLink.requester_id == a, FriendLink.recipient_id == b),
        and_(FriendLink.requester_id == b, FriendLink.recipient_id == a),
    )


async def get_link_between(db: AsyncSession, a: uuid.UUID, b: uuid.UUID) -> FriendLink | None:
    q = select(FriendLink).where(_pair_clause(a, b)).order_by(FriendLink.created_at.asc()).limit(1)
    return (await db.execute(q)).scalar_one_or_none()


async def are_friends(db: AsyncSession, a: uuid.UUID, b: uuid.UUID) -> bool:
    q = sa.select(sa.literal(True)).select_from(FriendLink).where(
        _pair_clause(a, b),
        FriendLink.status == FriendLinkStatus.accepted.value,
    )
    return (await db.execute(q.limit(1))).scalar_one_or_none() is True


async def request_friend(db: AsyncSession, requester_id: uuid.UUID, recipient_id: uuid.UUID) -> FriendLink:
    if requester_id == recipient_id:
        raise ValidationError("cannot_friend_self")

    recipient = (await db.execute(select(User.id).where(User.id == recipient_id))).scalar_one_or_none()
    if recipient is None:
        raise NotFound("user_not_found")

    existing = await get_link_between(db, requester_id, recipient_id)
    if existing is not None:
        if existing.status == FriendLinkStatus.accepted.value:
            raise Conflict("already_friends")
        if existing.requester_id == requester_id:
            raise Conflict("request_already_sent")
        # Reverse request is pending; the caller accepts that one instead.
        raise Conflict("request_already_received")

    link = FriendLink(
        requester_id=requester_id,
        recipient_id=recipient_id,
        status=FriendLinkStatus.pending.value,
    )
    db.add(link)
    await db.flush()
    await db.refresh(link)
    logger.info("friend request link_id=%s requester=%s recipient=%s", link.id, requester_id, recipient_id)
    return link


async def request_friends_batch(
    db: AsyncSession,
    requester_id: uuid.UUID,
    recipient_ids: list[uuid.UUID],
) -> list[FriendRequestOutcome]:
    """Send several requests; one recipient failing does not affect the others."""
    outcomes: list[FriendRequestOutcome] = []
    seen: set[uuid.UUID] = set()
    for recipient_id in recipient_ids:
        if recipient_id in seen:
            continue
        seen.add(recipient_id)
        try:
            async with db.begin_nested():
                link = await request_friend(db, requester_id, recipient_id)
        except (ValueError, PermissionError) as exc:
            outcomes.append(FriendRequestOutcome(recipient_id=recipient_id, error=error_code(exc)))
            continue
        outcomes.append(FriendRequestOutcome(recipient_id=recipient_id, link=link))
    return outcomes


async def _get_link_for_recipient(db: AsyncSession, link_id: uuid.UUID, user_id: uuid.UUID) -> FriendLink:
    link = (await db.execute(select(FriendLink).where(FriendLink.id == link_id))).scalar_one_or_none()
    if link is None:
        raise NotFound("request_not_found")
    if link.recipient_id != user_id:
        raise Forbidden("not_recipient")
    return link


async def accept_friend(db: AsyncSession, link_id: uuid.UUID, user_id: uuid.UUID) -> FriendLink:
    link = await _get_link_for_recipient(db, link_id, user_id)
    if link.status != FriendLinkStatus.pending.value:
        raise InvalidState("not_pending")

    link.status = FriendLinkStatus.accepted.value
    link.accepted_at = datetime.now(timezone.utc)
    await db.flush()
    logger.info("friend request accepted link_id=%s friend=%s", link.id, link.other_party(user_id))
    return link


async def decline_friend(db: AsyncSession, link_id: uuid.UUID, user_id: uuid.UUID) -> None:
    link = await _get_link_for_recipient(db, link_id, user_id)
    if link.status != FriendLinkStatus.pending.value:
        raise InvalidState("not_pending")

    # Declining leaves no record so the requester can ask again later.
    await db.delete(link)
    await db.flush()
    logger.info("friend request declined link_id=%s", link_id)


async def list_accepted_friends(db: AsyncSession, user_id: uuid.UUID) -> list[User]:
    f = FriendLink
    u = aliased(User)

    q = (
        select(u)
        .join(
            f,
            ((f.requester_id == user_id) & (u.id == f.recipient_id))
            | ((f.recipient_id == user_id) & (u.id == f.requester_id)),
        )
        .where(f.status == FriendLinkStatus.accepted.value)
        .order_by(u.username.asc())
    )
    return list((await db.execute(q)).scalars())


async def list_pending_incoming(db: AsyncSession, user_id: uuid.UUID) -> list[tuple[FriendLink, User]]:
    q = (
        select(FriendLink, User)
        .join(User, User.id == FriendLink.requester_id)
        .where(
            FriendLink.recipient_id == user_id,
            FriendLink.status == FriendLinkStatus.pending.value,
        )
        .order_by(FriendLink.created_at.desc())
    )
    return [(link, user) for link, user in (await db.execute(q)).all()]


async def list_pending_outgoing(db: AsyncSession, user_id: uuid.UUID) -> list[tuple[FriendLink, User]]:
    q = (
        select(FriendLink, User)
        .join(User, User.id == FriendLink.recipient_id)
        .where(
            FriendLink.requester_id == user_id,
            FriendLink.status == FriendLinkStatus.pending.value,
        )
        .order_by(FriendLink.created_at.desc())
    )
    return [(link, user) for link, user in (await db.execute(q)).all()]


async def unfriend(db: AsyncSession, user_id: uuid.UUID, other_user_id: uuid.UUID) -> None:
    if user_id == other_user_id:
        raise ValidationError("cannot_unfriend_self")

    links = (
        await db.execute(
            select(FriendLink).where(
                _pair_clause(user_id, other_user_id),
                FriendLink.status == FriendLinkStatus.accepted.value,
            )
        )
    ).scalars().all()
    if not links:
        raise NotFound("friendship_not_found")

    for link in links:
        await db.delete(link)
    await db.flush()

