from __future__ import annotations

import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hangtime.core.errors import Conflict, NotFound, ValidationError
from hangtime.models.interest import Interest

TITLE_MAX_LEN = 80


def _clean_title(title: str) -> str:
    cleaned = " ".join(title.split())
    if not cleaned:
        raise ValidationError("title_required")
    if len(cleaned) > TITLE_MAX_LEN:
        raise ValidationError("title_too_long")
    return cleaned


async def list_interests(db: AsyncSession, user_id: uuid.UUID) -> list[Interest]:
    q = select(Interest).where(Interest.user_id == user_id).order_by(Interest.created_at.asc(), Interest.title.asc())
    return list((await db.execute(q)).scalars())


async def add_interests(db: AsyncSession, user_id: uuid.UUID, titles: list[str]) -> list[Interest]:
    """Add titles the user does not have yet; returns the rows created."""
    existing = {i.title.lower() for i in await list_interests(db, user_id)}

    created: list[Interest] = []
    for raw in titles:
        title = _clean_title(raw)
        key = title.lower()
        if key in existing:
            continue
        existing.add(key)
        interest = Interest(user_id=user_id, title=title)
        db.add(interest)
        created.append(interest)

    if not created and titles:
        raise Conflict("interest_exists")

    await db.flush()
    for interest in created:
        await db.refresh(interest)
    return created


async def remove_interest(db: AsyncSession, user_id: uuid.UUID, interest_id: uuid.UUID) -> None:
    interest = (
        await db.execute(select(Interest).where(Interest.id == interest_id, Interest.user_id == user_id))
    ).scalar_one_or_none()
    if interest is None:
        raise NotFound("interest_not_found")
    await db.delete(interest)
    await db.flush()
