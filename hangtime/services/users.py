from __future__ import annotations

import logging
import re
import uuid

import sqlalchemy as sa
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from hangtime.core.config import settings
from hangtime.core.errors import Conflict, ValidationError
from hangtime.models.user import User

logger = logging.getLogger(__name__)

USERNAME_MIN_LEN = 3
USERNAME_MAX_LEN = 50
_USERNAME_RE = re.compile(r"^[a-z0-9_]+$")
_LIKE_ESCAPE_RE = re.compile(r"([\\%_])")


def normalize_username(value: str) -> str:
    return value.strip().lower()


def _validate_username(username: str) -> None:
    if not USERNAME_MIN_LEN <= len(username) <= USERNAME_MAX_LEN:
        raise ValidationError("invalid_username_length")
    if not _USERNAME_RE.match(username):
        raise ValidationError("invalid_username_characters")


async def username_exists(db: AsyncSession, username: str) -> bool:
    result = await db.execute(select(User.id).where(User.username == normalize_username(username)))
    return result.scalar_one_or_none() is not None


async def create_profile(
    db: AsyncSession,
    *,
    user_id: uuid.UUID,
    email: str,
    display_name: str,
    username: str,
    avatar_url: str | None = None,
) -> User:
    username = normalize_username(username)
    _validate_username(username)
    display_name = display_name.strip()
    if not display_name:
        raise ValidationError("display_name_required")

    existing = (await db.execute(select(User.id).where(User.id == user_id))).scalar_one_or_none()
    if existing is not None:
        raise Conflict("profile_exists")
    if await username_exists(db, username):
        raise Conflict("username_taken")

    user = User(
        id=user_id,
        email=email.strip().lower(),
        display_name=display_name,
        username=username,
        avatar_url=(avatar_url or "").strip() or None,
    )
    db.add(user)
    try:
        await db.flush()
    except IntegrityError as exc:
        # e-mail collision or a concurrent onboarding with the same handle
        raise Conflict("profile_conflict") from exc
    await db.refresh(user)
    logger.info("profile created user_id=%s username=%s", user.id, user.username)
    return user


def _like_pattern(query: str) -> str:
    escaped = _LIKE_ESCAPE_RE.sub(r"\\\1", query)
    return f"%{escaped}%"


async def search_users(
    db: AsyncSession,
    current_user_id: uuid.UUID,
    query: str,
    limit: int | None = None,
) -> list[User]:
    """Case-insensitive substring match on display name or username."""
    cleaned = query.strip()
    if len(cleaned) < settings.search_min_query_length:
        return []

    pattern = _like_pattern(cleaned.lower())
    q = (
        select(User)
        .where(
            sa.or_(
                sa.func.lower(User.display_name).like(pattern, escape="\\"),
                sa.func.lower(User.username).like(pattern, escape="\\"),
            ),
            User.id != current_user_id,
        )
        .order_by(User.username.asc())
        .limit(limit or settings.search_result_limit)
    )
    return list((await db.execute(q)).scalars())
