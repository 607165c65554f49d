from __future__ import annotations

from collections.abc import AsyncGenerator
import uuid

from fastapi import Cookie, Depends, Header, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hangtime.core.security import decode_access_token
from hangtime.db.session import get_db_session
from hangtime.models.user import User

COOKIE_NAME = "access_token"


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async for session in get_db_session():
        yield session


def _bearer_token(authorization: str | None) -> str | None:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def get_current_identity(
    access_token: str | None = Cookie(default=None, alias=COOKIE_NAME),
    authorization: str | None = Header(default=None),
) -> uuid.UUID:
    token = _bearer_token(authorization) or access_token
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")

    user_id, error = decode_access_token(token)
    if user_id is None:
        detail = "Token expired" if error == "expired" else "Invalid token"
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)
    return user_id


async def get_current_user(
    db: AsyncSession = Depends(get_db),
    identity: uuid.UUID = Depends(get_current_identity),
) -> User:
    result = await db.execute(select(User).where(User.id == identity))
    user = result.scalar_one_or_none()
    if not user:
        # Authenticated but onboarding not finished (or DB reset).
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Profile not found")

    return user
