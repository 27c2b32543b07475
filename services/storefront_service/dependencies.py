"""Resolve bearer-token claims to live user rows."""

import uuid
from typing import Optional

from fastapi import Depends, HTTPException, status
from libs.auth.dependencies import get_optional_token_claims, get_token_claims
from libs.auth.models import AuthUser
from libs.db.session import get_async_db
from services.storefront_service.models import User
from sqlalchemy.ext.asyncio import AsyncSession


async def _load_user(db: AsyncSession, claims: AuthUser) -> Optional[User]:
    try:
        user_id = uuid.UUID(claims.user_id)
    except ValueError:
        return None
    return await db.get(User, user_id)


async def get_current_user(
    claims: AuthUser = Depends(get_token_claims),
    db: AsyncSession = Depends(get_async_db),
) -> User:
    user = await _load_user(db, claims)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token is not valid",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


async def get_optional_user(
    claims: Optional[AuthUser] = Depends(get_optional_token_claims),
    db: AsyncSession = Depends(get_async_db),
) -> Optional[User]:
    """Like ``get_current_user`` but anonymous callers get ``None``."""
    if claims is None:
        return None
    return await _load_user(db, claims)
