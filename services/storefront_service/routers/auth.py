"""Auth router: registration, login and the current user."""

from fastapi import APIRouter, Depends, HTTPException, status
from libs.auth.security import create_access_token, hash_password, verify_password
from libs.common.datetime_utils import utc_now
from libs.common.logging import get_logger
from libs.db.session import get_async_db
from services.storefront_service.dependencies import get_current_user
from services.storefront_service.models import AffiliateReferral, User
from services.storefront_service.schemas import (
    AuthResponse,
    LoginRequest,
    RegisterRequest,
    UserEnvelope,
)
from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

router = APIRouter(tags=["auth"])


@router.post(
    "/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED
)
async def register(
    payload: RegisterRequest,
    db: AsyncSession = Depends(get_async_db),
):
    """Create an account, optionally attributed to a referrer."""
    email = payload.email.lower()
    result = await db.execute(
        select(User).where(or_(User.email == email, User.username == payload.username))
    )
    if result.scalars().first():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User already exists with this email or username",
        )

    referrer = None
    if payload.referral_code:
        result = await db.execute(
            select(User).where(User.referral_code == payload.referral_code)
        )
        referrer = result.scalar_one_or_none()

    user = User(
        username=payload.username,
        email=email,
        password_hash=hash_password(payload.password),
        profile=(
            payload.profile.model_dump(mode="json", exclude_none=True)
            if payload.profile
            else {}
        ),
        referred_by_id=referrer.id if referrer else None,
    )
    db.add(user)
    try:
        await db.flush()
        if referrer:
            db.add(AffiliateReferral(referrer_id=referrer.id, referred_user_id=user.id))
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User already exists with this email or username",
        )

    logger.info(
        "Registered user %s",
        user.username,
        extra={
            "extra_fields": {
                "user_id": str(user.id),
                "referred_by": str(referrer.id) if referrer else None,
            }
        },
    )
    return {
        "message": "User registered successfully",
        "token": create_access_token(str(user.id)),
        "user": user,
    }


@router.post("/login", response_model=AuthResponse)
async def login(
    payload: LoginRequest,
    db: AsyncSession = Depends(get_async_db),
):
    result = await db.execute(select(User).where(User.email == payload.email.lower()))
    user = result.scalar_one_or_none()
    if user is None or not verify_password(payload.password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials"
        )

    user.last_login = utc_now()
    await db.commit()

    return {
        "message": "Login successful",
        "token": create_access_token(str(user.id)),
        "user": user,
    }


@router.get("/me", response_model=UserEnvelope)
async def get_me(current_user: User = Depends(get_current_user)):
    return {"user": current_user}
