"""Users router: profile, dashboard, affiliate summary, subscription, account."""

from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException, status
from libs.auth.security import verify_password
from libs.common.config import get_settings
from libs.common.datetime_utils import add_months, utc_now
from libs.common.logging import get_logger
from libs.db.session import get_async_db
from services.storefront_service.dependencies import get_current_user
from services.storefront_service.models import (
    AffiliateReferral,
    Product,
    Store,
    SubscriptionPlan,
    User,
)
from services.storefront_service.routers._helpers import (
    delete_user_cascade,
    generate_referral_code,
    merge_dict,
)
from services.storefront_service.schemas import (
    AccountDeleteRequest,
    MessageResponse,
    ProfileUpdate,
    StoreListItem,
    SubscriptionUpdate,
    UserEnvelope,
    UserResponse,
)
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

router = APIRouter(tags=["users"])


def referral_link(code: str | None) -> str:
    return f"{get_settings().FRONTEND_URL.rstrip('/')}/register?ref={code}"


async def enable_affiliate(db: AsyncSession, user: User) -> bool:
    """Turn on the affiliate program for ``user``; True if anything changed."""
    if user.is_affiliate and user.referral_code:
        return False
    user.is_affiliate = True
    if not user.referral_code:
        user.referral_code = await generate_referral_code(db, user.username)
    return True


@router.get("/profile")
async def get_profile(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    result = await db.execute(
        select(Store)
        .where(Store.owner_id == current_user.id)
        .order_by(Store.created_at.desc())
    )
    stores = result.scalars().all()
    return {
        "user": UserResponse.model_validate(current_user),
        "stores": [
            {
                "id": store.id,
                "name": store.name,
                "slug": store.slug,
                "template": (store.theme or {}).get("template"),
                "analytics": store.analytics,
            }
            for store in stores
        ],
    }


@router.put("/profile", response_model=UserEnvelope)
async def update_profile(
    payload: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Merge profile fields (social links merged key-wise) and settings."""
    if payload.profile is not None:
        incoming = payload.profile.model_dump(mode="json", exclude_unset=True)
        social = incoming.pop("social", None)
        profile = merge_dict(current_user.profile, incoming)
        if social is not None:
            profile["social"] = merge_dict(profile.get("social"), social)
        current_user.profile = profile

    if payload.settings is not None:
        current_user.settings = merge_dict(current_user.settings, payload.settings)

    await db.commit()
    return {"message": "Profile updated successfully", "user": current_user}


@router.get("/dashboard")
async def get_dashboard(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    stores = (
        (
            await db.execute(
                select(Store)
                .where(Store.owner_id == current_user.id)
                .order_by(Store.created_at.desc())
            )
        )
        .scalars()
        .all()
    )
    store_ids = [store.id for store in stores]

    product_count = 0
    if store_ids:
        product_count = (
            await db.execute(
                select(func.count(Product.id)).where(Product.store_id.in_(store_ids))
            )
        ).scalar_one()

    referral_count = (
        await db.execute(
            select(func.count(AffiliateReferral.id)).where(
                AffiliateReferral.referrer_id == current_user.id
            )
        )
    ).scalar_one()

    metrics = {
        "total_stores": len(stores),
        "total_products": product_count,
        "total_revenue": sum(
            (store.analytics_revenue or Decimal("0") for store in stores),
            Decimal("0"),
        ),
        "total_orders": sum(store.analytics_orders or 0 for store in stores),
        "affiliate_earnings": current_user.affiliate_total_earnings or Decimal("0"),
        "referral_count": referral_count,
    }

    return {
        "user": {
            "id": current_user.id,
            "username": current_user.username,
            "email": current_user.email,
            "subscription": current_user.subscription,
            "profile": current_user.profile,
        },
        "metrics": metrics,
        "stores": [StoreListItem.model_validate(store) for store in stores],
        "recent_activity": [],
    }


@router.get("/affiliate")
async def get_affiliate(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Affiliate summary; enables the program on first access."""
    if await enable_affiliate(db, current_user):
        await db.commit()

    result = await db.execute(
        select(AffiliateReferral, User)
        .join(User, User.id == AffiliateReferral.referred_user_id)
        .where(AffiliateReferral.referrer_id == current_user.id)
        .order_by(AffiliateReferral.date_referred.desc())
    )
    referrals = [
        {
            "user": {
                "id": referred.id,
                "username": referred.username,
                "email": referred.email,
                "created_at": referred.created_at,
            },
            "date_referred": referral.date_referred,
            "commission_earned": referral.commission_earned,
        }
        for referral, referred in result.all()
    ]

    return {
        "affiliate": {
            "referral_code": current_user.referral_code,
            "total_earnings": current_user.affiliate_total_earnings,
            "pending_payouts": current_user.affiliate_pending_payouts,
            "referrals": referrals,
            "referral_link": referral_link(current_user.referral_code),
        }
    }


@router.put("/subscription")
async def update_subscription(
    payload: SubscriptionUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    now = utc_now()
    current_user.subscription_plan = payload.plan
    current_user.subscription_start = now
    if payload.plan != SubscriptionPlan.FREE:
        current_user.subscription_end = add_months(now, 1)

    await db.commit()
    logger.info(
        "User %s switched to plan %s", current_user.username, payload.plan.value
    )
    return {
        "message": "Subscription updated successfully",
        "subscription": current_user.subscription,
    }


@router.delete("/account", response_model=MessageResponse)
async def delete_account(
    payload: AccountDeleteRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    if not verify_password(payload.password, current_user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Password is incorrect"
        )

    user_id = current_user.id
    await delete_user_cascade(db, current_user)
    await db.commit()

    logger.info("Deleted account %s", user_id)
    return {"message": "Account deleted successfully"}
