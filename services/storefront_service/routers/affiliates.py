"""Affiliates router: referral dashboard, commissions, links and payouts."""

from collections import defaultdict
from datetime import timedelta
from decimal import Decimal
from typing import Literal, Optional
from urllib.parse import quote, urlencode

from fastapi import APIRouter, Depends, HTTPException, Query, status
from libs.common.datetime_utils import as_utc, timeframe_start, utc_now
from libs.common.logging import get_logger
from libs.db.session import get_async_db
from services.storefront_service.dependencies import get_current_user
from services.storefront_service.models import (
    AffiliatePayout,
    AffiliateReferral,
    Order,
    PaymentStatus,
    SubscriptionPlan,
    User,
)
from services.storefront_service.routers._helpers import (
    MAX_PAGE_SIZE,
    bad_request,
    pagination,
)
from services.storefront_service.routers.users import enable_affiliate, referral_link
from services.storefront_service.schemas import (
    GenerateLinkRequest,
    PayoutRequest,
    PayoutResponse,
)
from services.storefront_service.services.pricing import to_money
from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

router = APIRouter(tags=["affiliates"])

MINIMUM_PAYOUT = Decimal("100")
RECENT_REFERRAL_DAYS = 30
DASHBOARD_REFERRAL_LIMIT = 10
QR_CODE_URL = "https://api.qrserver.com/v1/create-qr-code/?size=200x200&data="


def require_affiliate(user: User) -> None:
    if not user.is_affiliate:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Affiliate program not enabled",
        )


def _commission_filters(user_id) -> list:
    return [
        Order.affiliate_referrer_id == user_id,
        Order.payment_status == PaymentStatus.COMPLETED,
    ]


async def commission_summary(db: AsyncSession, user_id) -> dict:
    """Totals over completed-payment orders attributed to ``user_id``."""
    paid_amount = case(
        (Order.commission_paid.is_(True), Order.commission_amount), else_=0
    )
    unpaid_amount = case(
        (Order.commission_paid.is_(True), 0), else_=Order.commission_amount
    )
    result = await db.execute(
        select(
            func.count(Order.id),
            func.sum(Order.commission_amount),
            func.sum(paid_amount),
            func.sum(unpaid_amount),
        ).where(*_commission_filters(user_id))
    )
    count, total, paid, unpaid = result.one()
    return {
        "total_commission": to_money(total),
        "total_orders": count or 0,
        "paid_commission": to_money(paid),
        "unpaid_commission": to_money(unpaid),
    }


@router.get("/dashboard")
async def affiliate_dashboard(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Affiliate overview; enables the program on first access."""
    if await enable_affiliate(db, current_user):
        await db.commit()

    result = await db.execute(
        select(AffiliateReferral, User)
        .join(User, User.id == AffiliateReferral.referred_user_id)
        .where(AffiliateReferral.referrer_id == current_user.id)
        .order_by(AffiliateReferral.date_referred.desc())
    )
    referrals = result.all()

    recent_cutoff = utc_now() - timedelta(days=RECENT_REFERRAL_DAYS)
    total_referrals = len(referrals)
    recent = sum(1 for r, _ in referrals if as_utc(r.date_referred) >= recent_cutoff)
    paid = sum(
        1 for _, u in referrals if u.subscription_plan != SubscriptionPlan.FREE
    )
    conversion_rate = round(paid / total_referrals * 100, 2) if total_referrals else 0

    return {
        "affiliate": {
            "is_active": current_user.is_affiliate,
            "referral_code": current_user.referral_code,
            "referral_link": referral_link(current_user.referral_code),
            "total_earnings": current_user.affiliate_total_earnings,
            "pending_payouts": current_user.affiliate_pending_payouts,
            "commission": await commission_summary(db, current_user.id),
            "metrics": {
                "total_referrals": total_referrals,
                "recent_referrals": recent,
                "paid_referrals": paid,
                "conversion_rate": conversion_rate,
            },
            "referrals": [
                {
                    "user": {
                        "id": referred.id,
                        "username": referred.username,
                        "email": referred.email,
                        "created_at": referred.created_at,
                        "subscription": referred.subscription,
                    },
                    "date_referred": referral.date_referred,
                    "commission_earned": referral.commission_earned,
                }
                for referral, referred in referrals[:DASHBOARD_REFERRAL_LIMIT]
            ],
        }
    }


@router.get("/referrals")
async def list_referrals(
    status_filter: Optional[Literal["converted", "free"]] = Query(
        None, alias="status"
    ),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=MAX_PAGE_SIZE),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    require_affiliate(current_user)

    filters = [User.referred_by_id == current_user.id]
    if status_filter == "converted":
        filters.append(User.subscription_plan != SubscriptionPlan.FREE)
    elif status_filter == "free":
        filters.append(User.subscription_plan == SubscriptionPlan.FREE)

    total = (await db.execute(select(func.count(User.id)).where(*filters))).scalar_one()
    result = await db.execute(
        select(User)
        .where(*filters)
        .order_by(User.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    referred_users = result.scalars().all()

    # Commission per referred customer over completed orders
    per_user = {}
    if referred_users:
        paid_amount = case(
            (Order.commission_paid.is_(True), Order.commission_amount), else_=0
        )
        rows = await db.execute(
            select(
                Order.customer_user_id,
                func.count(Order.id),
                func.sum(Order.commission_amount),
                func.sum(paid_amount),
            )
            .where(
                *_commission_filters(current_user.id),
                Order.customer_user_id.in_([u.id for u in referred_users]),
            )
            .group_by(Order.customer_user_id)
        )
        per_user = {row[0]: row[1:] for row in rows.all()}

    referrals = []
    for referred in referred_users:
        count, total_commission, paid_commission = per_user.get(
            referred.id, (0, None, None)
        )
        total_commission = to_money(total_commission)
        paid_commission = to_money(paid_commission)
        referrals.append(
            {
                "id": referred.id,
                "username": referred.username,
                "email": referred.email,
                "join_date": referred.created_at,
                "subscription": referred.subscription,
                "last_login": referred.last_login,
                "commission": {
                    "total": total_commission,
                    "paid": paid_commission,
                    "pending": total_commission - paid_commission,
                },
                "orders_count": count,
            }
        )

    return {"referrals": referrals, **pagination(total, page, limit)}


@router.get("/commissions")
async def list_commissions(
    status_filter: Optional[Literal["paid", "pending"]] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=MAX_PAGE_SIZE),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    filters = _commission_filters(current_user.id)
    if status_filter == "paid":
        filters.append(Order.commission_paid.is_(True))
    elif status_filter == "pending":
        filters.append(Order.commission_paid.is_(False))

    total = (
        await db.execute(select(func.count(Order.id)).where(*filters))
    ).scalar_one()
    result = await db.execute(
        select(Order)
        .where(*filters)
        .order_by(Order.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    commissions = [
        {
            "order_id": order.id,
            "order_number": order.order_number,
            "created_at": order.created_at,
            "store_id": order.store_id,
            "total": order.total,
            "commission": {
                "rate": order.commission_rate,
                "amount": order.commission_amount,
                "paid": order.commission_paid,
                "paid_at": order.commission_paid_at,
            },
            "customer": {
                "email": order.customer_email,
                "first_name": order.customer_first_name,
                "last_name": order.customer_last_name,
            },
        }
        for order in result.scalars().all()
    ]

    summary = await commission_summary(db, current_user.id)
    return {
        "commissions": commissions,
        **pagination(total, page, limit),
        "summary": {
            "total_commissions": summary["total_commission"],
            "paid_commissions": summary["paid_commission"],
            "pending_commissions": summary["unpaid_commission"],
            "total_orders": summary["total_orders"],
        },
    }


@router.post("/generate-link")
async def generate_link(
    payload: GenerateLinkRequest,
    current_user: User = Depends(get_current_user),
):
    """Referral link with optional UTM parameters, plus a QR-code URL."""
    require_affiliate(current_user)

    link = referral_link(current_user.referral_code)
    utm = {
        f"utm_{key}": value
        for key, value in (
            ("campaign", payload.campaign),
            ("source", payload.source),
            ("medium", payload.medium),
        )
        if value
    }
    if utm:
        link = f"{link}&{urlencode(utm, quote_via=quote)}"

    return {"link": link, "qr_code": f"{QR_CODE_URL}{quote(link, safe='')}"}


@router.post("/request-payout")
async def request_payout(
    payload: PayoutRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Move ``amount`` out of the pending balance into a payout request."""
    # Lock the user row so concurrent requests cannot overdraw the balance
    result = await db.execute(
        select(User)
        .where(User.id == current_user.id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    user = result.scalar_one()
    require_affiliate(user)

    amount = to_money(payload.amount)
    pending = to_money(user.affiliate_pending_payouts)
    if amount <= 0:
        raise bad_request("Invalid payout amount")
    if amount > pending:
        raise bad_request("Requested amount exceeds available balance")
    if amount < MINIMUM_PAYOUT:
        raise bad_request(f"Minimum payout amount is R{MINIMUM_PAYOUT}")

    user.affiliate_pending_payouts = pending - amount
    payout = AffiliatePayout(
        user_id=user.id,
        amount=amount,
        payment_method=payload.payment_method,
        payment_details=payload.payment_details,
    )
    db.add(payout)
    await db.commit()

    logger.info(
        "Payout requested by %s",
        user.username,
        extra={
            "extra_fields": {
                "payout_id": str(payout.id),
                "amount": str(amount),
                "remaining": str(user.affiliate_pending_payouts),
            }
        },
    )
    return {
        "message": "Payout request submitted successfully",
        "payout": PayoutResponse.model_validate(payout),
        "amount": amount,
        "payment_method": payload.payment_method,
        "status": payout.status.value,
        "estimated_processing_time": "3-5 business days",
    }


@router.get("/analytics")
async def affiliate_analytics(
    timeframe: Literal["7d", "30d", "90d", "1y"] = "30d",
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Referrals and commissions per day over ``timeframe``."""
    require_affiliate(current_user)
    start = timeframe_start(timeframe)

    referral_rows = await db.execute(
        select(User.created_at, User.subscription_plan).where(
            User.referred_by_id == current_user.id, User.created_at >= start
        )
    )
    referrals_by_day = defaultdict(lambda: {"referrals": 0, "conversions": 0})
    for created_at, plan in referral_rows.all():
        day = referrals_by_day[as_utc(created_at).date().isoformat()]
        day["referrals"] += 1
        if plan != SubscriptionPlan.FREE:
            day["conversions"] += 1

    order_rows = await db.execute(
        select(Order.created_at, Order.commission_amount, Order.total).where(
            *_commission_filters(current_user.id), Order.created_at >= start
        )
    )
    commissions_by_day = defaultdict(
        lambda: {"orders": 0, "commission": Decimal("0"), "revenue": Decimal("0")}
    )
    for created_at, commission, total in order_rows.all():
        day = commissions_by_day[as_utc(created_at).date().isoformat()]
        day["orders"] += 1
        day["commission"] += to_money(commission)
        day["revenue"] += to_money(total)

    total_referrals = (
        await db.execute(
            select(func.count(AffiliateReferral.id)).where(
                AffiliateReferral.referrer_id == current_user.id
            )
        )
    ).scalar_one()

    return {
        "timeframe": timeframe,
        "referral_analytics": [
            {"date": day, **referrals_by_day[day]} for day in sorted(referrals_by_day)
        ],
        "commission_analytics": [
            {"date": day, **commissions_by_day[day]}
            for day in sorted(commissions_by_day)
        ],
        "summary": {
            "total_referrals": total_referrals,
            "total_earnings": current_user.affiliate_total_earnings,
            "pending_payouts": current_user.affiliate_pending_payouts,
        },
    }
