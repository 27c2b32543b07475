"""PayFast IPN reconciliation: one locked, idempotent transition per order."""

import enum
import uuid
from typing import Mapping

from fastapi import HTTPException, status
from libs.common.datetime_utils import utc_now
from libs.common.logging import get_logger
from services.storefront_service.models import (
    AffiliateReferral,
    Order,
    OrderStatus,
    PaymentStatus,
    Product,
    Store,
    User,
)
from services.storefront_service.services.payfast import verify_signature
from services.storefront_service.services.payment_state import ensure_transition
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

PAYFAST_COMPLETE = "COMPLETE"


class ReconciliationOutcome(str, enum.Enum):
    COMPLETED = "completed"
    FAILED = "failed"
    ALREADY_PROCESSED = "already_processed"


def _parse_order_id(raw) -> uuid.UUID | None:
    try:
        return uuid.UUID(str(raw))
    except (TypeError, ValueError):
        return None


async def _apply_completion_effects(db: AsyncSession, order: Order) -> None:
    """Bump product, store and referrer counters in SQL."""
    for item in order.items:
        if item.product_id is None:
            continue
        await db.execute(
            update(Product)
            .where(Product.id == item.product_id)
            .values(
                sales=Product.sales + item.quantity,
                revenue=Product.revenue + item.subtotal,
            )
        )

    await db.execute(
        update(Store)
        .where(Store.id == order.store_id)
        .values(
            analytics_orders=Store.analytics_orders + 1,
            analytics_revenue=Store.analytics_revenue + order.total,
        )
    )

    commission = order.commission_amount
    if order.affiliate_referrer_id is None or not commission:
        return

    await db.execute(
        update(User)
        .where(User.id == order.affiliate_referrer_id)
        .values(
            affiliate_total_earnings=User.affiliate_total_earnings + commission,
            affiliate_pending_payouts=User.affiliate_pending_payouts + commission,
        )
    )
    if order.customer_user_id is not None:
        await db.execute(
            update(AffiliateReferral)
            .where(
                AffiliateReferral.referrer_id == order.affiliate_referrer_id,
                AffiliateReferral.referred_user_id == order.customer_user_id,
            )
            .values(
                commission_earned=AffiliateReferral.commission_earned + commission
            )
        )


async def apply_payment_notification(
    db: AsyncSession,
    payload: Mapping[str, str],
    passphrase: str | None = "",
) -> ReconciliationOutcome:
    """
    Reconcile a PayFast IPN against its order.

    Raises 400 on a signature mismatch and 404 when the order is unknown.
    A notification for an order whose payment is no longer pending is
    acknowledged without touching any state.
    """
    if not verify_signature(payload, passphrase):
        logger.warning(
            "PayFast signature verification failed",
            extra={"extra_fields": {"m_payment_id": payload.get("m_payment_id")}},
        )
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid signature"
        )

    order_id = _parse_order_id(payload.get("custom_str1"))
    order = None
    if order_id is not None:
        # Lock the order row so concurrent notifications serialize here
        result = await db.execute(
            select(Order).where(Order.id == order_id).with_for_update()
        )
        order = result.scalar_one_or_none()
    if order is None:
        logger.error(
            "PayFast notification for unknown order %s", payload.get("custom_str1")
        )
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Order not found"
        )

    if order.payment_status != PaymentStatus.PENDING:
        logger.info(
            f"Order {order.order_number} already processed "
            f"(payment_status={order.payment_status.value}), skipping",
            extra={
                "extra_fields": {
                    "order_id": str(order.id),
                    "payment_status": payload.get("payment_status"),
                }
            },
        )
        return ReconciliationOutcome.ALREADY_PROCESSED

    pf_payment_id = payload.get("pf_payment_id")
    if payload.get("payment_status") == PAYFAST_COMPLETE:
        order.payment_status = ensure_transition(
            order.payment_status, PaymentStatus.COMPLETED
        )
        order.transaction_id = pf_payment_id
        order.payfast_payment_id = pf_payment_id
        order.paid_at = utc_now()
        order.status = OrderStatus.PROCESSING
        await _apply_completion_effects(db, order)
        outcome = ReconciliationOutcome.COMPLETED
    else:
        order.payment_status = ensure_transition(
            order.payment_status, PaymentStatus.FAILED
        )
        order.status = OrderStatus.CANCELLED
        outcome = ReconciliationOutcome.FAILED

    db.add(order)
    await db.commit()

    logger.info(
        "Order %s payment %s",
        order.order_number,
        outcome.value,
        extra={
            "extra_fields": {
                "order_id": str(order.id),
                "pf_payment_id": pf_payment_id,
                "total": str(order.total),
            }
        },
    )
    return outcome
