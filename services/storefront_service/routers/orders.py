"""Orders router: customer history, store order management, refunds."""

import uuid
from collections import defaultdict
from datetime import timedelta
from decimal import Decimal
from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from libs.common.datetime_utils import as_utc, timeframe_start, utc_now
from libs.common.logging import get_logger
from libs.db.session import get_async_db
from services.storefront_service.dependencies import get_current_user
from services.storefront_service.models import (
    Order,
    OrderStatus,
    PaymentStatus,
    Store,
    User,
)
from services.storefront_service.routers._helpers import (
    MAX_PAGE_SIZE,
    bad_request,
    merge_dict,
    not_found,
    pagination,
)
from services.storefront_service.schemas import (
    OrderResponse,
    OrderStatusUpdate,
    RefundRequest,
)
from services.storefront_service.services.ownership import (
    ResourceKind,
    can_mutate,
    require_owned,
)
from services.storefront_service.services.payment_state import ensure_transition
from services.storefront_service.services.pricing import (
    derive_order_pricing,
    to_money,
)
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

router = APIRouter(tags=["orders"])

ESTIMATED_DELIVERY_DAYS = 5

Timeframe = Literal["7d", "30d", "90d", "1y"]


async def _order_page(db: AsyncSession, filters: list, page: int, limit: int):
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
    orders = [OrderResponse.model_validate(o) for o in result.scalars().all()]
    return orders, pagination(total, page, limit)


async def _store_summary(db: AsyncSession, store_id: uuid.UUID) -> dict:
    result = await db.execute(
        select(Order.status, func.count(Order.id), func.sum(Order.total))
        .where(Order.store_id == store_id)
        .group_by(Order.status)
    )
    counts = {}
    revenue = Decimal("0")
    for order_status, count, total in result.all():
        counts[OrderStatus(order_status)] = count
        revenue += to_money(total)
    return {
        "total_orders": sum(counts.values()),
        "total_revenue": revenue,
        "pending_orders": counts.get(OrderStatus.PENDING, 0),
        "processing_orders": counts.get(OrderStatus.PROCESSING, 0),
        "shipped_orders": counts.get(OrderStatus.SHIPPED, 0),
        "completed_orders": counts.get(OrderStatus.DELIVERED, 0),
    }


async def _lock_order(db: AsyncSession, order_id: uuid.UUID) -> Order:
    result = await db.execute(
        select(Order)
        .where(Order.id == order_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return result.scalar_one()


@router.get("")
async def list_my_orders(
    status_filter: Optional[OrderStatus] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=MAX_PAGE_SIZE),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Orders placed by the current user."""
    filters = [Order.customer_user_id == current_user.id]
    if status_filter:
        filters.append(Order.status == status_filter)
    orders, meta = await _order_page(db, filters, page, limit)
    return {"orders": orders, **meta}


@router.get("/store/{store_id}")
async def list_store_orders(
    status_filter: Optional[OrderStatus] = Query(None, alias="status"),
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=MAX_PAGE_SIZE),
    store: Store = Depends(require_owned(ResourceKind.STORE, "store_id")),
    db: AsyncSession = Depends(get_async_db),
):
    filters = [Order.store_id == store.id]
    if status_filter:
        filters.append(Order.status == status_filter)
    if search:
        pattern = f"%{search}%"
        filters.append(
            or_(
                Order.order_number.ilike(pattern),
                Order.customer_email.ilike(pattern),
                Order.customer_first_name.ilike(pattern),
                Order.customer_last_name.ilike(pattern),
            )
        )
    orders, meta = await _order_page(db, filters, page, limit)
    return {"orders": orders, **meta, "summary": await _store_summary(db, store.id)}


@router.get("/analytics/overview")
async def order_analytics(
    store_id: uuid.UUID,
    timeframe: Timeframe = "30d",
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Totals, status counts and a per-day breakdown for one store."""
    store = await db.get(Store, store_id)
    if store is None:
        raise not_found("Store not found")
    if not await can_mutate(db, current_user, ResourceKind.STORE, store_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized"
        )

    start = timeframe_start(timeframe)
    result = await db.execute(
        select(Order.created_at, Order.total, Order.status)
        .where(Order.store_id == store_id, Order.created_at >= start)
        .order_by(Order.created_at)
    )
    rows = result.all()

    daily = defaultdict(lambda: {"orders": 0, "revenue": Decimal("0")})
    statuses = defaultdict(int)
    revenue = Decimal("0")
    for created_at, total, order_status in rows:
        day = as_utc(created_at).date().isoformat()
        daily[day]["orders"] += 1
        daily[day]["revenue"] += to_money(total)
        statuses[OrderStatus(order_status)] += 1
        revenue += to_money(total)

    count = len(rows)
    return {
        "overview": {
            "total_orders": count,
            "total_revenue": revenue,
            "average_order_value": to_money(revenue / count) if count else 0,
            "completed_orders": statuses[OrderStatus.DELIVERED],
            "pending_orders": statuses[OrderStatus.PENDING],
            "cancelled_orders": statuses[OrderStatus.CANCELLED],
        },
        "daily_stats": [{"date": day, **daily[day]} for day in sorted(daily)],
        "timeframe": timeframe,
    }


@router.get("/{order_id}")
async def get_order(
    order_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Visible to the order's customer and to the store owner."""
    order = await db.get(Order, order_id)
    if order is None:
        raise not_found("Order not found")

    is_customer = order.customer_user_id == current_user.id
    if not is_customer and not await can_mutate(
        db, current_user, ResourceKind.ORDER, order_id
    ):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not authorized to view this order",
        )
    return {"order": OrderResponse.model_validate(order)}


@router.put("/{order_id}/status")
async def update_order_status(
    payload: OrderStatusUpdate,
    order: Order = Depends(require_owned(ResourceKind.ORDER, "order_id")),
    db: AsyncSession = Depends(get_async_db),
):
    if payload.status == OrderStatus.REFUNDED:
        raise bad_request("Invalid status")

    old_status = order.status
    order.status = payload.status

    shipping = dict(order.shipping or {})
    if payload.tracking_number:
        shipping["tracking_number"] = payload.tracking_number
    if payload.status == OrderStatus.SHIPPED and not shipping.get(
        "estimated_delivery"
    ):
        shipping["estimated_delivery"] = (
            utc_now() + timedelta(days=ESTIMATED_DELIVERY_DAYS)
        ).isoformat()
    if shipping != (order.shipping or {}):
        order.shipping = merge_dict(order.shipping, shipping)

    if payload.notes:
        order.notes = payload.notes

    derive_order_pricing(order)
    await db.commit()

    logger.info(
        "Order %s status changed from %s to %s",
        order.order_number,
        old_status.value,
        payload.status.value,
    )
    return {
        "message": "Order status updated successfully",
        "order": OrderResponse.model_validate(order),
    }


@router.post("/{order_id}/refund")
async def refund_order(
    payload: RefundRequest,
    order: Order = Depends(require_owned(ResourceKind.ORDER, "order_id")),
    db: AsyncSession = Depends(get_async_db),
):
    """Refund a paid order, in full by default."""
    order = await _lock_order(db, order.id)

    if order.payment_status != PaymentStatus.COMPLETED:
        raise bad_request("Cannot refund unpaid order")

    # Missing or zero amount refunds the full total
    amount = to_money(payload.amount or order.total)
    if amount <= 0:
        raise bad_request("Refund amount must be greater than zero")
    if amount > to_money(order.total):
        raise bad_request("Refund amount cannot exceed order total")

    order.payment_status = ensure_transition(
        order.payment_status, PaymentStatus.REFUNDED
    )
    order.status = OrderStatus.REFUNDED
    order.refund_amount = amount
    order.refunded_at = utc_now()
    note = f"Refund: {payload.reason or 'No reason provided'}"
    order.notes = f"{order.notes}\n{note}" if order.notes else note

    derive_order_pricing(order)
    await db.commit()

    logger.info(
        "Refunded order %s",
        order.order_number,
        extra={"extra_fields": {"order_id": str(order.id), "amount": str(amount)}},
    )
    return {
        "message": "Refund processed successfully",
        "order": OrderResponse.model_validate(order),
        "refund_amount": amount,
    }
