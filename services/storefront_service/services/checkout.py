"""Order construction for checkout: items, pricing and affiliate attribution."""

from typing import Optional

from fastapi import HTTPException, status
from libs.common.logging import get_logger
from services.storefront_service.models import (
    Order,
    OrderItem,
    PaymentStatus,
    Product,
    Store,
    User,
)
from services.storefront_service.schemas import CreateOrderRequest
from services.storefront_service.services.pricing import (
    COMMISSION_RATE,
    derive_order_pricing,
    generate_order_number,
    line_subtotal,
    shipping_cost_for,
    sum_subtotals,
    tax_for,
    to_money,
)
from sqlalchemy import exists, select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

ORDER_NUMBER_ATTEMPTS = 5


async def unique_order_number(db: AsyncSession) -> str:
    for _ in range(ORDER_NUMBER_ATTEMPTS):
        candidate = generate_order_number()
        taken = await db.execute(
            select(exists().where(Order.order_number == candidate))
        )
        if not taken.scalar():
            return candidate
    raise RuntimeError("Could not allocate a unique order number")


async def resolve_referrer(
    db: AsyncSession, referral_code: Optional[str]
) -> Optional[User]:
    if not referral_code:
        return None
    result = await db.execute(select(User).where(User.referral_code == referral_code))
    return result.scalar_one_or_none()


async def build_order(
    db: AsyncSession,
    store: Store,
    payload: CreateOrderRequest,
    customer: Optional[User] = None,
) -> Order:
    """
    Price the requested items against ``store`` and return an unsaved Order.

    Every product must exist, be active and belong to ``store``; otherwise
    the request is rejected with 400.
    """
    order_items = []
    for position, requested in enumerate(payload.items):
        product = await db.get(Product, requested.product_id)
        if product is None or not product.is_active or product.store_id != store.id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Product {requested.product_id} not found or inactive",
            )
        order_items.append(
            OrderItem(
                product_id=product.id,
                position=position,
                name=product.name,
                price=to_money(product.price_amount),
                quantity=requested.quantity,
                variant=requested.variant or {},
                subtotal=line_subtotal(product.price_amount, requested.quantity),
            )
        )

    store_settings = store.settings or {}
    subtotal = sum_subtotals(item.subtotal for item in order_items)

    order = Order(
        order_number=await unique_order_number(db),
        store_id=store.id,
        customer_user_id=customer.id if customer else None,
        customer_email=payload.customer.email.lower(),
        customer_first_name=payload.customer.first_name,
        customer_last_name=payload.customer.last_name,
        customer_phone=payload.customer.phone,
        shipping_cost=shipping_cost_for(store_settings),
        tax=tax_for(subtotal, store_settings),
        discount=to_money(0),
        currency=store_settings.get("currency") or "ZAR",
        shipping=payload.shipping,
        billing=payload.billing or payload.shipping,
        payment_method=payload.payment_method,
        payment_status=PaymentStatus.PENDING,
        notes=payload.notes,
    )
    order.items = order_items

    referrer = await resolve_referrer(db, payload.referral_code)
    if referrer is not None:
        order.affiliate_referrer_id = referrer.id
        order.commission_rate = COMMISSION_RATE
    elif payload.referral_code:
        logger.info("Ignoring unknown referral code %s", payload.referral_code)

    return derive_order_pricing(order)
