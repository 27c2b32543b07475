"""Payments router: checkout, PayFast IPN and public order status."""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import PlainTextResponse
from libs.common.config import get_settings
from libs.common.logging import get_logger
from libs.db.session import get_async_db
from services.storefront_service.dependencies import get_optional_user
from services.storefront_service.models import Order, PaymentMethod, Store, User
from services.storefront_service.routers._helpers import not_found
from services.storefront_service.schemas import (
    CreateOrderRequest,
    CreateOrderResponse,
    OrderResponse,
)
from services.storefront_service.services.checkout import build_order
from services.storefront_service.services.payfast import build_payment_request
from services.storefront_service.services.reconciliation import (
    apply_payment_notification,
)
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

router = APIRouter(tags=["payments"])


def _payment_payload(order: Order, store: Store) -> dict:
    """Client-side payment instructions for a freshly created order."""
    if order.payment_method == PaymentMethod.PAYFAST:
        return build_payment_request(
            order_id=str(order.id),
            order_number=order.order_number,
            amount=order.total,
            store_id=str(store.id),
            store_name=store.name,
            first_name=order.customer_first_name,
            last_name=order.customer_last_name,
            email=order.customer_email,
        ).to_dict()
    if order.payment_method == PaymentMethod.STRIPE:
        return {"message": "Stripe integration coming soon"}
    return {"message": "The store will contact you with payment instructions"}


@router.post(
    "/create-order",
    response_model=CreateOrderResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_order(
    payload: CreateOrderRequest,
    current_user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_async_db),
):
    """
    Create a pending order and return what the client needs to pay for it.

    Anonymous callers may check out only when the store allows guests.
    """
    store = await db.get(Store, payload.store_id)
    if store is None or not store.is_active:
        raise not_found("Store not found")

    allow_guests = (store.settings or {}).get("allow_guest_checkout", True)
    if current_user is None and not allow_guests:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Please log in to place an order with this store",
        )

    order = await build_order(db, store, payload, customer=current_user)
    db.add(order)
    await db.commit()

    logger.info(
        "Created order %s",
        order.order_number,
        extra={
            "extra_fields": {
                "order_id": str(order.id),
                "store_id": str(store.id),
                "total": str(order.total),
                "payment_method": order.payment_method.value,
                "guest": current_user is None,
            }
        },
    )
    return {
        "message": "Order created successfully",
        "order": {
            "id": order.id,
            "order_number": order.order_number,
            "total": order.total,
            "currency": order.currency,
        },
        "payment": _payment_payload(order, store),
    }


@router.post("/payfast/notify", response_class=PlainTextResponse)
async def payfast_notify(
    request: Request,
    db: AsyncSession = Depends(get_async_db),
):
    """PayFast IPN. Always answers ``OK`` once the notification is accepted."""
    form = await request.form()
    payload = {key: str(value) for key, value in form.items()}
    await apply_payment_notification(db, payload, get_settings().PAYFAST_PASSPHRASE)
    return PlainTextResponse("OK")


@router.get("/order/{order_id}")
async def get_order_status(
    order_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_db),
):
    """Public order view for the payment return page."""
    order = await db.get(Order, order_id)
    if order is None:
        raise not_found("Order not found")
    store = await db.get(Store, order.store_id)
    return {
        "order": OrderResponse.model_validate(order),
        "store": {"id": store.id, "name": store.name} if store else None,
    }
