"""Integration tests for checkout and the PayFast notification endpoint."""

import re
import uuid
from decimal import Decimal

import pytest
from services.storefront_service.models import (
    Order,
    OrderStatus,
    PaymentStatus,
)
from services.storefront_service.services.payfast import verify_signature
from sqlalchemy import select
from tests.conftest import (
    auth_headers,
    make_order,
    make_product,
    make_store,
    make_user,
    signed_notification,
)
from tests.factories import AffiliateFactory

ORDER_NUMBER_RE = re.compile(r"^M7R-\d{6}-[A-Z0-9]{4}$")


def _checkout_payload(store, product, quantity=2, **overrides):
    payload = {
        "store_id": str(store.id),
        "items": [{"product_id": str(product.id), "quantity": quantity}],
        "customer": {
            "email": "Buyer@Test.com",
            "first_name": "Thandi",
            "last_name": "Nkosi",
        },
        "shipping": {"address": {"city": "Johannesburg", "country": "ZA"}},
        "payment_method": "payfast",
    }
    payload.update(overrides)
    return payload


async def _load_order(db_session, order_id) -> Order:
    result = await db_session.execute(
        select(Order)
        .where(Order.id == uuid.UUID(str(order_id)))
        .execution_options(populate_existing=True)
    )
    return result.scalar_one()


# ---------------------------------------------------------------------------
# Checkout
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_guest_checkout_prices_order(client, db_session):
    owner = await make_user(db_session)
    store = await make_store(db_session, owner, name="Kasi Kicks")
    product = await make_product(db_session, store, price_amount=Decimal("50.00"))

    response = await client.post(
        "/api/payments/create-order", json=_checkout_payload(store, product)
    )

    assert response.status_code == 201, response.text
    data = response.json()
    assert data["message"] == "Order created successfully"
    assert ORDER_NUMBER_RE.match(data["order"]["order_number"])
    assert Decimal(str(data["order"]["total"])) == Decimal("100.00")
    assert data["order"]["currency"] == "ZAR"

    payfast = data["payment"]
    assert payfast["data"]["amount"] == "100.00"
    assert payfast["data"]["custom_str1"] == data["order"]["id"]
    assert payfast["data"]["item_description"] == "Order from Kasi Kicks"
    assert verify_signature(payfast["data"], "")

    order = await _load_order(db_session, data["order"]["id"])
    assert order.subtotal == Decimal("100.00")
    assert order.total == Decimal("100.00")
    assert order.customer_email == "buyer@test.com"
    assert order.customer_user_id is None
    assert order.status == OrderStatus.PENDING
    assert order.payment_status == PaymentStatus.PENDING
    assert order.items[0].name == product.name
    assert order.items[0].subtotal == Decimal("100.00")
    assert order.billing == order.shipping


@pytest.mark.asyncio
@pytest.mark.integration
async def test_checkout_applies_shipping_and_exclusive_tax(client, db_session):
    owner = await make_user(db_session)
    store = await make_store(db_session, owner)
    store.settings = {
        **store.settings,
        "shipping": {"enabled": True, "rates": [{"name": "Courier", "price": 75}]},
        "taxes": {"enabled": True, "rate": 15, "include_in_price": False},
    }
    await db_session.commit()
    product = await make_product(db_session, store, price_amount=Decimal("50.00"))

    response = await client.post(
        "/api/payments/create-order", json=_checkout_payload(store, product)
    )

    assert response.status_code == 201, response.text
    order = await _load_order(db_session, response.json()["order"]["id"])
    assert order.shipping_cost == Decimal("75.00")
    assert order.tax == Decimal("15.00")
    assert order.total == Decimal("190.00")


@pytest.mark.asyncio
@pytest.mark.integration
async def test_checkout_by_logged_in_customer_with_referral(client, db_session):
    affiliate = AffiliateFactory.create()
    db_session.add(affiliate)
    await db_session.commit()
    customer = await make_user(db_session)
    owner = await make_user(db_session)
    store = await make_store(db_session, owner)
    product = await make_product(db_session, store, price_amount=Decimal("50.00"))

    response = await client.post(
        "/api/payments/create-order",
        headers=auth_headers(customer),
        json=_checkout_payload(
            store, product, referral_code=affiliate.referral_code
        ),
    )

    assert response.status_code == 201, response.text
    order = await _load_order(db_session, response.json()["order"]["id"])
    assert order.customer_user_id == customer.id
    assert order.affiliate_referrer_id == affiliate.id
    assert order.commission_rate == Decimal("0.05")
    assert order.commission_amount == Decimal("5.00")


@pytest.mark.asyncio
@pytest.mark.integration
async def test_checkout_rejects_foreign_or_inactive_products(client, db_session):
    owner = await make_user(db_session)
    store = await make_store(db_session, owner)
    other_store = await make_store(db_session, owner)
    foreign = await make_product(db_session, other_store)
    inactive = await make_product(db_session, store, is_active=False)

    for product in (foreign, inactive):
        response = await client.post(
            "/api/payments/create-order", json=_checkout_payload(store, product)
        )
        assert response.status_code == 400
        assert response.json()["message"] == (
            f"Product {product.id} not found or inactive"
        )


@pytest.mark.asyncio
@pytest.mark.integration
async def test_checkout_validation_and_missing_store(client, db_session):
    owner = await make_user(db_session)
    store = await make_store(db_session, owner)
    product = await make_product(db_session, store)

    empty_items = await client.post(
        "/api/payments/create-order",
        json=_checkout_payload(store, product, items=[]),
    )
    zero_quantity = await client.post(
        "/api/payments/create-order",
        json=_checkout_payload(store, product, quantity=0),
    )
    missing_store = await client.post(
        "/api/payments/create-order",
        json=_checkout_payload(store, product, store_id=str(uuid.uuid4())),
    )

    assert empty_items.status_code == 400
    assert zero_quantity.status_code == 400
    assert missing_store.status_code == 404


@pytest.mark.asyncio
@pytest.mark.integration
async def test_guest_checkout_disabled_requires_login(client, db_session):
    owner = await make_user(db_session)
    store = await make_store(db_session, owner)
    store.settings = {**store.settings, "allow_guest_checkout": False}
    await db_session.commit()
    product = await make_product(db_session, store)

    response = await client.post(
        "/api/payments/create-order", json=_checkout_payload(store, product)
    )

    assert response.status_code == 401


@pytest.mark.asyncio
@pytest.mark.integration
async def test_manual_payment_returns_instructions(client, db_session):
    owner = await make_user(db_session)
    store = await make_store(db_session, owner)
    product = await make_product(db_session, store)

    response = await client.post(
        "/api/payments/create-order",
        json=_checkout_payload(store, product, payment_method="manual"),
    )

    assert response.status_code == 201
    assert "message" in response.json()["payment"]


# ---------------------------------------------------------------------------
# PayFast notify
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_notify_complete_then_duplicate(client, db_session):
    owner = await make_user(db_session)
    store = await make_store(db_session, owner)
    product = await make_product(db_session, store, price_amount=Decimal("50.00"))
    order = await make_order(db_session, store, product, quantity=2)
    payload = signed_notification(order)

    first = await client.post("/api/payments/payfast/notify", data=payload)
    second = await client.post("/api/payments/payfast/notify", data=payload)

    assert first.status_code == 200
    assert first.text == "OK"
    assert second.status_code == 200
    await db_session.refresh(store)
    await db_session.refresh(order)
    assert order.payment_status == PaymentStatus.COMPLETED
    assert order.status == OrderStatus.PROCESSING
    assert store.analytics_orders == 1
    assert store.analytics_revenue == Decimal("100.00")


@pytest.mark.asyncio
@pytest.mark.integration
async def test_notify_bad_signature_changes_nothing(client, db_session):
    owner = await make_user(db_session)
    store = await make_store(db_session, owner)
    product = await make_product(db_session, store)
    order = await make_order(db_session, store, product)
    payload = signed_notification(order)
    payload["amount_gross"] = "0.01"

    response = await client.post("/api/payments/payfast/notify", data=payload)

    assert response.status_code == 400
    assert response.json()["message"] == "Invalid signature"
    await db_session.refresh(order)
    assert order.payment_status == PaymentStatus.PENDING


@pytest.mark.asyncio
@pytest.mark.integration
async def test_notify_failed_payment_cancels(client, db_session):
    owner = await make_user(db_session)
    store = await make_store(db_session, owner)
    product = await make_product(db_session, store)
    order = await make_order(db_session, store, product)

    response = await client.post(
        "/api/payments/payfast/notify",
        data=signed_notification(order, payment_status="FAILED"),
    )

    assert response.status_code == 200
    await db_session.refresh(order)
    assert order.payment_status == PaymentStatus.FAILED
    assert order.status == OrderStatus.CANCELLED


@pytest.mark.asyncio
@pytest.mark.integration
async def test_public_order_status(client, db_session):
    owner = await make_user(db_session)
    store = await make_store(db_session, owner)
    product = await make_product(db_session, store)
    order = await make_order(db_session, store, product)

    response = await client.get(f"/api/payments/order/{order.id}")
    missing = await client.get(f"/api/payments/order/{uuid.uuid4()}")

    assert response.status_code == 200
    data = response.json()
    assert data["order"]["order_number"] == order.order_number
    assert data["store"]["name"] == store.name
    assert missing.status_code == 404
