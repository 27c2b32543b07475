"""Unit tests for PayFast IPN reconciliation.

Tests call apply_payment_notification directly with the db_session fixture.
"""

import uuid
from decimal import Decimal

import pytest
from fastapi import HTTPException
from services.storefront_service.models import (
    AffiliateReferral,
    OrderStatus,
    PaymentStatus,
)
from services.storefront_service.services.reconciliation import (
    ReconciliationOutcome,
    apply_payment_notification,
)
from tests.conftest import (
    make_order,
    make_product,
    make_store,
    make_user,
    signed_notification,
)
from tests.factories import AffiliateFactory

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def _setup(db, **order_overrides):
    owner = await make_user(db)
    store = await make_store(db, owner)
    product = await make_product(db, store, price_amount=Decimal("50.00"))
    order = await make_order(db, store, product, quantity=2, **order_overrides)
    return store, product, order


async def _reload(db, *rows):
    for row in rows:
        await db.refresh(row)


# ---------------------------------------------------------------------------
# Completion
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_complete_notification_marks_order_paid(db_session):
    store, product, order = await _setup(db_session)

    outcome = await apply_payment_notification(
        db_session, signed_notification(order), ""
    )

    assert outcome == ReconciliationOutcome.COMPLETED
    await _reload(db_session, order, store, product)
    assert order.payment_status == PaymentStatus.COMPLETED
    assert order.status == OrderStatus.PROCESSING
    assert order.transaction_id == "1089250"
    assert order.payfast_payment_id == "1089250"
    assert order.paid_at is not None
    assert store.analytics_orders == 1
    assert store.analytics_revenue == Decimal("100.00")
    assert product.sales == 2
    assert product.revenue == Decimal("100.00")


@pytest.mark.asyncio
@pytest.mark.unit
async def test_duplicate_notification_is_a_no_op(db_session):
    store, product, order = await _setup(db_session)
    payload = signed_notification(order)

    await apply_payment_notification(db_session, payload, "")
    outcome = await apply_payment_notification(db_session, payload, "")

    assert outcome == ReconciliationOutcome.ALREADY_PROCESSED
    await _reload(db_session, store, product)
    assert store.analytics_orders == 1
    assert store.analytics_revenue == Decimal("100.00")
    assert product.sales == 2


@pytest.mark.asyncio
@pytest.mark.unit
async def test_failure_after_completion_is_ignored(db_session):
    _, _, order = await _setup(db_session)

    await apply_payment_notification(db_session, signed_notification(order), "")
    outcome = await apply_payment_notification(
        db_session, signed_notification(order, payment_status="FAILED"), ""
    )

    assert outcome == ReconciliationOutcome.ALREADY_PROCESSED
    await _reload(db_session, order)
    assert order.payment_status == PaymentStatus.COMPLETED
    assert order.status == OrderStatus.PROCESSING


@pytest.mark.asyncio
@pytest.mark.unit
async def test_non_complete_notification_cancels_order(db_session):
    store, _, order = await _setup(db_session)

    outcome = await apply_payment_notification(
        db_session, signed_notification(order, payment_status="CANCELLED"), ""
    )

    assert outcome == ReconciliationOutcome.FAILED
    await _reload(db_session, order, store)
    assert order.payment_status == PaymentStatus.FAILED
    assert order.status == OrderStatus.CANCELLED
    assert store.analytics_orders == 0


# ---------------------------------------------------------------------------
# Rejections
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_bad_signature_is_rejected_without_changes(db_session):
    store, _, order = await _setup(db_session)
    payload = signed_notification(order)
    payload["signature"] = "0" * 32

    with pytest.raises(HTTPException) as exc_info:
        await apply_payment_notification(db_session, payload, "")

    assert exc_info.value.status_code == 400
    await _reload(db_session, order, store)
    assert order.payment_status == PaymentStatus.PENDING
    assert store.analytics_orders == 0


@pytest.mark.asyncio
@pytest.mark.unit
async def test_passphrase_mismatch_is_rejected(db_session):
    _, _, order = await _setup(db_session)

    with pytest.raises(HTTPException) as exc_info:
        await apply_payment_notification(
            db_session, signed_notification(order, passphrase="right"), "wrong"
        )
    assert exc_info.value.status_code == 400


@pytest.mark.asyncio
@pytest.mark.unit
async def test_unknown_order_is_not_found(db_session):
    _, _, order = await _setup(db_session)
    payload = signed_notification(order, custom_str1=str(uuid.uuid4()))

    with pytest.raises(HTTPException) as exc_info:
        await apply_payment_notification(db_session, payload, "")
    assert exc_info.value.status_code == 404


# ---------------------------------------------------------------------------
# Affiliate commission
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_completion_credits_referrer_commission(db_session):
    affiliate = AffiliateFactory.create()
    db_session.add(affiliate)
    await db_session.commit()
    customer = await make_user(db_session, referred_by_id=affiliate.id)
    referral = AffiliateReferral(
        referrer_id=affiliate.id,
        referred_user_id=customer.id,
        commission_earned=Decimal("0"),
    )
    db_session.add(referral)
    await db_session.commit()

    _, _, order = await _setup(
        db_session,
        customer_user_id=customer.id,
        affiliate_referrer_id=affiliate.id,
    )
    assert order.commission_amount == Decimal("5.00")

    await apply_payment_notification(db_session, signed_notification(order), "")

    await _reload(db_session, affiliate, referral)
    assert affiliate.affiliate_total_earnings == Decimal("5.00")
    assert affiliate.affiliate_pending_payouts == Decimal("5.00")
    assert referral.commission_earned == Decimal("5.00")
