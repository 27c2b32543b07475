"""Unit tests for payment status transitions."""

import pytest
from fastapi import HTTPException
from services.storefront_service.models import PaymentStatus
from services.storefront_service.services.payment_state import (
    InvalidPaymentTransition,
    can_transition,
    ensure_transition,
)


@pytest.mark.unit
@pytest.mark.parametrize(
    "current, target",
    [
        (PaymentStatus.PENDING, PaymentStatus.COMPLETED),
        (PaymentStatus.PENDING, PaymentStatus.FAILED),
        (PaymentStatus.COMPLETED, PaymentStatus.REFUNDED),
    ],
)
def test_allowed_transitions(current, target):
    assert can_transition(current, target)
    assert ensure_transition(current, target) == target


@pytest.mark.unit
@pytest.mark.parametrize(
    "current, target",
    [
        (PaymentStatus.PENDING, PaymentStatus.REFUNDED),
        (PaymentStatus.COMPLETED, PaymentStatus.FAILED),
        (PaymentStatus.COMPLETED, PaymentStatus.COMPLETED),
        (PaymentStatus.FAILED, PaymentStatus.COMPLETED),
        (PaymentStatus.REFUNDED, PaymentStatus.COMPLETED),
        (PaymentStatus.REFUNDED, PaymentStatus.REFUNDED),
    ],
)
def test_rejected_transitions(current, target):
    assert not can_transition(current, target)
    with pytest.raises(InvalidPaymentTransition) as exc_info:
        ensure_transition(current, target)
    assert isinstance(exc_info.value, HTTPException)
    assert exc_info.value.status_code == 400


@pytest.mark.unit
def test_transitions_accept_raw_values():
    assert ensure_transition("pending", "completed") == PaymentStatus.COMPLETED
