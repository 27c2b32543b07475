"""Allowed payment-status transitions."""

from fastapi import HTTPException, status
from services.storefront_service.models import PaymentStatus

TRANSITIONS: dict[PaymentStatus, frozenset[PaymentStatus]] = {
    PaymentStatus.PENDING: frozenset({PaymentStatus.COMPLETED, PaymentStatus.FAILED}),
    PaymentStatus.COMPLETED: frozenset({PaymentStatus.REFUNDED}),
    PaymentStatus.FAILED: frozenset(),
    PaymentStatus.REFUNDED: frozenset(),
}


class InvalidPaymentTransition(HTTPException):
    def __init__(self, current: PaymentStatus, target: PaymentStatus):
        self.current = current
        self.target = target
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Cannot move payment from {current.value} to {target.value}",
        )


def can_transition(current: PaymentStatus, target: PaymentStatus) -> bool:
    return PaymentStatus(target) in TRANSITIONS.get(PaymentStatus(current), frozenset())


def ensure_transition(current: PaymentStatus, target: PaymentStatus) -> PaymentStatus:
    """Return ``target`` if the move is allowed, raise otherwise."""
    current = PaymentStatus(current)
    target = PaymentStatus(target)
    if not can_transition(current, target):
        raise InvalidPaymentTransition(current, target)
    return target
