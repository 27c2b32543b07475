"""Pure pricing helpers: slugs, order numbers, totals and commission.

These run explicitly from the routers before a row is persisted. None of
them touch the database.
"""

import random
import re
import string
import time
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

from services.storefront_service.models import Order

# Fixed affiliate commission rate (5%)
COMMISSION_RATE = Decimal("0.05")

CENT = Decimal("0.01")

_SLUG_INVALID = re.compile(r"[^a-z0-9]+")


def to_money(value) -> Decimal:
    """Coerce to a Decimal rounded to cents."""
    if value is None:
        return Decimal("0.00")
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def slugify(text: str) -> str:
    """Lower-case, collapse non-alphanumerics into '-', strip edge dashes."""
    return _SLUG_INVALID.sub("-", (text or "").lower()).strip("-")


def random_suffix(
    length: int = 4, alphabet: str = string.ascii_lowercase + string.digits
) -> str:
    return "".join(random.choices(alphabet, k=length))


def generate_order_number(now_ms: Optional[int] = None) -> str:
    """Return ``M7R-<last 6 digits of epoch ms>-<4 uppercase alphanumerics>``."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    stamp = str(now_ms)[-6:].rjust(6, "0")
    suffix = random_suffix(4, string.ascii_uppercase + string.digits)
    return f"M7R-{stamp}-{suffix}"


def line_subtotal(price, quantity: int) -> Decimal:
    return to_money(to_money(price) * quantity)


def shipping_cost_for(store_settings: Optional[dict]) -> Decimal:
    """First configured rate when shipping is enabled, else zero."""
    shipping = (store_settings or {}).get("shipping") or {}
    if not shipping.get("enabled", True):
        return to_money(0)
    rates = shipping.get("rates") or []
    if not rates:
        return to_money(0)
    return to_money(rates[0].get("price", 0))


def tax_for(subtotal, store_settings: Optional[dict]) -> Decimal:
    """Exclusive tax on the subtotal; zero when disabled or price-inclusive."""
    taxes = (store_settings or {}).get("taxes") or {}
    if not taxes.get("enabled") or taxes.get("include_in_price", True):
        return to_money(0)
    rate = Decimal(str(taxes.get("rate") or 0))
    return to_money(to_money(subtotal) * rate / Decimal("100"))


def order_total(subtotal, shipping, tax, discount) -> Decimal:
    return to_money(
        to_money(subtotal) + to_money(shipping) + to_money(tax) - to_money(discount)
    )


def commission_for(total, rate: Decimal = COMMISSION_RATE) -> Decimal:
    return to_money(to_money(total) * rate)


def sum_subtotals(subtotals: Iterable[Decimal]) -> Decimal:
    return to_money(sum((to_money(s) for s in subtotals), Decimal("0")))


def derive_order_pricing(order: Order) -> Order:
    """Re-derive line subtotals, subtotal and total from the stored fields.

    Shipping, tax and discount are taken as already set on the order. While
    payment is still pending, an attributed commission follows the total.
    """
    for item in order.items:
        item.subtotal = line_subtotal(item.price, item.quantity)
    order.subtotal = sum_subtotals(item.subtotal for item in order.items)
    order.shipping_cost = to_money(order.shipping_cost)
    order.tax = to_money(order.tax)
    order.discount = to_money(order.discount)
    order.total = order_total(
        order.subtotal, order.shipping_cost, order.tax, order.discount
    )

    if order.affiliate_referrer_id is not None and _payment_pending(order):
        rate = (
            Decimal(str(order.commission_rate))
            if order.commission_rate is not None
            else COMMISSION_RATE
        )
        order.commission_rate = rate
        order.commission_amount = commission_for(order.total, rate)
    return order


def _payment_pending(order: Order) -> bool:
    status = order.payment_status
    return status is None or getattr(status, "value", status) == "pending"
