"""
PayFast integration helpers.

Provides:
- Signature generation / verification for outbound requests and IPNs
- Building the redirect payload for a newly created order
"""

import hashlib
import hmac
from dataclasses import dataclass, field
from typing import Mapping, Optional
from urllib.parse import quote

from libs.common.config import Settings, get_settings

PAYFAST_SANDBOX_URL = "https://sandbox.payfast.co.za/eng/process"
PAYFAST_LIVE_URL = "https://www.payfast.co.za/eng/process"

# Characters left unescaped, matching encodeURIComponent
_SAFE_CHARS = "-_.!~*'()"


@dataclass
class PaymentRequest:
    """Redirect payload handed to the client for a PayFast checkout."""

    url: str
    data: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {"url": self.url, "data": self.data}


def _encode(value) -> str:
    return quote(str(value).strip(), safe=_SAFE_CHARS)


def generate_signature(
    data: Mapping[str, object], passphrase: Optional[str] = ""
) -> str:
    """
    MD5 over ``key=value`` pairs sorted by key.

    Empty values are skipped, each value is trimmed and URL-encoded, and
    ``passphrase`` is appended last when set.
    """
    pairs = [
        f"{key}={_encode(data[key])}"
        for key in sorted(data)
        if data[key] is not None and str(data[key]) != ""
    ]
    param_string = "&".join(pairs)
    if passphrase:
        param_string += f"&passphrase={_encode(passphrase)}"
    return hashlib.md5(param_string.encode("utf-8")).hexdigest()


def verify_signature(
    payload: Mapping[str, object], passphrase: Optional[str] = ""
) -> bool:
    """Check the ``signature`` field of an IPN against the other fields."""
    received = payload.get("signature")
    if not received:
        return False
    unsigned = {k: v for k, v in payload.items() if k != "signature"}
    expected = generate_signature(unsigned, passphrase)
    return hmac.compare_digest(expected, str(received))


def process_url(settings: Settings) -> str:
    return PAYFAST_SANDBOX_URL if settings.PAYFAST_SANDBOX else PAYFAST_LIVE_URL


def notify_url(settings: Settings) -> str:
    return f"{settings.BACKEND_URL.rstrip('/')}/api/payments/payfast/notify"


def build_payment_request(
    *,
    order_id: str,
    order_number: str,
    amount,
    store_id: str,
    store_name: str,
    first_name: str,
    last_name: str,
    email: str,
    settings: Optional[Settings] = None,
) -> PaymentRequest:
    """Assemble and sign the checkout form for an order."""
    settings = settings or get_settings()
    frontend = settings.FRONTEND_URL.rstrip("/")
    data = {
        "merchant_id": settings.PAYFAST_MERCHANT_ID,
        "merchant_key": settings.PAYFAST_MERCHANT_KEY,
        "return_url": f"{frontend}/payment/success",
        "cancel_url": f"{frontend}/payment/cancel",
        "notify_url": notify_url(settings),
        "name_first": first_name,
        "name_last": last_name,
        "email_address": email,
        "m_payment_id": order_id,
        "amount": f"{amount:.2f}",
        "item_name": f"Order {order_number}",
        "item_description": f"Order from {store_name}",
        "custom_str1": order_id,
        "custom_str2": store_id,
    }
    data["signature"] = generate_signature(data, settings.PAYFAST_PASSPHRASE)
    return PaymentRequest(url=process_url(settings), data=data)
