"""Shared helpers for storefront tests.

Fixtures (``test_engine``, ``db_session``, ``client``) live in the root
conftest. The helpers below build rows and signed requests on top of them.
"""

from typing import Optional

from libs.auth.security import create_access_token
from services.storefront_service.models import (
    Order,
    PaymentStatus,
    Product,
    Store,
    User,
)
from services.storefront_service.services.payfast import generate_signature
from services.storefront_service.services.pricing import derive_order_pricing
from tests.factories import (
    OrderFactory,
    OrderItemFactory,
    ProductFactory,
    StoreFactory,
    UserFactory,
)


def auth_headers(user: User) -> dict:
    """Bearer header carrying a real token for ``user``."""
    return {"Authorization": f"Bearer {create_access_token(str(user.id))}"}


async def make_user(db_session, **overrides) -> User:
    user = UserFactory.create(**overrides)
    db_session.add(user)
    await db_session.commit()
    return user


async def make_store(db_session, owner: User, **overrides) -> Store:
    store = StoreFactory.create(owner_id=owner.id, **overrides)
    db_session.add(store)
    await db_session.commit()
    return store


async def make_product(
    db_session, store: Store, creator: Optional[User] = None, **overrides
) -> Product:
    product = ProductFactory.create(
        store_id=store.id,
        creator_id=(creator.id if creator else store.owner_id),
        **overrides,
    )
    db_session.add(product)
    await db_session.commit()
    return product


async def make_order(
    db_session,
    store: Store,
    product: Product,
    quantity: int = 1,
    **overrides,
) -> Order:
    """Persist a priced order with a single line for ``product``.

    Pricing runs while the payment is still pending so an attributed
    order gets its commission, then ``payment_status`` is applied.
    """
    payment_status = overrides.pop("payment_status", PaymentStatus.PENDING)
    order = OrderFactory.create(store_id=store.id, **overrides)
    order.items = [
        OrderItemFactory.create(
            product_id=product.id,
            name=product.name,
            price=product.price_amount,
            quantity=quantity,
        )
    ]
    derive_order_pricing(order)
    order.payment_status = payment_status
    db_session.add(order)
    await db_session.commit()
    return order


def signed_notification(order: Order, passphrase: str = "", **fields) -> dict:
    """PayFast IPN form body for ``order`` with a valid signature."""
    payload = {
        "m_payment_id": str(order.id),
        "pf_payment_id": "1089250",
        "payment_status": "COMPLETE",
        "item_name": f"Order {order.order_number}",
        "amount_gross": f"{order.total:.2f}",
        "custom_str1": str(order.id),
        "custom_str2": str(order.store_id),
    }
    payload.update(fields)
    payload["signature"] = generate_signature(payload, passphrase)
    return payload
