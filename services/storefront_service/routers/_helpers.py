"""Shared helpers for storefront routers."""

import math
import uuid
from typing import Optional

from fastapi import HTTPException, status
from services.storefront_service.models import (
    AffiliatePayout,
    AffiliateReferral,
    Order,
    OrderItem,
    Product,
    Store,
    User,
)
from services.storefront_service.services.pricing import random_suffix, slugify
from sqlalchemy import delete, exists, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

MAX_PAGE_SIZE = 100


def pagination(total: int, page: int, limit: int) -> dict:
    return {
        "total_pages": math.ceil(total / limit) if limit else 0,
        "current_page": page,
        "total": total,
    }


def merge_dict(current: Optional[dict], incoming: Optional[dict]) -> dict:
    """Shallow merge, returning a new dict so JSON columns register the change."""
    return {**(current or {}), **(incoming or {})}


def not_found(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


def bad_request(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


async def slug_taken(
    db: AsyncSession, slug: str, exclude_id: Optional[uuid.UUID] = None
) -> bool:
    query = select(exists().where(Store.slug == slug))
    if exclude_id is not None:
        query = select(exists().where(Store.slug == slug, Store.id != exclude_id))
    return bool((await db.execute(query)).scalar())


async def unique_store_slug(db: AsyncSession, name: str) -> str:
    """Slug for ``name``, with a random 4-char suffix when already in use."""
    base = slugify(name) or "store"
    slug = base
    while await slug_taken(db, slug):
        slug = f"{base}-{random_suffix()}"
    return slug


async def generate_referral_code(db: AsyncSession, username: str) -> str:
    """Lower-cased username plus four random characters, unique."""
    while True:
        code = f"{username.lower()}{random_suffix(4)}"
        taken = await db.execute(select(exists().where(User.referral_code == code)))
        if not taken.scalar():
            return code


async def delete_store_cascade(db: AsyncSession, store_ids: list[uuid.UUID]) -> None:
    """Remove stores together with their orders and products. Caller commits."""
    if not store_ids:
        return
    order_ids = select(Order.id).where(Order.store_id.in_(store_ids))
    await db.execute(delete(OrderItem).where(OrderItem.order_id.in_(order_ids)))
    await db.execute(delete(Order).where(Order.store_id.in_(store_ids)))
    product_ids = select(Product.id).where(Product.store_id.in_(store_ids))
    await db.execute(
        update(OrderItem)
        .where(OrderItem.product_id.in_(product_ids))
        .values(product_id=None)
    )
    await db.execute(delete(Product).where(Product.store_id.in_(store_ids)))
    await db.execute(delete(Store).where(Store.id.in_(store_ids)))


async def delete_product(db: AsyncSession, product: Product) -> None:
    """Detach line items from the product (their snapshots stay) and delete it."""
    await db.execute(
        update(OrderItem)
        .where(OrderItem.product_id == product.id)
        .values(product_id=None)
    )
    await db.delete(product)


async def delete_user_cascade(db: AsyncSession, user: User) -> None:
    """Delete a user and everything they own; detach references elsewhere."""
    store_ids = list(
        (await db.execute(select(Store.id).where(Store.owner_id == user.id)))
        .scalars()
        .all()
    )
    await delete_store_cascade(db, store_ids)

    # Products the user created in other people's stores
    created = select(Product.id).where(Product.creator_id == user.id)
    await db.execute(
        update(OrderItem)
        .where(OrderItem.product_id.in_(created))
        .values(product_id=None)
    )
    await db.execute(delete(Product).where(Product.creator_id == user.id))

    await db.execute(
        update(Order)
        .where(Order.customer_user_id == user.id)
        .values(customer_user_id=None)
    )
    await db.execute(
        update(Order)
        .where(Order.affiliate_referrer_id == user.id)
        .values(affiliate_referrer_id=None)
    )
    await db.execute(
        update(User).where(User.referred_by_id == user.id).values(referred_by_id=None)
    )
    await db.execute(
        delete(AffiliateReferral).where(
            or_(
                AffiliateReferral.referrer_id == user.id,
                AffiliateReferral.referred_user_id == user.id,
            )
        )
    )
    await db.execute(delete(AffiliatePayout).where(AffiliatePayout.user_id == user.id))
    await db.delete(user)
