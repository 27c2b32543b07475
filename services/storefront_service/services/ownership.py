"""Ownership checks shared by every mutating store, product and order route."""

import enum
import uuid
from typing import Callable, Optional

from fastapi import Depends, HTTPException, Request, status
from libs.db.session import get_async_db
from services.storefront_service.dependencies import get_current_user
from services.storefront_service.models import Order, Product, Store, User
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession


class ResourceKind(str, enum.Enum):
    STORE = "store"
    PRODUCT = "product"
    ORDER = "order"


_MODELS = {
    ResourceKind.STORE: Store,
    ResourceKind.PRODUCT: Product,
    ResourceKind.ORDER: Order,
}

_NOT_FOUND = {
    ResourceKind.STORE: "Store not found",
    ResourceKind.PRODUCT: "Product not found",
    ResourceKind.ORDER: "Order not found",
}


def parse_uuid(value) -> Optional[uuid.UUID]:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        return None


async def load_resource(db: AsyncSession, kind: ResourceKind, resource_id):
    resource_id = parse_uuid(resource_id)
    if resource_id is None:
        return None
    return await db.get(_MODELS[ResourceKind(kind)], resource_id)


async def _owns_store(db: AsyncSession, actor_id: uuid.UUID, store_id) -> bool:
    result = await db.execute(select(Store.owner_id).where(Store.id == store_id))
    return result.scalar_one_or_none() == actor_id


async def is_owner(db: AsyncSession, actor: User, kind: ResourceKind, resource) -> bool:
    """Ownership predicate for an already loaded resource."""
    kind = ResourceKind(kind)
    if kind == ResourceKind.STORE:
        return resource.owner_id == actor.id
    if kind == ResourceKind.PRODUCT:
        if resource.creator_id == actor.id:
            return True
        return await _owns_store(db, actor.id, resource.store_id)
    return await _owns_store(db, actor.id, resource.store_id)


async def can_mutate(
    db: AsyncSession, actor: Optional[User], kind: ResourceKind, resource_id
) -> bool:
    """
    May ``actor`` change the store, product or order ``resource_id``?

    - store: the actor owns it
    - product: the actor created it or owns its store
    - order: the actor owns the order's store

    Unknown resources and anonymous actors yield ``False``.
    """
    if actor is None:
        return False
    resource = await load_resource(db, kind, resource_id)
    if resource is None:
        return False
    return await is_owner(db, actor, kind, resource)


def require_owned(kind: ResourceKind, param: str) -> Callable:
    """
    Dependency factory: load the resource named by path parameter
    ``param``, 404 if it does not exist, 403 unless the current user may
    mutate it. The loaded row is returned to the handler.
    """
    kind = ResourceKind(kind)

    async def dependency(
        request: Request,
        current_user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_async_db),
    ):
        resource = await load_resource(db, kind, request.path_params.get(param))
        if resource is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail=_NOT_FOUND[kind]
            )
        if not await is_owner(db, current_user, kind, resource):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized"
            )
        return resource

    return dependency
