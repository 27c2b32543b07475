"""Products router: catalog browsing and owner product management."""

import uuid
from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from libs.common.logging import get_logger
from libs.db.session import get_async_db
from services.storefront_service.dependencies import get_current_user
from services.storefront_service.models import (
    Product,
    ProductCategory,
    ProductType,
    Store,
    User,
)
from services.storefront_service.routers._helpers import (
    MAX_PAGE_SIZE,
    delete_product,
    not_found,
    pagination,
)
from services.storefront_service.schemas import (
    MessageResponse,
    ProductCreate,
    ProductResponse,
    ProductUpdate,
)
from services.storefront_service.services.ownership import (
    ResourceKind,
    require_owned,
)
from sqlalchemy import func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

router = APIRouter(tags=["products"])

CATEGORIES = [
    {"value": "tshirt", "label": "T-Shirts", "icon": "👕"},
    {"value": "ebook", "label": "E-Books", "icon": "📚"},
    {"value": "course", "label": "Courses", "icon": "🎓"},
    {"value": "template", "label": "Templates", "icon": "📄"},
    {"value": "digital", "label": "Digital Products", "icon": "💾"},
    {"value": "physical", "label": "Physical Products", "icon": "📦"},
    {"value": "service", "label": "Services", "icon": "🛠️"},
]

_SORT_COLUMNS = {
    "created_at": Product.created_at,
    "price": Product.price_amount,
    "sales": Product.sales,
    "views": Product.views,
    "name": Product.name,
}

# Plain fields copied as-is on update
_UPDATABLE_FIELDS = (
    "name",
    "description",
    "images",
    "inventory",
    "variants",
    "tshirt_details",
    "digital_details",
    "seo",
    "tags",
    "is_active",
    "is_featured",
)
# Updatable fields that may be cleared with an explicit null
_NULLABLE_FIELDS = ("tshirt_details", "digital_details")


async def _paginated(db: AsyncSession, filters: list, order_by, page: int, limit: int):
    total = (
        await db.execute(select(func.count(Product.id)).where(*filters))
    ).scalar_one()
    result = await db.execute(
        select(Product)
        .where(*filters)
        .order_by(order_by)
        .offset((page - 1) * limit)
        .limit(limit)
    )
    return {
        "products": [ProductResponse.model_validate(p) for p in result.scalars()],
        **pagination(total, page, limit),
    }


@router.get("")
async def list_products(
    category: Optional[ProductCategory] = None,
    type: Optional[ProductType] = None,
    store: Optional[uuid.UUID] = None,
    search: Optional[str] = None,
    sort_by: Literal["created_at", "price", "sales", "views", "name"] = "created_at",
    sort_order: Literal["asc", "desc"] = "desc",
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=MAX_PAGE_SIZE),
    db: AsyncSession = Depends(get_async_db),
):
    """Active products with optional filters and sorting."""
    filters = [Product.is_active.is_(True)]
    if category:
        filters.append(Product.category == category)
    if type:
        filters.append(Product.type == type)
    if store:
        filters.append(Product.store_id == store)
    if search:
        pattern = f"%{search}%"
        filters.append(
            or_(Product.name.ilike(pattern), Product.description.ilike(pattern))
        )

    column = _SORT_COLUMNS[sort_by]
    order_by = column.asc() if sort_order == "asc" else column.desc()
    return await _paginated(db, filters, order_by, page, limit)


@router.get("/meta/categories")
async def list_categories():
    return {"categories": CATEGORIES}


@router.get("/user/my-products")
async def list_my_products(
    store: Optional[uuid.UUID] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=MAX_PAGE_SIZE),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    filters = [Product.creator_id == current_user.id]
    if store:
        filters.append(Product.store_id == store)
    return await _paginated(db, filters, Product.created_at.desc(), page, limit)


@router.get("/store/{store_id}")
async def list_store_products(
    store_id: uuid.UUID,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=MAX_PAGE_SIZE),
    db: AsyncSession = Depends(get_async_db),
):
    filters = [Product.store_id == store_id, Product.is_active.is_(True)]
    return await _paginated(db, filters, Product.created_at.desc(), page, limit)


@router.get("/{product_id}")
async def get_product(product_id: uuid.UUID, db: AsyncSession = Depends(get_async_db)):
    """Single product; counts a view."""
    product = await db.get(Product, product_id)
    if product is None:
        raise not_found("Product not found")

    await db.execute(
        update(Product)
        .where(Product.id == product.id)
        .values(views=Product.views + 1)
    )
    await db.commit()
    await db.refresh(product)

    store = await db.get(Store, product.store_id)
    return {
        "product": ProductResponse.model_validate(product),
        "store": (
            {"id": store.id, "name": store.name, "slug": store.slug}
            if store
            else None
        ),
    }


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_product(
    payload: ProductCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    store = await db.get(Store, payload.store_id)
    if store is None:
        raise not_found("Store not found")
    if store.owner_id != current_user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not authorized to add products to this store",
        )

    data = payload.model_dump(
        mode="json", exclude={"price", "store_id", "category", "type"}
    )
    product = Product(
        **data,
        category=payload.category,
        type=payload.type,
        store_id=store.id,
        creator_id=current_user.id,
        price_amount=payload.price.amount,
        price_currency=payload.price.currency.value,
        compare_at_price=payload.price.compare_at_price,
    )
    db.add(product)
    await db.commit()

    logger.info(
        "Created product %s in store %s",
        product.id,
        store.slug,
        extra={"extra_fields": {"creator_id": str(current_user.id)}},
    )
    return {
        "message": "Product created successfully",
        "product": ProductResponse.model_validate(product),
    }


@router.put("/{product_id}")
async def update_product(
    payload: ProductUpdate,
    product: Product = Depends(require_owned(ResourceKind.PRODUCT, "product_id")),
    db: AsyncSession = Depends(get_async_db),
):
    updates = payload.model_dump(mode="json", exclude_unset=True)
    for field in _UPDATABLE_FIELDS:
        if field not in updates:
            continue
        if updates[field] is None and field not in _NULLABLE_FIELDS:
            continue
        setattr(product, field, updates[field])

    if payload.price is not None:
        product.price_amount = payload.price.amount
        product.price_currency = payload.price.currency.value
        product.compare_at_price = payload.price.compare_at_price

    await db.commit()
    return {
        "message": "Product updated successfully",
        "product": ProductResponse.model_validate(product),
    }


@router.delete("/{product_id}", response_model=MessageResponse)
async def remove_product(
    product: Product = Depends(require_owned(ResourceKind.PRODUCT, "product_id")),
    db: AsyncSession = Depends(get_async_db),
):
    product_id = product.id
    await delete_product(db, product)
    await db.commit()
    logger.info("Deleted product %s", product_id)
    return {"message": "Product deleted successfully"}
