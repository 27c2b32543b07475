"""Stores router: public storefronts, owner management, pages and analytics."""

from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from libs.common.logging import get_logger
from libs.db.session import get_async_db
from services.storefront_service.dependencies import get_current_user
from services.storefront_service.models import Product, Store, User
from services.storefront_service.models.store import (
    default_store_settings,
    default_theme,
)
from services.storefront_service.routers._helpers import (
    MAX_PAGE_SIZE,
    delete_store_cascade,
    merge_dict,
    not_found,
    pagination,
    slug_taken,
    unique_store_slug,
)
from services.storefront_service.schemas import (
    MessageResponse,
    PageUpsert,
    ProductResponse,
    StoreCreate,
    StoreListItem,
    StoreResponse,
    StoreUpdate,
)
from services.storefront_service.services.ownership import (
    ResourceKind,
    require_owned,
)
from services.storefront_service.services.pricing import slugify
from sqlalchemy import func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

router = APIRouter(tags=["stores"])

STOREFRONT_PRODUCT_LIMIT = 20

# Object-valued fields are shallow-merged on update; the rest are replaced.
_MERGED_FIELDS = ("theme", "settings", "contact", "social", "seo")
_REPLACED_FIELDS = ("name", "description", "logo", "banner")
# Replaced fields that may be cleared with an explicit null
_NULLABLE_FIELDS = ("description", "logo", "banner")


async def _active_store_by_slug(db: AsyncSession, slug: str) -> Store:
    result = await db.execute(
        select(Store).where(Store.slug == slug, Store.is_active.is_(True))
    )
    store = result.scalar_one_or_none()
    if store is None:
        raise not_found("Store not found")
    return store


@router.get("")
async def list_stores(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=MAX_PAGE_SIZE),
    search: Optional[str] = None,
    db: AsyncSession = Depends(get_async_db),
):
    """Public, active stores ordered by revenue."""
    filters = [
        Store.is_active.is_(True),
        Store.settings["is_public"].as_boolean().is_(True),
    ]
    if search:
        pattern = f"%{search}%"
        filters.append(
            or_(Store.name.ilike(pattern), Store.description.ilike(pattern))
        )

    total = (
        await db.execute(select(func.count(Store.id)).where(*filters))
    ).scalar_one()
    result = await db.execute(
        select(Store)
        .where(*filters)
        .order_by(Store.analytics_revenue.desc(), Store.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    stores = result.scalars().all()
    return {
        "stores": [StoreListItem.model_validate(store) for store in stores],
        **pagination(total, page, limit),
    }


@router.get("/user/my-stores")
async def list_my_stores(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    result = await db.execute(
        select(Store)
        .where(Store.owner_id == current_user.id)
        .order_by(Store.created_at.desc())
    )
    return {
        "stores": [StoreResponse.model_validate(s) for s in result.scalars().all()]
    }


@router.get("/{slug}")
async def get_store(slug: str, db: AsyncSession = Depends(get_async_db)):
    """Storefront view; counts a visitor."""
    store = await _active_store_by_slug(db, slug)

    await db.execute(
        update(Store)
        .where(Store.id == store.id)
        .values(analytics_visitors=Store.analytics_visitors + 1)
    )
    await db.commit()

    result = await db.execute(
        select(Product)
        .where(Product.store_id == store.id, Product.is_active.is_(True))
        .order_by(Product.is_featured.desc(), Product.created_at.desc())
        .limit(STOREFRONT_PRODUCT_LIMIT)
    )
    products = result.scalars().all()
    await db.refresh(store)
    return {
        "store": StoreResponse.model_validate(store),
        "products": [ProductResponse.model_validate(p) for p in products],
    }


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_store(
    payload: StoreCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    theme = default_theme()
    if payload.theme:
        theme.update(payload.theme.model_dump(mode="json", exclude_none=True))
    settings = default_store_settings()
    if payload.settings:
        settings.update(payload.settings.model_dump(mode="json", exclude_none=True))

    store = Store(
        owner_id=current_user.id,
        name=payload.name,
        slug=await unique_store_slug(db, payload.name),
        description=payload.description or "",
        theme=theme,
        settings=settings,
    )
    db.add(store)
    await db.commit()

    logger.info(
        "Created store %s",
        store.slug,
        extra={
            "extra_fields": {
                "store_id": str(store.id),
                "owner_id": str(current_user.id),
            }
        },
    )
    return {
        "message": "Store created successfully",
        "store": StoreResponse.model_validate(store),
    }


@router.put("/{store_id}")
async def update_store(
    payload: StoreUpdate,
    store: Store = Depends(require_owned(ResourceKind.STORE, "store_id")),
    db: AsyncSession = Depends(get_async_db),
):
    updates = payload.model_dump(mode="json", exclude_unset=True)

    for field in _REPLACED_FIELDS:
        if field not in updates:
            continue
        if updates[field] is None and field not in _NULLABLE_FIELDS:
            continue
        setattr(store, field, updates[field])
    for field in _MERGED_FIELDS:
        if updates.get(field) is not None:
            incoming = {k: v for k, v in updates[field].items() if v is not None}
            setattr(store, field, merge_dict(getattr(store, field), incoming))

    if updates.get("name"):
        new_slug = slugify(updates["name"])
        if new_slug and new_slug != store.slug:
            if not await slug_taken(db, new_slug, exclude_id=store.id):
                store.slug = new_slug

    await db.commit()
    return {
        "message": "Store updated successfully",
        "store": StoreResponse.model_validate(store),
    }


@router.delete("/{store_id}", response_model=MessageResponse)
async def delete_store(
    store: Store = Depends(require_owned(ResourceKind.STORE, "store_id")),
    db: AsyncSession = Depends(get_async_db),
):
    store_id = store.id
    await delete_store_cascade(db, [store_id])
    await db.commit()
    logger.info("Deleted store %s", store_id)
    return {"message": "Store deleted successfully"}


@router.post("/{store_id}/pages")
async def save_page(
    payload: PageUpsert,
    store: Store = Depends(require_owned(ResourceKind.STORE, "store_id")),
    db: AsyncSession = Depends(get_async_db),
):
    """Create or replace a page by slug; at most one page is the home page."""
    page_slug = payload.slug or slugify(payload.name)
    pages = [dict(p) for p in (store.pages or [])]

    if payload.is_home_page:
        for existing in pages:
            existing["is_home_page"] = False

    page = {
        "name": payload.name,
        "slug": page_slug,
        "content": payload.content,
        "is_home_page": payload.is_home_page,
        "is_published": True,
    }
    for index, existing in enumerate(pages):
        if existing.get("slug") == page_slug:
            pages[index] = {**existing, **page}
            break
    else:
        pages.append(page)

    store.pages = pages
    await db.commit()
    return {
        "message": "Page saved successfully",
        "page": next(p for p in pages if p["slug"] == page_slug),
    }


@router.get("/{slug}/pages/{page_slug}")
async def get_page(
    slug: str, page_slug: str, db: AsyncSession = Depends(get_async_db)
):
    store = await _active_store_by_slug(db, slug)
    page = next(
        (
            p
            for p in (store.pages or [])
            if p.get("slug") == page_slug and p.get("is_published")
        ),
        None,
    )
    if page is None:
        raise not_found("Page not found")

    await db.execute(
        update(Store)
        .where(Store.id == store.id)
        .values(analytics_page_views=Store.analytics_page_views + 1)
    )
    await db.commit()
    return {"page": page, "store": {"name": store.name, "theme": store.theme}}


@router.get("/{store_id}/analytics")
async def get_store_analytics(
    store: Store = Depends(require_owned(ResourceKind.STORE, "store_id")),
    db: AsyncSession = Depends(get_async_db),
):
    result = await db.execute(
        select(Product)
        .where(Product.store_id == store.id)
        .order_by(Product.created_at.desc())
    )
    products = result.scalars().all()

    rows = [
        {
            "id": p.id,
            "name": p.name,
            "views": p.views or 0,
            "sales": p.sales or 0,
            "revenue": p.revenue or Decimal("0"),
            "conversion_rate": (
                round((p.sales or 0) / p.views * 100, 2) if p.views else 0
            ),
        }
        for p in products
    ]
    return {
        "analytics": {
            "overview": store.analytics,
            "products": rows,
            "summary": {
                "total_products": len(rows),
                "total_views": sum(r["views"] for r in rows),
                "total_sales": sum(r["sales"] for r in rows),
                "total_revenue": sum((r["revenue"] for r in rows), Decimal("0")),
            },
        }
    }
