"""Storefront service routers package."""

from services.storefront_service.routers.affiliates import router as affiliates_router
from services.storefront_service.routers.auth import router as auth_router
from services.storefront_service.routers.orders import router as orders_router
from services.storefront_service.routers.payments import router as payments_router
from services.storefront_service.routers.products import router as products_router
from services.storefront_service.routers.stores import router as stores_router
from services.storefront_service.routers.users import router as users_router

__all__ = [
    "affiliates_router",
    "auth_router",
    "orders_router",
    "payments_router",
    "products_router",
    "stores_router",
    "users_router",
]
