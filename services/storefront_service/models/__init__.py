"""Storefront service models package."""

from services.storefront_service.models.catalog import Product
from services.storefront_service.models.commerce import Order, OrderItem
from services.storefront_service.models.core import (
    AffiliatePayout,
    AffiliateReferral,
    User,
)
from services.storefront_service.models.enums import (
    Currency,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    PayoutStatus,
    PrintType,
    ProductCategory,
    ProductType,
    StoreTemplate,
    SubscriptionPlan,
    SubscriptionStatus,
    enum_values,
)
from services.storefront_service.models.store import Store

__all__ = [
    # Enums
    "Currency",
    "OrderStatus",
    "PaymentMethod",
    "PaymentStatus",
    "PayoutStatus",
    "PrintType",
    "ProductCategory",
    "ProductType",
    "StoreTemplate",
    "SubscriptionPlan",
    "SubscriptionStatus",
    "enum_values",
    # Users & affiliates
    "User",
    "AffiliateReferral",
    "AffiliatePayout",
    # Stores & catalog
    "Store",
    "Product",
    # Orders
    "Order",
    "OrderItem",
]
