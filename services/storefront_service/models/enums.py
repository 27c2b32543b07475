"""Enum definitions for storefront models."""

import enum


def enum_values(enum_cls):
    """Return persistent DB values for SAEnum mappings."""
    return [member.value for member in enum_cls]


class SubscriptionPlan(str, enum.Enum):
    FREE = "free"
    CREATOR = "creator"
    PRO = "pro"


class SubscriptionStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    CANCELLED = "cancelled"


class PayoutStatus(str, enum.Enum):
    PENDING = "pending"
    PAID = "paid"
    REJECTED = "rejected"


class StoreTemplate(str, enum.Enum):
    MODERN = "modern"
    MINIMAL = "minimal"
    CLASSIC = "classic"
    BOLD = "bold"
    CREATIVE = "creative"


class Currency(str, enum.Enum):
    ZAR = "ZAR"
    USD = "USD"
    EUR = "EUR"
    GBP = "GBP"


class ProductCategory(str, enum.Enum):
    TSHIRT = "tshirt"
    EBOOK = "ebook"
    COURSE = "course"
    TEMPLATE = "template"
    DIGITAL = "digital"
    PHYSICAL = "physical"
    SERVICE = "service"


class ProductType(str, enum.Enum):
    PHYSICAL = "physical"
    DIGITAL = "digital"
    SERVICE = "service"


class PrintType(str, enum.Enum):
    SCREEN = "screen"
    DTG = "dtg"
    VINYL = "vinyl"
    EMBROIDERY = "embroidery"


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


class PaymentMethod(str, enum.Enum):
    PAYFAST = "payfast"
    STRIPE = "stripe"
    MANUAL = "manual"


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"
