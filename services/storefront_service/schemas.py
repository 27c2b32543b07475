"""Pydantic schemas for the storefront service."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from services.storefront_service.models import (
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
)


class MessageResponse(BaseModel):
    message: str


# ============================================================================
# USER SCHEMAS
# ============================================================================


class SocialLinks(BaseModel):
    model_config = ConfigDict(extra="allow")

    twitter: Optional[str] = None
    instagram: Optional[str] = None
    facebook: Optional[str] = None
    linkedin: Optional[str] = None
    tiktok: Optional[str] = None
    youtube: Optional[str] = None


class ProfileFields(BaseModel):
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    bio: Optional[str] = Field(None, max_length=500)
    avatar: Optional[str] = None
    website: Optional[str] = None
    social: Optional[SocialLinks] = None


class SubscriptionInfo(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    plan: SubscriptionPlan
    status: SubscriptionStatus
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


class AffiliateInfo(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    is_affiliate: bool = False
    referral_code: Optional[str] = None
    referred_by: Optional[uuid.UUID] = None
    total_earnings: Decimal = Decimal("0")
    pending_payouts: Decimal = Decimal("0")


class UserResponse(BaseModel):
    """Serialized user; never carries the password hash."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    username: str
    email: str
    profile: dict = Field(default_factory=dict)
    settings: dict = Field(default_factory=dict)
    subscription: SubscriptionInfo
    affiliate: AffiliateInfo
    is_email_verified: bool = False
    last_login: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class UserSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    username: str
    email: str
    created_at: datetime


class UserEnvelope(BaseModel):
    message: Optional[str] = None
    user: UserResponse


class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=30)
    email: EmailStr
    password: str = Field(..., min_length=6)
    referral_code: Optional[str] = None
    profile: Optional[ProfileFields] = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class AuthResponse(BaseModel):
    message: Optional[str] = None
    token: str
    user: UserResponse


class ProfileUpdate(BaseModel):
    profile: Optional[ProfileFields] = None
    settings: Optional[dict] = None


class SubscriptionUpdate(BaseModel):
    plan: SubscriptionPlan


class AccountDeleteRequest(BaseModel):
    password: str


# ============================================================================
# STORE SCHEMAS
# ============================================================================


class StoreTheme(BaseModel):
    model_config = ConfigDict(extra="allow")

    primary_color: Optional[str] = None
    secondary_color: Optional[str] = None
    font_family: Optional[str] = None
    template: Optional[StoreTemplate] = None


class ShippingRate(BaseModel):
    name: str
    price: float = Field(..., ge=0)
    estimated_days: Optional[str] = None


class ShippingSettings(BaseModel):
    enabled: bool = True
    free_shipping_threshold: Optional[float] = Field(None, ge=0)
    rates: list[ShippingRate] = Field(default_factory=list)


class TaxSettings(BaseModel):
    enabled: bool = False
    rate: float = Field(0, ge=0, le=100)
    include_in_price: bool = True


class StoreSettings(BaseModel):
    model_config = ConfigDict(extra="allow")

    is_public: Optional[bool] = None
    allow_guest_checkout: Optional[bool] = None
    currency: Optional[Currency] = None
    payment_methods: Optional[dict] = None
    shipping: Optional[ShippingSettings] = None
    taxes: Optional[TaxSettings] = None


class StoreCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    theme: Optional[StoreTheme] = None
    settings: Optional[StoreSettings] = None


class StoreUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    logo: Optional[str] = None
    banner: Optional[str] = None
    theme: Optional[StoreTheme] = None
    settings: Optional[StoreSettings] = None
    contact: Optional[dict] = None
    social: Optional[dict] = None
    seo: Optional[dict] = None


class PageUpsert(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    slug: Optional[str] = Field(None, max_length=120)
    content: Any = None
    is_home_page: bool = False


class StoreAnalytics(BaseModel):
    visitors: int = 0
    page_views: int = 0
    orders: int = 0
    revenue: Decimal = Decimal("0")


class StoreListItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    owner_id: uuid.UUID
    name: str
    slug: str
    description: Optional[str] = None
    logo: Optional[str] = None
    banner: Optional[str] = None
    theme: dict = Field(default_factory=dict)
    settings: dict = Field(default_factory=dict)
    contact: dict = Field(default_factory=dict)
    social: dict = Field(default_factory=dict)
    seo: dict = Field(default_factory=dict)
    custom_domain: dict = Field(default_factory=dict)
    analytics: StoreAnalytics
    is_active: bool = True
    created_at: datetime
    updated_at: datetime


class StoreResponse(StoreListItem):
    pages: list = Field(default_factory=list)


# ============================================================================
# PRODUCT SCHEMAS
# ============================================================================


class PriceIn(BaseModel):
    amount: Decimal = Field(..., ge=0)
    currency: Currency = Currency.ZAR
    compare_at_price: Optional[Decimal] = Field(None, ge=0)


class PriceOut(BaseModel):
    amount: Decimal
    currency: str
    compare_at_price: Optional[Decimal] = None


class TshirtDetails(BaseModel):
    model_config = ConfigDict(extra="allow")

    sizes: list[str] = Field(default_factory=list)
    colors: list[str] = Field(default_factory=list)
    material: Optional[str] = None
    print_type: Optional[PrintType] = None
    design_file: Optional[str] = None


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1, max_length=1000)
    category: ProductCategory
    type: ProductType
    price: PriceIn
    store_id: uuid.UUID
    images: list[dict] = Field(default_factory=list)
    inventory: dict = Field(default_factory=dict)
    variants: list[dict] = Field(default_factory=list)
    tshirt_details: Optional[TshirtDetails] = None
    digital_details: Optional[dict] = None
    seo: dict = Field(default_factory=dict)
    tags: list[str] = Field(default_factory=list)
    is_featured: bool = False
    ai_generated: bool = False


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, min_length=1, max_length=1000)
    price: Optional[PriceIn] = None
    images: Optional[list[dict]] = None
    inventory: Optional[dict] = None
    variants: Optional[list[dict]] = None
    tshirt_details: Optional[TshirtDetails] = None
    digital_details: Optional[dict] = None
    seo: Optional[dict] = None
    tags: Optional[list[str]] = None
    is_active: Optional[bool] = None
    is_featured: Optional[bool] = None


class ProductResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    store_id: uuid.UUID
    creator_id: uuid.UUID
    name: str
    description: str
    category: ProductCategory
    type: ProductType
    price: PriceOut
    images: list = Field(default_factory=list)
    inventory: dict = Field(default_factory=dict)
    variants: list = Field(default_factory=list)
    tshirt_details: Optional[dict] = None
    digital_details: Optional[dict] = None
    seo: dict = Field(default_factory=dict)
    tags: list = Field(default_factory=list)
    is_active: bool
    is_featured: bool
    ai_generated: bool
    views: int
    sales: int
    revenue: Decimal
    created_at: datetime
    updated_at: datetime


# ============================================================================
# ORDER SCHEMAS
# ============================================================================


class OrderItemIn(BaseModel):
    product_id: uuid.UUID
    quantity: int = Field(1, ge=1)
    variant: Optional[dict] = None


class CustomerIn(BaseModel):
    email: EmailStr
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    phone: Optional[str] = Field(None, max_length=50)


class CreateOrderRequest(BaseModel):
    items: list[OrderItemIn] = Field(..., min_length=1)
    customer: CustomerIn
    shipping: Optional[dict] = None
    billing: Optional[dict] = None
    payment_method: PaymentMethod
    store_id: uuid.UUID
    referral_code: Optional[str] = None
    notes: Optional[str] = None


class OrderItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    product_id: Optional[uuid.UUID] = None
    name: str
    price: Decimal
    quantity: int
    variant: Optional[dict] = None
    subtotal: Decimal


class CustomerOut(BaseModel):
    user_id: Optional[uuid.UUID] = None
    email: str
    first_name: str
    last_name: str
    phone: Optional[str] = None


class PricingOut(BaseModel):
    subtotal: Decimal
    shipping: Decimal
    tax: Decimal
    discount: Decimal
    total: Decimal
    currency: str


class PaymentOut(BaseModel):
    method: PaymentMethod
    status: PaymentStatus
    transaction_id: Optional[str] = None
    payfast_payment_id: Optional[str] = None
    stripe_payment_intent_id: Optional[str] = None
    paid_at: Optional[datetime] = None
    refunded_at: Optional[datetime] = None
    refund_amount: Optional[Decimal] = None


class AffiliateAttributionOut(BaseModel):
    referrer_id: uuid.UUID
    commission_rate: Optional[Decimal] = None
    commission_amount: Optional[Decimal] = None
    commission_paid: bool = False
    commission_paid_at: Optional[datetime] = None


class OrderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    order_number: str
    status: OrderStatus
    store_id: uuid.UUID
    customer: CustomerOut
    items: list[OrderItemResponse] = Field(default_factory=list)
    pricing: PricingOut
    shipping: Optional[dict] = None
    billing: Optional[dict] = None
    payment: PaymentOut
    notes: Optional[str] = None
    affiliate: Optional[AffiliateAttributionOut] = None
    created_at: datetime
    updated_at: datetime


class OrderCreatedSummary(BaseModel):
    id: uuid.UUID
    order_number: str
    total: Decimal
    currency: str


class CreateOrderResponse(BaseModel):
    message: str
    order: OrderCreatedSummary
    payment: dict = Field(default_factory=dict)


class OrderStatusUpdate(BaseModel):
    status: OrderStatus
    tracking_number: Optional[str] = None
    notes: Optional[str] = None


class RefundRequest(BaseModel):
    amount: Optional[Decimal] = None
    reason: Optional[str] = Field(None, max_length=500)


# ============================================================================
# AFFILIATE SCHEMAS
# ============================================================================


class GenerateLinkRequest(BaseModel):
    campaign: Optional[str] = None
    source: Optional[str] = None
    medium: Optional[str] = None


class PayoutRequest(BaseModel):
    amount: Decimal
    payment_method: str = Field(..., min_length=1, max_length=50)
    payment_details: Optional[dict] = None


class PayoutResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    amount: Decimal
    payment_method: Optional[str] = None
    status: PayoutStatus
    created_at: datetime
