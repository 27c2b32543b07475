"""Order models: orders, line items, payment and affiliate attribution."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base, JSONDocument
from services.storefront_service.models.enums import (
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    enum_values,
)
from sqlalchemy import Boolean, CheckConstraint, DateTime
from sqlalchemy import Enum as SAEnum
from sqlalchemy import ForeignKey, Index, Integer, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship


class Order(Base):
    """Customer orders."""

    __tablename__ = "orders"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    order_number: Mapped[str] = mapped_column(
        String(32), unique=True, nullable=False, index=True
    )
    status: Mapped[OrderStatus] = mapped_column(
        SAEnum(OrderStatus, values_callable=enum_values, name="order_status_enum"),
        default=OrderStatus.PENDING,
        server_default="pending",
    )
    store_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("stores.id", ondelete="CASCADE"), nullable=False, index=True
    )

    # Customer (registered user or guest)
    customer_user_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )
    customer_email: Mapped[str] = mapped_column(String(255), nullable=False)
    customer_first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    customer_last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    customer_phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    # Pricing
    subtotal: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    shipping_cost: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    tax: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    discount: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    total: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    currency: Mapped[str] = mapped_column(
        String(3), default="ZAR", server_default="ZAR"
    )

    # {"address": {...}, "method", "tracking_number", "estimated_delivery"}
    shipping: Mapped[Optional[dict]] = mapped_column(JSONDocument, nullable=True)
    billing: Mapped[Optional[dict]] = mapped_column(JSONDocument, nullable=True)

    # Payment
    payment_method: Mapped[PaymentMethod] = mapped_column(
        SAEnum(
            PaymentMethod, values_callable=enum_values, name="payment_method_enum"
        ),
        nullable=False,
    )
    payment_status: Mapped[PaymentStatus] = mapped_column(
        SAEnum(
            PaymentStatus, values_callable=enum_values, name="payment_status_enum"
        ),
        default=PaymentStatus.PENDING,
        server_default="pending",
    )
    transaction_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    payfast_payment_id: Mapped[Optional[str]] = mapped_column(
        String(255), nullable=True
    )
    stripe_payment_intent_id: Mapped[Optional[str]] = mapped_column(
        String(255), nullable=True
    )
    paid_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    refunded_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    refund_amount: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(12, 2), nullable=True
    )

    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Affiliate attribution
    affiliate_referrer_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )
    commission_rate: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(5, 4), nullable=True
    )
    commission_amount: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(12, 2), nullable=True
    )
    commission_paid: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default="false"
    )
    commission_paid_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    __table_args__ = (
        Index("ix_orders_store_id_created_at", "store_id", "created_at"),
    )

    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="OrderItem.position",
    )

    @property
    def customer(self) -> dict:
        return {
            "user_id": self.customer_user_id,
            "email": self.customer_email,
            "first_name": self.customer_first_name,
            "last_name": self.customer_last_name,
            "phone": self.customer_phone,
        }

    @property
    def pricing(self) -> dict:
        return {
            "subtotal": self.subtotal,
            "shipping": self.shipping_cost,
            "tax": self.tax,
            "discount": self.discount,
            "total": self.total,
            "currency": self.currency,
        }

    @property
    def payment(self) -> dict:
        return {
            "method": self.payment_method,
            "status": self.payment_status,
            "transaction_id": self.transaction_id,
            "payfast_payment_id": self.payfast_payment_id,
            "stripe_payment_intent_id": self.stripe_payment_intent_id,
            "paid_at": self.paid_at,
            "refunded_at": self.refunded_at,
            "refund_amount": self.refund_amount,
        }

    @property
    def affiliate(self) -> Optional[dict]:
        if self.affiliate_referrer_id is None:
            return None
        return {
            "referrer_id": self.affiliate_referrer_id,
            "commission_rate": self.commission_rate,
            "commission_amount": self.commission_amount,
            "commission_paid": self.commission_paid,
            "commission_paid_at": self.commission_paid_at,
        }

    def __repr__(self):
        return f"<Order {self.order_number} status={self.status}>"


class OrderItem(Base):
    """Order line items; name and price are snapshots taken at checkout."""

    __tablename__ = "order_items"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    order_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True
    )
    product_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("products.id", ondelete="SET NULL"), nullable=True, index=True
    )
    position: Mapped[int] = mapped_column(Integer, default=0)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    # {"name", "option"}
    variant: Mapped[Optional[dict]] = mapped_column(JSONDocument, nullable=True)
    subtotal: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)

    __table_args__ = (
        CheckConstraint("quantity >= 1", name="order_item_quantity_positive"),
    )

    order = relationship("Order", back_populates="items")

    def __repr__(self):
        return f"<OrderItem {self.name} x{self.quantity}>"
