"""Product catalog model."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base, JSONDocument
from services.storefront_service.models.enums import (
    ProductCategory,
    ProductType,
    enum_values,
)
from sqlalchemy import Boolean, CheckConstraint, DateTime
from sqlalchemy import Enum as SAEnum
from sqlalchemy import ForeignKey, Index, Integer, Numeric, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column


class Product(Base):
    """Products sold by a store."""

    __tablename__ = "products"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    store_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("stores.id", ondelete="CASCADE"), nullable=False, index=True
    )
    creator_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(String(1000), nullable=False)
    category: Mapped[ProductCategory] = mapped_column(
        SAEnum(
            ProductCategory,
            values_callable=enum_values,
            name="product_category_enum",
        ),
        nullable=False,
    )
    type: Mapped[ProductType] = mapped_column(
        SAEnum(ProductType, values_callable=enum_values, name="product_type_enum"),
        nullable=False,
    )

    # Pricing
    price_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    price_currency: Mapped[str] = mapped_column(
        String(3), default="ZAR", server_default="ZAR"
    )
    compare_at_price: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(12, 2), nullable=True
    )

    # [{"url", "alt", "is_primary"}]
    images: Mapped[list] = mapped_column(JSONDocument, default=list)
    # {"track_quantity", "quantity", "allow_backorder"}
    inventory: Mapped[dict] = mapped_column(JSONDocument, default=dict)
    # [{"name", "options": [{"name", "price_modifier", "sku", "inventory"}]}]
    variants: Mapped[list] = mapped_column(JSONDocument, default=list)
    tshirt_details: Mapped[Optional[dict]] = mapped_column(
        JSONDocument, nullable=True
    )
    digital_details: Mapped[Optional[dict]] = mapped_column(
        JSONDocument, nullable=True
    )
    seo: Mapped[dict] = mapped_column(JSONDocument, default=dict)
    tags: Mapped[list] = mapped_column(JSONDocument, default=list)

    is_active: Mapped[bool] = mapped_column(
        Boolean, default=True, server_default="true"
    )
    is_featured: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default="false"
    )
    ai_generated: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default="false"
    )

    # Counters
    views: Mapped[int] = mapped_column(Integer, default=0, server_default="0")
    sales: Mapped[int] = mapped_column(Integer, default=0, server_default="0")
    revenue: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), default=0, server_default="0"
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    __table_args__ = (
        CheckConstraint("price_amount >= 0", name="product_price_non_negative"),
        Index("ix_products_store_id_is_active", "store_id", "is_active"),
    )

    @property
    def price(self) -> dict:
        return {
            "amount": self.price_amount,
            "currency": self.price_currency,
            "compare_at_price": self.compare_at_price,
        }

    def __repr__(self):
        return f"<Product {self.name}>"
