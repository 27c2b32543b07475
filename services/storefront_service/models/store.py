"""Store model: branding, settings, custom pages and analytics counters."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base, JSONDocument
from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, Numeric, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column


def default_theme() -> dict:
    return {
        "primary_color": "#000000",
        "secondary_color": "#ffffff",
        "font_family": "Inter",
        "template": "modern",
    }


def default_store_settings() -> dict:
    return {
        "is_public": True,
        "allow_guest_checkout": True,
        "currency": "ZAR",
        "payment_methods": {"payfast": True, "stripe": False},
        "shipping": {"enabled": True, "free_shipping_threshold": None, "rates": []},
        "taxes": {"enabled": False, "rate": 0, "include_in_price": True},
    }


class Store(Base):
    """Creator storefronts."""

    __tablename__ = "stores"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    owner_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    slug: Mapped[str] = mapped_column(
        String(120), unique=True, nullable=False, index=True
    )
    description: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    logo: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    banner: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)

    theme: Mapped[dict] = mapped_column(JSONDocument, default=default_theme)
    settings: Mapped[dict] = mapped_column(
        JSONDocument, default=default_store_settings
    )
    contact: Mapped[dict] = mapped_column(JSONDocument, default=dict)
    social: Mapped[dict] = mapped_column(JSONDocument, default=dict)
    seo: Mapped[dict] = mapped_column(JSONDocument, default=dict)
    # {"domain", "is_verified", "ssl_enabled"}
    custom_domain: Mapped[dict] = mapped_column(JSONDocument, default=dict)
    # [{"name", "slug", "content", "is_home_page", "is_published"}]
    pages: Mapped[list] = mapped_column(JSONDocument, default=list)

    # Analytics counters, incremented in SQL
    analytics_visitors: Mapped[int] = mapped_column(
        Integer, default=0, server_default="0"
    )
    analytics_page_views: Mapped[int] = mapped_column(
        Integer, default=0, server_default="0"
    )
    analytics_orders: Mapped[int] = mapped_column(
        Integer, default=0, server_default="0"
    )
    analytics_revenue: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), default=0, server_default="0"
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean, default=True, server_default="true"
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    @property
    def analytics(self) -> dict:
        return {
            "visitors": self.analytics_visitors or 0,
            "page_views": self.analytics_page_views or 0,
            "orders": self.analytics_orders or 0,
            "revenue": self.analytics_revenue or Decimal("0"),
        }

    def __repr__(self):
        return f"<Store {self.slug}>"
