"""User and affiliate models."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base, JSONDocument
from services.storefront_service.models.enums import (
    PayoutStatus,
    SubscriptionPlan,
    SubscriptionStatus,
    enum_values,
)
from sqlalchemy import Boolean, DateTime
from sqlalchemy import Enum as SAEnum
from sqlalchemy import ForeignKey, Numeric, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column


def default_user_settings() -> dict:
    return {
        "notifications": {"email": True, "marketing": False},
        "privacy": {"profile_visibility": "public"},
    }


class User(Base):
    """Creators and customers."""

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    username: Mapped[str] = mapped_column(String(30), unique=True, nullable=False)
    email: Mapped[str] = mapped_column(
        String(255), unique=True, nullable=False, index=True
    )
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    # {"first_name", "last_name", "bio", "avatar", "website", "social": {...}}
    profile: Mapped[dict] = mapped_column(JSONDocument, default=dict)
    # {"notifications": {"email", "marketing"}, "privacy": {"profile_visibility"}}
    settings: Mapped[dict] = mapped_column(
        JSONDocument, default=default_user_settings
    )

    # Subscription
    subscription_plan: Mapped[SubscriptionPlan] = mapped_column(
        SAEnum(
            SubscriptionPlan,
            values_callable=enum_values,
            name="subscription_plan_enum",
        ),
        default=SubscriptionPlan.FREE,
        server_default="free",
    )
    subscription_status: Mapped[SubscriptionStatus] = mapped_column(
        SAEnum(
            SubscriptionStatus,
            values_callable=enum_values,
            name="subscription_status_enum",
        ),
        default=SubscriptionStatus.ACTIVE,
        server_default="active",
    )
    subscription_start: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    subscription_end: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Affiliate
    is_affiliate: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default="false"
    )
    referral_code: Mapped[Optional[str]] = mapped_column(
        String(40), unique=True, nullable=True
    )
    referred_by_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )
    affiliate_total_earnings: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), default=0, server_default="0"
    )
    affiliate_pending_payouts: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), default=0, server_default="0"
    )

    is_email_verified: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default="false"
    )
    last_login: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    @property
    def subscription(self) -> dict:
        return {
            "plan": self.subscription_plan,
            "status": self.subscription_status,
            "start_date": self.subscription_start,
            "end_date": self.subscription_end,
        }

    @property
    def affiliate(self) -> dict:
        return {
            "is_affiliate": bool(self.is_affiliate),
            "referral_code": self.referral_code,
            "referred_by": self.referred_by_id,
            "total_earnings": self.affiliate_total_earnings or Decimal("0"),
            "pending_payouts": self.affiliate_pending_payouts or Decimal("0"),
        }

    def __repr__(self):
        return f"<User {self.username}>"


class AffiliateReferral(Base):
    """One row per user signed up through a referral code."""

    __tablename__ = "affiliate_referrals"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    referrer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    referred_user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    date_referred: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    commission_earned: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), default=0, server_default="0"
    )

    __table_args__ = (
        UniqueConstraint("referrer_id", "referred_user_id", name="unique_referral"),
    )

    def __repr__(self):
        return f"<AffiliateReferral {self.referrer_id} -> {self.referred_user_id}>"


class AffiliatePayout(Base):
    """Payout requests against an affiliate's pending balance."""

    __tablename__ = "affiliate_payouts"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    payment_method: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    payment_details: Mapped[Optional[dict]] = mapped_column(
        JSONDocument, nullable=True
    )
    status: Mapped[PayoutStatus] = mapped_column(
        SAEnum(PayoutStatus, values_callable=enum_values, name="payout_status_enum"),
        default=PayoutStatus.PENDING,
        server_default="pending",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )

    def __repr__(self):
        return f"<AffiliatePayout {self.amount} status={self.status}>"
