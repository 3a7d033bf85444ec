"""Stripe mirror tables: customers, orders, subscriptions, payout accounts."""

from datetime import datetime, timezone

from sqlalchemy import Integer, String, Boolean, ForeignKey, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class StripeCustomer(Base):
    """Maps a user to their Stripe customer id."""

    __tablename__ = "stripe_customers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )
    customer_id: Mapped[str] = mapped_column(String, nullable=False, unique=True, index=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )


class StripeOrder(Base):
    """Completed one-time checkout (lifetime plan, idea purchase, partnership fee)."""

    __tablename__ = "stripe_orders"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    checkout_session_id: Mapped[str] = mapped_column(String, nullable=False, unique=True, index=True)
    payment_intent_id: Mapped[str | None] = mapped_column(String, nullable=True, index=True)
    customer_id: Mapped[str | None] = mapped_column(String, nullable=True)

    amount_subtotal: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    amount_total: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    currency: Mapped[str] = mapped_column(String, nullable=False, default="usd")
    payment_status: Mapped[str] = mapped_column(String, nullable=False, default="unpaid")
    status: Mapped[str] = mapped_column(String, nullable=False, default="completed")

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )


class StripeSubscription(Base):
    """Latest known subscription state per Stripe customer."""

    __tablename__ = "stripe_subscriptions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    customer_id: Mapped[str] = mapped_column(String, nullable=False, unique=True, index=True)
    subscription_id: Mapped[str | None] = mapped_column(String, nullable=True)
    price_id: Mapped[str | None] = mapped_column(String, nullable=True)

    current_period_start: Mapped[int | None] = mapped_column(Integer, nullable=True)  # unix seconds
    current_period_end: Mapped[int | None] = mapped_column(Integer, nullable=True)
    cancel_at_period_end: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    status: Mapped[str] = mapped_column(String, nullable=False, default="not_started")

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )


class StripePayoutAccount(Base):
    """Creator's Stripe Connect Express account."""

    __tablename__ = "stripe_payout_accounts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )
    stripe_account_id: Mapped[str | None] = mapped_column(String, nullable=True, index=True)
    account_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
