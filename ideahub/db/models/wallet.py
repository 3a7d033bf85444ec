"""Creator wallet, ledger and withdrawal models."""

from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import Integer, String, ForeignKey, DateTime, JSON, Index
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class CreatorWallet(Base):
    """Creator earnings wallet. One per user."""

    __tablename__ = "creator_wallets"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))

    user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )

    balance_cents: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_earned_cents: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_withdrawn_cents: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

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


class WalletTransaction(Base):
    """Ledger entry for a creator wallet."""

    __tablename__ = "wallet_transactions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    wallet_id: Mapped[str] = mapped_column(
        ForeignKey("creator_wallets.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    type: Mapped[str] = mapped_column(String, nullable=False)  # purchase/partnership/withdrawal/refund
    amount_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    description: Mapped[str | None] = mapped_column(String, nullable=True)

    idea_id: Mapped[str | None] = mapped_column(
        ForeignKey("ideas.id", ondelete="SET NULL"),
        nullable=True,
    )
    stripe_session_id: Mapped[str | None] = mapped_column(String, nullable=True, unique=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    __table_args__ = (
        Index("ix_wallet_tx_wallet_ts", "wallet_id", "created_at"),
    )


class WithdrawalRequest(Base):
    """Creator request to move wallet balance out to a bank account."""

    __tablename__ = "withdrawal_requests"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    wallet_id: Mapped[str] = mapped_column(
        ForeignKey("creator_wallets.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    amount_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(String, nullable=False, default="pending")
    # status: "pending" | "processing" | "completed" | "failed"
    bank_details: Mapped[dict | None] = mapped_column(JSON, nullable=True)

    requested_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    processed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
