"""Collaboration and partnership request models."""

from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import Integer, String, Boolean, Text, ForeignKey, DateTime, Index
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


PARTNERSHIP_STATUSES = ("awaiting_payment", "awaiting_message", "pending", "accepted", "declined")


class CollabRequest(Base):
    """Free contact request from an investor to the creator of an idea."""

    __tablename__ = "collab_requests"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    idea_id: Mapped[str] = mapped_column(
        ForeignKey("ideas.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    investor_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String, nullable=False)
    email: Mapped[str] = mapped_column(String, nullable=False)
    linkedin_url: Mapped[str | None] = mapped_column(String, nullable=True)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    accepted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

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


class PartnershipRequest(Base):
    """NDA-signed, paid partnership request (NDA -> payment -> message)."""

    __tablename__ = "partnership_requests"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    idea_id: Mapped[str] = mapped_column(
        ForeignKey("ideas.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    creator_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    investor_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    investor_name: Mapped[str] = mapped_column(String, nullable=False)
    investor_email: Mapped[str] = mapped_column(String, nullable=False)
    message: Mapped[str | None] = mapped_column(Text, nullable=True)

    agreed_nda: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    nda_signature: Mapped[str] = mapped_column(String, nullable=False)

    payment_amount_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    payment_completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    stripe_session_id: Mapped[str | None] = mapped_column(String, nullable=True, index=True)

    status: Mapped[str] = mapped_column(String, nullable=False, default="awaiting_payment")

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

    __table_args__ = (
        Index("ix_partnership_creator_status", "creator_id", "status"),
    )
