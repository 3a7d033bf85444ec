"""Idea, comment and upvote models."""

from datetime import datetime, timezone
from typing import List, Optional, TYPE_CHECKING
from uuid import uuid4

from sqlalchemy import String, Boolean, Text, ForeignKey, DateTime, JSON, Index, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base

if TYPE_CHECKING:
    from .user import User


OWNERSHIP_MODES = ("forsale", "partnership", "showcase")


class Idea(Base):
    """
    One row per uploaded idea.

    `minted_by` marks NFT ownership: set to the uploader when the idea is
    minted at upload time, or to the investor once a purchase is paid.
    """

    __tablename__ = "ideas"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    title: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    tags: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    image: Mapped[Optional[str]] = mapped_column(String, nullable=True)

    is_nft: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    minted_by: Mapped[Optional[str]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    is_blurred: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_by: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    remix_of_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("ideas.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    ownership_mode: Mapped[str] = mapped_column(String, nullable=False, default="showcase")
    price_cents: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)  # None => DEFAULT_IDEA_PRICE_CENTS

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

    # Relationships
    author: Mapped["User"] = relationship(foreign_keys=[created_by])
    minted_user: Mapped[Optional["User"]] = relationship(foreign_keys=[minted_by])

    __table_args__ = (
        Index("ix_ideas_created_at", "created_at"),
    )


class Comment(Base):
    """Comment left on an idea."""

    __tablename__ = "comments"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    idea_id: Mapped[str] = mapped_column(
        ForeignKey("ideas.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    comment_text: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    author: Mapped["User"] = relationship()


class Upvote(Base):
    """One upvote per (idea, user)."""

    __tablename__ = "upvotes"

    idea_id: Mapped[str] = mapped_column(
        ForeignKey("ideas.id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
