"""
Idea read models.

Feed and detail responses join the author and minter, attach upvote and
comment counts, and redact blurred ideas for viewers who are neither the
creator nor the owner.
"""
import logging
from typing import Iterable, Optional

from fastapi import HTTPException
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ideahub.core.config import settings
from ideahub.db.models import Comment, Idea, Upvote, User
from ideahub.schemas.user import UserPublic

log = logging.getLogger(__name__)

PROTECTED_DESCRIPTION = "This idea is protected. Only its creator and owner can read it."
REMIX_SEPARATOR = "\n\n--- REMIX CHANGES ---\n"


def idea_select():
    return (
        select(Idea)
        .options(selectinload(Idea.author), selectinload(Idea.minted_user))
        .execution_options(populate_existing=True)
    )


async def get_idea_or_404(db: AsyncSession, idea_id: str) -> Idea:
    idea = await db.scalar(idea_select().where(Idea.id == idea_id))
    if idea is None:
        raise HTTPException(404, "Idea not found")
    return idea


def can_view_full(idea: Idea, viewer: Optional[User]) -> bool:
    if not idea.is_blurred:
        return True
    if viewer is None:
        return False
    return viewer.id in (idea.created_by, idea.minted_by)


def can_purchase(idea: Idea, viewer: Optional[User]) -> bool:
    return (
        viewer is not None
        and idea.ownership_mode == "forsale"
        and idea.minted_by is None
        and idea.created_by != viewer.id
    )


def price_for(idea: Idea) -> int:
    return idea.price_cents or settings.DEFAULT_IDEA_PRICE_CENTS


def _user_dict(user: Optional[User]) -> Optional[dict]:
    if user is None:
        return None
    return UserPublic.model_validate(user).model_dump()


async def _counts(db: AsyncSession, model, idea_ids: list[str]) -> dict[str, int]:
    if not idea_ids:
        return {}
    rows = await db.execute(
        select(model.idea_id, func.count()).where(model.idea_id.in_(idea_ids)).group_by(model.idea_id)
    )
    return {idea_id: n for idea_id, n in rows.all()}


async def serialize_ideas(
    db: AsyncSession,
    ideas: Iterable[Idea],
    viewer: Optional[User],
) -> list[dict]:
    ideas = list(ideas)
    ids = [i.id for i in ideas]
    upvotes = await _counts(db, Upvote, ids)
    comments = await _counts(db, Comment, ids)

    upvoted: set[str] = set()
    if viewer is not None and ids:
        upvoted = set(
            (
                await db.scalars(
                    select(Upvote.idea_id).where(Upvote.user_id == viewer.id, Upvote.idea_id.in_(ids))
                )
            ).all()
        )

    out = []
    for idea in ideas:
        full = can_view_full(idea, viewer)
        out.append(
            {
                "id": idea.id,
                "title": idea.title,
                "description": idea.description if full else PROTECTED_DESCRIPTION,
                "tags": idea.tags or [],
                "image": idea.image if full else None,
                "is_nft": idea.is_nft,
                "minted_by": idea.minted_by,
                "is_blurred": idea.is_blurred,
                "created_by": idea.created_by,
                "remix_of_id": idea.remix_of_id,
                "ownership_mode": idea.ownership_mode,
                "price_cents": price_for(idea),
                "created_at": idea.created_at,
                "author": _user_dict(idea.author),
                "minted_user": _user_dict(idea.minted_user),
                "upvote_count": upvotes.get(idea.id, 0),
                "comment_count": comments.get(idea.id, 0),
                "user_upvoted": idea.id in upvoted,
                "can_view_full": full,
                "can_purchase": can_purchase(idea, viewer),
            }
        )
    return out


async def serialize_idea(db: AsyncSession, idea: Idea, viewer: Optional[User]) -> dict:
    return (await serialize_ideas(db, [idea], viewer))[0]


async def list_ideas(
    db: AsyncSession,
    *,
    sort: str = "newest",
    nft_status: str = "all",
    tag: Optional[str] = None,
    ownership_mode: Optional[str] = None,
    created_by: Optional[str] = None,
    limit: int = 50,
    offset: int = 0,
) -> list[Idea]:
    stmt = idea_select()
    if nft_status == "minted":
        stmt = stmt.where(Idea.minted_by.is_not(None))
    elif nft_status == "not_minted":
        stmt = stmt.where(Idea.minted_by.is_(None))
    if ownership_mode:
        stmt = stmt.where(Idea.ownership_mode == ownership_mode)
    if created_by:
        stmt = stmt.where(Idea.created_by == created_by)
    stmt = stmt.order_by(Idea.created_at.asc() if sort == "oldest" else Idea.created_at.desc())

    if not tag:
        return list((await db.scalars(stmt.limit(limit).offset(offset))).all())

    # tags is a plain JSON list, so the tag match runs here rather than in SQL
    wanted = tag.strip().lower()
    rows = (await db.scalars(stmt)).all()
    matched = [i for i in rows if any(t.lower() == wanted for t in (i.tags or []))]
    return matched[offset:offset + limit]


async def distinct_tags(db: AsyncSession) -> list[str]:
    seen: dict[str, str] = {}
    for tags in (await db.scalars(select(Idea.tags))).all():
        for t in tags or []:
            seen.setdefault(t.lower(), t)
    return sorted(seen.values(), key=str.lower)


async def upvote_count(db: AsyncSession, idea_id: str) -> int:
    return await db.scalar(select(func.count()).select_from(Upvote).where(Upvote.idea_id == idea_id)) or 0


async def toggle_upvote(db: AsyncSession, idea_id: str, user_id: str) -> tuple[bool, int]:
    existing = await db.get(Upvote, (idea_id, user_id))
    if existing is not None:
        await db.delete(existing)
        upvoted = False
    else:
        db.add(Upvote(idea_id=idea_id, user_id=user_id))
        upvoted = True
    await db.commit()
    return upvoted, await upvote_count(db, idea_id)


def remix_description(base: str, changes: Optional[str]) -> str:
    if changes and changes.strip():
        return f"{base}{REMIX_SEPARATOR}{changes.strip()}"
    return base
