import logging
from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ideahub.db.models import Comment, Idea, User
from ideahub.db.session import get_db
from ideahub.schemas.idea import (
    CommentCreate,
    CommentOut,
    IdeaCreate,
    IdeaListResponse,
    IdeaOut,
    IdeaUpdate,
    OwnershipMode,
    RemixCreate,
    UpvoteToggleResponse,
)
from ideahub.services.ideas import (
    can_view_full,
    distinct_tags,
    get_idea_or_404,
    idea_select,
    list_ideas,
    remix_description,
    serialize_idea,
    serialize_ideas,
    toggle_upvote,
)
from ideahub.utils.deps import get_current_user, get_optional_user

log = logging.getLogger(__name__)

router = APIRouter(prefix="/ideas", tags=["ideas"])


def _require_premium_for(mode: Optional[str], user: User) -> None:
    if mode == "partnership" and not user.is_premium:
        raise HTTPException(
            status_code=402,
            detail={
                "error": "PREMIUM_REQUIRED",
                "message": "Partnership mode is a Pro feature. Upgrade to enable it.",
            },
        )


@router.get("", response_model=IdeaListResponse)
async def get_feed(
    sort: Literal["newest", "oldest"] = "newest",
    nft_status: Literal["all", "minted", "not_minted"] = "all",
    tag: Optional[str] = None,
    ownership_mode: Optional[OwnershipMode] = None,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    viewer: User | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    ideas = await list_ideas(
        db,
        sort=sort,
        nft_status=nft_status,
        tag=tag,
        ownership_mode=ownership_mode,
        limit=limit,
        offset=offset,
    )
    items = await serialize_ideas(db, ideas, viewer)
    return {"count": len(items), "items": items}


@router.get("/tags", response_model=list[str])
async def get_tags(db: AsyncSession = Depends(get_db)):
    return await distinct_tags(db)


@router.post("", response_model=IdeaOut, status_code=201)
async def create_idea(
    data: IdeaCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    _require_premium_for(data.ownership_mode, current_user)

    idea = Idea(
        title=data.title.strip(),
        description=data.description.strip(),
        tags=data.tags,
        image=data.image or None,
        is_nft=data.is_nft,
        is_blurred=data.is_blurred,
        created_by=current_user.id,
        minted_by=current_user.id if data.is_nft else None,
        ownership_mode=data.ownership_mode,
        price_cents=data.price_cents,
    )
    db.add(idea)
    await db.commit()
    log.info("idea.created id=%s user=%s nft=%s", idea.id, current_user.id, data.is_nft)

    idea = await get_idea_or_404(db, idea.id)
    return await serialize_idea(db, idea, current_user)


@router.get("/{idea_id}", response_model=IdeaOut)
async def get_idea(
    idea_id: str,
    viewer: User | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    idea = await get_idea_or_404(db, idea_id)
    return await serialize_idea(db, idea, viewer)


@router.patch("/{idea_id}", response_model=IdeaOut)
async def update_idea(
    idea_id: str,
    data: IdeaUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    idea = await get_idea_or_404(db, idea_id)
    if idea.created_by != current_user.id:
        raise HTTPException(403, "Only the creator can edit this idea")

    changes = data.model_dump(exclude_unset=True)
    if changes.get("ownership_mode") and changes["ownership_mode"] != idea.ownership_mode:
        _require_premium_for(changes["ownership_mode"], current_user)
    for field in ("title", "description", "ownership_mode", "is_blurred", "tags"):
        if field in changes and changes[field] is None:
            changes.pop(field)

    for field, value in changes.items():
        setattr(idea, field, value)
    await db.commit()

    idea = await get_idea_or_404(db, idea_id)
    return await serialize_idea(db, idea, current_user)


@router.delete("/{idea_id}", status_code=204)
async def delete_idea(
    idea_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    idea = await db.get(Idea, idea_id)
    if idea is None:
        raise HTTPException(404, "Idea not found")
    if idea.created_by != current_user.id:
        raise HTTPException(403, "Only the creator can delete this idea")
    await db.delete(idea)
    await db.commit()
    log.info("idea.deleted id=%s user=%s", idea_id, current_user.id)


@router.post("/{idea_id}/remix", response_model=IdeaOut, status_code=201)
async def remix_idea(
    idea_id: str,
    data: RemixCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    original = await get_idea_or_404(db, idea_id)
    if not can_view_full(original, current_user):
        raise HTTPException(403, "This idea is protected")

    remix = Idea(
        title=(data.title or f"Remix: {original.title}").strip(),
        description=remix_description(data.description or original.description, data.remix_changes),
        tags=data.tags if data.tags is not None else list(original.tags or []),
        image=data.image if data.image is not None else original.image,
        is_nft=data.is_nft,
        is_blurred=data.is_blurred,
        created_by=current_user.id,
        minted_by=current_user.id if data.is_nft else None,
        remix_of_id=original.id,
    )
    db.add(remix)
    await db.commit()
    log.info("idea.remixed id=%s from=%s", remix.id, original.id)

    remix = await get_idea_or_404(db, remix.id)
    return await serialize_idea(db, remix, current_user)


@router.get("/{idea_id}/remixes", response_model=list[IdeaOut])
async def get_remixes(
    idea_id: str,
    viewer: User | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    await get_idea_or_404(db, idea_id)
    stmt = idea_select().where(Idea.remix_of_id == idea_id).order_by(Idea.created_at.desc())
    remixes = (await db.scalars(stmt)).all()
    return await serialize_ideas(db, remixes, viewer)


@router.get("/{idea_id}/comments", response_model=list[CommentOut])
async def get_comments(idea_id: str, db: AsyncSession = Depends(get_db)):
    await get_idea_or_404(db, idea_id)
    stmt = (
        select(Comment)
        .options(selectinload(Comment.author))
        .where(Comment.idea_id == idea_id)
        .order_by(Comment.created_at.asc())
    )
    return (await db.scalars(stmt)).all()


@router.post("/{idea_id}/comments", response_model=CommentOut, status_code=201)
async def add_comment(
    idea_id: str,
    data: CommentCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await get_idea_or_404(db, idea_id)
    text = data.comment_text.strip()
    if not text:
        raise HTTPException(400, "Comment cannot be empty")

    comment = Comment(idea_id=idea_id, user_id=current_user.id, comment_text=text)
    db.add(comment)
    await db.commit()
    await db.refresh(comment, attribute_names=["author"])
    return comment


@router.post("/{idea_id}/upvote", response_model=UpvoteToggleResponse)
async def upvote(
    idea_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await get_idea_or_404(db, idea_id)
    upvoted, count = await toggle_upvote(db, idea_id, current_user.id)
    return {"idea_id": idea_id, "upvoted": upvoted, "upvote_count": count}
