from fastapi import APIRouter, Depends
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ideahub.db.models import Comment, Idea, Upvote, User
from ideahub.db.session import get_db
from ideahub.schemas.dashboard import CreatorDashboard, InvestorDashboard
from ideahub.services.ideas import idea_select, serialize_ideas
from ideahub.utils.deps import require_role

router = APIRouter(prefix="/dashboard", tags=["dashboard"])

TRENDING_POOL = 10
TRENDING_SIZE = 5
RECENT_SIZE = 5


@router.get("/creator", response_model=CreatorDashboard)
async def creator_dashboard(
    current_user: User = Depends(require_role("creator")),
    db: AsyncSession = Depends(get_db),
):
    stmt = idea_select().where(Idea.created_by == current_user.id).order_by(Idea.created_at.desc())
    ideas = (await db.scalars(stmt)).all()
    idea_ids = [i.id for i in ideas]

    total_upvotes = total_comments = 0
    if idea_ids:
        total_upvotes = await db.scalar(
            select(func.count()).select_from(Upvote).where(Upvote.idea_id.in_(idea_ids))
        )
        total_comments = await db.scalar(
            select(func.count()).select_from(Comment).where(Comment.idea_id.in_(idea_ids))
        )

    return {
        "total_ideas": len(ideas),
        "total_upvotes": total_upvotes or 0,
        "total_comments": total_comments or 0,
        "nfts_minted": sum(1 for i in ideas if i.is_nft),
        "recent_ideas": await serialize_ideas(db, ideas[:RECENT_SIZE], current_user),
    }


@router.get("/investor", response_model=InvestorDashboard)
async def investor_dashboard(
    current_user: User = Depends(require_role("investor")),
    db: AsyncSession = Depends(get_db),
):
    owned_stmt = (
        idea_select()
        .where(Idea.minted_by == current_user.id, Idea.created_by != current_user.id)
        .order_by(Idea.created_at.desc())
    )
    owned = (await db.scalars(owned_stmt)).all()

    # Trending: the latest unowned ideas ranked by upvotes
    pool_stmt = (
        idea_select()
        .where(Idea.created_by != current_user.id, Idea.minted_by.is_(None))
        .order_by(Idea.created_at.desc())
        .limit(TRENDING_POOL)
    )
    pool = await serialize_ideas(db, (await db.scalars(pool_stmt)).all(), current_user)
    trending = sorted(pool, key=lambda i: i["upvote_count"], reverse=True)[:TRENDING_SIZE]

    return {
        "total_purchased": len(owned),
        "nfts_owned": sum(1 for i in owned if i.is_nft),
        "owned_ideas": await serialize_ideas(db, owned, current_user),
        "trending_ideas": trending,
    }
