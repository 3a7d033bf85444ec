import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ideahub.db.models import CollabRequest, Idea, User
from ideahub.db.session import get_db
from ideahub.schemas.collaboration import CollabRequestCreate, CollabRequestOut
from ideahub.utils.deps import get_current_user, require_role

log = logging.getLogger(__name__)

router = APIRouter(tags=["collaboration"])


@router.post("/ideas/{idea_id}/collab-requests", response_model=CollabRequestOut, status_code=201)
async def send_collab_request(
    idea_id: str,
    data: CollabRequestCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    idea = await db.get(Idea, idea_id)
    if idea is None:
        raise HTTPException(404, "Idea not found")
    if idea.created_by == current_user.id:
        raise HTTPException(400, "You cannot send a request for your own idea")
    if not data.nda_agreed:
        raise HTTPException(400, "You must agree to the NDA terms")

    req = CollabRequest(
        idea_id=idea_id,
        investor_id=current_user.id,
        name=data.name.strip(),
        email=data.email.strip(),
        linkedin_url=data.linkedin_url or None,
        message=data.message.strip(),
    )
    db.add(req)
    await db.commit()
    await db.refresh(req)
    log.info("collab.request idea=%s investor=%s", idea_id, current_user.id)
    return req


@router.get("/collab-requests/incoming", response_model=list[CollabRequestOut])
async def incoming_collab_requests(
    current_user: User = Depends(require_role("creator")),
    db: AsyncSession = Depends(get_db),
):
    rows = await db.scalars(
        select(CollabRequest)
        .join(Idea, Idea.id == CollabRequest.idea_id)
        .where(Idea.created_by == current_user.id)
        .order_by(CollabRequest.created_at.desc())
    )
    return rows.all()


@router.put("/collab-requests/{request_id}/accept", response_model=CollabRequestOut)
async def accept_collab_request(
    request_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    req = await db.get(CollabRequest, request_id)
    if req is None:
        raise HTTPException(404, "Request not found")
    idea = await db.get(Idea, req.idea_id)
    if idea is None or idea.created_by != current_user.id:
        raise HTTPException(403, "Only the idea's creator can accept this request")

    req.accepted = True
    await db.commit()
    await db.refresh(req)
    return req
