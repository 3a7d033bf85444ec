import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ideahub.core.config import settings
from ideahub.db.models import PartnershipRequest, User
from ideahub.db.session import get_db
from ideahub.schemas.collaboration import (
    NdaOut,
    PartnershipDecision,
    PartnershipMessage,
    PartnershipOut,
    PartnershipStart,
    PartnershipStartResponse,
)
from ideahub.services.billing import frontend_origin, start_partnership_checkout
from ideahub.services.ideas import get_idea_or_404
from ideahub.services.payments import PaymentProviderError
from ideahub.utils.deps import get_current_user
from ideahub.utils.infrastructure import get_user_key, rate_limit

log = logging.getLogger(__name__)

router = APIRouter(prefix="/partnerships", tags=["partnerships"])

NDA_TEMPLATE = """
NON-DISCLOSURE AGREEMENT

This Non-Disclosure Agreement ("Agreement") is entered into between the Creator of the idea "{title}" ("Disclosing Party") and the undersigned investor ("Receiving Party").

1. CONFIDENTIAL INFORMATION
The Disclosing Party may share confidential and proprietary information related to their business idea, including but not limited to:
- Business plans and strategies
- Technical specifications and implementations
- Market research and analysis
- Financial projections and models
- Customer lists and market data
- Any other proprietary information marked as confidential

2. OBLIGATIONS OF RECEIVING PARTY
The Receiving Party agrees to:
- Keep all confidential information strictly confidential
- Not disclose any confidential information to third parties
- Use the information solely for the purpose of evaluating potential collaboration
- Not use the information for any competitive purposes
- Return or destroy all confidential materials upon request

3. TERM
This Agreement shall remain in effect for a period of 2 years from the date of signing, unless terminated earlier by mutual consent.

4. REMEDIES
The Receiving Party acknowledges that any breach of this Agreement may cause irreparable harm to the Disclosing Party, and that monetary damages may be inadequate. Therefore, the Disclosing Party shall be entitled to seek injunctive relief and other equitable remedies.

5. GOVERNING LAW
This Agreement shall be governed by and construed in accordance with the laws of the jurisdiction where the Disclosing Party resides.

By signing below, both parties acknowledge that they have read, understood, and agree to be bound by the terms of this Agreement.
"""


async def _get_partnership(db: AsyncSession, partnership_id: str) -> PartnershipRequest:
    partnership = await db.get(PartnershipRequest, partnership_id)
    if partnership is None:
        raise HTTPException(404, "Partnership request not found")
    return partnership


@router.get("/nda", response_model=NdaOut)
async def get_nda(idea_id: str, db: AsyncSession = Depends(get_db)):
    idea = await get_idea_or_404(db, idea_id)
    return {"idea_id": idea.id, "text": NDA_TEMPLATE.format(title=idea.title)}


@router.post("", response_model=PartnershipStartResponse, status_code=201)
@rate_limit(
    max_requests=settings.RATE_LIMIT_BILLING_MAX,
    window_seconds=settings.RATE_LIMIT_BILLING_WINDOW,
    key_prefix="rl:partnership",
    key_func=get_user_key,
)
async def start_partnership(
    data: PartnershipStart,
    request: Request,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """NDA signed: record the request and open the partnership fee checkout."""
    idea = await get_idea_or_404(db, data.idea_id)
    if idea.ownership_mode != "partnership":
        raise HTTPException(400, "Idea is not available for partnership")
    if idea.created_by == current_user.id:
        raise HTTPException(400, "You cannot partner on your own idea")

    partnership = PartnershipRequest(
        idea_id=idea.id,
        creator_id=idea.created_by,
        investor_id=current_user.id,
        investor_name=data.investor_name.strip(),
        investor_email=data.investor_email.strip(),
        agreed_nda=True,
        nda_signature=data.signature.strip(),
        payment_amount_cents=settings.PARTNERSHIP_FEE_CENTS,
        payment_completed=False,
        status="awaiting_payment",
    )
    db.add(partnership)
    await db.commit()

    try:
        session = await start_partnership_checkout(
            db, partnership, idea, current_user, frontend_origin(request)
        )
    except PaymentProviderError as e:
        log.error("Error creating partnership payment session: %s", e)
        await db.delete(partnership)
        await db.commit()
        raise HTTPException(400, detail={"error": str(e)})

    log.info("partnership.started id=%s idea=%s", partnership.id, idea.id)
    return {"partnership_id": partnership.id, "url": session["url"]}


@router.post("/{partnership_id}/message", response_model=PartnershipOut)
async def send_partnership_message(
    partnership_id: str,
    data: PartnershipMessage,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    partnership = await _get_partnership(db, partnership_id)
    if partnership.investor_id != current_user.id:
        raise HTTPException(403, "Not your partnership request")
    if not partnership.payment_completed or partnership.status == "awaiting_payment":
        raise HTTPException(402, "Partnership fee has not been paid yet")
    if partnership.status != "awaiting_message":
        raise HTTPException(409, "Message already sent")

    partnership.message = data.message.strip()
    if data.investor_name:
        partnership.investor_name = data.investor_name.strip()
    if data.investor_email:
        partnership.investor_email = data.investor_email.strip()
    partnership.status = "pending"
    await db.commit()
    await db.refresh(partnership)
    return partnership


@router.get("/incoming", response_model=list[PartnershipOut])
async def incoming_partnerships(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    rows = await db.scalars(
        select(PartnershipRequest)
        .where(PartnershipRequest.creator_id == current_user.id)
        .order_by(PartnershipRequest.created_at.desc())
    )
    return rows.all()


@router.get("/outgoing", response_model=list[PartnershipOut])
async def outgoing_partnerships(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    rows = await db.scalars(
        select(PartnershipRequest)
        .where(PartnershipRequest.investor_id == current_user.id)
        .order_by(PartnershipRequest.created_at.desc())
    )
    return rows.all()


@router.put("/{partnership_id}/status", response_model=PartnershipOut)
async def decide_partnership(
    partnership_id: str,
    data: PartnershipDecision,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    partnership = await _get_partnership(db, partnership_id)
    if partnership.creator_id != current_user.id:
        raise HTTPException(403, "Only the idea's creator can respond")
    if partnership.status != "pending":
        raise HTTPException(409, f"Request is {partnership.status}")

    partnership.status = data.status
    await db.commit()
    await db.refresh(partnership)
    log.info("partnership.decided id=%s status=%s", partnership.id, data.status)
    return partnership
