import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from ideahub.core.config import settings
from ideahub.db.models import Idea, PartnershipRequest, User
from ideahub.db.session import get_db
from ideahub.schemas.billing import (
    BillingStatus,
    CheckoutRequest,
    CheckoutResponse,
    ConnectPurchaseResponse,
    OnboardingResponse,
    PlanOut,
)
from ideahub.services.billing import (
    ensure_payout_account,
    frontend_origin,
    onboarding_link,
    plan_catalog,
    start_connect_purchase,
    start_plan_checkout,
    start_wallet_purchase,
)
from ideahub.services.ideas import get_idea_or_404
from ideahub.services.payments import ConnectNotEnabledError, PaymentProviderError
from ideahub.utils.deps import get_current_user, require_role
from ideahub.utils.infrastructure import get_user_key, rate_limit

log = logging.getLogger(__name__)

router = APIRouter(prefix="/billing", tags=["billing"])

CONNECT_NOT_ENABLED = {
    "error": "STRIPE_CONNECT_NOT_ENABLED",
    "message": (
        "Payment processing is temporarily unavailable. The platform administrator "
        "needs to enable Stripe Connect to process creator payouts."
    ),
    "userMessage": "Payment processing is currently being set up. Please try again later or contact support.",
}


def _provider_error(e: PaymentProviderError, what: str) -> HTTPException:
    log.error("Error creating %s: %s", what, e)
    return HTTPException(status_code=400, detail={"error": str(e)})


@router.get("/plans", response_model=list[PlanOut])
async def list_plans():
    return [{"key": key, **plan} for key, plan in plan_catalog().items()]


@router.post("/checkout", response_model=CheckoutResponse)
@rate_limit(
    max_requests=settings.RATE_LIMIT_BILLING_MAX,
    window_seconds=settings.RATE_LIMIT_BILLING_WINDOW,
    key_prefix="rl:checkout",
    key_func=get_user_key,
)
async def create_checkout(
    data: CheckoutRequest,
    request: Request,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    try:
        session = await start_plan_checkout(
            db, current_user, data.plan_type, frontend_origin(request), price_id=data.price_id
        )
    except PaymentProviderError as e:
        raise _provider_error(e, "checkout session")
    return {"url": session["url"], "session_id": session["id"]}


@router.post("/ideas/{idea_id}/purchase", response_model=CheckoutResponse)
@rate_limit(
    max_requests=settings.RATE_LIMIT_BILLING_MAX,
    window_seconds=settings.RATE_LIMIT_BILLING_WINDOW,
    key_prefix="rl:purchase",
    key_func=get_user_key,
)
async def purchase_idea(
    idea_id: str,
    request: Request,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Platform-collected purchase; the creator's share lands in their wallet."""
    idea = await get_idea_or_404(db, idea_id)
    try:
        session = await start_wallet_purchase(db, current_user, idea, frontend_origin(request))
    except PaymentProviderError as e:
        raise _provider_error(e, "wallet purchase session")
    return {"url": session["url"], "session_id": session["id"]}


@router.post("/ideas/{idea_id}/purchase/connect", response_model=ConnectPurchaseResponse)
@rate_limit(
    max_requests=settings.RATE_LIMIT_BILLING_MAX,
    window_seconds=settings.RATE_LIMIT_BILLING_WINDOW,
    key_prefix="rl:purchase",
    key_func=get_user_key,
)
async def purchase_idea_connect(
    idea_id: str,
    request: Request,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    idea = await get_idea_or_404(db, idea_id)
    try:
        return await start_connect_purchase(db, current_user, idea, frontend_origin(request))
    except ConnectNotEnabledError as e:
        log.warning("billing.connect_not_enabled err=%s", e)
        raise HTTPException(status_code=503, detail=CONNECT_NOT_ENABLED)
    except PaymentProviderError as e:
        raise _provider_error(e, "payout session")


@router.post("/payouts/onboarding", response_model=OnboardingResponse)
async def payout_onboarding(
    request: Request,
    current_user: User = Depends(require_role("creator")),
    db: AsyncSession = Depends(get_db),
):
    """Start or resume Connect onboarding for the current creator."""
    try:
        account = await ensure_payout_account(db, current_user)
        url = await onboarding_link(account, frontend_origin(request))
    except ConnectNotEnabledError:
        raise HTTPException(status_code=503, detail=CONNECT_NOT_ENABLED)
    except PaymentProviderError as e:
        raise _provider_error(e, "onboarding link")
    return {
        "onboarding_url": url,
        "stripe_account_id": account.stripe_account_id,
        "account_enabled": account.account_enabled,
    }


@router.get("/status", response_model=BillingStatus)
async def billing_status(
    idea_id: Optional[str] = None,
    partnership_id: Optional[str] = None,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """What the client polls after a payment redirect."""
    await db.refresh(current_user)
    out: dict = {"is_premium": current_user.is_premium}

    if idea_id:
        idea = await db.get(Idea, idea_id, populate_existing=True)
        if idea is None:
            raise HTTPException(404, "Idea not found")
        out["idea_id"] = idea.id
        out["idea_owned"] = idea.minted_by == current_user.id

    if partnership_id:
        partnership = await db.get(PartnershipRequest, partnership_id, populate_existing=True)
        if partnership is None or partnership.investor_id != current_user.id:
            raise HTTPException(404, "Partnership request not found")
        out["partnership_id"] = partnership.id
        out["partnership_status"] = partnership.status

    return out
