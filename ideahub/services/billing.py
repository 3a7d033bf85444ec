import logging
from typing import Optional

from fastapi import HTTPException, Request
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ideahub.core.config import settings
from ideahub.db.models import Idea, PartnershipRequest, StripeCustomer, StripePayoutAccount, User
from ideahub.services import payments
from ideahub.services.ideas import price_for
from ideahub.services.wallet import get_or_create_wallet

log = logging.getLogger(__name__)


def plan_catalog() -> dict[str, dict]:
    return {
        "monthly": {
            "price_id": settings.STRIPE_MONTHLY_PRICE_ID,
            "name": "Monthly Pro",
            "price": "$10",
            "interval": "month",
            "description": "Upload up to 100 ideas per month. Includes idea protection & blur feature.",
            "features": [
                "100 ideas per month",
                "Idea protection & blur",
                "Premium support",
                "Advanced analytics",
            ],
        },
        "quarterly": {
            "price_id": settings.STRIPE_QUARTERLY_PRICE_ID,
            "name": "Quarterly Pro",
            "price": "$25",
            "interval": "3 months",
            "description": "Upload up to 300 ideas over 3 months. Best for active creators.",
            "features": [
                "300 ideas per quarter",
                "Idea protection & blur",
                "Premium support",
                "Advanced analytics",
                "Priority feature requests",
            ],
        },
        "lifetime": {
            "price_id": settings.STRIPE_LIFETIME_PRICE_ID,
            "name": "Lifetime Pro",
            "price": "$99",
            "interval": "lifetime",
            "description": "One-time payment for unlimited idea uploads and protection forever.",
            "features": [
                "Unlimited ideas forever",
                "Idea protection & blur",
                "Premium support",
                "Advanced analytics",
                "Priority feature requests",
                "Early access to new features",
            ],
        },
    }


def frontend_origin(request: Request) -> str:
    """Redirect base: the caller's Origin header, else FRONTEND_URL."""
    origin = request.headers.get("origin") or settings.FRONTEND_URL
    return origin.rstrip("/")


async def get_or_create_customer(db: AsyncSession, user: User) -> str:
    row = await db.scalar(select(StripeCustomer).where(StripeCustomer.user_id == user.id))
    if row is not None:
        return row.customer_id

    customer_id = await payments.create_customer(user.email, user.id)
    db.add(StripeCustomer(user_id=user.id, customer_id=customer_id))
    await db.commit()
    log.info("billing.customer.created user=%s", user.id)
    return customer_id


def ensure_purchasable(idea: Idea, investor: User) -> None:
    if idea.created_by == investor.id:
        raise HTTPException(400, "You cannot purchase your own idea")
    if idea.ownership_mode != "forsale" or idea.minted_by:
        raise HTTPException(409, "Idea is not available for purchase")


def _author_name(idea: Idea) -> str:
    return (idea.author.username if idea.author else None) or "Anonymous"


async def start_plan_checkout(
    db: AsyncSession,
    user: User,
    plan_type: str,
    origin: str,
    price_id: Optional[str] = None,
) -> dict:
    plan = plan_catalog()[plan_type]
    customer_id = await get_or_create_customer(db, user)
    return await payments.create_checkout_session(
        customer_id=customer_id,
        price_id=price_id or plan["price_id"],
        mode="payment" if plan_type == "lifetime" else "subscription",
        success_url=f"{origin}/profile?success=true",
        cancel_url=f"{origin}/profile?canceled=true",
        metadata={"user_id": user.id, "plan_type": plan_type},
    )


async def start_wallet_purchase(
    db: AsyncSession,
    investor: User,
    idea: Idea,
    origin: str,
) -> dict:
    """Platform collects the listed price; the webhook credits the creator wallet."""
    ensure_purchasable(idea, investor)
    amount = price_for(idea)
    platform_fee, creator_amount = payments.split_fee(amount)

    customer_id = await get_or_create_customer(db, investor)
    await get_or_create_wallet(db, idea.created_by)
    await db.commit()

    return await payments.create_checkout_session(
        customer_id=customer_id,
        mode="payment",
        amount_cents=amount,
        product_name=f"Idea: {idea.title}",
        product_description=f'Purchase full rights to "{idea.title}" by {_author_name(idea)}',
        image=None if idea.is_blurred else idea.image,
        success_url=f"{origin}/profile?purchase=success&idea={idea.id}",
        cancel_url=f"{origin}/?purchase=canceled",
        metadata={
            "type": "wallet_purchase",
            "idea_id": idea.id,
            "creator_id": idea.created_by,
            "investor_id": investor.id,
            "platform_fee": str(platform_fee),
            "creator_amount": str(creator_amount),
        },
    )


async def _payout_account(db: AsyncSession, user_id: str) -> Optional[StripePayoutAccount]:
    return await db.scalar(select(StripePayoutAccount).where(StripePayoutAccount.user_id == user_id))


async def ensure_payout_account(db: AsyncSession, creator: User) -> StripePayoutAccount:
    """Return the creator's Connect account row, creating the Express account if missing."""
    account = await _payout_account(db, creator.id)
    if account is not None and account.stripe_account_id:
        return account

    account_id = await payments.create_connect_account(creator.email, creator.id)
    if account is None:
        account = StripePayoutAccount(user_id=creator.id, stripe_account_id=account_id, account_enabled=False)
        db.add(account)
    else:
        account.stripe_account_id = account_id
        account.account_enabled = False
    await db.commit()
    log.info("billing.connect.account_created user=%s", creator.id)
    return account


async def onboarding_link(account: StripePayoutAccount, origin: str) -> str:
    return await payments.create_onboarding_link(
        account.stripe_account_id,
        refresh_url=f"{origin}/profile?refresh=true",
        return_url=f"{origin}/profile?setup=complete",
    )


async def start_connect_purchase(
    db: AsyncSession,
    investor: User,
    idea: Idea,
    origin: str,
) -> dict:
    """
    Destination-charge purchase through the creator's Connect account.

    If the creator has not finished onboarding, no checkout is created and
    an onboarding link is returned instead.
    """
    ensure_purchasable(idea, investor)
    account = await ensure_payout_account(db, idea.author)
    if not account.account_enabled:
        return {
            "requires_onboarding": True,
            "onboarding_url": await onboarding_link(account, origin),
            "message": "Creator needs to complete Stripe onboarding first",
        }

    amount = price_for(idea)
    platform_fee, creator_amount = payments.split_fee(amount)
    customer_id = await get_or_create_customer(db, investor)

    session = await payments.create_checkout_session(
        customer_id=customer_id,
        mode="payment",
        amount_cents=amount,
        product_name=f"Idea: {idea.title}",
        product_description=f'Purchase full rights to "{idea.title}" by {_author_name(idea)}',
        image=None if idea.is_blurred else idea.image,
        success_url=f"{origin}/profile?purchase=success&idea={idea.id}",
        cancel_url=f"{origin}/?purchase=canceled",
        payment_intent_data={
            "application_fee_amount": platform_fee,
            "transfer_data": {"destination": account.stripe_account_id},
            "metadata": {
                "idea_id": idea.id,
                "creator_id": idea.created_by,
                "investor_id": investor.id,
                "platform_fee": str(platform_fee),
                "creator_amount": str(creator_amount),
            },
        },
        metadata={
            "type": "idea_purchase",
            "idea_id": idea.id,
            "creator_id": idea.created_by,
            "investor_id": investor.id,
        },
    )
    return {"url": session["url"], "session_id": session["id"], "requires_onboarding": False}


async def start_partnership_checkout(
    db: AsyncSession,
    partnership: PartnershipRequest,
    idea: Idea,
    investor: User,
    origin: str,
) -> dict:
    amount = partnership.payment_amount_cents
    platform_fee, creator_amount = payments.split_fee(amount)
    customer_id = await get_or_create_customer(db, investor)
    await get_or_create_wallet(db, idea.created_by)

    session = await payments.create_checkout_session(
        customer_id=customer_id,
        mode="payment",
        amount_cents=amount,
        product_name="Partnership Access Fee",
        product_description=f'Partnership request for "{idea.title}" by {_author_name(idea)}',
        image=None if idea.is_blurred else idea.image,
        success_url=f"{origin}/profile?partnership=success&idea={idea.id}",
        cancel_url=f"{origin}/?partnership=canceled",
        metadata={
            "type": "partnership_payment",
            "partnership_id": partnership.id,
            "idea_id": idea.id,
            "creator_id": idea.created_by,
            "investor_id": investor.id,
            "platform_fee": str(platform_fee),
            "creator_amount": str(creator_amount),
            "investor_name": partnership.investor_name,
            "investor_email": partnership.investor_email,
        },
    )
    partnership.stripe_session_id = session["id"]
    await db.commit()
    return session
