"""
Stripe webhook event handlers.

`handle_event` dispatches on `event["type"]`. Each handler commits its own
changes. Handlers tolerate re-delivery: an idea is only minted while it is
unowned, and wallet credits are keyed by checkout session id.
"""
import logging
from typing import Any, Awaitable, Callable, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ideahub.db.models import (
    Idea,
    PartnershipRequest,
    StripeCustomer,
    StripeOrder,
    StripePayoutAccount,
    StripeSubscription,
    User,
)
from ideahub.services import payments
from ideahub.services.wallet import credit_wallet

log = logging.getLogger(__name__)

Handler = Callable[[AsyncSession, dict], Awaitable[None]]


def _redact(val: Any) -> str:
    """Redact ids in logs; works for str/None."""
    if val is None:
        return "-"
    s = str(val)
    if len(s) <= 6:
        return "***"
    return f"{s[:3]}…{s[-2:]}"


def _field(obj, key: str, default=None):
    # Works for plain dicts and StripeObject alike
    try:
        value = obj[key]
    except (KeyError, TypeError):
        return default
    return default if value is None else value


def _price_id(subscription) -> Optional[str]:
    try:
        return subscription["items"]["data"][0]["price"]["id"]
    except (KeyError, IndexError, TypeError):
        return None


def _cents(value, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


async def _user_for_customer(db: AsyncSession, customer_id: Optional[str]) -> Optional[User]:
    if not customer_id:
        return None
    row = await db.scalar(select(StripeCustomer).where(StripeCustomer.customer_id == customer_id))
    if row is None:
        return None
    return await db.get(User, row.user_id)


async def _set_premium(db: AsyncSession, user_id: str, value: bool) -> None:
    user = await db.get(User, user_id)
    if user is None:
        log.error("stripe.premium.user_missing user=%s", _redact(user_id))
        return
    user.is_premium = value
    log.info("stripe.premium.updated user=%s premium=%s", _redact(user_id), value)


async def _mint_idea(db: AsyncSession, idea_id: Optional[str], investor_id: Optional[str]) -> bool:
    """Give an unowned idea to the investor. Returns False if nothing changed."""
    if not idea_id or not investor_id:
        log.error("stripe.mint.missing_metadata idea=%s investor=%s", _redact(idea_id), _redact(investor_id))
        return False
    idea = await db.get(Idea, idea_id)
    if idea is None:
        log.error("stripe.mint.idea_missing idea=%s", _redact(idea_id))
        return False
    if idea.minted_by is not None:
        log.info("stripe.mint.already_owned idea=%s", _redact(idea_id))
        return False
    idea.minted_by = investor_id
    idea.is_nft = True
    log.info("stripe.mint.done idea=%s investor=%s", _redact(idea_id), _redact(investor_id))
    return True


async def _record_order(db: AsyncSession, session: dict) -> None:
    session_id = session.get("id")
    exists = await db.scalar(select(StripeOrder.id).where(StripeOrder.checkout_session_id == session_id))
    if exists:
        return
    db.add(
        StripeOrder(
            checkout_session_id=session_id,
            payment_intent_id=session.get("payment_intent"),
            customer_id=session.get("customer"),
            amount_subtotal=session.get("amount_subtotal") or 0,
            amount_total=session.get("amount_total") or 0,
            currency=session.get("currency") or "usd",
            payment_status=session.get("payment_status") or "unpaid",
            status="completed",
        )
    )


async def _upsert_subscription(db: AsyncSession, customer_id: str, subscription) -> str:
    status = _field(subscription, "status", "incomplete")
    row = await db.scalar(select(StripeSubscription).where(StripeSubscription.customer_id == customer_id))
    if row is None:
        row = StripeSubscription(customer_id=customer_id)
        db.add(row)
    row.subscription_id = _field(subscription, "id")
    row.price_id = _price_id(subscription)
    row.current_period_start = _field(subscription, "current_period_start")
    row.current_period_end = _field(subscription, "current_period_end")
    row.cancel_at_period_end = bool(_field(subscription, "cancel_at_period_end", False))
    row.status = status
    return status


async def _idea_purchase_completed(db: AsyncSession, session: dict, metadata: dict) -> None:
    await _record_order(db, session)
    await _mint_idea(db, metadata.get("idea_id"), metadata.get("investor_id"))
    await db.commit()


async def _wallet_purchase_completed(db: AsyncSession, session: dict, metadata: dict) -> None:
    idea_id = metadata.get("idea_id")
    await _record_order(db, session)
    await _mint_idea(db, idea_id, metadata.get("investor_id"))

    creator_id = metadata.get("creator_id")
    if creator_id:
        amount = _cents(metadata.get("creator_amount"), default=-1)
        if amount < 0:
            amount = payments.split_fee(session.get("amount_total") or 0)[1]
        idea = await db.get(Idea, idea_id) if idea_id else None
        await credit_wallet(
            db,
            user_id=creator_id,
            amount_cents=amount,
            tx_type="purchase",
            description=f'Sale of "{idea.title}"' if idea else "Idea sale",
            idea_id=idea_id if idea else None,
            stripe_session_id=session.get("id"),
        )
    else:
        log.error("stripe.wallet_purchase.missing_creator session=%s", _redact(session.get("id")))
    await db.commit()


async def _partnership_payment_completed(db: AsyncSession, session: dict, metadata: dict) -> None:
    await _record_order(db, session)

    partnership = None
    if metadata.get("partnership_id"):
        partnership = await db.get(PartnershipRequest, metadata["partnership_id"])
    if partnership is None and session.get("id"):
        partnership = await db.scalar(
            select(PartnershipRequest).where(PartnershipRequest.stripe_session_id == session["id"])
        )
    if partnership is None:
        log.error("stripe.partnership.missing session=%s", _redact(session.get("id")))
        await db.commit()
        return

    if partnership.status == "awaiting_payment":
        partnership.payment_completed = True
        partnership.stripe_session_id = session.get("id")
        partnership.status = "awaiting_message"
        log.info("stripe.partnership.paid partnership=%s", _redact(partnership.id))

    amount = _cents(metadata.get("creator_amount"), default=-1)
    if amount < 0:
        amount = payments.split_fee(partnership.payment_amount_cents)[1]
    await credit_wallet(
        db,
        user_id=partnership.creator_id,
        amount_cents=amount,
        tx_type="partnership",
        description=f"Partnership fee from {partnership.investor_name}",
        idea_id=partnership.idea_id,
        stripe_session_id=session.get("id"),
    )
    await db.commit()


async def _plan_checkout_completed(db: AsyncSession, session: dict, metadata: dict) -> None:
    user_id = metadata.get("user_id")
    log.info("stripe.checkout.plan user=%s plan=%s", _redact(user_id), metadata.get("plan_type"))
    if not user_id:
        log.error("stripe.checkout.no_user_id session=%s", _redact(session.get("id")))
        return

    if session.get("mode") == "payment":
        await _record_order(db, session)
        await _set_premium(db, user_id, True)

    elif session.get("mode") == "subscription" and session.get("subscription"):
        subscription = await payments.retrieve_subscription(session["subscription"])
        status = await _upsert_subscription(db, session.get("customer"), subscription)
        await _set_premium(db, user_id, status in payments.ACTIVE_SUBSCRIPTION_STATUSES)

    await db.commit()


_CHECKOUT_KINDS: dict[str, Callable[[AsyncSession, dict, dict], Awaitable[None]]] = {
    "idea_purchase": _idea_purchase_completed,
    "wallet_purchase": _wallet_purchase_completed,
    "partnership_payment": _partnership_payment_completed,
}


async def on_checkout_completed(db: AsyncSession, session: dict) -> None:
    metadata = session.get("metadata") or {}
    kind = metadata.get("type")
    handler = _CHECKOUT_KINDS.get(kind)
    if handler is None:
        await _plan_checkout_completed(db, session, metadata)
        return
    if session.get("payment_status") != "paid":
        log.info("stripe.checkout.unpaid type=%s session=%s", kind, _redact(session.get("id")))
        return
    await handler(db, session, metadata)


async def on_subscription_changed(db: AsyncSession, subscription: dict) -> None:
    customer_id = subscription.get("customer")
    log.info("stripe.subscription.changed customer=%s status=%s", _redact(customer_id), subscription.get("status"))
    user = await _user_for_customer(db, customer_id)
    if user is None:
        log.error("stripe.subscription.customer_missing customer=%s", _redact(customer_id))
        return
    status = await _upsert_subscription(db, customer_id, subscription)
    await _set_premium(db, user.id, status in payments.ACTIVE_SUBSCRIPTION_STATUSES)
    await db.commit()


async def on_subscription_deleted(db: AsyncSession, subscription: dict) -> None:
    customer_id = subscription.get("customer")
    user = await _user_for_customer(db, customer_id)
    if user is None:
        log.error("stripe.subscription.customer_missing customer=%s", _redact(customer_id))
        return
    user.is_premium = False
    row = await db.scalar(select(StripeSubscription).where(StripeSubscription.customer_id == customer_id))
    if row is not None:
        row.status = "canceled"
    await db.commit()
    log.info("stripe.subscription.deleted user=%s", _redact(user.id))


async def on_invoice_paid(db: AsyncSession, invoice: dict) -> None:
    if not invoice.get("subscription"):
        return
    user = await _user_for_customer(db, invoice.get("customer"))
    if user is None:
        return
    user.is_premium = True
    await db.commit()
    log.info("stripe.invoice.paid user=%s", _redact(user.id))


async def on_invoice_failed(db: AsyncSession, invoice: dict) -> None:
    # Premium stays on; Stripe's dunning decides when the subscription ends
    if not invoice.get("subscription"):
        return
    user = await _user_for_customer(db, invoice.get("customer"))
    if user is not None:
        log.warning("stripe.invoice.failed user=%s", _redact(user.id))


async def on_account_updated(db: AsyncSession, account: dict) -> None:
    row = await db.scalar(
        select(StripePayoutAccount).where(StripePayoutAccount.stripe_account_id == account.get("id"))
    )
    if row is None:
        log.info("stripe.account.unknown account=%s", _redact(account.get("id")))
        return
    row.account_enabled = bool(account.get("charges_enabled")) and bool(account.get("payouts_enabled"))
    await db.commit()
    log.info("stripe.account.updated user=%s enabled=%s", _redact(row.user_id), row.account_enabled)


async def on_payment_intent_succeeded(db: AsyncSession, intent: dict) -> None:
    metadata = intent.get("metadata") or {}
    if not metadata.get("idea_id") or not metadata.get("investor_id"):
        return
    if await _mint_idea(db, metadata["idea_id"], metadata["investor_id"]):
        await db.commit()


HANDLERS: dict[str, Handler] = {
    "checkout.session.completed": on_checkout_completed,
    "customer.subscription.created": on_subscription_changed,
    "customer.subscription.updated": on_subscription_changed,
    "customer.subscription.deleted": on_subscription_deleted,
    "invoice.payment_succeeded": on_invoice_paid,
    "invoice.payment_failed": on_invoice_failed,
    "account.updated": on_account_updated,
    "payment_intent.succeeded": on_payment_intent_succeeded,
}


async def handle_event(db: AsyncSession, event: dict) -> bool:
    """Run the handler for an event. Returns False for unhandled types."""
    event_type = event.get("type")
    handler = HANDLERS.get(event_type)
    log.info("stripe.webhook.received type=%s id=%s", event_type, _redact(event.get("id")))
    if handler is None:
        return False
    await handler(db, (event.get("data") or {}).get("object") or {})
    return True
