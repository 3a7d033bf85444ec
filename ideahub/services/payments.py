"""
Thin async wrapper over the Stripe SDK.

The SDK is blocking, so every call goes through the threadpool. Stripe
errors are re-raised as PaymentProviderError so routes can map them to a
400 without importing stripe.
"""
import logging
from typing import Any, Optional

import stripe
from starlette.concurrency import run_in_threadpool

from ideahub.core.config import settings

log = logging.getLogger(__name__)

stripe.api_key = settings.STRIPE_SECRET_KEY
stripe.api_version = settings.STRIPE_API_VERSION

ACTIVE_SUBSCRIPTION_STATUSES = ("active", "trialing")


class PaymentProviderError(Exception):
    """Raised when Stripe rejects a call or is not configured."""


class ConnectNotEnabledError(PaymentProviderError):
    """The platform account has not enabled Stripe Connect."""


def split_fee(amount_cents: int) -> tuple[int, int]:
    """Return (platform_fee, creator_amount) for a gross amount in cents."""
    platform_fee = round(amount_cents * settings.PLATFORM_FEE_PERCENT / 100)
    return platform_fee, amount_cents - platform_fee


async def _call(fn, *args, **kwargs):
    if not stripe.api_key:
        raise PaymentProviderError("STRIPE_SECRET_KEY environment variable is not set")
    try:
        return await run_in_threadpool(fn, *args, **kwargs)
    except stripe.StripeError as e:
        log.warning("stripe.call_failed fn=%s err=%s", getattr(fn, "__qualname__", fn), e)
        raise PaymentProviderError(e.user_message or str(e)) from e


async def create_customer(email: str, user_id: str) -> str:
    customer = await _call(
        stripe.Customer.create,
        email=email,
        metadata={"user_id": user_id},
    )
    return customer["id"]


async def create_checkout_session(
    *,
    customer_id: str,
    mode: str,
    success_url: str,
    cancel_url: str,
    metadata: dict[str, str],
    price_id: Optional[str] = None,
    amount_cents: Optional[int] = None,
    product_name: Optional[str] = None,
    product_description: Optional[str] = None,
    image: Optional[str] = None,
    payment_intent_data: Optional[dict[str, Any]] = None,
) -> dict:
    """
    Create a Checkout Session.

    Either `price_id` (catalog price, used for plans) or `amount_cents` with a
    product name (inline price_data, used for ideas and partnership fees)
    must be given.
    """
    if price_id:
        line_item: dict[str, Any] = {"price": price_id, "quantity": 1}
    elif amount_cents:
        product: dict[str, Any] = {"name": product_name or "Idea-HUB"}
        if product_description:
            product["description"] = product_description
        if image:
            product["images"] = [image]
        line_item = {
            "price_data": {
                "currency": settings.STRIPE_CURRENCY,
                "product_data": product,
                "unit_amount": amount_cents,
            },
            "quantity": 1,
        }
    else:
        raise PaymentProviderError("Missing required parameters")

    params: dict[str, Any] = dict(
        customer=customer_id,
        payment_method_types=["card"],
        line_items=[line_item],
        mode=mode,
        success_url=success_url,
        cancel_url=cancel_url,
        metadata=metadata,
    )
    if payment_intent_data:
        params["payment_intent_data"] = payment_intent_data

    session = await _call(stripe.checkout.Session.create, **params)
    log.info("stripe.checkout.created mode=%s type=%s", mode, metadata.get("type", "plan"))
    return {"id": session["id"], "url": session["url"]}


async def create_connect_account(email: str, user_id: str) -> str:
    """Create an Express account for a creator; returns the account id."""
    try:
        account = await _call(
            stripe.Account.create,
            type="express",
            country=settings.STRIPE_CONNECT_COUNTRY,
            email=email,
            capabilities={
                "card_payments": {"requested": True},
                "transfers": {"requested": True},
            },
            business_type="individual",
            metadata={"user_id": user_id},
        )
    except PaymentProviderError as e:
        if "Connect" in str(e):
            raise ConnectNotEnabledError(str(e)) from e
        raise
    return account["id"]


async def create_onboarding_link(account_id: str, refresh_url: str, return_url: str) -> str:
    link = await _call(
        stripe.AccountLink.create,
        account=account_id,
        refresh_url=refresh_url,
        return_url=return_url,
        type="account_onboarding",
    )
    return link["url"]


async def retrieve_subscription(subscription_id: str):
    subscription = await _call(stripe.Subscription.retrieve, subscription_id)
    return subscription


def construct_event(payload: bytes, signature: str):
    """Verify a webhook signature. Raises on a bad signature or payload."""
    if not settings.STRIPE_WEBHOOK_SECRET:
        raise PaymentProviderError("STRIPE_WEBHOOK_SECRET is not configured")
    return stripe.Webhook.construct_event(payload, signature, settings.STRIPE_WEBHOOK_SECRET)
