import json
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ideahub.db.session import get_db
from ideahub.services import payments, stripe_events

log = logging.getLogger(__name__)

router = APIRouter(prefix="/webhooks", tags=["webhooks"])


@router.post("/stripe")
async def stripe_webhook(request: Request, db: AsyncSession = Depends(get_db)):
    """
    Stripe webhook receiver.
    - Verifies the `stripe-signature` header against the raw body.
    - Any failure answers 400 so Stripe retries the delivery.
    """
    signature = request.headers.get("stripe-signature")
    raw = await request.body()
    if not signature:
        log.warning("stripe.webhook.missing_signature")
        return PlainTextResponse("No signature", status_code=400)

    try:
        payments.construct_event(raw, signature)
        event = json.loads(raw)
        handled = await stripe_events.handle_event(db, event)
    except Exception as e:
        log.exception("stripe.webhook.error")
        await db.rollback()
        return PlainTextResponse(f"Webhook error: {e}", status_code=400)

    if not handled:
        log.info("stripe.webhook.ignored type=%s", event.get("type"))
    return JSONResponse({"received": True})
