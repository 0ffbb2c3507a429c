import logging
from fastapi import APIRouter, Depends, Header, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from typing import Optional
from sqlalchemy.orm import Session
from storefront.api.deps import get_db
from storefront.services.orders import mark_session_paid, cancel_expired_session
from storefront.services.payments import StripeGateway, get_payment_gateway

logger = logging.getLogger(__name__)

router = APIRouter()

def dispatch_event(db: Session, event: dict):
    event_type = event["type"]
    obj = event["data"]["object"]
    if event_type == "checkout.session.completed":
        mark_session_paid(db, obj)
    elif event_type == "checkout.session.expired":
        cancel_expired_session(db, obj)
    elif event_type == "payment_intent.payment_failed":
        logger.warning("Payment failed for intent %s", obj["id"])
    else:
        logger.info("Unhandled event type: %s", event_type)

@router.post("/webhooks/stripe")
async def stripe_webhook(
    request: Request,
    stripe_signature: Optional[str] = Header(default=None, alias="Stripe-Signature"),
    db: Session = Depends(get_db),
    gateway: StripeGateway = Depends(get_payment_gateway),
):
    # signature is computed over the raw bytes
    payload = await request.body()
    if not stripe_signature:
        logger.error("Missing stripe-signature header")
        return JSONResponse(status_code=400, content={"error": "Missing stripe-signature header"})
    try:
        event = gateway.construct_event(payload, stripe_signature)
    except Exception:
        logger.exception("Webhook signature verification failed")
        return JSONResponse(status_code=400, content={"error": "Webhook signature verification failed"})

    try:
        # session commits are blocking
        await run_in_threadpool(dispatch_event, db, event)
    except Exception:
        logger.exception("Webhook handler error")
        return JSONResponse(status_code=500, content={"error": "Webhook handler failed"})
    return {"received": True}
