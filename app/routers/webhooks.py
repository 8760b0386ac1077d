"""Stripe webhook endpoint."""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from app.dependencies import get_dispatcher
from app.dispatcher import DispatchStatus, WebhookDispatcher

router = APIRouter()


@router.post("/webhook/stripe")
async def stripe_webhook(request: Request, dispatcher: WebhookDispatcher = Depends(get_dispatcher)) -> Response:
    """Receive a Stripe event; failed-payment events are emailed and recorded."""
    # Signature covers the raw bytes, so read them before any parsing
    payload = await request.body()
    signature = request.headers.get("stripe-signature")

    outcome = await dispatcher.handle_webhook(payload, signature)

    if outcome.status == DispatchStatus.REJECTED:
        return PlainTextResponse(f"Webhook Error: {outcome.error}", status_code=400)
    if outcome.status == DispatchStatus.FAILED:
        return PlainTextResponse("Internal Server Error", status_code=500)
    return JSONResponse({"received": True})
