"""Manual test trigger - pushes a synthetic failed payment through both channels."""

import time
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.util import get_remote_address

from app.config import settings
from app.dependencies import get_dispatcher
from app.dispatcher import WebhookDispatcher
from app.models import FailedPayment

router = APIRouter()

limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)


def build_test_payment() -> FailedPayment:
    return FailedPayment(
        payment_id=f"test_{int(time.time() * 1000)}",
        customer_email="test@example.com",
        amount=2500,  # $25.00
        currency="usd",
        failure_code="card_declined",
        failure_message="Your card was declined.",
        failed_at=datetime.now(timezone.utc),
    )


@router.post("/test")
@limiter.limit(settings.manual_test_rate_limit)
async def run_manual_test(request: Request, dispatcher: WebhookDispatcher = Depends(get_dispatcher)):
    """Send a test alert and add a test row to Airtable."""
    dispatcher.log_sink.append("Manual test initiated")

    test_payment = build_test_payment()
    outcome = await dispatcher.deliver(test_payment)

    if not outcome.succeeded:
        dispatcher.log_sink.append(f"Manual test failed: {outcome.error}")
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": outcome.error},
        )

    dispatcher.log_sink.append("Manual test completed successfully")
    return {
        "success": True,
        "message": "Test completed successfully",
        "testData": test_payment.model_dump(mode="json"),
    }
