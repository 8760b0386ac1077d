"""Map Stripe failure events onto the canonical FailedPayment record."""

from datetime import datetime, timezone

from app.models import (
    HANDLED_EVENT_TYPES,
    UNKNOWN_EMAIL,
    ChargeFailedEvent,
    FailedPayment,
    InvoicePaymentFailedEvent,
    PaymentIntentFailedEvent,
    StripeEvent,
    stripe_event_adapter,
)

INVOICE_FAILURE_CODE = "invoice_payment_failed"
INVOICE_FAILURE_MESSAGE = "Invoice payment failed"


def _first_present(*candidates: str | None, default: str = UNKNOWN_EMAIL) -> str:
    """Return the first non-empty candidate, in priority order, else ``default``."""
    for value in candidates:
        if value:
            return value
    return default


def _created_at(created: int) -> datetime:
    return datetime.fromtimestamp(created, tz=timezone.utc)


def _from_payment_intent(event: PaymentIntentFailedEvent) -> FailedPayment:
    intent = event.data.object
    error = intent.last_payment_error
    return FailedPayment(
        payment_id=intent.id,
        customer_email=_first_present(intent.receipt_email),
        amount=intent.amount,
        currency=intent.currency,
        failure_code=error.code if error else None,
        failure_message=error.message if error else None,
        failed_at=_created_at(event.created),
    )


def _from_invoice(event: InvoicePaymentFailedEvent) -> FailedPayment:
    invoice = event.data.object
    return FailedPayment(
        payment_id=invoice.id,
        customer_email=_first_present(invoice.customer_email),
        amount=invoice.amount_due,
        currency=invoice.currency,
        failure_code=INVOICE_FAILURE_CODE,
        failure_message=INVOICE_FAILURE_MESSAGE,
        failed_at=_created_at(event.created),
    )


def _from_charge(event: ChargeFailedEvent) -> FailedPayment:
    charge = event.data.object
    billing_email = charge.billing_details.email if charge.billing_details else None
    return FailedPayment(
        payment_id=charge.id,
        customer_email=_first_present(charge.receipt_email, billing_email),
        amount=charge.amount,
        currency=charge.currency,
        failure_code=charge.failure_code,
        failure_message=charge.failure_message,
        failed_at=_created_at(event.created),
    )


def normalize(event: StripeEvent) -> FailedPayment:
    """Build the canonical record for one validated Stripe event."""
    if isinstance(event, PaymentIntentFailedEvent):
        return _from_payment_intent(event)
    if isinstance(event, InvoicePaymentFailedEvent):
        return _from_invoice(event)
    if isinstance(event, ChargeFailedEvent):
        return _from_charge(event)
    raise TypeError(f"Unsupported event model: {type(event).__name__}")


def parse_event(payload: dict) -> StripeEvent | None:
    """Validate a decoded envelope. Returns None for event types we don't handle.

    Raises pydantic.ValidationError when a handled event is missing required fields.
    """
    if payload.get("type") not in HANDLED_EVENT_TYPES:
        return None
    return stripe_event_adapter.validate_python(payload)


def normalize_payload(payload: dict) -> FailedPayment | None:
    """Normalize a decoded envelope, or return None if its type isn't handled."""
    event = parse_event(payload)
    if event is None:
        return None
    return normalize(event)
