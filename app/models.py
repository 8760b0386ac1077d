"""Canonical failed-payment record and the Stripe event envelopes it is built from."""

from datetime import datetime
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

PAYMENT_INTENT_FAILED = "payment_intent.payment_failed"
INVOICE_PAYMENT_FAILED = "invoice.payment_failed"
CHARGE_FAILED = "charge.failed"

HANDLED_EVENT_TYPES = (PAYMENT_INTENT_FAILED, INVOICE_PAYMENT_FAILED, CHARGE_FAILED)

UNKNOWN_EMAIL = "Unknown"


class FailedPayment(BaseModel):
    """One failed payment, independent of which Stripe event reported it."""

    model_config = ConfigDict(frozen=True)

    payment_id: str = Field(..., min_length=1)
    customer_email: str = UNKNOWN_EMAIL
    amount: int  # minor units (cents)
    currency: str
    failure_code: str | None = None
    failure_message: str | None = None
    failed_at: datetime

    @property
    def amount_major(self) -> float:
        return round(self.amount / 100, 2)

    @property
    def currency_display(self) -> str:
        return self.currency.upper()


# Stripe objects. Only the fields we read are declared; the rest are ignored.


class LastPaymentError(BaseModel):
    code: str | None = None
    message: str | None = None


class PaymentIntent(BaseModel):
    id: str = Field(..., min_length=1)
    amount: int
    currency: str
    receipt_email: str | None = None
    last_payment_error: LastPaymentError | None = None


class Invoice(BaseModel):
    id: str = Field(..., min_length=1)
    amount_due: int
    currency: str
    customer_email: str | None = None


class BillingDetails(BaseModel):
    email: str | None = None


class Charge(BaseModel):
    id: str = Field(..., min_length=1)
    amount: int
    currency: str
    receipt_email: str | None = None
    billing_details: BillingDetails | None = None
    failure_code: str | None = None
    failure_message: str | None = None


class PaymentIntentData(BaseModel):
    object: PaymentIntent


class InvoiceData(BaseModel):
    object: Invoice


class ChargeData(BaseModel):
    object: Charge


class PaymentIntentFailedEvent(BaseModel):
    type: Literal["payment_intent.payment_failed"]
    id: str | None = None
    created: int
    data: PaymentIntentData


class InvoicePaymentFailedEvent(BaseModel):
    type: Literal["invoice.payment_failed"]
    id: str | None = None
    created: int
    data: InvoiceData


class ChargeFailedEvent(BaseModel):
    type: Literal["charge.failed"]
    id: str | None = None
    created: int
    data: ChargeData


StripeEvent = Annotated[
    Union[PaymentIntentFailedEvent, InvoicePaymentFailedEvent, ChargeFailedEvent],
    Field(discriminator="type"),
]

stripe_event_adapter = TypeAdapter(StripeEvent)
