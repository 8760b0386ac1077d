"""Webhook dispatcher - verify, classify, normalize, then notify and store.

One call to ``handle_webhook`` is one delivery:

    Received -> Verified -> Classified -> Normalized -> Notified -> Stored -> Acknowledged

with early exits to ``REJECTED`` (bad signature) and ``FAILED`` (anything
after verification that raises). Nothing is retried; Stripe redelivers on
non-2xx responses.
"""

import json
import logging
from enum import Enum

from pydantic import BaseModel

from app.channels.base import NotificationChannel, RecordStoreChannel
from app.errors import SignatureInvalid
from app.logs import LogSink
from app.models import HANDLED_EVENT_TYPES, FailedPayment
from app.normalizer import normalize, parse_event
from app.verification import verify_signature


class DispatchStatus(str, Enum):
    ACKNOWLEDGED = "acknowledged"
    IGNORED = "ignored"
    REJECTED = "rejected"
    FAILED = "failed"


_HTTP_STATUS = {
    DispatchStatus.ACKNOWLEDGED: 200,
    DispatchStatus.IGNORED: 200,
    DispatchStatus.REJECTED: 400,
    DispatchStatus.FAILED: 500,
}


class DispatchOutcome(BaseModel):
    status: DispatchStatus
    event_type: str | None = None
    record: FailedPayment | None = None
    store_record_id: str | None = None
    error: str | None = None
    # True when the alert went out but a later step failed
    notified: bool = False

    @property
    def http_status(self) -> int:
        return _HTTP_STATUS[self.status]

    @property
    def succeeded(self) -> bool:
        return self.http_status == 200

    @property
    def partial(self) -> bool:
        return self.status == DispatchStatus.FAILED and self.notified


class WebhookDispatcher:
    def __init__(
        self,
        webhook_secret: str,
        notifier: NotificationChannel,
        store: RecordStoreChannel,
        log_sink: LogSink,
    ):
        self.webhook_secret = webhook_secret
        self.notifier = notifier
        self.store = store
        self.log_sink = log_sink

    async def handle_webhook(self, raw_body: bytes, signature_header: str | None) -> DispatchOutcome:
        """Process one Stripe webhook delivery."""
        try:
            verify_signature(raw_body, signature_header, self.webhook_secret)
        except SignatureInvalid as e:
            self.log_sink.append(f"Webhook signature verification failed: {e}", logging.WARNING)
            return DispatchOutcome(status=DispatchStatus.REJECTED, error=str(e))

        try:
            payload = json.loads(raw_body)
        except ValueError as e:
            self.log_sink.append(f"Error processing webhook: invalid JSON payload ({e})", logging.ERROR)
            return DispatchOutcome(status=DispatchStatus.FAILED, error="Invalid JSON payload")

        raw_type = payload.get("type") if isinstance(payload, dict) else None
        event_type = raw_type if isinstance(raw_type, str) else None
        if event_type not in HANDLED_EVENT_TYPES:
            self.log_sink.append(f"Unhandled event type: {raw_type}")
            return DispatchOutcome(status=DispatchStatus.IGNORED, event_type=event_type)

        try:
            record = normalize(parse_event(payload))
        except Exception as e:
            self.log_sink.append(f"Error processing failed payment: {e}", logging.ERROR)
            self.log_sink.append(f"Error processing webhook: {e}", logging.ERROR)
            return DispatchOutcome(status=DispatchStatus.FAILED, event_type=event_type, error=str(e))

        outcome = await self.deliver(record)
        outcome.event_type = event_type

        if outcome.succeeded:
            self.log_sink.append(f"Webhook processed successfully: {event_type}")
        else:
            self.log_sink.append(f"Error processing webhook: {outcome.error}", logging.ERROR)
        return outcome

    async def deliver(self, record: FailedPayment) -> DispatchOutcome:
        """Send the alert, then write the store row. The first failure stops the delivery."""
        self.log_sink.append(f"Processing failed payment: {record.payment_id}")
        notified = False

        try:
            await self._notify(record)
            notified = True
            store_record_id = await self._store(record)
        except Exception as e:
            self.log_sink.append(f"Error processing failed payment: {e}", logging.ERROR)
            return DispatchOutcome(
                status=DispatchStatus.FAILED,
                record=record,
                error=str(e),
                notified=notified,
            )

        self.log_sink.append(f"Successfully processed failed payment: {record.payment_id}")
        return DispatchOutcome(
            status=DispatchStatus.ACKNOWLEDGED,
            record=record,
            store_record_id=store_record_id,
            notified=True,
        )

    async def _notify(self, record: FailedPayment) -> None:
        name = self.notifier.channel_name
        try:
            await self.notifier.send_alert(record)
        except Exception as e:
            self.log_sink.append(f"Error sending {name} alert: {e}", logging.ERROR)
            raise
        self.log_sink.append(f"{name} alert sent for payment {record.payment_id}")

    async def _store(self, record: FailedPayment) -> str:
        name = self.store.channel_name
        try:
            store_record_id = await self.store.append(record)
        except Exception as e:
            self.log_sink.append(f"Error adding to {name}: {e}", logging.ERROR)
            raise
        self.log_sink.append(f"Added failed payment record to {name}: {store_record_id}")
        return store_record_id
