"""Pytest configuration and fixtures for the payment monitor tests.

Provides:
- Stripe-signed webhook payload helpers
- In-memory fake channels that record the order of calls
- A dispatcher and TestClient wired to those fakes
"""

import hashlib
import hmac
import json
import os
import time
from typing import Any

import pytest

# Set environment before app.config is imported
TEST_WEBHOOK_SECRET = "whsec_test_secret_for_testing"
os.environ.setdefault("STRIPE_WEBHOOK_SECRET", TEST_WEBHOOK_SECRET)
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

from fastapi.testclient import TestClient  # noqa: E402

from app.channels.base import NotificationChannel, RecordStoreChannel  # noqa: E402
from app.dispatcher import WebhookDispatcher  # noqa: E402
from app.errors import NotificationError, RecordStoreError  # noqa: E402
from app.logs import LogSink  # noqa: E402
from app.models import FailedPayment  # noqa: E402

KNOWN_CREATED = 1700000000  # 2023-11-14T22:13:20Z


# === Signing helpers ===


def sign_payload(payload: bytes, secret: str = TEST_WEBHOOK_SECRET, timestamp: int | None = None) -> str:
    """Create a Stripe-Signature header value: t={timestamp},v1={hmac-sha256}."""
    timestamp = int(time.time()) if timestamp is None else timestamp
    signed_payload = f"{timestamp}.{payload.decode('utf-8')}"
    signature = hmac.new(
        secret.encode("utf-8"),
        signed_payload.encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()
    return f"t={timestamp},v1={signature}"


def encode_event(event: dict[str, Any]) -> bytes:
    return json.dumps(event).encode("utf-8")


# === Event builders ===


def payment_intent_failed_event(**overrides: Any) -> dict[str, Any]:
    intent = {
        "id": "pi_3ABC123DEF456",
        "object": "payment_intent",
        "amount": 4999,
        "currency": "eur",
        "receipt_email": "buyer@example.com",
        "last_payment_error": {
            "code": "insufficient_funds",
            "message": "Your card has insufficient funds.",
        },
    }
    intent.update(overrides)
    return {
        "id": "evt_1PI",
        "object": "event",
        "type": "payment_intent.payment_failed",
        "created": KNOWN_CREATED,
        "data": {"object": intent},
    }


def invoice_payment_failed_event(**overrides: Any) -> dict[str, Any]:
    invoice = {
        "id": "in_1INV789",
        "object": "invoice",
        "amount_due": 12000,
        "currency": "gbp",
        "customer_email": "billing@example.com",
    }
    invoice.update(overrides)
    return {
        "id": "evt_1INV",
        "object": "event",
        "type": "invoice.payment_failed",
        "created": KNOWN_CREATED,
        "data": {"object": invoice},
    }


def charge_failed_event(**overrides: Any) -> dict[str, Any]:
    charge = {
        "id": "ch_3CHG456",
        "object": "charge",
        "amount": 2500,
        "currency": "usd",
        "receipt_email": "a@b.com",
        "billing_details": {"email": "billing-details@example.com", "name": "A B"},
        "failure_code": "card_declined",
        "failure_message": "Your card was declined.",
    }
    charge.update(overrides)
    return {
        "id": "evt_1CHG",
        "object": "event",
        "type": "charge.failed",
        "created": KNOWN_CREATED,
        "data": {"object": charge},
    }


# === Fake channels ===


class FakeNotifier(NotificationChannel):
    def __init__(self, calls: list, fail: bool = False):
        self.calls = calls
        self.fail = fail
        self.sent: list[FailedPayment] = []

    @property
    def channel_name(self) -> str:
        return "Gmail"

    async def send_alert(self, record: FailedPayment) -> None:
        self.calls.append("notify")
        if self.fail:
            raise NotificationError("Gmail API error: quota exceeded")
        self.sent.append(record)


class FakeStore(RecordStoreChannel):
    def __init__(self, calls: list, fail: bool = False):
        self.calls = calls
        self.fail = fail
        self.rows: list[FailedPayment] = []

    @property
    def channel_name(self) -> str:
        return "Airtable"

    async def append(self, record: FailedPayment) -> str:
        self.calls.append("store")
        if self.fail:
            raise RecordStoreError("Airtable API error: INVALID_PERMISSIONS")
        self.rows.append(record)
        return f"rec{len(self.rows):03d}"


# === Fixtures ===


@pytest.fixture
def calls() -> list:
    return []


@pytest.fixture
def notifier(calls) -> FakeNotifier:
    return FakeNotifier(calls)


@pytest.fixture
def store(calls) -> FakeStore:
    return FakeStore(calls)


@pytest.fixture
def log_sink() -> LogSink:
    return LogSink()


@pytest.fixture
def dispatcher(notifier, store, log_sink) -> WebhookDispatcher:
    return WebhookDispatcher(
        webhook_secret=TEST_WEBHOOK_SECRET,
        notifier=notifier,
        store=store,
        log_sink=log_sink,
    )


@pytest.fixture
def client(dispatcher, log_sink) -> TestClient:
    """TestClient whose app state points at the fake channels.

    Not entered as a context manager, so the startup log line is not written.
    """
    from app.main import app

    app.state.log_sink = log_sink
    app.state.dispatcher = dispatcher
    return TestClient(app, raise_server_exceptions=False)


def log_messages(sink: LogSink) -> list[str]:
    return [entry.message for entry in sink.recent(sink.capacity)]
