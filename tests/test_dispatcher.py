"""Tests for the webhook dispatcher: verify, classify, normalize, notify, store."""

from datetime import datetime, timezone

import pytest

from app.dispatcher import DispatchStatus, WebhookDispatcher
from app.logs import LogSink
from app.models import FailedPayment
from conftest import (
    KNOWN_CREATED,
    FakeNotifier,
    FakeStore,
    TEST_WEBHOOK_SECRET,
    charge_failed_event,
    encode_event,
    invoice_payment_failed_event,
    log_messages,
    payment_intent_failed_event,
    sign_payload,
)


def _signed(event: dict) -> tuple[bytes, str]:
    payload = encode_event(event)
    return payload, sign_payload(payload)


@pytest.mark.asyncio
async def test_charge_failed_round_trip(dispatcher, notifier, store, calls):
    outcome = await dispatcher.handle_webhook(*_signed(charge_failed_event()))

    expected = FailedPayment(
        payment_id="ch_3CHG456",
        customer_email="a@b.com",
        amount=2500,
        currency="usd",
        failure_code="card_declined",
        failure_message="Your card was declined.",
        failed_at=datetime.fromtimestamp(KNOWN_CREATED, tz=timezone.utc),
    )
    assert outcome.status == DispatchStatus.ACKNOWLEDGED
    assert outcome.http_status == 200
    assert outcome.event_type == "charge.failed"
    assert outcome.record == expected
    assert outcome.store_record_id == "rec001"
    assert notifier.sent == [expected]
    assert store.rows == [expected]
    assert calls == ["notify", "store"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "event",
    [payment_intent_failed_event(), invoice_payment_failed_event(), charge_failed_event()],
    ids=["payment_intent", "invoice", "charge"],
)
async def test_every_handled_type_reaches_both_channels(dispatcher, calls, event):
    outcome = await dispatcher.handle_webhook(*_signed(event))

    assert outcome.status == DispatchStatus.ACKNOWLEDGED
    assert calls == ["notify", "store"]


@pytest.mark.asyncio
async def test_unhandled_event_type_is_acknowledged_without_side_effects(dispatcher, calls, log_sink):
    event = charge_failed_event()
    event["type"] = "customer.created"

    outcome = await dispatcher.handle_webhook(*_signed(event))

    assert outcome.status == DispatchStatus.IGNORED
    assert outcome.http_status == 200
    assert outcome.event_type == "customer.created"
    assert outcome.record is None
    assert calls == []
    assert log_messages(log_sink) == ["Unhandled event type: customer.created"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "event_type",
    [5, ["charge.failed"], {"x": 1}, None],
    ids=["int", "list", "object", "null"],
)
async def test_non_string_event_type_is_ignored(dispatcher, calls, log_sink, event_type):
    event = charge_failed_event()
    event["type"] = event_type

    outcome = await dispatcher.handle_webhook(*_signed(event))

    assert outcome.status == DispatchStatus.IGNORED
    assert outcome.http_status == 200
    assert outcome.event_type is None
    assert calls == []
    assert log_messages(log_sink) == [f"Unhandled event type: {event_type}"]


@pytest.mark.asyncio
async def test_invalid_signature_is_rejected_before_parsing(dispatcher, calls, log_sink, monkeypatch):
    parsed = []
    monkeypatch.setattr("app.dispatcher.parse_event", lambda payload: parsed.append(payload))
    payload = encode_event(charge_failed_event())

    outcome = await dispatcher.handle_webhook(payload, sign_payload(payload, secret="whsec_wrong"))

    assert outcome.status == DispatchStatus.REJECTED
    assert outcome.http_status == 400
    assert outcome.error
    assert parsed == []
    assert calls == []
    assert log_messages(log_sink)[0].startswith("Webhook signature verification failed:")


@pytest.mark.asyncio
async def test_missing_signature_is_rejected(dispatcher, calls):
    outcome = await dispatcher.handle_webhook(encode_event(charge_failed_event()), None)

    assert outcome.status == DispatchStatus.REJECTED
    assert calls == []


@pytest.mark.asyncio
async def test_notifier_failure_skips_store(calls, log_sink):
    store = FakeStore(calls)
    dispatcher = WebhookDispatcher(TEST_WEBHOOK_SECRET, FakeNotifier(calls, fail=True), store, log_sink)

    outcome = await dispatcher.handle_webhook(*_signed(charge_failed_event()))

    assert outcome.status == DispatchStatus.FAILED
    assert outcome.http_status == 500
    assert outcome.notified is False
    assert outcome.partial is False
    assert "quota exceeded" in outcome.error
    assert calls == ["notify"]
    assert store.rows == []
    messages = log_messages(log_sink)
    assert "Error sending Gmail alert: Gmail API error: quota exceeded" in messages
    assert messages[-1] == "Error processing webhook: Gmail API error: quota exceeded"


@pytest.mark.asyncio
async def test_store_failure_after_alert_is_flagged_partial(calls, log_sink):
    notifier = FakeNotifier(calls)
    dispatcher = WebhookDispatcher(TEST_WEBHOOK_SECRET, notifier, FakeStore(calls, fail=True), log_sink)

    outcome = await dispatcher.handle_webhook(*_signed(charge_failed_event()))

    assert outcome.status == DispatchStatus.FAILED
    assert outcome.notified is True
    assert outcome.partial is True
    assert outcome.store_record_id is None
    assert calls == ["notify", "store"]
    assert len(notifier.sent) == 1
    assert "Error adding to Airtable: Airtable API error: INVALID_PERMISSIONS" in log_messages(log_sink)


@pytest.mark.asyncio
async def test_handled_type_with_missing_fields_fails_without_side_effects(dispatcher, calls):
    event = payment_intent_failed_event()
    del event["data"]["object"]["currency"]

    outcome = await dispatcher.handle_webhook(*_signed(event))

    assert outcome.status == DispatchStatus.FAILED
    assert outcome.event_type == "payment_intent.payment_failed"
    assert calls == []


@pytest.mark.asyncio
async def test_invalid_json_fails(dispatcher, calls):
    payload = b"not json"

    outcome = await dispatcher.handle_webhook(payload, sign_payload(payload))

    assert outcome.status == DispatchStatus.FAILED
    assert calls == []


@pytest.mark.asyncio
async def test_success_logs_each_step_in_order(dispatcher, log_sink):
    await dispatcher.handle_webhook(*_signed(charge_failed_event()))

    assert log_messages(log_sink) == [
        "Processing failed payment: ch_3CHG456",
        "Gmail alert sent for payment ch_3CHG456",
        "Added failed payment record to Airtable: rec001",
        "Successfully processed failed payment: ch_3CHG456",
        "Webhook processed successfully: charge.failed",
    ]


@pytest.mark.asyncio
async def test_deliver_runs_channels_for_a_prebuilt_record(dispatcher, calls):
    record = FailedPayment(
        payment_id="test_1",
        amount=2500,
        currency="usd",
        failed_at=datetime.now(timezone.utc),
    )

    outcome = await dispatcher.deliver(record)

    assert outcome.status == DispatchStatus.ACKNOWLEDGED
    assert outcome.record == record
    assert outcome.event_type is None
    assert calls == ["notify", "store"]


@pytest.mark.asyncio
async def test_sink_stays_bounded_across_many_deliveries(dispatcher):
    sink: LogSink = dispatcher.log_sink

    for _ in range(60):
        await dispatcher.handle_webhook(*_signed(charge_failed_event()))

    assert len(sink) == 50
    assert sink.total == 60 * 5
