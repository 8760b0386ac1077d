"""Shared FastAPI dependencies and application wiring."""

from fastapi import Request

from app.channels import AirtableStore, GmailNotifier
from app.config import Settings
from app.dispatcher import WebhookDispatcher
from app.logs import LogSink


def build_dispatcher(settings: Settings, log_sink: LogSink) -> WebhookDispatcher:
    """Wire the production channels from settings."""
    notifier = GmailNotifier(
        recipient=settings.alert_email,
        refresh_token=settings.google_refresh_token,
    )
    store = AirtableStore(
        api_key=settings.airtable_api_key,
        base_id=settings.airtable_base_id,
        table_name=settings.airtable_table_name,
    )
    return WebhookDispatcher(
        webhook_secret=settings.stripe_webhook_secret,
        notifier=notifier,
        store=store,
        log_sink=log_sink,
    )


def get_log_sink(request: Request) -> LogSink:
    return request.app.state.log_sink


def get_dispatcher(request: Request) -> WebhookDispatcher:
    return request.app.state.dispatcher
