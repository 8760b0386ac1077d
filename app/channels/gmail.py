"""Gmail alert channel - emails a failed-payment summary to the alert address."""

import base64
import logging
from email.header import Header
from email.mime.text import MIMEText

import httpx

from app.auth.google import GMAIL_SEND_SCOPES, GoogleOAuth, TokenData
from app.errors import NotificationError, parse_google_error
from app.models import FailedPayment

from .base import NotificationChannel

logger = logging.getLogger(__name__)

GMAIL_API = "https://gmail.googleapis.com/gmail/v1"
_TIMEOUT = 30.0


def _build_raw_message(to: str, subject: str, body: str) -> str:
    """Build a base64url encoded raw MIME message for the Gmail API."""
    msg = MIMEText(body, "plain", "utf-8")
    msg["to"] = to
    msg["subject"] = Header(subject, "utf-8")
    return base64.urlsafe_b64encode(msg.as_bytes()).decode("utf-8")


def build_alert_subject(record: FailedPayment) -> str:
    customer = record.customer_email or "Unknown Customer"
    return f"🚨 Payment Failed Alert - {customer}"


def build_alert_body(record: FailedPayment) -> str:
    return "\n".join([
        "Payment Failure Detected!",
        "",
        "Details:",
        f"- Payment ID: {record.payment_id}",
        f"- Customer: {record.customer_email or 'Not available'}",
        f"- Amount: ${record.amount_major:.2f} {record.currency_display}",
        f"- Failure Code: {record.failure_code or 'Not specified'}",
        f"- Failure Message: {record.failure_message or 'Not specified'}",
        f"- Date: {record.failed_at.isoformat()}",
        "",
        "Please review and take appropriate action.",
        "",
        "Best regards,",
        "Failed Payments Monitor",
    ])


class GmailNotifier(NotificationChannel):
    """Sends alerts through the Gmail API as the account behind the refresh token."""

    def __init__(
        self,
        recipient: str,
        refresh_token: str,
        oauth: GoogleOAuth | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.recipient = recipient
        self._refresh_token = refresh_token
        self._oauth = oauth or GoogleOAuth(scopes=GMAIL_SEND_SCOPES, transport=transport)
        self._transport = transport
        self._cached_token: TokenData | None = None

    @property
    def channel_name(self) -> str:
        return "Gmail"

    async def _get_access_token(self) -> str:
        """Get a valid access token, refreshing if needed."""
        if self._cached_token is None or self._oauth.is_token_expired(self._cached_token):
            if not self._refresh_token:
                raise NotificationError("Google refresh token not configured")
            self._cached_token = await self._oauth.refresh_token(self._refresh_token)
        return self._cached_token.access_token

    async def _post_send(self, client: httpx.AsyncClient, raw: str) -> httpx.Response:
        token = await self._get_access_token()
        return await client.post(
            f"{GMAIL_API}/users/me/messages/send",
            json={"raw": raw},
            headers={"Authorization": f"Bearer {token}"},
        )

    async def send_alert(self, record: FailedPayment) -> None:
        raw = _build_raw_message(self.recipient, build_alert_subject(record), build_alert_body(record))

        try:
            async with httpx.AsyncClient(timeout=_TIMEOUT, transport=self._transport) as client:
                response = await self._post_send(client, raw)
                if response.status_code == 401:
                    self._cached_token = None
                    response = await self._post_send(client, raw)
        except httpx.HTTPError as e:
            raise NotificationError(f"Gmail request failed: {e}") from e

        if response.status_code not in (200, 201):
            raise NotificationError(f"Gmail API error: {parse_google_error(response.text)}")

        logger.debug("Gmail alert for %s sent to %s", record.payment_id, self.recipient)
