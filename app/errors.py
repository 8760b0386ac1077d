"""Error types and provider error-parsing utilities."""

import json


class SignatureInvalid(Exception):
    """Raised when a webhook body does not match its Stripe-Signature header."""


class ChannelFailure(Exception):
    """Raised when a side-effect channel (email, record store) fails."""


class NotificationError(ChannelFailure):
    """Raised when the alert email could not be sent."""


class RecordStoreError(ChannelFailure):
    """Raised when the Airtable row could not be created."""


def parse_google_error(response_text: str) -> str:
    """Extract a readable message from a Google API error response.

    Google APIs return JSON like {"error": {"code": 400, "message": "...", "status": "..."}}.
    Returns "STATUS: message" when parseable, raw text otherwise.
    """
    try:
        body = json.loads(response_text)
        err = body.get("error", {})
        msg = err.get("message", "")
        status = err.get("status", "")
        if msg:
            return f"{status}: {msg}" if status else msg
    except (ValueError, AttributeError):
        pass
    return response_text


def parse_airtable_error(response_text: str) -> str:
    """Extract a readable message from an Airtable API error response.

    Airtable returns either {"error": {"type": "...", "message": "..."}}
    or {"error": "NOT_FOUND"}. Returns "TYPE: message" when parseable.
    """
    try:
        err = json.loads(response_text).get("error")
        if isinstance(err, str):
            return err
        if isinstance(err, dict):
            msg = err.get("message", "")
            kind = err.get("type", "")
            if msg:
                return f"{kind}: {msg}" if kind else msg
            if kind:
                return kind
    except (ValueError, AttributeError):
        pass
    return response_text
