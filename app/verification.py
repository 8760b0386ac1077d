"""Stripe webhook signature verification."""

import stripe

from app.errors import SignatureInvalid


def verify_signature(
    payload: bytes,
    signature: str | None,
    secret: str,
    tolerance: int = stripe.Webhook.DEFAULT_TOLERANCE,
) -> None:
    """Check a Stripe-Signature header against the raw request body.

    The signature covers the exact bytes Stripe sent, so this must run
    before the body is parsed.

    Raises:
        SignatureInvalid: header missing, malformed, stale, or not matching.
    """
    if not secret:
        raise SignatureInvalid("Webhook signing secret not configured")
    if not signature:
        raise SignatureInvalid("No Stripe-Signature header value was provided")

    try:
        body = payload.decode("utf-8")
    except UnicodeDecodeError as e:
        raise SignatureInvalid("Webhook payload is not valid UTF-8") from e

    try:
        stripe.WebhookSignature.verify_header(body, signature, secret, tolerance)
    except stripe.SignatureVerificationError as e:
        raise SignatureInvalid(str(e.user_message or e)) from e
