"""Slack request signature verification.

Slack signs every request with HMAC-SHA256 over ``v0:{timestamp}:{body}``
using the app's signing secret. Verification fails closed: a missing or
non-numeric timestamp, a missing signature, a timestamp more than
``signature_max_age_seconds`` (300) from now, or a signature mismatch all
count as invalid. The caller decides how to respond; nothing here raises.
"""

import hmac
import logging
from collections.abc import Mapping

from slack_sdk.signature import Clock, SignatureVerifier

from wiki_responder.config import get_settings

logger = logging.getLogger(__name__)

TIMESTAMP_HEADER = "X-Slack-Request-Timestamp"
SIGNATURE_HEADER = "X-Slack-Signature"


def is_valid_slack_request(
    headers: Mapping[str, str],
    body: bytes,
    *,
    clock: Clock | None = None,
) -> bool:
    """Return True if ``body`` carries a fresh, correctly computed Slack signature.

    Args:
        headers: Request headers. Lookup is case-insensitive.
        body: Raw request body exactly as received.
        clock: Time source, injectable for tests. Defaults to wall-clock time.
    """
    lowered = {key.lower(): value for key, value in headers.items()}
    timestamp = lowered.get(TIMESTAMP_HEADER.lower())
    signature = lowered.get(SIGNATURE_HEADER.lower())

    if not timestamp or not signature:
        logger.warning("Missing Slack timestamp or signature header")
        return False

    try:
        request_time = int(timestamp)
    except ValueError:
        logger.warning("Non-numeric Slack timestamp header: %r", timestamp)
        return False

    settings = get_settings()
    clock = clock or Clock()

    # Bound is inclusive: exactly max_age seconds old is still accepted.
    age = abs(clock.now() - request_time)
    if age > settings.signature_max_age_seconds:
        logger.warning("Stale Slack request timestamp", extra={"age_seconds": age})
        return False

    try:
        body_text = body.decode("utf-8")
    except UnicodeDecodeError:
        logger.warning("Slack request body is not valid UTF-8")
        return False

    verifier = SignatureVerifier(signing_secret=settings.slack_signing_secret, clock=clock)
    expected = verifier.generate_signature(timestamp=timestamp, body=body_text)
    if expected is None or not hmac.compare_digest(expected, signature):
        logger.warning("Invalid Slack signature", extra={"timestamp": timestamp})
        return False

    return True
