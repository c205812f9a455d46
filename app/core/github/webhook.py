"""
Webhook validation and parsing for GitHub webhooks
"""
import hmac
import hashlib
import logging
from typing import Optional, Dict, Any

from pydantic import ValidationError

from .models import PullRequestRef, WebhookPayload

logger = logging.getLogger(__name__)

PULL_REQUEST_EVENT = "pull_request"
CHECKED_ACTIONS = ("opened", "reopened", "synchronize", "edited")


class WebhookPayloadError(ValueError):
    """A pull request event whose payload does not have the expected shape."""


def verify_webhook_signature(payload_body: bytes, signature_header: Optional[str],
                             webhook_secret: Optional[str]) -> bool:
    """
    Verify GitHub webhook signature using HMAC SHA256.

    Args:
        payload_body: Raw request body as bytes
        signature_header: X-Hub-Signature-256 header value
        webhook_secret: Shared secret configured on the webhook

    Returns:
        True if signature is valid, False otherwise
    """
    if not signature_header:
        logger.warning("No signature header provided")
        return False

    if not webhook_secret:
        logger.error("Webhook secret not configured")
        return False

    # GitHub sends signature as: sha256=<hash>
    if not signature_header.startswith("sha256="):
        logger.warning(f"Invalid signature format: {signature_header}")
        return False

    expected_signature = signature_header[7:]

    computed_signature = hmac.new(
        webhook_secret.encode("utf-8"),
        payload_body,
        hashlib.sha256
    ).hexdigest()

    # Constant-time comparison
    is_valid = hmac.compare_digest(computed_signature, expected_signature)

    if not is_valid:
        logger.warning("Webhook signature verification failed")

    return is_valid


def parse_webhook_payload(event_type: Optional[str], payload: Dict[str, Any]) -> Optional[PullRequestRef]:
    """
    Turn a webhook delivery into the pull request to check.

    Args:
        event_type: X-GitHub-Event header value
        payload: JSON payload from GitHub

    Returns:
        PullRequestRef for pull request events we check, None for anything else

    Raises:
        WebhookPayloadError: a checked pull request event is missing required fields
    """
    if event_type != PULL_REQUEST_EVENT:
        logger.info(f"Ignoring webhook event: {event_type}")
        return None

    if payload.get("action") not in CHECKED_ACTIONS:
        logger.info(f"Ignoring webhook action: {payload.get('action')}")
        return None

    try:
        webhook_data = WebhookPayload(**payload)
    except ValidationError as e:
        logger.error(f"Failed to parse webhook payload: {e}")
        raise WebhookPayloadError(str(e)) from e

    pr = PullRequestRef.from_payload(webhook_data)
    logger.info(f"Parsed webhook: PR #{pr.number} ({webhook_data.action}) in {pr.full_name}")
    return pr
