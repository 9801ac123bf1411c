"""
Webhook verification for payment callbacks.

IntaSend signs nothing; instead every webhook body carries the ``challenge``
string configured in the IntaSend dashboard. It is compared in constant time.
"""

import hmac
import logging
from typing import Optional

from fastapi import HTTPException

logger = logging.getLogger(__name__)


def constant_time_compare(a: Optional[str], b: Optional[str]) -> bool:
    """
    Compare two strings in constant time to prevent timing attacks.
    Uses hmac.compare_digest which is designed for this purpose.
    """
    if not a or not b:
        return False
    return hmac.compare_digest(a.encode("utf-8"), b.encode("utf-8"))


def verify_intasend_challenge(
    payload: dict, secret: Optional[str], raise_on_failure: bool = True
) -> bool:
    """
    Check the ``challenge`` field of an IntaSend webhook body.

    Args:
        payload: Decoded webhook body
        secret: Challenge configured for the webhook
        raise_on_failure: If True, raises HTTPException on failure

    Returns:
        True if the challenge matches
    """
    if not secret:
        logger.error("🚫 INTASEND_WEBHOOK_CHALLENGE not configured, rejecting webhook")
        if raise_on_failure:
            raise HTTPException(status_code=500, detail="Webhook not configured")
        return False

    challenge = payload.get("challenge")
    if not isinstance(challenge, str) or not constant_time_compare(challenge, secret):
        logger.warning(f"🚫 IntaSend webhook challenge mismatch for invoice {payload.get('invoice_id')}")
        if raise_on_failure:
            raise HTTPException(status_code=401, detail="Invalid webhook challenge")
        return False

    return True
