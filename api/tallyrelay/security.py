"""Tally webhook signature verification."""

import base64
import hashlib
import hmac
from typing import Optional

SIGNATURE_HEADER = "Tally-Signature"


def compute_tally_signature(raw_body: bytes, secret: str) -> str:
    """Return base64(HMAC-SHA256(raw_body, secret)), the value Tally sends."""
    digest = hmac.new(secret.encode("utf-8"), raw_body, hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


def verify_tally_signature(raw_body: bytes, secret: str, signature: Optional[str]) -> bool:
    """
    Check a Tally-Signature header value against the raw request body.

    An empty secret never verifies, whatever signature is supplied.
    """
    if not secret:
        return False
    if not signature:
        return False

    expected = compute_tally_signature(raw_body, secret)
    return hmac.compare_digest(expected.encode("ascii"), signature.encode("utf-8"))
