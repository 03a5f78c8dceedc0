from __future__ import annotations

import hashlib
import hmac
import string

from hillmonitor.domain.errors import (
    MalformedSignatureError,
    MissingSignatureError,
    SignatureMismatchError,
)


SIGNATURE_HEADER = "X-HillMonitor-Signature"
_HEX_DIGEST_LENGTH = hashlib.sha256().digest_size * 2
_HEX_CHARS = frozenset(string.hexdigits)


def compute_signature(payload: str | bytes, secret: str) -> str:
    """Return the HMAC-SHA256 hex digest of ``payload`` keyed by ``secret``."""
    raw = payload.encode("utf-8") if isinstance(payload, str) else payload
    return hmac.new(secret.encode("utf-8"), raw, hashlib.sha256).hexdigest()


def verify_webhook_signature(payload: str | bytes, signature: str | None, secret: str) -> None:
    """Raise a ``SignatureError`` unless ``signature`` is the bare hex HMAC of ``payload``.

    The header carries the hex digest only. Prefixed forms such as
    ``sha256=<digest>`` are rejected as malformed.
    """
    if not signature:
        raise MissingSignatureError("Missing webhook signature")

    if len(signature) != _HEX_DIGEST_LENGTH or not _HEX_CHARS.issuperset(signature):
        raise MalformedSignatureError("Webhook signature must be a hex SHA-256 digest")

    expected = compute_signature(payload, secret)
    if not hmac.compare_digest(expected, signature):
        raise SignatureMismatchError("Invalid webhook signature")
