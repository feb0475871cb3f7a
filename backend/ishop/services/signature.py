"""
iShop Payments Backend — Payment Signature Verification
=========================================================

What:  Decides whether a "payment succeeded" report really came from the gateway.
How:   Recomputes HMAC-SHA256 over "<order_id>|<payment_id>" keyed by the
       gateway secret and compares it with the supplied signature.
Who:   Called by PaymentService.verify_payment.

Canonical message:
    order_id + "|" + payment_id, UTF-8 encoded, nothing else. The separator
    never occurs in gateway ids, so the concatenation is unambiguous.

Pure computation: no I/O, no shared state.
"""

import hashlib
import hmac
from typing import Optional

from ishop.exceptions import ValidationError

SEPARATOR = "|"


def canonical_message(order_id: str, payment_id: str) -> bytes:
    """Byte string the gateway signs for a completed payment."""
    return f"{order_id}{SEPARATOR}{payment_id}".encode("utf-8")


def compute_signature(order_id: str, payment_id: str, secret: str) -> str:
    """Lowercase hex HMAC-SHA256 of the canonical message."""
    return hmac.new(
        secret.encode("utf-8"),
        canonical_message(order_id, payment_id),
        hashlib.sha256,
    ).hexdigest()


def verify_signature(
    order_id: Optional[str],
    payment_id: Optional[str],
    signature: Optional[str],
    secret: str,
) -> bool:
    """
    Check a payment report's signature.

    Returns:
        True iff `signature` equals the expected signature byte for byte.

    Raises:
        ValidationError: order_id or payment_id is missing. This is not a
            mismatch and callers must not report it as one.
    """
    if not order_id:
        raise ValidationError(message="razorpay_order_id is required", field="razorpay_order_id")
    if not payment_id:
        raise ValidationError(message="razorpay_payment_id is required", field="razorpay_payment_id")
    if not signature:
        return False

    expected = compute_signature(order_id, payment_id, secret)
    # compare_digest only accepts ASCII str; compare as bytes so a non-ASCII
    # forgery is a mismatch rather than a TypeError
    return hmac.compare_digest(expected.encode("utf-8"), signature.encode("utf-8"))
