"""
iShop Payments Backend — Custom Exception Hierarchy
=====================================================

What:  Application-specific exceptions for each payment failure mode.
How:   Each exception carries a client-safe message and an optional context
       dict. Global exception handlers (registered in main.py) catch these
       and return structured JSON error responses with the right status.
Who:   Raised by services; caught by global handlers.

Exception Hierarchy:
    IShopError (base)
    ├── ValidationError          → 400 Bad Request (client can fix)
    ├── VerificationRejected     → 400 Bad Request (signature not authentic)
    ├── GatewayError             → 500 Internal Server Error (upstream detail attached)
    ├── StorageError             → 500 Internal Server Error (generic message)
    └── ForbiddenError           → 403 Forbidden (internal endpoint, bad admin key)

Logging rule:
    `context` is logged server-side. It may hold order and payment ids but
    never the gateway secret or a raw signature.
"""

from typing import Any, Dict, Optional


class IShopError(Exception):
    """
    Base exception for all iShop application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(IShopError):
    """
    Raised when a request is missing required fields or carries malformed ones.

    When:    Missing amount, non-positive amount, missing order/payment id or
             signature on a verification report.
    HTTP:    400 Bad Request

    No side effects have happened when this is raised: neither the gateway
    nor the payment store has been called.
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class VerificationRejected(IShopError):
    """
    Raised when a payment report's signature does not match.

    HTTP:    400 Bad Request, error code `verification_rejected`

    Kept separate from ValidationError: a well-formed report with a wrong
    signature is a possible forgery and is logged as such.
    """

    def __init__(
        self,
        message: str = "Payment verification failed: signature is not authentic",
        order_id: Optional[str] = None,
        payment_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if order_id:
            ctx["order_id"] = order_id
        if payment_id:
            ctx["payment_id"] = payment_id
        super().__init__(message=message, context=ctx)
        self.order_id = order_id
        self.payment_id = payment_id


class GatewayError(IShopError):
    """
    Raised when the payment gateway's order-creation call fails.

    What:    Non-2xx response, network error, timeout or unreadable body.
    HTTP:    500 Internal Server Error

    `detail` holds whatever the gateway said about the failure (its JSON
    `error` object, or a text excerpt). It is relayed to the client for
    diagnosis. The order may still exist upstream if only the response was
    lost; reconciling such orders is not handled here.
    """

    def __init__(
        self,
        message: str = "Something went wrong",
        detail: Any = None,
        status_code: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if status_code is not None:
            ctx["upstream_status"] = status_code
        super().__init__(message=message, context=ctx)
        self.detail = detail
        self.status_code = status_code


class StorageError(IShopError):
    """
    Raised when persisting or reading payment confirmations fails.

    HTTP:    500 Internal Server Error

    If raised after a successful verification, the client is NOT told the
    payment is confirmed; it can retry the verify call.
    """

    def __init__(
        self,
        message: str = "Could not record the payment. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ForbiddenError(IShopError):
    """
    Raised when an internal endpoint is called without the admin key.

    HTTP:    403 Forbidden
    """

    def __init__(
        self,
        message: str = "Not allowed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
