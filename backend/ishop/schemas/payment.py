"""
iShop Payments Backend — Pydantic Request/Response Schemas
============================================================

What:  Pydantic models defining the payment API contract.
How:   FastAPI validates request bodies against these models, serializes
       responses through them, and generates the OpenAPI docs from them.

Request fields that the business rules require (amount, order/payment ids,
signature) are Optional here on purpose: their absence is reported by
PaymentService as a ValidationError, the same way whether the report came
over HTTP or from another caller.
"""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class CreateOrderRequest(BaseModel):
    """Body of POST /api/payment/order. Amount is in major units (rupees)."""
    amount: Optional[Decimal] = Field(
        default=None,
        description="Amount to charge in major currency units, e.g. 499.99",
        examples=[499.99],
    )


class VerifyPaymentRequest(BaseModel):
    """
    Body of POST /api/payment/verify, as posted by the checkout handler.

    Field names follow the gateway's checkout callback so the client can
    forward the callback payload unchanged.
    """
    razorpay_order_id: Optional[str] = Field(default=None, description="Gateway order id")
    razorpay_payment_id: Optional[str] = Field(default=None, description="Gateway payment id")
    razorpay_signature: Optional[str] = Field(
        default=None,
        description="Hex HMAC-SHA256 of '<order_id>|<payment_id>' issued by the gateway",
    )


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class GatewayOrder(BaseModel):
    """
    Order object returned by the gateway, relayed to the client unmodified.

    Only the fields we rely on are declared; everything else the gateway
    sends (entity, status, attempts, notes, ...) passes through as extras.
    """
    model_config = ConfigDict(extra="allow")

    id: str = Field(description="Gateway-assigned order id")
    amount: int = Field(description="Amount in minor units (paise)")
    currency: str = Field(description="ISO 4217 currency code")
    receipt: Optional[str] = Field(default=None, description="Correlation token we generated")


class OrderResponse(BaseModel):
    data: GatewayOrder


class VerifyPaymentResponse(BaseModel):
    message: str = Field(default="confirmed")


class PaymentRecord(BaseModel):
    """Stored confirmation as exposed by the lookup endpoint (no signature)."""
    id: uuid.UUID
    razorpay_order_id: str
    razorpay_payment_id: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PaymentListResponse(BaseModel):
    order_id: str
    payments: List[PaymentRecord]


# ══════════════════════════════════════════════════════════════════════════
# Error Response Models
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    Standardized error response format for all API errors.

    Example:
        {
            "error": "verification_rejected",
            "message": "Payment verification failed: signature is not authentic",
            "details": null,
            "request_id": "3f2a9c1b"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class GatewayErrorResponse(BaseModel):
    """Order-creation failure; `error` carries the gateway's own error detail."""
    message: str
    error: Any = None
    request_id: Optional[str] = None


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy, degraded, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    gateway: str = Field(description="Gateway client: configured, unconfigured")
    uptime_seconds: float = Field(description="Seconds since service started")
