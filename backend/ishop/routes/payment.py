"""
iShop Payments Backend — Payment Route Handlers
=================================================

What:  POST /api/payment/order, POST /api/payment/verify and
       GET /api/payment/{order_id}.
How:   Thin handlers; all decisions are made by PaymentService and all error
       responses are produced by the global handlers in main.py.
Who:   Called by the storefront checkout; the order lookup is for internal
       and admin callers only (see require_admin_key).

Checkout sequence:
    1. Storefront posts {amount} to /order and opens the gateway checkout
       with the returned order id.
    2. Gateway checkout calls back in the browser with
       {razorpay_order_id, razorpay_payment_id, razorpay_signature}.
    3. Storefront forwards that payload to /verify.
"""

import hmac
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from ishop.config import settings
from ishop.database import get_db_session
from ishop.exceptions import ForbiddenError
from ishop.schemas.payment import (
    CreateOrderRequest,
    ErrorResponse,
    GatewayErrorResponse,
    OrderResponse,
    PaymentListResponse,
    VerifyPaymentRequest,
    VerifyPaymentResponse,
)
from ishop.services.payment_service import PaymentService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/payment", tags=["Payment"])


def get_payment_service(request: Request) -> PaymentService:
    """PaymentService built by the lifespan; overridden in tests."""
    return request.app.state.payment_service


@router.post(
    "/order",
    response_model=OrderResponse,
    responses={
        400: {"description": "Missing or invalid amount", "model": ErrorResponse},
        500: {"description": "Gateway failed to create the order", "model": GatewayErrorResponse},
    },
    summary="Create a gateway payment order",
)
async def create_order(
    body: CreateOrderRequest,
    service: PaymentService = Depends(get_payment_service),
) -> OrderResponse:
    order = await service.create_order(body)
    return OrderResponse(data=order)


@router.post(
    "/verify",
    response_model=VerifyPaymentResponse,
    responses={
        400: {
            "description": "Missing fields (validation_error) or forged signature "
                           "(verification_rejected)",
            "model": ErrorResponse,
        },
        500: {"description": "Verified but could not be recorded", "model": ErrorResponse},
    },
    summary="Verify and record a completed payment",
)
async def verify_payment(
    body: VerifyPaymentRequest,
    db: AsyncSession = Depends(get_db_session),
    service: PaymentService = Depends(get_payment_service),
) -> VerifyPaymentResponse:
    return await service.verify_payment(db, body)


def require_admin_key(x_admin_key: Optional[str] = Header(default=None)) -> None:
    """
    Gate for internal endpoints.

    Passes when ADMIN_API_KEY is unset; otherwise the X-Admin-Key header
    must match it.
    """
    expected = settings.admin_api_key.get_secret_value()
    if not expected:
        return
    if not x_admin_key or not hmac.compare_digest(
        x_admin_key.encode("utf-8"), expected.encode("utf-8")
    ):
        raise ForbiddenError(context={"endpoint": "payment_lookup"})


@router.get(
    "/{order_id}",
    response_model=PaymentListResponse,
    responses={
        403: {"description": "Missing or wrong X-Admin-Key", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="List recorded payments for an order (internal)",
    dependencies=[Depends(require_admin_key)],
)
async def list_payments(
    order_id: str,
    db: AsyncSession = Depends(get_db_session),
    service: PaymentService = Depends(get_payment_service),
) -> PaymentListResponse:
    """
    Internal/admin lookup of stored confirmations. Not called by the
    storefront; order ids are not secret, so deployments should set
    ADMIN_API_KEY or keep this path off the public ingress.
    """
    return await service.list_payments(db, order_id)
