"""
iShop Payments Backend — Payment Service (Order/Verify Orchestrator)
======================================================================

What:  Orchestrates the two public payment operations.
How:   Composes RazorpayClient, the signature verifier and
       PaymentRecordStore; raises typed errors from ishop.exceptions that
       the global handlers in main.py turn into responses.
Who:   Built once in the application lifespan; routes obtain it through
       the get_payment_service dependency.

Verification flow (POST /api/payment/verify):

    Received ──▶ Validated ──▶ Authentic ──▶ Persisted      → 200 confirmed
        │             │             │
        │             │             └──────▶ PersistFailed  → 500 storage_error
        │             └──────────▶ Rejected                 → 400 verification_rejected
        └──────────────────────────▶ invalid                → 400 validation_error

    Every state is terminal for a single report. The store is called only
    from the Authentic state.
"""

import logging
from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ishop.exceptions import IShopError, ValidationError, VerificationRejected
from ishop.schemas.payment import (
    CreateOrderRequest,
    PaymentListResponse,
    PaymentRecord,
    VerifyPaymentRequest,
    VerifyPaymentResponse,
)
from ishop.services.gateway_client import RazorpayClient
from ishop.services.payment_store import PaymentRecordStore, payment_store
from ishop.services.signature import verify_signature

logger = logging.getLogger(__name__)

REQUIRED_REPORT_FIELDS = ("razorpay_order_id", "razorpay_payment_id", "razorpay_signature")


class PaymentService:
    """
    Payment business logic.

    Holds no per-request state. The gateway client and secret are fixed at
    construction; rotating the secret means building a new service.
    """

    def __init__(
        self,
        gateway: RazorpayClient,
        secret: str,
        store: Optional[PaymentRecordStore] = None,
        unique_order_confirmation: bool = False,
    ):
        self.gateway = gateway
        self.store = store or payment_store
        self.unique_order_confirmation = unique_order_confirmation
        self._secret = secret

    async def create_order(self, request: CreateOrderRequest) -> Dict[str, Any]:
        """
        Create a gateway order for the requested amount.

        Raises:
            ValidationError: amount missing or not positive (gateway not called).
            GatewayError: the gateway call failed.
        """
        if request.amount is None:
            raise ValidationError(message="amount is required", field="amount")
        if not request.amount.is_finite() or request.amount <= 0:
            raise ValidationError(message="amount must be a positive number", field="amount")

        try:
            return await self.gateway.create_order(request.amount)
        except IShopError:
            raise
        except Exception:
            logger.exception("Unexpected failure creating order: amount=%s", request.amount)
            raise

    async def verify_payment(
        self, db: AsyncSession, report: VerifyPaymentRequest
    ) -> VerifyPaymentResponse:
        """
        Authenticate a checkout report and record it.

        Raises:
            ValidationError: a required field is missing; nothing is called.
            VerificationRejected: signature mismatch; nothing is stored.
            StorageError: verified but could not be stored; the client is
                not told the payment is confirmed.

        Any other exception is logged here with the order and payment ids
        and re-raised for the catch-all handler.
        """
        missing = [name for name in REQUIRED_REPORT_FIELDS if not getattr(report, name)]
        if missing:
            raise ValidationError(
                message=f"Missing required field(s): {', '.join(missing)}",
                field=missing[0],
                context={"missing": missing},
            )

        order_id = report.razorpay_order_id
        payment_id = report.razorpay_payment_id

        # Ids are client-supplied; %r keeps control characters escaped in logs
        try:
            if not verify_signature(order_id, payment_id, report.razorpay_signature, self._secret):
                logger.warning(
                    "Payment signature rejected: order=%r payment=%r", order_id, payment_id
                )
                raise VerificationRejected(order_id=order_id, payment_id=payment_id)

            logger.info("Payment signature verified: order=%r payment=%r", order_id, payment_id)

            if self.unique_order_confirmation:
                existing = await self.store.find_by_order_id(db, order_id)
                if existing:
                    logger.info(
                        "Order %r already confirmed (%d record(s)); not storing payment %r again",
                        order_id, len(existing), payment_id,
                    )
                    return VerifyPaymentResponse(message="confirmed")

            await self.store.save(db, report)
        except IShopError:
            raise
        except Exception:
            logger.exception(
                "Unexpected failure verifying payment: order=%r payment=%r",
                order_id, payment_id,
            )
            raise

        return VerifyPaymentResponse(message="confirmed")

    async def list_payments(self, db: AsyncSession, order_id: str) -> PaymentListResponse:
        """Stored confirmations for an order, without signatures."""
        if not order_id:
            raise ValidationError(message="order id is required", field="order_id")
        payments = await self.store.find_by_order_id(db, order_id)
        return PaymentListResponse(
            order_id=order_id,
            payments=[PaymentRecord.model_validate(p) for p in payments],
        )
