"""
iShop Payments Backend — Payment Record Store
===============================================

What:  Durable, append-only record of verified payment confirmations.
How:   Inserts one `payments` row per confirmation and commits before
       returning, so the caller only reports success for committed rows.
Who:   Called by PaymentService after a signature has been verified.

Only verified confirmations may reach save(); the store itself does not
check signatures.
"""

import logging
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ishop.exceptions import StorageError
from ishop.models.payment import Payment
from ishop.schemas.payment import VerifyPaymentRequest

logger = logging.getLogger(__name__)


class PaymentRecordStore:
    """Stateless; receives the session for each call."""

    async def save(self, db: AsyncSession, confirmation: VerifyPaymentRequest) -> Payment:
        """
        Insert and commit a confirmation.

        Raises:
            StorageError: the insert or commit failed; the transaction is
                rolled back.
        """
        payment = Payment(
            razorpay_order_id=confirmation.razorpay_order_id,
            razorpay_payment_id=confirmation.razorpay_payment_id,
            razorpay_signature=confirmation.razorpay_signature,
        )
        try:
            db.add(payment)
            await db.commit()
        except Exception as e:
            logger.error(
                "Failed to store payment (order=%r, payment=%r): %s",
                confirmation.razorpay_order_id,
                confirmation.razorpay_payment_id,
                type(e).__name__,
                exc_info=True,
            )
            await db.rollback()
            raise StorageError(
                context={
                    "order_id": confirmation.razorpay_order_id,
                    "payment_id": confirmation.razorpay_payment_id,
                    "error_type": type(e).__name__,
                },
            )

        logger.info(
            "Payment stored: id=%s order=%r payment=%r",
            payment.id, payment.razorpay_order_id, payment.razorpay_payment_id,
        )
        return payment

    async def find_by_order_id(self, db: AsyncSession, order_id: str) -> List[Payment]:
        """Stored confirmations for an order, oldest first."""
        try:
            result = await db.execute(
                select(Payment)
                .where(Payment.razorpay_order_id == order_id)
                .order_by(Payment.created_at)
            )
            return list(result.scalars().all())
        except Exception as e:
            logger.error(
                "Failed to load payments for order %r: %s",
                order_id, type(e).__name__, exc_info=True,
            )
            raise StorageError(
                message="Could not retrieve payments. Please try again.",
                context={"order_id": order_id, "error_type": type(e).__name__},
            )


# ── Singleton Instance ────────────────────────────────────────────────────
payment_store = PaymentRecordStore()
