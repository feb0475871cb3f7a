"""
iShop Payments Backend — Payment SQLAlchemy Model
===================================================

What:  ORM model representing the `payments` table.
Who:   Written by PaymentRecordStore; read by the payment lookup route and
       by Alembic for schema management.

Table Design:
    - One row per verified payment report (append-only, never updated).
    - razorpay_order_id is indexed but NOT unique: repeated authentic reports
      for one order produce one row each unless the service-level dedupe
      setting (PAYMENT_UNIQUE_ORDER_CONFIRMATION) is enabled.
    - The signature is stored as received so the record can be re-verified
      later against the gateway secret.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Index, String, text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID, TIMESTAMP

from ishop.database import Base


class Payment(Base):
    """A verified payment confirmation reported by the gateway checkout."""

    __tablename__ = "payments"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        server_default=text("gen_random_uuid()"),
    )

    # Gateway order reference, e.g. "order_N5pq..."
    razorpay_order_id: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        comment="Gateway order id the payment belongs to",
    )

    # Gateway payment reference, e.g. "pay_N5pr..."
    razorpay_payment_id: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        comment="Gateway payment id",
    )

    # Lowercase hex HMAC-SHA256, 64 chars
    razorpay_signature: Mapped[str] = mapped_column(
        String(128),
        nullable=False,
        comment="Signature supplied with the verified report",
    )

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
        comment="When the confirmation was recorded (UTC)",
    )

    __table_args__ = (
        Index("idx_payments_razorpay_order_id", razorpay_order_id),
    )

    def __repr__(self) -> str:
        # Signature deliberately left out of the repr
        return (
            f"<Payment(id={self.id}, order_id='{self.razorpay_order_id}', "
            f"payment_id='{self.razorpay_payment_id}')>"
        )
