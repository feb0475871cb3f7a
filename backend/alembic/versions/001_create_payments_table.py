"""Create payments table

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Creates the `payments` table holding verified payment confirmations.
How:   UUID primary key, TIMESTAMP WITH TIME ZONE, non-unique index on the
       gateway order id (repeat confirmations for one order are allowed).

Rollback: downgrade() drops the table (destructive).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "payments",
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            server_default=sa.text("gen_random_uuid()"),
            nullable=False,
        ),
        sa.Column(
            "razorpay_order_id",
            sa.String(64),
            nullable=False,
            comment="Gateway order id the payment belongs to",
        ),
        sa.Column(
            "razorpay_payment_id",
            sa.String(64),
            nullable=False,
            comment="Gateway payment id",
        ),
        sa.Column(
            "razorpay_signature",
            sa.String(128),
            nullable=False,
            comment="Signature supplied with the verified report",
        ),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
            comment="When the confirmation was recorded (UTC)",
        ),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_index(
        "idx_payments_razorpay_order_id",
        "payments",
        ["razorpay_order_id"],
    )


def downgrade() -> None:
    op.drop_index("idx_payments_razorpay_order_id", table_name="payments")
    op.drop_table("payments")
