"""
iShop Payments Backend — Payment Record Store Unit Tests
==========================================================

What:  Tests for PaymentRecordStore with a mocked AsyncSession.

What we test:
    ✅ save() adds a Payment row with the three fields and commits
    ✅ Commit failure rolls back and raises StorageError
    ✅ Failure log escapes control characters in client-supplied ids
    ✅ find_by_order_id() returns query results; query failure → StorageError
"""

from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from ishop.exceptions import StorageError
from ishop.models.payment import Payment
from ishop.schemas.payment import VerifyPaymentRequest
from ishop.services.payment_store import PaymentRecordStore


class TestSave:

    def setup_method(self):
        self.store = PaymentRecordStore()

    @pytest.mark.asyncio
    async def test_save_adds_and_commits(self, mock_db_session, signed_report):
        payment = await self.store.save(mock_db_session, signed_report)

        assert isinstance(payment, Payment)
        assert payment.razorpay_order_id == "order_abc"
        assert payment.razorpay_payment_id == "pay_xyz"
        assert payment.razorpay_signature == signed_report.razorpay_signature
        mock_db_session.add.assert_called_once_with(payment)
        mock_db_session.commit.assert_awaited_once()
        mock_db_session.rollback.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_commit_failure_raises_storage_error(self, mock_db_session, signed_report):
        mock_db_session.commit.side_effect = OperationalError("INSERT", {}, Exception("db down"))

        with pytest.raises(StorageError) as exc_info:
            await self.store.save(mock_db_session, signed_report)

        mock_db_session.rollback.assert_awaited_once()
        assert exc_info.value.context["order_id"] == "order_abc"
        assert exc_info.value.context["payment_id"] == "pay_xyz"
        assert exc_info.value.context["error_type"] == "OperationalError"

    @pytest.mark.asyncio
    async def test_storage_error_context_has_no_signature(self, mock_db_session, signed_report):
        mock_db_session.commit.side_effect = RuntimeError("boom")

        with pytest.raises(StorageError) as exc_info:
            await self.store.save(mock_db_session, signed_report)

        assert signed_report.razorpay_signature not in str(exc_info.value.context)

    @pytest.mark.asyncio
    async def test_failure_log_escapes_control_characters(self, mock_db_session, caplog):
        mock_db_session.commit.side_effect = RuntimeError("boom")
        report = VerifyPaymentRequest(
            razorpay_order_id="order_abc\nforged line",
            razorpay_payment_id="pay_xyz",
            razorpay_signature="ab" * 32,
        )

        with pytest.raises(StorageError):
            await self.store.save(mock_db_session, report)

        message = caplog.records[0].getMessage()
        assert "\n" not in message
        assert "'order_abc\\nforged line'" in message

    def test_repr_omits_signature(self, signed_report):
        payment = Payment(
            razorpay_order_id="order_abc",
            razorpay_payment_id="pay_xyz",
            razorpay_signature=signed_report.razorpay_signature,
        )
        assert signed_report.razorpay_signature not in repr(payment)


class TestFindByOrderId:

    def setup_method(self):
        self.store = PaymentRecordStore()

    @pytest.mark.asyncio
    async def test_returns_rows(self, mock_db_session):
        rows = [MagicMock(), MagicMock()]
        mock_result = MagicMock()
        mock_result.scalars.return_value.all.return_value = rows
        mock_db_session.execute.return_value = mock_result

        result = await self.store.find_by_order_id(mock_db_session, "order_abc")

        assert result == rows
        mock_db_session.execute.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_query_failure_raises_storage_error(self, mock_db_session):
        mock_db_session.execute.side_effect = OperationalError("SELECT", {}, Exception("db down"))

        with pytest.raises(StorageError):
            await self.store.find_by_order_id(mock_db_session, "order_abc")
