"""
iShop Payments Backend — Test Configuration (conftest.py)
===========================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── gateway_secret: Shared secret used to sign test reports
    ├── mock_db_session: Mock async database session (no real DB needed)
    ├── mock_gateway: AsyncMock standing in for RazorpayClient
    ├── mock_store: PaymentRecordStore with mocked save/find
    ├── payment_service: PaymentService wired to the mocks above
    ├── signed_report: A correctly signed VerifyPaymentRequest
    ├── test_client: HTTPX AsyncClient against the FastAPI app
    └── raw_test_client: same, with unhandled errors answered by the app
"""

import os
import tempfile

# Settings are read at import time; configure the environment before any
# ishop module is imported
_tmp_dir = tempfile.mkdtemp(prefix="ishop_test_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_tmp_dir}/test.db"
os.environ["RAZORPAY_KEY_ID"] = "rzp_test_key123456"
os.environ["RAZORPAY_SECRET"] = "test-secret-not-real"
os.environ["LOG_LEVEL"] = "WARNING"

from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from ishop.schemas.payment import VerifyPaymentRequest
from ishop.services.payment_service import PaymentService
from ishop.services.payment_store import PaymentRecordStore
from ishop.services.signature import compute_signature

TEST_SECRET = "s3cr3t"


@pytest.fixture
def gateway_secret():
    return TEST_SECRET


@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        mock_db_session.commit.side_effect = OperationalError(...)
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def sample_gateway_order():
    """Order object shaped like the gateway's /orders response."""
    return {
        "id": "order_abc",
        "entity": "order",
        "amount": 49999,
        "amount_paid": 0,
        "amount_due": 49999,
        "currency": "INR",
        "receipt": "a1b2c3d4e5f6a7b8c9d0",
        "status": "created",
        "attempts": 0,
        "notes": [],
        "created_at": 1760000000,
    }


@pytest.fixture
def mock_gateway(sample_gateway_order):
    gateway = MagicMock()
    gateway.create_order = AsyncMock(return_value=sample_gateway_order)
    gateway.aclose = AsyncMock()
    return gateway


@pytest.fixture
def mock_store():
    store = PaymentRecordStore()
    store.save = AsyncMock()
    store.find_by_order_id = AsyncMock(return_value=[])
    return store


@pytest.fixture
def payment_service(mock_gateway, mock_store, gateway_secret):
    return PaymentService(gateway=mock_gateway, secret=gateway_secret, store=mock_store)


@pytest.fixture
def signed_report(gateway_secret):
    return VerifyPaymentRequest(
        razorpay_order_id="order_abc",
        razorpay_payment_id="pay_xyz",
        razorpay_signature=compute_signature("order_abc", "pay_xyz", gateway_secret),
    )


@pytest_asyncio.fixture
async def test_client(payment_service, mock_db_session):
    """
    Provides an async HTTP test client for endpoint testing.

    The lifespan does not run under ASGITransport, so the payment service
    and DB session are supplied through dependency overrides.

    Usage:
        async def test_verify(test_client):
            response = await test_client.post("/api/payment/verify", json={...})
    """
    from ishop.database import get_db_session
    from ishop.main import app
    from ishop.routes.payment import get_payment_service

    async def override_db_session():
        yield mock_db_session

    app.dependency_overrides[get_payment_service] = lambda: payment_service
    app.dependency_overrides[get_db_session] = override_db_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def raw_test_client(payment_service, mock_db_session):
    """
    Like test_client, but unhandled exceptions come back as the app's 500
    response instead of being re-raised into the test.
    """
    from ishop.database import get_db_session
    from ishop.main import app
    from ishop.routes.payment import get_payment_service

    async def override_db_session():
        yield mock_db_session

    app.dependency_overrides[get_payment_service] = lambda: payment_service
    app.dependency_overrides[get_db_session] = override_db_session

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
