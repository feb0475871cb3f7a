"""
iShop Payments Backend — Health Route Tests
=============================================

The test database is a throwaway SQLite file (see conftest.py), so the
database check really connects.
"""

import pytest
import pytest_asyncio

from ishop import __version__
from ishop.database import dispose_engine


@pytest_asyncio.fixture(autouse=True)
async def fresh_pool():
    """Pooled connections are bound to the test's event loop; drop them after."""
    yield
    await dispose_engine()


class TestHealth:

    @pytest.mark.asyncio
    async def test_health_reports_dependencies(self, test_client):
        response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["version"] == __version__
        assert body["database"] == "connected"
        assert body["gateway"] == "configured"
        assert body["status"] == "healthy"
        assert body["uptime_seconds"] >= 0

    @pytest.mark.asyncio
    async def test_missing_credentials_degrade_status(self, test_client, monkeypatch):
        from ishop.config import settings

        monkeypatch.setattr(settings, "razorpay_key_id", "")

        response = await test_client.get("/health")

        body = response.json()
        assert body["gateway"] == "unconfigured"
        assert body["status"] == "degraded"
