"""
Health and readiness endpoint tests.
"""

from unittest.mock import patch

import pytest
import structlog
from httpx import AsyncClient, ASGITransport
from sqlalchemy.exc import OperationalError

from plantrack.core.logging import configure_logging
from plantrack.main import app


@pytest.fixture
async def client():
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient):
    """Health endpoint should return status ok."""
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_ready_check(client: AsyncClient):
    """Ready endpoint should answer once the store responds to SELECT 1."""
    response = await client.get("/ready")
    assert response.status_code == 200
    assert response.json() == {"status": "ready"}


@pytest.mark.asyncio
async def test_ready_reports_unavailable_store(client: AsyncClient):
    def broken_context():
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))

    with patch("plantrack.main.get_session_context", broken_context):
        response = await client.get("/ready")
    assert response.status_code == 503
    assert response.json()["error"]["code"] == "NOT_READY"


@pytest.mark.asyncio
async def test_responses_carry_request_id_and_security_headers(client: AsyncClient):
    response = await client.get("/health", headers={"X-Request-ID": "abc123"})
    assert response.headers["X-Request-ID"] == "abc123"
    assert response.headers["X-Content-Type-Options"] == "nosniff"


@pytest.mark.parametrize("level, fmt", [("warning", "text"), ("INFO", "json"), ("debug", "json")])
def test_configure_logging_accepts_level_names(level, fmt):
    configure_logging(level, fmt)
    structlog.get_logger().info("logging.configured", level=level)
    configure_logging("warning", "json")
