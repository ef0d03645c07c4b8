"""
Shared fixtures: a file-backed SQLite database per test, the app wired to it,
and helpers to onboard users through the public API.
"""

from __future__ import annotations

import os
import tempfile

# Settings are read once at import time; point them at throwaway stores first.
_DB_DIR = tempfile.mkdtemp(prefix="plantrack-tests-")
os.environ.setdefault("PT_DATABASE_URL", f"sqlite+aiosqlite:///{_DB_DIR}/app.db")
os.environ.setdefault("PT_SESSION_REVOCATION_ENABLED", "false")
os.environ.setdefault("PT_SECRET_KEY", "test-secret-key-that-is-long-enough-for-hs256")
os.environ.setdefault("PT_LOG_LEVEL", "warning")

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.pool import NullPool  # noqa: E402

from plantrack.core.database import (  # noqa: E402
    build_engine,
    build_session_factory,
    get_session,
    init_db,
)


@pytest.fixture
async def engine(tmp_path):
    eng = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'plantrack.db'}", poolclass=NullPool)
    await init_db(eng)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
async def session(session_factory):
    """A plain session for service tests. Nothing is committed unless the test does it."""
    async with session_factory() as s:
        yield s


@pytest.fixture
async def client(session_factory):
    from plantrack.main import app

    async def override_get_session():
        async with session_factory() as s:
            try:
                yield s
                await s.commit()
            except Exception:
                await s.rollback()
                raise

    app.dependency_overrides[get_session] = override_get_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def register(client):
    """Register a user via POST /auth/register and return the response body."""

    async def _register(
        email: str,
        *,
        password: str = "secret123",
        name: str = "Test User",
        organization_name: str | None = None,
        invite_token: str | None = None,
    ) -> dict:
        body = {"email": email, "password": password, "name": name}
        if organization_name is not None:
            body["organizationName"] = organization_name
        if invite_token is not None:
            body["inviteToken"] = invite_token
        resp = await client.post("/auth/register", json=body)
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _register


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers():
    return bearer
