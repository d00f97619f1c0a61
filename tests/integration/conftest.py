"""
Integration Test Fixtures.

The full application runs in-process over httpx's ASGI transport. The
database session and storage backend dependencies are overridden with the
per-test SQLite session and an in-memory backend.
"""

from collections.abc import AsyncGenerator, Callable
from unittest.mock import patch

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from notes_app.core.database import get_db_session
from notes_app.core.security import create_access_token
from notes_app.storage import get_storage_backend


# =============================================================================
# API Client Fixtures
# =============================================================================


@pytest.fixture
async def client(
    db_session: AsyncSession,
    memory_storage,
    tmp_path,
) -> AsyncGenerator[AsyncClient, None]:
    """
    Create a test client with database and storage overrides.

    Usage:
        async def test_alive(client: AsyncClient):
            response = await client.get("/api/note/alive")
            assert response.status_code == 200
    """
    async def override_get_db_session() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    with patch("notes_app.main.get_uploads_dir", return_value=tmp_path / "uploads"):
        from notes_app.main import create_app

        app = create_app()

    app.dependency_overrides[get_db_session] = override_get_db_session
    app.dependency_overrides[get_storage_backend] = lambda: memory_storage

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# =============================================================================
# Authentication Fixtures
# =============================================================================


@pytest.fixture
def make_auth_headers() -> Callable[..., dict[str, str]]:
    """Build an Authorization header carrying a token for the given user."""
    def _make(user_id: str = "user-alice", claim: str = "sub") -> dict[str, str]:
        token = create_access_token({claim: user_id})
        return {"Authorization": f"Bearer {token}"}

    return _make


@pytest.fixture
def auth_headers(make_auth_headers) -> dict[str, str]:
    """Authorization header for the default test user."""
    return make_auth_headers()
