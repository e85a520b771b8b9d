"""
Smart Pantry Backend: Test Configuration (conftest.py)
=======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Environment overrides are applied before anything from smart_pantry
       is imported, so the settings singleton and the engine see them.

Fixture Hierarchy:
    Function-scoped:
    ├── mock_db_session: AsyncMock session for service-level tests
    ├── db: real tables in a temporary SQLite file (created, then dropped)
    ├── test_client: httpx AsyncClient wired to the app via ASGITransport
    ├── csrf_headers: X-CSRF-Token header matching the client's cookie
    └── auth_headers: registers + logs in a user, returns Bearer + CSRF headers
"""

import os
import tempfile

# ══════════════════════════════════════════════════════════════════════════
# Environment Setup (before any smart_pantry import)
# ══════════════════════════════════════════════════════════════════════════

_test_dir = tempfile.mkdtemp(prefix="smart_pantry_test_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_test_dir}/test.db"
os.environ["GEMINI_API_KEY"] = "test-key-not-real"
os.environ["SECRET"] = "test-secret-key-with-at-least-32-bytes!!"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["COOKIE_SECURE"] = "false"
os.environ["COOKIE_SAMESITE"] = "lax"
os.environ["RATE_LIMIT_REQUESTS"] = "100000"
os.environ["LOG_LEVEL"] = "WARNING"

from datetime import date, datetime, timezone  # noqa: E402
from typing import Dict  # noqa: E402
from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from smart_pantry.database import create_all_tables, drop_all_tables  # noqa: E402
from smart_pantry.models.food_item import FoodItem  # noqa: E402

TEST_PASSWORD = "correct horse battery staple"


@pytest.fixture
def mock_db_session():
    """
    A MagicMock standing in for AsyncSession.

    Usage:
        async def test_x(mock_db_session):
            mock_db_session.execute.return_value.scalar_one_or_none.return_value = item
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.delete = AsyncMock()
    session.get = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def make_food_item():
    """Factory for detached FoodItem rows with sensible defaults."""

    def _make(
        title: str = "Milk",
        quantity: int = 1,
        expiry_date: date = date(2030, 1, 1),
        item_id: int = 1,
        user_id: int = 1,
    ) -> FoodItem:
        now = datetime.now(timezone.utc)
        return FoodItem(
            id=item_id,
            title=title,
            quantity=quantity,
            expiry_date=expiry_date,
            user_id=user_id,
            created_at=now,
            updated_at=now,
        )

    return _make


@pytest_asyncio.fixture
async def db():
    """Fresh tables in the temporary SQLite database for one test."""
    await create_all_tables()
    yield
    await drop_all_tables()


@pytest_asyncio.fixture
async def test_client(db):
    """
    HTTPX AsyncClient talking to the app in-process.

    base_url is plain http and COOKIE_SECURE is off, so the client's cookie
    jar keeps the CSRF and auth cookies between requests.
    """
    from smart_pantry.main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


async def fetch_csrf_headers(client: AsyncClient) -> Dict[str, str]:
    response = await client.get("/csrf")
    assert response.status_code == 200
    return {"X-CSRF-Token": response.json()["csrf_token"]}


async def register_and_login(client: AsyncClient, email: str) -> Dict[str, str]:
    """Sign up `email`, log in, and return Bearer + CSRF headers."""
    headers = await fetch_csrf_headers(client)
    response = await client.post(
        "/signup", json={"email": email, "password": TEST_PASSWORD}, headers=headers
    )
    assert response.status_code == 201, response.text
    response = await client.post(
        "/login", json={"email": email, "password": TEST_PASSWORD}, headers=headers
    )
    assert response.status_code == 200, response.text
    return {**headers, "Authorization": f"Bearer {response.json()['data']['accessToken']}"}


@pytest_asyncio.fixture
async def csrf_headers(test_client):
    return await fetch_csrf_headers(test_client)


@pytest_asyncio.fixture
async def auth_headers(test_client):
    return await register_and_login(test_client, "alice@example.com")
