"""API test fixtures — FastAPI app wired to the in-memory store, httpx client.

Invariants:
    - Each test builds its own app (create_app) with explicit settings
    - app.state.store is the InMemoryStore fixture; lifespan is not run
    - ASGITransport: requests go through the full middleware pipeline
"""

import pytest
from httpx import ASGITransport, AsyncClient

from app.config import Settings
from app.main import create_app

ALLOWED_ORIGIN = "http://good.test"


@pytest.fixture
def settings():
    return Settings(
        cors_origins=[ALLOWED_ORIGIN],
        database_url="sqlite+aiosqlite:///:memory:",
        store_timeout_seconds=2.0,
    )


@pytest.fixture
def app(settings, store):
    application = create_app(settings)
    application.state.store = store
    return application


@pytest.fixture
async def client(app):
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c
