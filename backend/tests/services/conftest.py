"""Service test fixtures — in-memory SQLite engine for the SQL store.

Invariants:
    - Every test gets a fresh in-memory SQLite database with the posts table
    - One shared connection (StaticPool) so every session sees the same database
"""

import pytest
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from app.db.base import Base
from app.infrastructure.database import DatabaseSessionManager
from app.infrastructure.sql_store import SqlKeyValueStore


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False, poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def sql_store(test_engine):
    return SqlKeyValueStore(DatabaseSessionManager.from_engine(test_engine))
