"""Root conftest — shared test configuration and the in-memory store fake.

Invariants:
    - Tests never touch a real database file or AWS endpoint
    - InMemoryStore honours the KeyValueStore contract: insertion-order scan,
      conditional update, idempotent delete
    - Every store call is recorded in store.calls for "no store call made" assertions
"""

import os

import pytest

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("STORAGE_BACKEND", "sql")
os.environ.setdefault("LOG_FORMAT", "text")

from app.core.errors import StorageError  # noqa: E402
from app.core.repository_protocols import LookupResult, ScanBatch  # noqa: E402


class InMemoryStore:
    """Dict-backed KeyValueStore. Cursor = index of the next item in insertion order."""

    def __init__(self):
        self.items: dict[str, dict] = {}
        self.calls: list[str] = []
        self.fail_on: set[str] = set()

    def _record(self, name: str) -> None:
        self.calls.append(name)
        if name in self.fail_on:
            raise StorageError("injected failure", name)

    def calls_to(self, name: str) -> int:
        return self.calls.count(name)

    @property
    def mutating_calls(self) -> list[str]:
        return [c for c in self.calls if c in ("put_item", "update_item", "delete_item")]

    def seed(self, count: int) -> list[str]:
        keys = []
        for i in range(count):
            key = f"post-{i:03d}"
            self.items[key] = {
                "id": key, "title": f"Title {i}",
                "content": f"Content {i}", "author": "seed",
            }
            keys.append(key)
        return keys

    async def scan(self, cursor, limit):
        self._record("scan")
        start = int(cursor) if cursor is not None else 0
        ordered = list(self.items.values())
        batch = [dict(item) for item in ordered[start:start + limit]]
        end = start + len(batch)
        next_cursor = str(end) if end < len(ordered) else None
        return ScanBatch(items=batch, next_cursor=next_cursor)

    async def get_item(self, key):
        self._record("get_item")
        item = self.items.get(key)
        return LookupResult.found(dict(item)) if item else LookupResult.absent()

    async def put_item(self, item):
        self._record("put_item")
        self.items[item["id"]] = dict(item)

    async def update_item(self, key, fields):
        self._record("update_item")
        if key not in self.items:
            raise StorageError(f"item {key} does not exist", "update")
        self.items[key].update(fields)
        return dict(self.items[key])

    async def delete_item(self, key):
        self._record("delete_item")
        self.items.pop(key, None)

    async def health_check(self):
        return "health_check" not in self.fail_on


@pytest.fixture
def store():
    return InMemoryStore()
