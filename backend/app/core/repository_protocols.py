"""Boundary Protocols — contracts between the service layer and storage.

Invariants:
    - Services NEVER import a concrete store; dependency arrows point inward only
    - All store IO accessed through the KeyValueStore Protocol
    - Store items are plain dicts keyed by the Post attribute names (id, title, content, author)
    - get_item() returns a tagged LookupResult; absence is not an exception at this boundary

Design Decisions:
    - Protocol over ABC: structural subtyping, test fakes need no inheritance
    - Tagged lookup (FOUND | ABSENT) with failures raised as StorageError: callers can
      tell "does not exist" from "could not find out"
    - update_item() is conditional on the key existing; a vanished key raises StorageError
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol

from app.core.domain_types import Post, PostFields, PostId, ScanCursor


class LookupStatus(str, Enum):
    FOUND = "found"
    ABSENT = "absent"


@dataclass(frozen=True)
class LookupResult:
    """Outcome of a single-key read."""
    status: LookupStatus
    item: dict | None = None

    @classmethod
    def found(cls, item: dict) -> "LookupResult":
        return cls(LookupStatus.FOUND, item)

    @classmethod
    def absent(cls) -> "LookupResult":
        return cls(LookupStatus.ABSENT)

    @property
    def is_found(self) -> bool:
        return self.status is LookupStatus.FOUND


@dataclass(frozen=True)
class ScanBatch:
    """One bounded scan page plus the resume point (None when exhausted)."""
    items: list[dict] = field(default_factory=list)
    next_cursor: ScanCursor | None = None


class KeyValueStore(Protocol):
    """Contract for the single-table key-value store, implemented by infrastructure."""
    async def scan(self, cursor: ScanCursor | None, limit: int) -> ScanBatch: ...
    async def get_item(self, key: str) -> LookupResult: ...
    async def put_item(self, item: dict) -> None: ...
    async def update_item(self, key: str, fields: dict) -> dict: ...
    async def delete_item(self, key: str) -> None: ...
    async def health_check(self) -> bool: ...


class PostRepository(Protocol):
    """Contract for post persistence, consumed by PostService."""
    async def list_posts(self, page: int, limit: int) -> list[Post]: ...
    async def get_by_id(self, post_id: str) -> Post: ...
    async def create(self, fields: PostFields) -> Post: ...
    async def update(self, post_id: str, fields: PostFields) -> Post: ...
    async def delete(self, post_id: str) -> None: ...


def item_to_post(item: dict) -> Post:
    return Post(
        id=PostId(str(item["id"])),
        title=item.get("title", ""),
        content=item.get("content", ""),
        author=item.get("author", ""),
    )
