"""Domain Types — the Post record and the rich types around it.

Invariants:
    - PostId wraps the store key string, assigned by the repository, never by clients
    - Post is immutable; the repository returns a fresh Post after every write
    - MUTABLE_FIELDS is the single list of client-writable attributes

Design Decisions:
    - NewType over dataclass wrappers for ids: zero runtime cost, full type-checker support
    - Frozen dataclass for Post: core stays free of ORM and HTTP imports
"""

from dataclasses import dataclass
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

PostId = NewType("PostId", str)
ScanCursor = NewType("ScanCursor", str)


# ─── Records ─────────────────────────────────────────────────────

MUTABLE_FIELDS = ("title", "content", "author")


@dataclass(frozen=True)
class PostFields:
    """Client-supplied post content (no id)."""
    title: str = ""
    content: str = ""
    author: str = ""

    def as_dict(self) -> dict[str, str]:
        return {name: getattr(self, name) for name in MUTABLE_FIELDS}


@dataclass(frozen=True)
class Post:
    """A persisted post. id is the store key."""
    id: PostId
    title: str
    content: str
    author: str

    @property
    def fields(self) -> PostFields:
        return PostFields(self.title, self.content, self.author)

    def as_dict(self) -> dict[str, str]:
        return {"id": self.id, **self.fields.as_dict()}


def merge_fields(current: PostFields, updates: dict) -> PostFields:
    """Apply only the title/content/author keys present in updates.

    Non-string values and unknown keys are ignored.
    """
    merged = current.as_dict()
    for name in MUTABLE_FIELDS:
        value = updates.get(name)
        if isinstance(value, str):
            merged[name] = value
    return PostFields(**merged)
