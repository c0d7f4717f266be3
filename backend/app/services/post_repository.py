"""Scan Post Repository — page/limit pagination over a cursor-chained table scan.

Invariants:
    - list_posts() validates page/limit before any store call
    - The scan cursor never leaves this module; callers see only lists of Post
    - Accumulation stops as soon as the page can be cut or the store is exhausted
    - Ids are generated here (uuid4); a client-supplied id never reaches the store
    - Every store call is bounded by the configured timeout and raises StorageError on expiry

Design Decisions:
    - Full forward scan per page request: the store has no "skip N" primitive, so
      page N is found by buffering scan order up to N*limit items. Correctness over
      efficiency: identical pages for an unchanged table
    - Scan batch size is tunable independently of the page limit (settings.scan_batch_size)
    - update() is a targeted field update conditional on the key, not a put-overwrite
"""

import asyncio
import logging
import uuid
from typing import Awaitable, TypeVar

from app.core.domain_types import Post, PostFields, PostId, ScanCursor
from app.core.errors import (
    ErrorContext, InvalidArgumentError, ResourceNotFoundError, StorageError,
)
from app.core.paginate import page_window, scan_batch_size
from app.core.repository_protocols import KeyValueStore, item_to_post

logger = logging.getLogger(__name__)

T = TypeVar("T")

RESOURCE = "Post"


def generate_post_id() -> PostId:
    return PostId(str(uuid.uuid4()))


class ScanPostRepository:
    """PostRepository over any KeyValueStore."""

    def __init__(
        self,
        store: KeyValueStore,
        scan_batch_size: int | None = None,
        timeout_seconds: float | None = 10.0,
    ):
        self._store = store
        self._scan_batch_size = scan_batch_size
        self._timeout_seconds = timeout_seconds

    async def _call(self, operation: str, awaitable: Awaitable[T]) -> T:
        """Await a store call under the timeout. Cancellation propagates untouched."""
        try:
            return await asyncio.wait_for(awaitable, timeout=self._timeout_seconds)
        except asyncio.TimeoutError:
            logger.error(f"Store {operation} timed out after {self._timeout_seconds}s")
            raise StorageError(
                f"timed out after {self._timeout_seconds}s", operation,
            )

    async def list_posts(self, page: int, limit: int) -> list[Post]:
        """Return page `page` of size `limit` in the store's scan order."""
        window = page_window(page, limit)
        batch_size = scan_batch_size(window, self._scan_batch_size)

        buffered: list[dict] = []
        cursor: ScanCursor | None = None
        scans = 0
        while True:
            batch = await self._call("scan", self._store.scan(cursor, batch_size))
            scans += 1
            buffered.extend(batch.items)
            cursor = batch.next_cursor
            if cursor is None or window.is_filled_by(len(buffered)):
                break

        logger.debug(
            f"Listed page {page} (limit {limit}) after {scans} scan(s), "
            f"{len(buffered)} item(s) buffered",
        )
        return [item_to_post(item) for item in window.cut(buffered)]

    async def get_by_id(self, post_id: str) -> Post:
        """Raises ResourceNotFoundError when absent, StorageError on store failure."""
        if not post_id:
            raise InvalidArgumentError("id is empty", "id")
        result = await self._call("get", self._store.get_item(post_id))
        if not result.is_found:
            raise ResourceNotFoundError(
                RESOURCE, post_id, ErrorContext(post_id=post_id, operation="get"),
            )
        return item_to_post(result.item)

    async def create(self, fields: PostFields) -> Post:
        post = Post(id=generate_post_id(), **fields.as_dict())
        await self._call("put", self._store.put_item(post.as_dict()))
        logger.info("Post created", extra={"post_id": post.id})
        return post

    async def update(self, post_id: str, fields: PostFields) -> Post:
        """Replace title/content/author. Returns the post as stored after the write."""
        stored = await self._call(
            "update", self._store.update_item(post_id, fields.as_dict()),
        )
        logger.info("Post updated", extra={"post_id": post_id})
        return item_to_post(stored)

    async def delete(self, post_id: str) -> None:
        await self._call("delete", self._store.delete_item(post_id))
        logger.info("Post deleted", extra={"post_id": post_id})
