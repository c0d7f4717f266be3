"""SQL Key-Value Store — the KeyValueStore contract over one SQLAlchemy table.

Invariants:
    - scan() walks the table in primary-key order; the cursor is the last key of a full batch
    - A batch shorter than the requested limit ends the scan (next_cursor None)
    - update_item() touches only title/content/author and only if the row exists
    - Driver exceptions surface as StorageError via DatabaseSessionManager

Design Decisions:
    - Keyset scan (id > cursor ORDER BY id) over OFFSET: resume point is stable
      and the cost of each batch does not grow with the cursor position
    - Conditional UPDATE with a row-count check: a row deleted after the service's
      existence check makes the update fail instead of resurrecting it
"""

import logging

from sqlalchemy import delete, select, update

from app.core.domain_types import MUTABLE_FIELDS, ScanCursor
from app.core.errors import StorageError
from app.core.repository_protocols import LookupResult, ScanBatch
from app.infrastructure.database import DatabaseSessionManager
from app.models.post import PostRecord

logger = logging.getLogger(__name__)


class SqlKeyValueStore:
    """KeyValueStore backed by the posts table."""

    def __init__(self, manager: DatabaseSessionManager):
        self._manager = manager

    async def scan(self, cursor: ScanCursor | None, limit: int) -> ScanBatch:
        query = select(PostRecord).order_by(PostRecord.id).limit(limit)
        if cursor is not None:
            query = query.where(PostRecord.id > cursor)
        async with self._manager.session() as db:
            result = await db.execute(query)
            rows = result.scalars().all()
        items = [row.to_item() for row in rows]
        next_cursor = ScanCursor(items[-1]["id"]) if len(items) == limit else None
        return ScanBatch(items=items, next_cursor=next_cursor)

    async def get_item(self, key: str) -> LookupResult:
        async with self._manager.session() as db:
            row = await db.get(PostRecord, key)
        if row is None:
            return LookupResult.absent()
        return LookupResult.found(row.to_item())

    async def put_item(self, item: dict) -> None:
        async with self._manager.session() as db:
            await db.merge(PostRecord(
                id=item["id"],
                **{name: item[name] for name in MUTABLE_FIELDS},
            ))
            await db.commit()

    async def update_item(self, key: str, fields: dict) -> dict:
        values = {name: fields[name] for name in MUTABLE_FIELDS if name in fields}
        async with self._manager.session() as db:
            result = await db.execute(
                update(PostRecord).where(PostRecord.id == key).values(**values),
            )
            if result.rowcount == 0:
                logger.warning(f"Conditional update rejected: {key} no longer exists")
                raise StorageError(f"item {key} does not exist", "update")
            await db.commit()
            row = await db.get(PostRecord, key, populate_existing=True)
        return row.to_item()

    async def delete_item(self, key: str) -> None:
        async with self._manager.session() as db:
            await db.execute(delete(PostRecord).where(PostRecord.id == key))
            await db.commit()

    async def health_check(self) -> bool:
        return await self._manager.health_check()

    async def close(self) -> None:
        await self._manager.dispose()
