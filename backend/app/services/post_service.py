"""Post Service — business rules and error translation between routes and repository.

Invariants:
    - Validation runs before any store call; invalid input never reaches the repository
    - update/patch/delete confirm existence first; a missing post raises
      ResourceNotFoundError before the mutating call is attempted
    - An empty page from get_all() is success, never an error
    - Only absence becomes ResourceNotFoundError; StorageError propagates unchanged (503)
    - No partial mutation: each operation stops at its first failing step

Design Decisions:
    - Existence check then mutate is two store calls. update() is closed by the
      store's conditional write (lost race -> StorageError); delete() keeps the
      window: a concurrent delete between check and delete is a no-op
    - patch() merges only title/content/author keys present in the body, then
      re-validates the merged record (same rules as create/update)
"""

import logging

from app.core.domain_types import Post, PostFields, merge_fields
from app.core.errors import PostValidationError
from app.core.repository_protocols import PostRepository
from app.schemas.post import validate_post_fields

logger = logging.getLogger(__name__)


class PostService:
    """Orchestrates post reads and writes. Stateless; one instance per request is fine."""

    def __init__(self, repo: PostRepository):
        self._repo = repo

    @staticmethod
    def _validate(fields: PostFields) -> None:
        violations = validate_post_fields(fields)
        if violations:
            logger.warning(
                f"Post validation failed: {[v.describe() for v in violations]}",
                extra={"error_code": "VALIDATION_ERROR"},
            )
            raise PostValidationError(violations)

    async def get_all(self, page: int, limit: int) -> list[Post]:
        return await self._repo.list_posts(page, limit)

    async def get_by_id(self, post_id: str) -> Post:
        return await self._repo.get_by_id(post_id)

    async def create(self, fields: PostFields) -> Post:
        self._validate(fields)
        return await self._repo.create(fields)

    async def update(self, post_id: str, fields: PostFields) -> Post:
        self._validate(fields)
        await self._repo.get_by_id(post_id)
        return await self._repo.update(post_id, fields)

    async def patch(self, post_id: str, updates: dict) -> Post:
        """Partial update: merge present fields into the stored post, then update."""
        current = await self._repo.get_by_id(post_id)
        merged = merge_fields(current.fields, updates)
        self._validate(merged)
        return await self._repo.update(post_id, merged)

    async def delete(self, post_id: str) -> None:
        await self._repo.get_by_id(post_id)
        await self._repo.delete(post_id)
