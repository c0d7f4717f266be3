"""Page Window — pure page/limit arithmetic for scan-based pagination.

Invariants:
    - page >= 1 and limit >= 1, otherwise InvalidArgumentError (caller never touches the store)
    - A page past the end of the data is an empty page, never an error
    - scan_batch_size() falls back to the page limit when no tuning is configured

Design Decisions:
    - Pure functions, not repository methods: the accumulation loop in the
      repository does IO, the window math here is tested without a store
"""

from dataclasses import dataclass
from typing import Sequence, TypeVar

from app.core.errors import InvalidArgumentError

T = TypeVar("T")

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10


@dataclass(frozen=True)
class PageWindow:
    """Half-open slice [skip, stop) of the store's scan order."""
    page: int
    limit: int

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit

    @property
    def stop(self) -> int:
        return self.skip + self.limit

    def is_filled_by(self, accumulated: int) -> bool:
        """True once enough items are buffered to cut this page."""
        return accumulated >= self.stop

    def cut(self, items: Sequence[T]) -> list[T]:
        """Slice the page out of the accumulated items, clipped to their length."""
        if self.skip >= len(items):
            return []
        return list(items[self.skip:self.stop])


def page_window(page: int, limit: int) -> PageWindow:
    """Validate page/limit and build the window. Raises InvalidArgumentError."""
    if page < 1:
        raise InvalidArgumentError(f"invalid page ({page}): must be >= 1", "page")
    if limit < 1:
        raise InvalidArgumentError(f"invalid limit ({limit}): must be >= 1", "limit")
    return PageWindow(page=page, limit=limit)


def scan_batch_size(window: PageWindow, configured: int | None) -> int:
    """Items to request per underlying scan call."""
    if configured and configured > 0:
        return configured
    return window.limit


def parse_page_param(raw: str | None, default: int) -> int:
    """Lenient query-string parse: missing, non-integer or < 1 -> default."""
    if raw is None:
        return default
    try:
        value = int(raw.strip())
    except ValueError:
        return default
    return value if value >= 1 else default
