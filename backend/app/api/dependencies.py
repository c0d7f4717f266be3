"""Route Dependencies — per-request wiring of store -> repository -> service.

Invariants:
    - The store and settings are process-wide (app.state); repository and service are built per request
    - Tests replace get_store via app.dependency_overrides

Design Decisions:
    - FastAPI Depends over module globals: overridable without monkeypatching
"""

from fastapi import Depends, Request

from app.config import Settings
from app.core.repository_protocols import KeyValueStore
from app.services.post_repository import ScanPostRepository
from app.services.post_service import PostService


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> KeyValueStore:
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise RuntimeError("Store not initialized")
    return store


def get_post_service(
    store: KeyValueStore = Depends(get_store),
    settings: Settings = Depends(get_app_settings),
) -> PostService:
    repo = ScanPostRepository(
        store,
        scan_batch_size=settings.scan_batch_size,
        timeout_seconds=settings.store_timeout_seconds,
    )
    return PostService(repo)
