"""Post Service — validation first, existence check before mutation, error translation.

Tests cover:
    - Invalid posts never reach the store
    - get_by_id/update/patch/delete on an absent id raise ResourceNotFoundError
      before any mutating store call
    - Store failures propagate as StorageError, not NotFound
    - Create then get round-trips title/content/author with a generated id
"""

import pytest

from app.core.domain_types import PostFields
from app.core.errors import (
    PostValidationError, ResourceNotFoundError, StorageError,
)
from app.services.post_repository import ScanPostRepository
from app.services.post_service import PostService


@pytest.fixture
def service(store):
    return PostService(ScanPostRepository(store))


async def test_get_all_empty_page_is_success(service):
    assert await service.get_all(3, 10) == []


async def test_create_then_get_round_trips(service):
    created = await service.create(PostFields("Valid", "c", "a"))
    fetched = await service.get_by_id(created.id)
    assert created.id
    assert fetched.fields == PostFields("Valid", "c", "a")


@pytest.mark.parametrize("title", ["", "Hi", "ab"])
async def test_create_with_bad_title_writes_nothing(service, store, title):
    with pytest.raises(PostValidationError) as exc_info:
        await service.create(PostFields(title, "c", "a"))
    assert exc_info.value.violations[0].field == "title"
    assert store.calls == []


async def test_create_missing_author_writes_nothing(service, store):
    with pytest.raises(PostValidationError):
        await service.create(PostFields("Valid", "c", ""))
    assert store.calls == []


async def test_get_by_id_absent_is_not_found(service):
    with pytest.raises(ResourceNotFoundError) as exc_info:
        await service.get_by_id("missing")
    assert (exc_info.value.resource_type, exc_info.value.resource_id) == ("Post", "missing")


async def test_get_by_id_store_failure_is_storage_error(service, store):
    store.fail_on.add("get_item")
    with pytest.raises(StorageError):
        await service.get_by_id("p1")


async def test_update_validates_before_existence_check(service, store):
    with pytest.raises(PostValidationError):
        await service.update("missing", PostFields("no", "c", "a"))
    assert store.calls == []


async def test_update_absent_raises_not_found_without_write(service, store):
    with pytest.raises(ResourceNotFoundError):
        await service.update("missing", PostFields("Valid", "c", "a"))
    assert store.mutating_calls == []


async def test_update_existing_replaces_fields(service, store):
    (key,) = store.seed(1)
    post = await service.update(key, PostFields("Renamed", "Body", "Bob"))
    assert post.fields == PostFields("Renamed", "Body", "Bob")
    assert store.calls == ["get_item", "update_item"]


async def test_update_lost_race_surfaces_storage_error(service, store):
    (key,) = store.seed(1)
    original_update = store.update_item

    async def _deleted_meanwhile(k, fields):
        store.items.pop(k)
        return await original_update(k, fields)

    store.update_item = _deleted_meanwhile
    with pytest.raises(StorageError):
        await service.update(key, PostFields("Renamed", "c", "a"))


async def test_patch_merges_present_fields(service, store):
    (key,) = store.seed(1)
    post = await service.patch(key, {"content": "Patched"})
    assert post.title == "Title 0"
    assert post.content == "Patched"
    assert post.author == "seed"


async def test_patch_revalidates_merged_record(service, store):
    (key,) = store.seed(1)
    with pytest.raises(PostValidationError):
        await service.patch(key, {"title": "x"})
    assert store.mutating_calls == []


async def test_patch_absent_raises_not_found(service, store):
    with pytest.raises(ResourceNotFoundError):
        await service.patch("missing", {"title": "Valid"})
    assert store.mutating_calls == []


async def test_delete_absent_raises_not_found_without_delete(service, store):
    with pytest.raises(ResourceNotFoundError):
        await service.delete("missing")
    assert store.mutating_calls == []


async def test_delete_existing_then_get_is_not_found(service, store):
    created = await service.create(PostFields("Valid", "c", "a"))
    await service.delete(created.id)
    with pytest.raises(ResourceNotFoundError):
        await service.get_by_id(created.id)
