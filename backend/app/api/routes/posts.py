"""Posts Routes — CRUD endpoints for the post resource.

Invariants:
    - Routes hold no business rules: parse, delegate to PostService, shape the response
    - Pagination query params are lenient: missing, unparseable or < 1 -> defaults (1/10)
    - Errors are raised as PostsApiError and rendered by api/error_handlers.py
    - DELETE answers 204 with an empty body

Design Decisions:
    - page/limit read as raw strings: a bad value falls back to the default instead of a 400
    - PATCH body is a plain JSON object; the service merges the known keys
"""

import logging

from fastapi import APIRouter, Body, Depends, Query, Response, status

from app.api.dependencies import get_post_service
from app.core.paginate import DEFAULT_LIMIT, DEFAULT_PAGE, parse_page_param
from app.schemas.post import PostBody, PostResponse
from app.services.post_service import PostService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/v1/posts", tags=["posts"])


@router.get("", response_model=list[PostResponse])
async def list_posts(
    page: str | None = Query(None),
    limit: str | None = Query(None),
    service: PostService = Depends(get_post_service),
):
    """List posts, page/limit addressed."""
    posts = await service.get_all(
        parse_page_param(page, DEFAULT_PAGE),
        parse_page_param(limit, DEFAULT_LIMIT),
    )
    return [PostResponse.from_post(p) for p in posts]


@router.get("/{post_id}", response_model=PostResponse)
async def get_post(
    post_id: str, service: PostService = Depends(get_post_service),
):
    post = await service.get_by_id(post_id)
    return PostResponse.from_post(post)


@router.post(
    "", response_model=PostResponse, status_code=status.HTTP_201_CREATED,
)
async def create_post(
    body: PostBody, service: PostService = Depends(get_post_service),
):
    """Create a post. The id is always generated server-side."""
    post = await service.create(body.to_fields())
    return PostResponse.from_post(post)


@router.put("/{post_id}", response_model=PostResponse)
async def replace_post(
    post_id: str,
    body: PostBody,
    service: PostService = Depends(get_post_service),
):
    """Full replace of title, content and author."""
    post = await service.update(post_id, body.to_fields())
    return PostResponse.from_post(post)


@router.patch("/{post_id}", response_model=PostResponse)
async def patch_post(
    post_id: str,
    updates: dict = Body(...),
    service: PostService = Depends(get_post_service),
):
    """Partial update: only title/content/author keys present are applied."""
    post = await service.patch(post_id, updates)
    return PostResponse.from_post(post)


@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_post(
    post_id: str, service: PostService = Depends(get_post_service),
):
    await service.delete(post_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
