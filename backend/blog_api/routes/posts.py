"""
Blog API Backend — Posts Route Handlers
=========================================

What:  The posts resource: list, fetch, create, update, delete.
How:   Validates input with Pydantic schemas, delegates to PostStore,
       serializes BlogPost rows into PostResponse.
Who:   Any HTTP client of the blog.

Route Inventory:
    GET    /posts        → 200 {"entries": [...]}
    GET    /posts/{id}   → 200 post | 404
    POST   /posts        → 201 post | 400
    PUT    /posts/{id}   → 200 post | 400 | 404
    DELETE /posts/{id}   → 204      | 404
"""

import logging

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from blog_api.database import get_db_session
from blog_api.exceptions import NotFoundError, ValidationError
from blog_api.schemas.post import (
    ErrorResponse,
    PostCreate,
    PostListResponse,
    PostResponse,
    PostUpdate,
)
from blog_api.services.post_store import parse_post_id, post_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/posts", tags=["Posts"])


@router.get(
    "",
    response_model=PostListResponse,
    responses={500: {"description": "Server error", "model": ErrorResponse}},
    summary="List all blog posts",
)
async def list_posts(db: AsyncSession = Depends(get_db_session)) -> PostListResponse:
    posts = await post_store.list_all(db)
    return PostListResponse(entries=[PostResponse.from_post(post) for post in posts])


@router.get(
    "/{post_id}",
    response_model=PostResponse,
    responses={404: {"description": "Post not found", "model": ErrorResponse}},
    summary="Get a single blog post by ID",
)
async def get_post(post_id: str, db: AsyncSession = Depends(get_db_session)) -> PostResponse:
    """
    Fetch one post.

    A malformed id is reported as 404, the same as an unknown one.
    """
    post = await post_store.find_by_id(db, post_id)
    if post is None:
        raise NotFoundError(resource="post", resource_id=post_id)
    return PostResponse.from_post(post)


@router.post(
    "",
    response_model=PostResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"description": "Missing or empty field", "model": ErrorResponse}},
    summary="Create a blog post",
)
async def create_post(
    payload: PostCreate,
    db: AsyncSession = Depends(get_db_session),
) -> PostResponse:
    """
    Create a post from author, title and content.

    Missing or empty fields are rejected with 400 by the
    RequestValidationError handler before this function runs.
    """
    post = await post_store.create(db, payload.to_document())
    return PostResponse.from_post(post)


@router.put(
    "/{post_id}",
    response_model=PostResponse,
    responses={
        400: {"description": "Invalid body or id mismatch", "model": ErrorResponse},
        404: {"description": "Post not found", "model": ErrorResponse},
    },
    summary="Update fields of a blog post",
)
async def update_post(
    post_id: str,
    payload: PostUpdate,
    db: AsyncSession = Depends(get_db_session),
) -> PostResponse:
    """
    Partially update a post.

    Only author, title and content are applied; omitted fields keep their
    values. A body `id`, when present, must equal the path id.
    """
    # Compare parsed UUIDs so letter case does not matter; malformed ids
    # fall back to their raw text
    if payload.id is not None and (
        (parse_post_id(payload.id) or payload.id) != (parse_post_id(post_id) or post_id)
    ):
        logger.debug("Rejected update: path id %s, body id %s", post_id, payload.id)
        raise ValidationError(
            message=(
                f"Request path id ({post_id}) and request body id "
                f"({payload.id}) must match"
            ),
            field="id",
        )

    post = await post_store.update_by_id(db, post_id, payload.to_patch())
    return PostResponse.from_post(post)


@router.delete(
    "/{post_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={404: {"description": "Post not found", "model": ErrorResponse}},
    summary="Delete a blog post",
)
async def delete_post(post_id: str, db: AsyncSession = Depends(get_db_session)) -> Response:
    """Delete a post. Deleting an unknown or already-deleted id is a 404."""
    await post_store.delete_by_id(db, post_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
