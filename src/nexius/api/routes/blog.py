"""Blog API endpoints.

GET /api/blog/categories - Categories of published posts
GET /api/blog/tags - Tags of published posts
GET /api/blog/slug/{slug} - Get post by slug
"""

from __future__ import annotations

import logging
from dataclasses import asdict

from fastapi import APIRouter, Depends

from nexius.api.deps import get_db_session
from nexius.api.errors import MSG_BLOG_POST_NOT_FOUND, InternalServerError, NotFoundError
from nexius.db import repo
from nexius.db.repo import DbSession
from nexius.models.domain import BlogPostEntity
from nexius.models.types import BlogPostDetail, ErrorResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["blog"], responses={500: {"model": ErrorResponse}})


def _post_to_detail(post: BlogPostEntity) -> BlogPostDetail:
    """Convert BlogPostEntity to BlogPostDetail."""
    return BlogPostDetail.model_validate(asdict(post))


@router.get("/blog/categories", response_model=list[str])
def get_blog_categories(session: DbSession = Depends(get_db_session)) -> list[str]:
    """List categories used by published posts."""
    try:
        return repo.get_blog_categories(session)
    except Exception as exc:
        logger.error("Error fetching blog categories: %s", exc, exc_info=True)
        raise InternalServerError() from exc


@router.get("/blog/tags", response_model=list[str])
def get_blog_tags(session: DbSession = Depends(get_db_session)) -> list[str]:
    """List tags used by published posts."""
    try:
        return repo.get_blog_tags(session)
    except Exception as exc:
        logger.error("Error fetching blog tags: %s", exc, exc_info=True)
        raise InternalServerError() from exc


@router.get(
    "/blog/slug/{slug}",
    response_model=BlogPostDetail,
    responses={404: {"model": ErrorResponse}},
)
def get_blog_post_by_slug(
    slug: str,
    session: DbSession = Depends(get_db_session),
) -> BlogPostDetail:
    """Get blog post by slug.

    Args:
        slug: URL slug of the post.
        session: Database session (injected).

    Returns:
        BlogPostDetail for the post.

    Raises:
        NotFoundError: 404 if no post has this slug.
        InternalServerError: 500 if the lookup fails.
    """
    try:
        post = repo.get_blog_post_by_slug(session, slug)
    except Exception as exc:
        logger.error("Error fetching blog post by slug: %s", exc, exc_info=True)
        raise InternalServerError() from exc

    if post is None:
        raise NotFoundError(MSG_BLOG_POST_NOT_FOUND)

    return _post_to_detail(post)
