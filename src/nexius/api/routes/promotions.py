"""Promotions API endpoint.

GET /api/promotions/slug/{slug} - Get promotion by slug
"""

from __future__ import annotations

import logging
from dataclasses import asdict

from fastapi import APIRouter, Depends

from nexius.api.deps import get_db_session
from nexius.api.errors import MSG_PROMOTION_NOT_FOUND, InternalServerError, NotFoundError
from nexius.db import repo
from nexius.db.repo import DbSession
from nexius.models.domain import PromotionEntity
from nexius.models.types import ErrorResponse, PromotionDetail
from nexius.promotions import get_time_remaining, is_promotion_valid

logger = logging.getLogger(__name__)

router = APIRouter(tags=["promotions"], responses={500: {"model": ErrorResponse}})


def _promotion_to_detail(promotion: PromotionEntity) -> PromotionDetail:
    """Convert PromotionEntity to PromotionDetail with its countdown."""
    return PromotionDetail.model_validate(
        {
            **asdict(promotion),
            "is_valid": is_promotion_valid(promotion),
            "time_remaining": get_time_remaining(promotion.end_date),
        }
    )


@router.get(
    "/promotions/slug/{slug}",
    response_model=PromotionDetail,
    responses={404: {"model": ErrorResponse}},
)
def get_promotion_by_slug(
    slug: str,
    session: DbSession = Depends(get_db_session),
) -> PromotionDetail:
    """Get promotion by slug.

    Raises:
        NotFoundError: 404 if no promotion has this slug.
        InternalServerError: 500 if the lookup fails.
    """
    try:
        promotion = repo.get_promotion_by_slug(session, slug)
    except Exception as exc:
        logger.error("Error fetching promotion by slug: %s", exc, exc_info=True)
        raise InternalServerError() from exc

    if promotion is None:
        raise NotFoundError(MSG_PROMOTION_NOT_FOUND)

    return _promotion_to_detail(promotion)
