"""Team API endpoints (public profiles).

GET /api/team - Active team members
GET /api/team/public/{public_id} - Get member by public ID
"""

from __future__ import annotations

import logging
from dataclasses import asdict

from fastapi import APIRouter, Depends
from pydantic import ValidationError

from nexius.api.deps import get_db_session
from nexius.api.errors import MSG_TEAM_MEMBER_NOT_FOUND, InternalServerError, NotFoundError
from nexius.db import repo
from nexius.db.repo import DbSession
from nexius.models.domain import TeamMemberEntity
from nexius.models.types import (
    ErrorResponse,
    ProfileOptions,
    TeamMemberDetail,
    TeamMemberLinks,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["team"], responses={500: {"model": ErrorResponse}})


def _member_to_detail(member: TeamMemberEntity) -> TeamMemberDetail:
    """Convert TeamMemberEntity to TeamMemberDetail.

    Stored links and profile options predate validation, so they are read
    leniently.
    """
    data = asdict(member)
    data["links"] = TeamMemberLinks.from_stored(member.links)
    data["profile_options"] = ProfileOptions.from_stored(member.profile_options)
    return TeamMemberDetail.model_validate(data)


@router.get("/team", response_model=list[TeamMemberDetail])
def list_team_members(session: DbSession = Depends(get_db_session)) -> list[TeamMemberDetail]:
    """List active team members."""
    try:
        members = repo.get_team_members(session)
    except Exception as exc:
        logger.error("Error fetching team members: %s", exc, exc_info=True)
        raise InternalServerError() from exc

    details = []
    for member in members:
        try:
            details.append(_member_to_detail(member))
        except ValidationError as exc:
            logger.warning(
                "Skipping team member %s with invalid profile: %s", member.public_id, exc
            )
    return details


@router.get(
    "/team/public/{public_id}",
    response_model=TeamMemberDetail,
    responses={404: {"model": ErrorResponse}},
)
def get_team_member_by_public_id(
    public_id: str,
    session: DbSession = Depends(get_db_session),
) -> TeamMemberDetail:
    """Get a team member's public profile.

    Raises:
        NotFoundError: 404 if no member has this public ID.
    """
    try:
        member = repo.get_team_member_by_public_id(session, public_id)
        detail = _member_to_detail(member) if member else None
    except Exception as exc:
        logger.error("Error fetching team member by public ID: %s", exc, exc_info=True)
        raise InternalServerError() from exc

    if detail is None:
        raise NotFoundError(MSG_TEAM_MEMBER_NOT_FOUND)

    return detail
