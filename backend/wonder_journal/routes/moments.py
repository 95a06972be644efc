"""
Wonder Journal Backend — Moment Routes
========================================

    POST   /moments                         → 201 {moment}      logged in
    GET    /moments?title&text&tag&dateStart&dateEnd&hasMedia
                                            → {moments}         logged in (own moments)
    GET    /moments/{id}                    → {moment}          owner or admin
    PATCH  /moments/{id}                    → {moment}          owner or admin
    DELETE /moments/{id}                    → {deleted}         owner or admin
    POST   /moments/{id}/media              → 201 {media}       owner or admin
    DELETE /moments/{id}/media/{mediaId}    → {deleted}         owner or admin
    POST   /moments/{id}/tags/{tagId}       → 201 {tagged}      owner or admin
    DELETE /moments/{id}/tags/{tagId}       → {untagged}        owner or admin

The owner of a new moment is always the token's user; a `username` in the
body is rejected like any other unknown field.
"""

import datetime
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Path, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from wonder_journal.database import get_db_session
from wonder_journal.exceptions import UnauthorizedError
from wonder_journal.middleware.auth import can_access, ensure_logged_in
from wonder_journal.schemas.common import ErrorResponse
from wonder_journal.schemas.moment import (
    MediaCreate,
    MediaEnvelope,
    MomentCreate,
    MomentEnvelope,
    MomentFilters,
    MomentsEnvelope,
    MomentUpdate,
    TaggedResponse,
    UntaggedResponse,
)
from wonder_journal.schemas.user import DeletedResponse
from wonder_journal.services.moment_service import moment_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/moments", tags=["Moments"])

# Ids are int4 columns; anything larger is rejected with 400 before a query runs
MAX_ID = 2**31 - 1

OWNER_ERRORS = {
    401: {"description": "Missing token or not the owner", "model": ErrorResponse},
    404: {"description": "No such moment", "model": ErrorResponse},
}


def id_path(description: str):
    return Path(ge=1, le=MAX_ID, description=description)


async def ensure_moment_access(
    request: Request,
    moment_id: int = id_path("Moment id"),
    db: AsyncSession = Depends(get_db_session),
) -> Dict[str, Any]:
    """Dependency: the token's user must own moment `moment_id`, or be an admin."""
    user = ensure_logged_in(request)
    owner = await moment_service.get_owner(db, moment_id)
    if not can_access(user, owner):
        logger.warning("%s denied access to moment %s", user["username"], moment_id)
        raise UnauthorizedError()
    return user


@router.post(
    "",
    status_code=201,
    response_model=MomentEnvelope,
    responses={400: {"description": "Invalid body", "model": ErrorResponse}},
    summary="Create a moment for the logged-in user",
)
async def create_moment(
    data: MomentCreate,
    user: Dict[str, Any] = Depends(ensure_logged_in),
    db: AsyncSession = Depends(get_db_session),
) -> MomentEnvelope:
    fields = data.model_dump(exclude_none=True)
    fields["username"] = user["username"]
    return MomentEnvelope(moment=await moment_service.create(db, fields))


@router.get(
    "",
    response_model=MomentsEnvelope,
    summary="Search the logged-in user's moments",
)
async def list_moments(
    title: Optional[str] = Query(default=None),
    text: Optional[str] = Query(default=None),
    tag: Optional[str] = Query(default=None),
    date_start: Optional[datetime.date] = Query(default=None, alias="dateStart"),
    date_end: Optional[datetime.date] = Query(default=None, alias="dateEnd"),
    has_media: Optional[bool] = Query(default=None, alias="hasMedia"),
    user: Dict[str, Any] = Depends(ensure_logged_in),
    db: AsyncSession = Depends(get_db_session),
) -> MomentsEnvelope:
    filters = MomentFilters(
        title=title,
        text=text,
        tag=tag,
        date_start=date_start,
        date_end=date_end,
        has_media=has_media,
    )
    moments = await moment_service.find_all(db, user["username"], filters)
    return MomentsEnvelope(moments=moments)


@router.get(
    "/{moment_id}",
    response_model=MomentEnvelope,
    dependencies=[Depends(ensure_moment_access)],
    responses=OWNER_ERRORS,
    summary="Get a moment with its media and tags",
)
async def get_moment(
    moment_id: int = id_path("Moment id"),
    db: AsyncSession = Depends(get_db_session),
) -> MomentEnvelope:
    return MomentEnvelope(moment=await moment_service.get(db, moment_id))


@router.patch(
    "/{moment_id}",
    response_model=MomentEnvelope,
    dependencies=[Depends(ensure_moment_access)],
    responses={**OWNER_ERRORS, 400: {"description": "Invalid body", "model": ErrorResponse}},
    summary="Update a moment's title, text or date",
)
async def update_moment(
    data: MomentUpdate,
    moment_id: int = id_path("Moment id"),
    db: AsyncSession = Depends(get_db_session),
) -> MomentEnvelope:
    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    return MomentEnvelope(moment=await moment_service.update(db, moment_id, changes))


@router.delete(
    "/{moment_id}",
    response_model=DeletedResponse,
    dependencies=[Depends(ensure_moment_access)],
    responses=OWNER_ERRORS,
    summary="Delete a moment with its media and tag links",
)
async def delete_moment(
    moment_id: int = id_path("Moment id"),
    db: AsyncSession = Depends(get_db_session),
) -> DeletedResponse:
    await moment_service.remove(db, moment_id)
    return DeletedResponse(deleted=moment_id)


# ── Media ─────────────────────────────────────────────────────────────────


@router.post(
    "/{moment_id}/media",
    status_code=201,
    response_model=MediaEnvelope,
    dependencies=[Depends(ensure_moment_access)],
    responses={**OWNER_ERRORS, 400: {"description": "Invalid body", "model": ErrorResponse}},
    summary="Attach a media reference to a moment",
)
async def add_media(
    data: MediaCreate,
    moment_id: int = id_path("Moment id"),
    db: AsyncSession = Depends(get_db_session),
) -> MediaEnvelope:
    media = await moment_service.add_media(db, moment_id, data.type, data.url)
    return MediaEnvelope(media=media)


@router.delete(
    "/{moment_id}/media/{media_id}",
    response_model=DeletedResponse,
    dependencies=[Depends(ensure_moment_access)],
    responses=OWNER_ERRORS,
    summary="Remove a media reference from a moment",
)
async def remove_media(
    moment_id: int = id_path("Moment id"),
    media_id: int = id_path("Media id"),
    db: AsyncSession = Depends(get_db_session),
) -> DeletedResponse:
    await moment_service.remove_media(db, moment_id, media_id)
    return DeletedResponse(deleted=media_id)


# ── Tags ──────────────────────────────────────────────────────────────────


@router.post(
    "/{moment_id}/tags/{tag_id}",
    status_code=201,
    response_model=TaggedResponse,
    dependencies=[Depends(ensure_moment_access)],
    responses={**OWNER_ERRORS, 400: {"description": "Tag already applied", "model": ErrorResponse}},
    summary="Apply an existing tag to a moment",
)
async def apply_tag(
    moment_id: int = id_path("Moment id"),
    tag_id: int = id_path("Tag id"),
    db: AsyncSession = Depends(get_db_session),
) -> TaggedResponse:
    return TaggedResponse(tagged=await moment_service.apply_tag(db, moment_id, tag_id))


@router.delete(
    "/{moment_id}/tags/{tag_id}",
    response_model=UntaggedResponse,
    dependencies=[Depends(ensure_moment_access)],
    responses=OWNER_ERRORS,
    summary="Remove a tag from a moment",
)
async def remove_tag(
    moment_id: int = id_path("Moment id"),
    tag_id: int = id_path("Tag id"),
    db: AsyncSession = Depends(get_db_session),
) -> UntaggedResponse:
    return UntaggedResponse(untagged=await moment_service.remove_tag(db, moment_id, tag_id))
