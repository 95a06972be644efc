"""
Wonder Journal Backend — Tag Routes
=====================================

    GET  /tags?name=   → {tags}        logged in
    POST /tags {name}  → 201 {tag}     logged in

Tags are shared by all users; names are stored lower-cased.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from wonder_journal.database import get_db_session
from wonder_journal.middleware.auth import ensure_logged_in
from wonder_journal.schemas.common import ErrorResponse
from wonder_journal.schemas.moment import TagCreate, TagEnvelope, TagsEnvelope
from wonder_journal.services.tag_service import tag_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/tags",
    tags=["Tags"],
    dependencies=[Depends(ensure_logged_in)],
)


@router.get(
    "",
    response_model=TagsEnvelope,
    summary="List tags, optionally by partial name",
)
async def list_tags(
    name: Optional[str] = Query(default=None, max_length=50),
    db: AsyncSession = Depends(get_db_session),
) -> TagsEnvelope:
    return TagsEnvelope(tags=await tag_service.find_all(db, name))


@router.post(
    "",
    status_code=201,
    response_model=TagEnvelope,
    responses={400: {"description": "Invalid or duplicate name", "model": ErrorResponse}},
    summary="Create a tag",
)
async def create_tag(
    data: TagCreate,
    db: AsyncSession = Depends(get_db_session),
) -> TagEnvelope:
    return TagEnvelope(tag=await tag_service.create(db, data.name))
