"""
Wonder Journal Backend — User Routes
======================================

    GET    /users                      → {users}           admin
    GET    /users/{username}           → {user}            same user or admin
    PATCH  /users/{username}           → {user}            same user or admin
    DELETE /users/{username}           → {deleted}         same user or admin
    GET    /users/{username}/moments   → {moments}         same user or admin

PATCH accepts any of {firstName, lastName, password, email}; unknown fields
are rejected with 400.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from wonder_journal.database import get_db_session
from wonder_journal.middleware.auth import ensure_admin, ensure_correct_user_or_admin
from wonder_journal.schemas.common import ErrorResponse
from wonder_journal.schemas.moment import MomentsEnvelope
from wonder_journal.schemas.user import (
    DeletedResponse,
    UserEnvelope,
    UsersEnvelope,
    UserUpdate,
)
from wonder_journal.services.user_service import user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Users"])

AUTH_ERRORS = {
    401: {"description": "Missing token or not this user", "model": ErrorResponse},
    404: {"description": "No such user", "model": ErrorResponse},
}


@router.get(
    "",
    response_model=UsersEnvelope,
    dependencies=[Depends(ensure_admin)],
    summary="List all users (admin)",
)
async def list_users(db: AsyncSession = Depends(get_db_session)) -> UsersEnvelope:
    return UsersEnvelope(users=await user_service.find_all(db))


@router.get(
    "/{username}",
    response_model=UserEnvelope,
    dependencies=[Depends(ensure_correct_user_or_admin)],
    responses=AUTH_ERRORS,
    summary="Get a user and the ids of their moments",
)
async def get_user(
    username: str,
    db: AsyncSession = Depends(get_db_session),
) -> UserEnvelope:
    return UserEnvelope(user=await user_service.get(db, username))


@router.patch(
    "/{username}",
    response_model=UserEnvelope,
    dependencies=[Depends(ensure_correct_user_or_admin)],
    responses={**AUTH_ERRORS, 400: {"description": "Invalid body", "model": ErrorResponse}},
    summary="Update a user's profile",
)
async def update_user(
    username: str,
    data: UserUpdate,
    db: AsyncSession = Depends(get_db_session),
) -> UserEnvelope:
    changes = data.model_dump(by_alias=True, exclude_unset=True, exclude_none=True)
    return UserEnvelope(user=await user_service.update(db, username, changes))


@router.delete(
    "/{username}",
    response_model=DeletedResponse,
    dependencies=[Depends(ensure_correct_user_or_admin)],
    responses=AUTH_ERRORS,
    summary="Delete a user and their moments",
)
async def delete_user(
    username: str,
    db: AsyncSession = Depends(get_db_session),
) -> DeletedResponse:
    await user_service.remove(db, username)
    return DeletedResponse(deleted=username)


@router.get(
    "/{username}/moments",
    response_model=MomentsEnvelope,
    dependencies=[Depends(ensure_correct_user_or_admin)],
    responses=AUTH_ERRORS,
    summary="List a user's moments, newest first",
)
async def get_user_moments(
    username: str,
    db: AsyncSession = Depends(get_db_session),
) -> MomentsEnvelope:
    return MomentsEnvelope(moments=await user_service.get_moments(db, username))
