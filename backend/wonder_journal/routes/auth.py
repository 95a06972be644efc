"""
Wonder Journal Backend — Auth Routes
======================================

What:  Issue bearer tokens.
    POST /auth/token     {username, password}                      → {token}
    POST /auth/register  {username, password, firstName, lastName, email} → 201 {token}

Both routes are public. Registered users are never admins.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from wonder_journal.database import get_db_session
from wonder_journal.helpers.security import create_token
from wonder_journal.schemas.common import ErrorResponse
from wonder_journal.schemas.user import TokenResponse, UserAuth, UserRegister
from wonder_journal.services.user_service import user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post(
    "/token",
    response_model=TokenResponse,
    responses={
        400: {"description": "Invalid body", "model": ErrorResponse},
        401: {"description": "Invalid username/password", "model": ErrorResponse},
    },
    summary="Log in and get a token",
)
async def login(
    credentials: UserAuth,
    db: AsyncSession = Depends(get_db_session),
) -> TokenResponse:
    user = await user_service.authenticate(db, credentials.username, credentials.password)
    return TokenResponse(token=create_token(user.model_dump()))


@router.post(
    "/register",
    status_code=201,
    response_model=TokenResponse,
    responses={
        400: {"description": "Invalid body or duplicate username", "model": ErrorResponse},
    },
    summary="Create an account and get a token",
)
async def register(
    data: UserRegister,
    db: AsyncSession = Depends(get_db_session),
) -> TokenResponse:
    user = await user_service.register(db, **data.model_dump(), is_admin=False)
    return TokenResponse(token=create_token(user.model_dump()))
