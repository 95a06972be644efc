"""
Wonder Journal Backend — Auth and User Schemas
================================================

Request bodies:
    UserAuth       POST /auth/token
    UserRegister   POST /auth/register
    UserUpdate     PATCH /users/{username}

Responses:
    TokenResponse  {token}
    UserEnvelope   {user}        (detail incl. moment ids)
    UsersEnvelope  {users}
    DeletedResponse {deleted}
"""

from typing import List, Optional, Union

from pydantic import Field

from wonder_journal.schemas.common import CamelModel, StrictCamelModel

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class UserAuth(StrictCamelModel):
    username: str = Field(min_length=1, max_length=25)
    password: str = Field(min_length=1, max_length=64)


class UserRegister(StrictCamelModel):
    username: str = Field(min_length=1, max_length=25)
    password: str = Field(min_length=5, max_length=64)
    first_name: str = Field(min_length=1, max_length=50)
    last_name: str = Field(min_length=1, max_length=50)
    email: str = Field(min_length=6, max_length=60, pattern=EMAIL_PATTERN)


class UserUpdate(StrictCamelModel):
    """Partial update; only the fields the client sends are changed."""
    first_name: Optional[str] = Field(default=None, min_length=1, max_length=50)
    last_name: Optional[str] = Field(default=None, min_length=1, max_length=50)
    password: Optional[str] = Field(default=None, min_length=5, max_length=64)
    email: Optional[str] = Field(default=None, min_length=6, max_length=60, pattern=EMAIL_PATTERN)


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class TokenResponse(CamelModel):
    token: str


class UserOut(CamelModel):
    username: str
    first_name: str
    last_name: str
    email: str
    is_admin: bool = False


class UserDetail(UserOut):
    moments: List[int] = Field(description="Ids of the user's moments")


class UserEnvelope(CamelModel):
    user: Union[UserDetail, UserOut]


class UsersEnvelope(CamelModel):
    users: List[UserOut]


class DeletedResponse(CamelModel):
    deleted: Union[int, str]
