"""
Wonder Journal Backend — Authentication Middleware and Route Guards
=====================================================================

What:  Reads the bearer token on every request, and provides the FastAPI
       dependencies routes use to require a login, a specific user, or an
       admin.
How:   AuthenticateJWTMiddleware stores the verified token payload on
       `request.state.user`. A missing or invalid token is NOT an error at
       this stage; `request.state.user` is simply None. The guards below
       raise UnauthorizedError when their condition is not met.

Guards (use with Depends):
    ensure_logged_in               any valid token
    ensure_correct_user_or_admin   token user == {username} path param, or admin
    ensure_admin                   token with isAdmin
"""

import logging
import re
from typing import Any, Dict, Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from wonder_journal.exceptions import UnauthorizedError
from wonder_journal.helpers.security import decode_token

logger = logging.getLogger(__name__)

BEARER_PREFIX = re.compile(r"^[Bb]earer ")


def token_from_header(header: Optional[str]) -> Optional[str]:
    """Strip the `Bearer ` / `bearer ` prefix from an Authorization header."""
    if not header:
        return None
    return BEARER_PREFIX.sub("", header).strip() or None


class AuthenticateJWTMiddleware(BaseHTTPMiddleware):
    """
    If a token was provided, verify it and store its payload on
    `request.state.user` (this includes the username).
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request.state.user = None

        token = token_from_header(request.headers.get("Authorization"))
        if token:
            try:
                request.state.user = decode_token(token)
            except UnauthorizedError as e:
                logger.debug("Ignoring invalid bearer token: %s", e.context.get("reason"))

        return await call_next(request)


def current_user(request: Request) -> Optional[Dict[str, Any]]:
    """Token payload for this request, or None."""
    return getattr(request.state, "user", None)


def ensure_logged_in(request: Request) -> Dict[str, Any]:
    """Dependency: the request must carry a valid token."""
    user = current_user(request)
    if not (user and user.get("username")):
        raise UnauthorizedError()
    return user


def ensure_admin(request: Request) -> Dict[str, Any]:
    """Dependency: the token must belong to an admin."""
    user = ensure_logged_in(request)
    if not user.get("isAdmin"):
        raise UnauthorizedError()
    return user


def ensure_correct_user_or_admin(username: str, request: Request) -> Dict[str, Any]:
    """
    Dependency: the token's user must match the `username` route parameter,
    unless the token belongs to an admin.
    """
    user = ensure_logged_in(request)
    if user["username"] != username and not user.get("isAdmin"):
        raise UnauthorizedError()
    return user


def can_access(user: Dict[str, Any], owner: str) -> bool:
    """Whether the token's user may act on a resource owned by `owner`."""
    return user.get("username") == owner or bool(user.get("isAdmin"))
