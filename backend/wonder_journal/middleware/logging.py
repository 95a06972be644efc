"""
Wonder Journal Backend — Access Log Middleware
================================================

What:  One access log line per request, naming the journal user behind it.
How:   Runs inside AuthenticateJWTMiddleware, so `request.state.user` is
       already set; anonymous requests are logged as "-". The level follows
       the status code (5xx ERROR, 4xx WARNING, otherwise INFO).

Example:
    GET /moments/3 200 4.2ms user=u1 [a1b2c3d4] from 127.0.0.1

Logged:      method, path, status, duration, username, admin flag, client IP,
             request ID
Not logged:  request bodies (passwords, journal text) and Authorization headers
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from wonder_journal.middleware.auth import current_user
from wonder_journal.middleware.request_id import current_request_id

logger = logging.getLogger("wonder_journal.access")

ANONYMOUS = "-"


def level_for(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):

    # Polled by load balancers
    QUIET_PATHS = {"/health"}

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in self.QUIET_PATHS:
            return await call_next(request)

        user = current_user(request) or {}
        username = user.get("username") or ANONYMOUS
        client_ip = request.client.host if request.client else "unknown"

        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000

        rid = current_request_id()
        logger.log(
            level_for(response.status_code),
            "%s %s %d %.1fms user=%s [%s] from %s",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
            username,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": request.method,
                "path": request.url.path,
                "status": response.status_code,
                "duration_ms": round(duration_ms, 2),
                "username": username,
                "is_admin": bool(user.get("isAdmin")),
                "client_ip": client_ip,
            },
        )
        return response
