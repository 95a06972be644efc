"""
Wonder Journal Backend — Request ID Middleware
================================================

What:  Tags each request with a short correlation ID.
How:   A client-supplied X-Request-ID is reused only if it is a plain token
       (letters, digits and dashes, at most 64 characters); anything else is
       replaced by a fresh 8-character hex ID. The ID is kept in a ContextVar,
       on request.state, and echoed in the X-Request-ID response header.
Who:   The access log line and the `request_id` field of every error body.
"""

import re
import uuid
from contextvars import ContextVar
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"

# Header values end up in log lines; reject anything that could forge one
VALID_REQUEST_ID = re.compile(r"^[A-Za-z0-9-]{1,64}$")

request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def new_request_id() -> str:
    return uuid.uuid4().hex[:8]


def resolve_request_id(header: Optional[str]) -> str:
    """The client's ID when it is well formed, otherwise a new one."""
    if header and VALID_REQUEST_ID.match(header):
        return header
    return new_request_id()


def current_request_id() -> str:
    """ID of the request being handled, or "" outside a request."""
    return request_id_var.get()


class RequestIDMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)

        response.headers[REQUEST_ID_HEADER] = rid
        return response
