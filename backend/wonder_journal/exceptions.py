"""
Wonder Journal Backend — Custom Exception Hierarchy
=====================================================

What:  Application-specific exceptions, each bound to an HTTP status code.
How:   Each exception carries a message (string or list of strings) and an
       optional context dict. Global exception handlers (registered in
       main.py) turn them into `{"error": {"message", "status"}}` responses.
Who:   Raised by services, auth guards and middleware.

Exception Hierarchy:
    JournalError (base)          → 500
    ├── BadRequestError          → 400 Bad Request
    ├── UnauthorizedError        → 401 Unauthorized
    ├── NotFoundError            → 404 Not Found
    ├── RateLimitExceededError   → 429 Too Many Requests
    └── DatabaseError            → 500 Internal Server Error
"""

from typing import Any, Dict, List, Optional, Union

Message = Union[str, List[str]]


class JournalError(Exception):
    """
    Base exception for all Wonder Journal application errors.

    Attributes:
        message:  User-facing error description, or a list of them
                  (safe to return in the API response)
        status:   HTTP status code used by the global handler
        context:  Additional debug info (logged but NOT returned to client)
    """

    status: int = 500

    def __init__(
        self,
        message: Message = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(message if isinstance(message, str) else "; ".join(message))


class BadRequestError(JournalError):
    """
    Raised when client input is invalid or conflicts with existing data.

    When:  Payload validation failures (one message per failing field),
           empty partial updates, duplicate usernames / tags.
    HTTP:  400 Bad Request
    """

    status = 400

    def __init__(
        self,
        message: Message = "Bad Request",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class UnauthorizedError(JournalError):
    """
    Raised when the request lacks a valid token, or the token's user may not
    act on the requested resource.

    HTTP:  401 Unauthorized
    """

    status = 401

    def __init__(
        self,
        message: Message = "Unauthorized",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(JournalError):
    """
    Raised when a requested resource does not exist.

    When:  Unknown username, moment id, media id or tag id.
    HTTP:  404 Not Found

    SQLAlchemy returns None for missing rows; services convert that into
    this exception so routes stay free of status-code logic.
    """

    status = 404

    def __init__(
        self,
        message: Message = "Not Found",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(JournalError):
    """
    Raised when database operations fail unexpectedly.

    HTTP:  500 Internal Server Error

    The message returned to the client is always generic. Details such as
    the SQL error type are kept in `context` and logged server-side only.
    """

    status = 500

    def __init__(
        self,
        message: Message = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(JournalError):
    """
    Raised when a client exceeds the per-IP request rate limit.

    HTTP:  429 Too Many Requests, with a Retry-After header.
    """

    status = 429

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Too many requests. Please wait {retry_after} seconds before retrying."
        )
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after
