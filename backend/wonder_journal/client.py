"""
Wonder Journal Backend — API Client
=====================================

What:  Async client for the Wonder Journal REST API, used by scripts and
       other services that talk to a running backend.
How:   One httpx.AsyncClient per JournalApi instance. Every request carries
       `Authorization: Bearer <token>` once set_token() has been called.
       Error responses are normalized to ApiError with a list of messages,
       whether the server sent one message or many.

Example:
    async with JournalApi() as api:
        api.set_token(await api.login({"username": "u1", "password": "pw123"}))
        moment = await api.moment_create({"title": "First snow", "text": "..."})
"""

import logging
from typing import Any, Dict, List, Mapping, Optional

import httpx

from wonder_journal.config import settings

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """An error response from the API; `messages` is always a list."""

    def __init__(self, messages: List[str], status: Optional[int] = None):
        self.messages = messages
        self.status = status
        super().__init__("; ".join(messages))


def error_messages(response: httpx.Response) -> List[str]:
    """Pull `error.message` out of an error body, always as a list."""
    try:
        message = response.json()["error"]["message"]
    except (ValueError, KeyError, TypeError):
        message = response.text or response.reason_phrase
    return message if isinstance(message, list) else [message]


class JournalApi:
    """
    A collection of methods used to get/send to the API.

    Args:
        base_url:  API root; defaults to JOURNAL_API_BASE_URL.
        token:     bearer token, if already known.
        transport: custom httpx transport (tests use httpx.MockTransport).
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 30.0,
    ):
        self.token = token
        self.client = httpx.AsyncClient(
            base_url=base_url or settings.journal_api_base_url,
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "JournalApi":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        await self.client.aclose()

    def set_token(self, token: Optional[str]) -> None:
        self.token = token

    async def request(
        self,
        endpoint: str,
        data: Optional[Mapping[str, Any]] = None,
        method: str = "get",
    ) -> Dict[str, Any]:
        """
        Send a request and return the decoded JSON body.

        GET sends `data` as query parameters; other methods send it as the
        JSON body.

        Raises:
            ApiError: the server answered with a 4xx/5xx status.
        """
        method = method.upper()
        headers = {"Authorization": f"Bearer {self.token}"} if self.token else {}
        data = dict(data or {})

        logger.debug("API call: %s %s", method, endpoint)
        if method == "GET":
            params = {k: _query_value(v) for k, v in data.items() if v is not None}
            response = await self.client.request(
                method, f"/{endpoint}", params=params, headers=headers
            )
        else:
            response = await self.client.request(
                method, f"/{endpoint}", json=data, headers=headers
            )

        if response.is_error:
            messages = error_messages(response)
            logger.warning("API error %d on %s %s: %s", response.status_code, method, endpoint, messages)
            raise ApiError(messages, status=response.status_code)

        return response.json()

    # ── Individual API routes ─────────────────────────────────────────────

    async def login(self, credentials: Mapping[str, str]) -> str:
        res = await self.request(
            "auth/token",
            {"username": credentials["username"], "password": credentials["password"]},
            "post",
        )
        return res["token"]

    async def signup(self, data: Mapping[str, Any]) -> str:
        res = await self.request("auth/register", data, "post")
        return res["token"]

    async def get_user(self, username: str) -> Dict[str, Any]:
        res = await self.request(f"users/{username}")
        return res["user"]

    async def update_user(self, username: str, data: Mapping[str, Any]) -> Dict[str, Any]:
        """`data` may include {firstName, lastName, password, email}."""
        res = await self.request(f"users/{username}", data, "patch")
        return res["user"]

    async def moment_create(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        res = await self.request("moments", data, "post")
        return res["moment"]

    async def moment_get(self, moment_id: int) -> Dict[str, Any]:
        res = await self.request(f"moments/{moment_id}")
        return res["moment"]

    async def moment_get_all(
        self, filters: Optional[Mapping[str, Any]] = None
    ) -> List[Dict[str, Any]]:
        """Filters: title, text, tag, dateStart, dateEnd, hasMedia."""
        res = await self.request("moments", filters)
        return res["moments"]


def _query_value(value: Any) -> Any:
    # FastAPI parses "true"/"false" for bool query parameters
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
