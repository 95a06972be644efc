"""
Wonder Journal Backend — API Client Tests
===========================================

What:  Tests for JournalApi request building and error normalization.
How:   httpx.MockTransport answers every request in-process; the handler
       records what the client sent.

What we test:
    ✅ Bearer token header, GET query params vs JSON bodies
    ✅ Each endpoint method unwraps its response envelope
    ✅ ApiError.messages is always a list
"""

import json

import httpx
import pytest

from wonder_journal.client import ApiError, JournalApi


class Recorder:
    """MockTransport handler returning canned responses by (method, path)."""

    def __init__(self, routes):
        self.routes = routes
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        status, body = self.routes[(request.method, request.url.path)]
        return httpx.Response(status, json=body)


def make_api(routes, token=None):
    recorder = Recorder(routes)
    api = JournalApi(
        base_url="http://journal.test",
        token=token,
        transport=httpx.MockTransport(recorder),
    )
    return api, recorder


class TestJournalApiRequests:

    @pytest.mark.asyncio
    async def test_login_posts_json(self):
        api, recorder = make_api({("POST", "/auth/token"): (200, {"token": "tok"})})
        async with api:
            token = await api.login({"username": "u1", "password": "password1"})

        assert token == "tok"
        sent = recorder.requests[0]
        assert json.loads(sent.content) == {"username": "u1", "password": "password1"}
        assert "authorization" not in sent.headers

    @pytest.mark.asyncio
    async def test_token_sent_after_set_token(self):
        api, recorder = make_api({("GET", "/users/u1"): (200, {"user": {"username": "u1"}})})
        async with api:
            api.set_token("abc")
            user = await api.get_user("u1")

        assert user == {"username": "u1"}
        assert recorder.requests[0].headers["authorization"] == "Bearer abc"

    @pytest.mark.asyncio
    async def test_get_sends_query_params(self):
        api, recorder = make_api(
            {("GET", "/moments"): (200, {"moments": [{"id": 1}]})}, token="abc"
        )
        async with api:
            moments = await api.moment_get_all({"tag": "travel", "hasMedia": True, "title": None})

        assert moments == [{"id": 1}]
        params = recorder.requests[0].url.params
        assert params["tag"] == "travel"
        assert params["hasMedia"] == "true"
        assert "title" not in params
        assert recorder.requests[0].content == b""

    @pytest.mark.asyncio
    async def test_envelopes_unwrapped(self):
        api, recorder = make_api({
            ("POST", "/auth/register"): (201, {"token": "new"}),
            ("PATCH", "/users/u1"): (200, {"user": {"firstName": "New"}}),
            ("POST", "/moments"): (201, {"moment": {"id": 3}}),
            ("GET", "/moments/3"): (200, {"moment": {"id": 3, "media": []}}),
        }, token="abc")
        async with api:
            assert await api.signup({"username": "new"}) == "new"
            assert await api.update_user("u1", {"firstName": "New"}) == {"firstName": "New"}
            assert await api.moment_create({"title": "x"}) == {"id": 3}
            assert (await api.moment_get(3))["media"] == []

        assert [r.method for r in recorder.requests] == ["POST", "PATCH", "POST", "GET"]


class TestJournalApiErrors:

    @pytest.mark.asyncio
    async def test_single_message_wrapped_in_list(self):
        api, _ = make_api({
            ("GET", "/moments/9"): (404, {"error": {"message": "No moment: 9", "status": 404}}),
        })
        async with api:
            with pytest.raises(ApiError) as exc_info:
                await api.moment_get(9)

        assert exc_info.value.messages == ["No moment: 9"]
        assert exc_info.value.status == 404

    @pytest.mark.asyncio
    async def test_message_list_kept(self):
        messages = ["title: Field required", "date: Input should be a valid date"]
        api, _ = make_api({
            ("POST", "/moments"): (400, {"error": {"message": messages, "status": 400}}),
        })
        async with api:
            with pytest.raises(ApiError) as exc_info:
                await api.moment_create({})

        assert exc_info.value.messages == messages

    @pytest.mark.asyncio
    async def test_non_json_error_body(self):
        def handler(request):
            return httpx.Response(502, text="Bad Gateway")

        async with JournalApi(
            base_url="http://journal.test", transport=httpx.MockTransport(handler)
        ) as api:
            with pytest.raises(ApiError) as exc_info:
                await api.get_user("u1")

        assert exc_info.value.messages == ["Bad Gateway"]
