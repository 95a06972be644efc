"""
Wonder Journal Backend — Tag Route Tests
==========================================
"""

import pytest


class TestTags:

    @pytest.mark.asyncio
    async def test_create_normalizes_name(self, seed, test_client, u1_token, auth):
        response = await test_client.post(
            "/tags", json={"name": "  Family "}, headers=auth(u1_token)
        )
        assert response.status_code == 201
        assert response.json()["tag"]["name"] == "family"

    @pytest.mark.asyncio
    async def test_duplicate(self, seed, test_client, u1_token, auth):
        response = await test_client.post(
            "/tags", json={"name": "TRAVEL"}, headers=auth(u1_token)
        )
        assert response.status_code == 400
        assert response.json()["error"]["message"] == "Duplicate tag: travel"

    @pytest.mark.asyncio
    async def test_blank_name(self, seed, test_client, u1_token, auth):
        response = await test_client.post("/tags", json={"name": "   "}, headers=auth(u1_token))
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_list_and_filter(self, seed, test_client, u1_token, auth):
        await test_client.post("/tags", json={"name": "family"}, headers=auth(u1_token))

        response = await test_client.get("/tags", headers=auth(u1_token))
        assert response.status_code == 200
        assert [t["name"] for t in response.json()["tags"]] == ["family", "travel"]

        filtered = await test_client.get("/tags", params={"name": "FAM"}, headers=auth(u1_token))
        assert [t["name"] for t in filtered.json()["tags"]] == ["family"]

    @pytest.mark.asyncio
    async def test_anon(self, seed, test_client):
        response = await test_client.get("/tags")
        assert response.status_code == 401
