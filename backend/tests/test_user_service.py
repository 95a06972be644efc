"""
Wonder Journal Backend — User Service Unit Tests
==================================================

What:  Tests for UserService business logic with a mocked AsyncSession.

What we test:
    ✅ authenticate: success, unknown user, wrong password (same error)
    ✅ register: duplicate username, password hashed before insert
    ✅ get / update / remove: missing user raises NotFoundError
    ✅ update: empty data rejected, password re-hashed, camelCase mapped
    ✅ SQLAlchemy failures surface as DatabaseError
"""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from wonder_journal.exceptions import (
    BadRequestError,
    DatabaseError,
    NotFoundError,
    UnauthorizedError,
)
from wonder_journal.helpers.security import hash_password, verify_password
from wonder_journal.services.user_service import UserService


def make_user(**overrides):
    data = {
        "username": "u1",
        "password": hash_password("password1"),
        "first_name": "U1F",
        "last_name": "U1L",
        "email": "u1@email.com",
        "is_admin": False,
    }
    data.update(overrides)
    return SimpleNamespace(**data)


def scalar_result(value):
    result = MagicMock()
    result.scalar_one_or_none.return_value = value
    return result


class TestUserServiceAuthenticate:

    def setup_method(self):
        self.service = UserService()

    @pytest.mark.asyncio
    async def test_authenticate_success(self, mock_db_session):
        mock_db_session.execute.return_value = scalar_result(make_user())

        user = await self.service.authenticate(mock_db_session, "u1", "password1")

        assert user.username == "u1"
        assert user.first_name == "U1F"
        assert "password" not in user.model_dump()

    @pytest.mark.asyncio
    async def test_authenticate_wrong_password(self, mock_db_session):
        mock_db_session.execute.return_value = scalar_result(make_user())

        with pytest.raises(UnauthorizedError, match="Invalid username/password"):
            await self.service.authenticate(mock_db_session, "u1", "wrong")

    @pytest.mark.asyncio
    async def test_authenticate_unknown_user(self, mock_db_session):
        mock_db_session.execute.return_value = scalar_result(None)

        with pytest.raises(UnauthorizedError, match="Invalid username/password"):
            await self.service.authenticate(mock_db_session, "nope", "password1")


class TestUserServiceRegister:

    def setup_method(self):
        self.service = UserService()

    @pytest.mark.asyncio
    async def test_register_duplicate_username(self, mock_db_session):
        mock_db_session.execute.return_value = scalar_result(make_user())

        with pytest.raises(BadRequestError, match="Duplicate username: u1"):
            await self.service.register(
                mock_db_session,
                username="u1",
                password="password1",
                first_name="F",
                last_name="L",
                email="new@email.com",
            )
        mock_db_session.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_register_hashes_password(self, mock_db_session):
        mock_db_session.execute.return_value = scalar_result(None)

        user = await self.service.register(
            mock_db_session,
            username="new",
            password="password1",
            first_name="F",
            last_name="L",
            email="new@email.com",
        )

        added = mock_db_session.add.call_args.args[0]
        assert added.password != "password1"
        assert verify_password("password1", added.password)
        assert user.username == "new"
        assert user.is_admin is False
        mock_db_session.flush.assert_awaited_once()


class TestUserServiceGetUpdateRemove:

    def setup_method(self):
        self.service = UserService()

    @pytest.mark.asyncio
    async def test_get_not_found(self, mock_db_session):
        mock_db_session.execute.return_value = scalar_result(None)

        with pytest.raises(NotFoundError, match="No user: nope"):
            await self.service.get(mock_db_session, "nope")

    @pytest.mark.asyncio
    async def test_get_includes_moment_ids(self, mock_db_session):
        ids = MagicMock()
        ids.scalars.return_value.all.return_value = [3, 7]
        mock_db_session.execute.side_effect = [scalar_result(make_user()), ids]

        user = await self.service.get(mock_db_session, "u1")

        assert user.moments == [3, 7]
        assert user.email == "u1@email.com"

    @pytest.mark.asyncio
    async def test_update_empty_data(self, mock_db_session):
        with pytest.raises(BadRequestError, match="No data"):
            await self.service.update(mock_db_session, "u1", {})
        mock_db_session.execute.assert_not_called()

    @pytest.mark.asyncio
    async def test_update_not_found(self, mock_db_session):
        mock_db_session.execute.return_value = scalar_result(None)

        with pytest.raises(NotFoundError, match="No user: nope"):
            await self.service.update(mock_db_session, "nope", {"firstName": "New"})

    @pytest.mark.asyncio
    async def test_update_maps_fields_and_hashes_password(self, mock_db_session):
        mock_db_session.execute.return_value = scalar_result(make_user(first_name="New"))

        user = await self.service.update(
            mock_db_session, "u1", {"firstName": "New", "password": "newpass1"}
        )

        assert user.first_name == "New"
        stmt = mock_db_session.execute.call_args.args[0]
        params = stmt.compile().params
        assert params["first_name"] == "New"
        assert params["password"] != "newpass1"
        assert verify_password("newpass1", params["password"])

    @pytest.mark.asyncio
    async def test_remove_not_found(self, mock_db_session):
        mock_db_session.execute.return_value = scalar_result(None)

        with pytest.raises(NotFoundError):
            await self.service.remove(mock_db_session, "nope")

    @pytest.mark.asyncio
    async def test_remove(self, mock_db_session):
        mock_db_session.execute.return_value = scalar_result("u1")

        assert await self.service.remove(mock_db_session, "u1") is None


class TestUserServiceDatabaseErrors:

    def setup_method(self):
        self.service = UserService()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method,args", [
        ("authenticate", ("u1", "password1")),
        ("find_all", ()),
        ("get", ("u1",)),
        ("remove", ("u1",)),
    ])
    async def test_wrapped(self, mock_db_session, method, args):
        mock_db_session.execute.side_effect = OperationalError(
            "SELECT 1", {}, Exception("connection lost")
        )
        with pytest.raises(DatabaseError):
            await getattr(self.service, method)(mock_db_session, *args)

    @pytest.mark.asyncio
    async def test_get_moment_ids_failure(self, mock_db_session):
        mock_db_session.execute.side_effect = [
            scalar_result(make_user()),
            OperationalError("SELECT moments.id", {}, Exception("connection lost")),
        ]
        with pytest.raises(DatabaseError):
            await self.service.get(mock_db_session, "u1")
