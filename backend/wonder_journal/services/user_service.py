"""
Wonder Journal Backend — User Service
=======================================

What:  Account operations: authenticate, register, list, detail, partial
       update, delete, and the user's moment listing.
Who:   Called by the auth and users routes.

Passwords are hashed with helpers.security before they reach the database
and are never part of a response model.
"""

import logging
from typing import Any, Dict, List, Mapping

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from wonder_journal.exceptions import (
    BadRequestError,
    DatabaseError,
    NotFoundError,
    UnauthorizedError,
)
from wonder_journal.helpers.security import hash_password, verify_password
from wonder_journal.helpers.sql import sql_for_partial_update
from wonder_journal.models.moment import Moment
from wonder_journal.models.user import User
from wonder_journal.schemas.moment import MomentListItem
from wonder_journal.schemas.user import UserDetail, UserOut
from wonder_journal.services.moment_service import moment_service

logger = logging.getLogger(__name__)

# API field name → column name for partial updates
USER_JS_TO_SQL = {
    "firstName": "first_name",
    "lastName": "last_name",
    "isAdmin": "is_admin",
}


class UserService:
    """Stateless user operations; every method receives the request's session."""

    async def _find(self, db: AsyncSession, username: str) -> User | None:
        try:
            result = await db.execute(select(User).where(User.username == username))
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error looking up user %s: %s", username, str(e))
            raise DatabaseError(context={"username": username})

    async def authenticate(self, db: AsyncSession, username: str, password: str) -> UserOut:
        """
        Check a username/password pair.

        Raises:
            UnauthorizedError: unknown user or wrong password (same message
                               for both).
        """
        user = await self._find(db, username)
        if user is not None and verify_password(password, user.password):
            return UserOut.model_validate(user)

        logger.warning("Failed login for username %r", username)
        raise UnauthorizedError("Invalid username/password")

    async def register(
        self,
        db: AsyncSession,
        *,
        username: str,
        password: str,
        first_name: str,
        last_name: str,
        email: str,
        is_admin: bool = False,
    ) -> UserOut:
        """
        Create a user with a hashed password.

        Raises:
            BadRequestError: username (or email) already taken.
        """
        if await self._find(db, username) is not None:
            raise BadRequestError(f"Duplicate username: {username}")

        user = User(
            username=username,
            password=hash_password(password),
            first_name=first_name,
            last_name=last_name,
            email=email,
            is_admin=is_admin,
        )
        try:
            db.add(user)
            await db.flush()
        except IntegrityError as e:
            raise BadRequestError(f"Duplicate email: {email}", context={"error": str(e.orig)})
        except SQLAlchemyError as e:
            logger.error("Database error registering %s: %s", username, str(e), exc_info=True)
            raise DatabaseError(context={"error_type": type(e).__name__})

        logger.info("User registered: %s", username)
        return UserOut.model_validate(user)

    async def find_all(self, db: AsyncSession) -> List[UserOut]:
        """All users ordered by username."""
        try:
            result = await db.execute(select(User).order_by(User.username))
            users = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error("Database error listing users: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve users. Please try again.",
                context={"error_type": type(e).__name__},
            )
        return [UserOut.model_validate(user) for user in users]

    async def get(self, db: AsyncSession, username: str) -> UserDetail:
        """
        Given a username, return the user plus the ids of their moments.

        Raises:
            NotFoundError: no such user.
        """
        user = await self._find(db, username)
        if user is None:
            raise NotFoundError(f"No user: {username}")

        try:
            result = await db.execute(
                select(Moment.id).where(Moment.username == username).order_by(Moment.id)
            )
            moment_ids = list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error fetching moments of %s: %s", username, str(e))
            raise DatabaseError(context={"username": username})

        return UserDetail(**UserOut.model_validate(user).model_dump(), moments=moment_ids)

    async def update(
        self, db: AsyncSession, username: str, data: Mapping[str, Any]
    ) -> UserOut:
        """
        Partial update: only the fields present in `data` change.

        Args:
            data: camelCase API fields, any of
                  {firstName, lastName, password, email}

        Raises:
            BadRequestError: `data` is empty, or the email is taken.
            NotFoundError:   no such user.
        """
        cols: Dict[str, Any] = sql_for_partial_update(data, USER_JS_TO_SQL)
        if cols.get("password") is not None:
            cols["password"] = hash_password(cols["password"])

        try:
            result = await db.execute(
                update(User)
                .where(User.username == username)
                .values(**cols)
                .returning(User)
            )
            user = result.scalar_one_or_none()
        except IntegrityError as e:
            raise BadRequestError("Email already in use", context={"error": str(e.orig)})
        except SQLAlchemyError as e:
            logger.error("Database error updating %s: %s", username, str(e))
            raise DatabaseError(context={"username": username})

        if user is None:
            raise NotFoundError(f"No user: {username}")

        logger.info("User %s updated: %s", username, ", ".join(sorted(cols)))
        return UserOut.model_validate(user)

    async def remove(self, db: AsyncSession, username: str) -> None:
        """
        Delete a user; their moments go with them (ON DELETE CASCADE).

        Raises:
            NotFoundError: no such user.
        """
        try:
            result = await db.execute(
                delete(User).where(User.username == username).returning(User.username)
            )
            deleted = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error deleting user %s: %s", username, str(e))
            raise DatabaseError(context={"username": username})

        if deleted is None:
            raise NotFoundError(f"No user: {username}")
        logger.info("User deleted: %s", username)

    async def get_moments(self, db: AsyncSession, username: str) -> List[MomentListItem]:
        """The user's moments, newest first. Raises NotFoundError for unknown users."""
        return await moment_service.find_all(db, username)


user_service = UserService()
