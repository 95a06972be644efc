"""
Wonder Journal Backend — User SQLAlchemy Model
================================================

What:  ORM model representing the `users` table.
Who:   Used by UserService for authentication and account CRUD.

Table Design:
    - username: natural primary key, referenced by moments.username
    - password: pbkdf2_sha256 hash, never returned by the API
    - email: unique across users
    - is_admin: grants access to every user's resources
"""

from typing import TYPE_CHECKING, List

from sqlalchemy import Boolean, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from wonder_journal.database import Base

if TYPE_CHECKING:
    from wonder_journal.models.moment import Moment


class User(Base):
    """A registered journal author."""

    __tablename__ = "users"

    username: Mapped[str] = mapped_column(
        String(25),
        primary_key=True,
        comment="Login name; also the owner key on moments",
    )

    password: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="pbkdf2_sha256 password hash",
    )

    first_name: Mapped[str] = mapped_column(String(50), nullable=False)
    last_name: Mapped[str] = mapped_column(String(50), nullable=False)

    email: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        unique=True,
    )

    is_admin: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=text("false"),
    )

    # Deletion goes through the ON DELETE CASCADE foreign key on moments
    moments: Mapped[List["Moment"]] = relationship(
        back_populates="user",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<User(username='{self.username}', is_admin={self.is_admin})>"
