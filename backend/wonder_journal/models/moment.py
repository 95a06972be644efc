"""
Wonder Journal Backend — Moment and MomentMedia SQLAlchemy Models
===================================================================

What:  ORM models for the `moments` (journal entries) and `moment_media`
       (attachments) tables.
Who:   Used by MomentService for CRUD, tagging and filtered search.

Table Design:
    moments
    - id: serial primary key
    - title: short heading, required
    - text: entry body, may be empty
    - date: the day the moment belongs to; defaults to today
    - username: owner, ON DELETE CASCADE from users
    moment_media
    - type: free-form kind ("image", "video", "link", ...)
    - url: where the media lives; the backend stores references only
    - moment_id: ON DELETE CASCADE from moments

    Index on (username, date DESC) serves the main listing query:
    "this user's moments, newest first".
"""

import datetime
from typing import TYPE_CHECKING, List

from sqlalchemy import Date, ForeignKey, Index, Integer, String, Text
from sqlalchemy import text as sql_text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from wonder_journal.database import Base
from wonder_journal.models.tag import Tag, moments_tags

if TYPE_CHECKING:
    from wonder_journal.models.user import User


class Moment(Base):
    """A user-authored journal entry."""

    __tablename__ = "moments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    title: Mapped[str] = mapped_column(String(100), nullable=False)

    text: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="",
        server_default=sql_text("''"),
    )

    date: Mapped[datetime.date] = mapped_column(
        Date,
        nullable=False,
        default=datetime.date.today,
        server_default=sql_text("CURRENT_DATE"),
    )

    username: Mapped[str] = mapped_column(
        String(25),
        ForeignKey("users.username", ondelete="CASCADE"),
        nullable=False,
    )

    user: Mapped["User"] = relationship(back_populates="moments")

    media: Mapped[List["MomentMedia"]] = relationship(
        back_populates="moment",
        passive_deletes=True,
        order_by="MomentMedia.id",
    )

    tags: Mapped[List[Tag]] = relationship(
        secondary=moments_tags,
        passive_deletes=True,
        order_by=Tag.name,
    )

    __table_args__ = (
        Index("idx_moments_username_date", username, date.desc()),
    )

    def __repr__(self) -> str:
        return f"<Moment(id={self.id}, username='{self.username}', date='{self.date}')>"


class MomentMedia(Base):
    """A media attachment (by URL) on a moment."""

    __tablename__ = "moment_media"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    type: Mapped[str] = mapped_column(String(25), nullable=False)

    url: Mapped[str] = mapped_column(Text, nullable=False)

    moment_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("moments.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    moment: Mapped[Moment] = relationship(back_populates="media")

    def __repr__(self) -> str:
        return f"<MomentMedia(id={self.id}, type='{self.type}', moment_id={self.moment_id})>"
