"""
Wonder Journal Backend — Moment Service
=========================================

What:  Business logic for moments: create, filtered search, detail, partial
       update, delete, media attachments and tagging.
How:   SQLAlchemy Core/ORM statements on the request's AsyncSession. Missing
       rows become NotFoundError; SQLAlchemy failures become DatabaseError.
Who:   Called by the moment routes and by UserService.get_moments.

Filtered search (find_all):
    SELECT m.* FROM moments m
    WHERE m.username = :username
      [AND m.title ILIKE :title]   [AND m.text ILIKE :text]
      [AND m.date >= :date_start]  [AND m.date <= :date_end]
      [AND EXISTS (tag named :tag)] [AND [NOT] EXISTS (media)]
    ORDER BY m.date DESC, m.id DESC
    + one SELECT ... IN (...) for the tags of the returned moments
"""

import logging
from typing import Any, Dict, List, Mapping

from sqlalchemy import delete, insert, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from wonder_journal.exceptions import BadRequestError, DatabaseError, NotFoundError
from wonder_journal.helpers.sql import sql_for_partial_insert, sql_for_partial_update
from wonder_journal.models.moment import Moment, MomentMedia
from wonder_journal.models.tag import Tag, moments_tags
from wonder_journal.models.user import User
from wonder_journal.schemas.moment import (
    MediaOut,
    MomentDetail,
    MomentFilters,
    MomentListItem,
    MomentOut,
    MomentTagLink,
    TagOut,
    normalize_tag_name,
)
from wonder_journal.services.tag_service import tag_service

logger = logging.getLogger(__name__)

# Columns returned by INSERT/UPDATE ... RETURNING
RETURNED_COLUMNS = (Moment.id, Moment.title, Moment.text, Moment.date, Moment.username)


class MomentService:
    """
    Business logic layer for moment operations.

    Responsibilities:
        - create() / update() / remove(): moment rows
        - find_all(): a user's moments with optional filters
        - get() / get_owner(): single moment lookups
        - add_media() / remove_media(): attachments
        - apply_tag() / remove_tag(): moments_tags links
    """

    # ── Lookups ───────────────────────────────────────────────────────────

    async def _ensure_user(self, db: AsyncSession, username: str) -> None:
        result = await db.execute(select(User.username).where(User.username == username))
        if result.scalar_one_or_none() is None:
            raise NotFoundError(f"No user: {username}")

    async def get_owner(self, db: AsyncSession, moment_id: int) -> str:
        """
        Username owning the moment; used by route guards.

        Raises:
            NotFoundError: no moment with that id.
        """
        try:
            result = await db.execute(select(Moment.username).where(Moment.id == moment_id))
            owner = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error looking up moment %s: %s", moment_id, str(e))
            raise DatabaseError(context={"moment_id": moment_id})
        if owner is None:
            raise NotFoundError(f"No moment: {moment_id}")
        return owner

    # ── Create ────────────────────────────────────────────────────────────

    async def create(self, db: AsyncSession, data: Mapping[str, Any]) -> MomentDetail:
        """
        Create a moment, then apply its tags and add its media.

        Args:
            data: {title, text, username} and optionally {date, tags, media};
                  `tags` is a list of names, `media` a list of {type, url}.

        Returns:
            MomentDetail of the new moment.

        Raises:
            BadRequestError: no data, or the row violates a constraint.
            NotFoundError:   the owning user does not exist.
        """
        fields: Dict[str, Any] = dict(data)
        tag_names: List[str] = fields.pop("tags", None) or []
        media: List[Mapping[str, str]] = fields.pop("media", None) or []

        cols = sql_for_partial_insert(fields)
        try:
            if "username" in fields:
                await self._ensure_user(db, fields["username"])

            result = await db.execute(
                insert(Moment).values(**cols).returning(*RETURNED_COLUMNS)
            )
            moment = MomentOut.model_validate(dict(result.mappings().one()))

            tags = []
            for name in tag_names:
                tag = await tag_service.get_or_create(db, name)
                await db.execute(
                    insert(moments_tags).values(moment_id=moment.id, tag_id=tag.id)
                )
                tags.append(tag)

            added_media = [
                await self._insert_media(db, moment.id, item["type"], item["url"])
                for item in media
            ]
        except IntegrityError as e:
            logger.warning("Rejected moment for %s: %s", fields.get("username"), str(e.orig))
            raise BadRequestError("Invalid moment data", context={"error": str(e.orig)})
        except SQLAlchemyError as e:
            logger.error("Database error creating moment: %s", str(e), exc_info=True)
            raise DatabaseError(context={"error_type": type(e).__name__})

        logger.info(
            "Moment %s created for %s (%d tags, %d media)",
            moment.id, moment.username, len(tags), len(added_media),
        )
        return MomentDetail(
            **moment.model_dump(),
            media=added_media,
            tags=[TagOut.model_validate(tag) for tag in sorted(tags, key=lambda t: t.name)],
        )

    # ── Read ──────────────────────────────────────────────────────────────

    async def find_all(
        self,
        db: AsyncSession,
        username: str,
        filters: MomentFilters | None = None,
    ) -> List[MomentListItem]:
        """
        Find all moments of `username`, optionally filtered.

        Filters (all optional):
            title / text: case-insensitive partial match
            tag:          moment carries a tag with this name
            date_start:   date >= date_start
            date_end:     date <= date_end
            has_media:    True → at least one attachment, False → none

        Returns:
            [{id, title, text, date, tags}, ...] newest first.

        Raises:
            NotFoundError: the user does not exist.
        """
        filters = filters or MomentFilters()
        try:
            await self._ensure_user(db, username)

            query = (
                select(Moment)
                .options(selectinload(Moment.tags))
                .where(Moment.username == username)
            )

            if filters.title is not None:
                query = query.where(Moment.title.ilike(f"%{filters.title}%"))

            if filters.text is not None:
                query = query.where(Moment.text.ilike(f"%{filters.text}%"))

            if filters.date_start is not None:
                query = query.where(Moment.date >= filters.date_start)

            if filters.date_end is not None:
                query = query.where(Moment.date <= filters.date_end)

            if filters.tag is not None:
                query = query.where(
                    Moment.tags.any(Tag.name == normalize_tag_name(filters.tag))
                )

            if filters.has_media is True:
                query = query.where(Moment.media.any())
            elif filters.has_media is False:
                query = query.where(~Moment.media.any())

            query = query.order_by(Moment.date.desc(), Moment.id.desc())

            result = await db.execute(query)
            moments = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error("Database error listing moments for %s: %s", username, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve moments. Please try again.",
                context={"error_type": type(e).__name__},
            )

        return [MomentListItem.model_validate(moment) for moment in moments]

    async def get(self, db: AsyncSession, moment_id: int) -> MomentDetail:
        """
        Given a moment id, return the moment with its media and tags.

        Raises:
            NotFoundError: no moment with that id.
        """
        try:
            result = await db.execute(
                select(Moment)
                .options(selectinload(Moment.media), selectinload(Moment.tags))
                .where(Moment.id == moment_id)
            )
            moment = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching moment %s: %s", moment_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the moment. Please try again.",
                context={"moment_id": moment_id},
            )

        if moment is None:
            raise NotFoundError(f"No moment: {moment_id}")

        return MomentDetail.model_validate(moment)

    # ── Update / Delete ───────────────────────────────────────────────────

    async def update(
        self, db: AsyncSession, moment_id: int, data: Mapping[str, Any]
    ) -> MomentOut:
        """
        Partial update: only the fields present in `data` change.

        Args:
            data: any of {title, text, date}

        Raises:
            BadRequestError: `data` is empty.
            NotFoundError:   no moment with that id.
        """
        cols = sql_for_partial_update(data)
        try:
            result = await db.execute(
                update(Moment)
                .where(Moment.id == moment_id)
                .values(**cols)
                .returning(*RETURNED_COLUMNS)
            )
            row = result.mappings().one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error updating moment %s: %s", moment_id, str(e))
            raise DatabaseError(context={"moment_id": moment_id})

        if row is None:
            raise NotFoundError(f"No moment: {moment_id}")

        logger.info("Moment %s updated: %s", moment_id, ", ".join(sorted(cols)))
        return MomentOut.model_validate(dict(row))

    async def remove(self, db: AsyncSession, moment_id: int) -> None:
        """
        Delete a moment; its media and tag links go with it (ON DELETE CASCADE).

        Raises:
            NotFoundError: no moment with that id.
        """
        try:
            result = await db.execute(
                delete(Moment).where(Moment.id == moment_id).returning(Moment.id)
            )
            deleted = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error deleting moment %s: %s", moment_id, str(e))
            raise DatabaseError(context={"moment_id": moment_id})

        if deleted is None:
            raise NotFoundError(f"No moment: {moment_id}")
        logger.info("Moment %s deleted", moment_id)

    # ── Media ─────────────────────────────────────────────────────────────

    async def _insert_media(
        self, db: AsyncSession, moment_id: int, media_type: str, url: str
    ) -> MediaOut:
        result = await db.execute(
            insert(MomentMedia)
            .values(type=media_type, url=url, moment_id=moment_id)
            .returning(MomentMedia.id, MomentMedia.type, MomentMedia.url, MomentMedia.moment_id)
        )
        return MediaOut.model_validate(dict(result.mappings().one()))

    async def add_media(
        self, db: AsyncSession, moment_id: int, media_type: str, url: str
    ) -> MediaOut:
        """
        Attach a media reference to a moment.

        Returns:
            {id, type, url, momentId}

        Raises:
            NotFoundError: no moment with that id.
        """
        await self.get_owner(db, moment_id)
        try:
            media = await self._insert_media(db, moment_id, media_type, url)
        except SQLAlchemyError as e:
            logger.error("Database error adding media to moment %s: %s", moment_id, str(e))
            raise DatabaseError(context={"moment_id": moment_id})

        logger.info("Media %s (%s) added to moment %s", media.id, media.type, moment_id)
        return media

    async def remove_media(self, db: AsyncSession, moment_id: int, media_id: int) -> None:
        """
        Raises:
            NotFoundError: the media row does not exist on this moment.
        """
        try:
            result = await db.execute(
                delete(MomentMedia)
                .where(MomentMedia.id == media_id, MomentMedia.moment_id == moment_id)
                .returning(MomentMedia.id)
            )
            deleted = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error removing media %s: %s", media_id, str(e))
            raise DatabaseError(context={"moment_id": moment_id, "media_id": media_id})

        if deleted is None:
            raise NotFoundError(f"No media: {media_id}")
        logger.info("Media %s removed from moment %s", media_id, moment_id)

    # ── Tags ──────────────────────────────────────────────────────────────

    async def apply_tag(self, db: AsyncSession, moment_id: int, tag_id: int) -> MomentTagLink:
        """
        Tag a moment.

        Raises:
            NotFoundError:   unknown moment or tag.
            BadRequestError: the tag is already applied.
        """
        await self.get_owner(db, moment_id)
        await tag_service.get(db, tag_id)

        duplicate = f"Moment {moment_id} already has tag {tag_id}"
        try:
            existing = await db.execute(
                select(moments_tags.c.tag_id).where(
                    moments_tags.c.moment_id == moment_id,
                    moments_tags.c.tag_id == tag_id,
                )
            )
            if existing.scalar_one_or_none() is not None:
                raise BadRequestError(duplicate)

            await db.execute(insert(moments_tags).values(moment_id=moment_id, tag_id=tag_id))
        except IntegrityError:
            raise BadRequestError(duplicate)
        except SQLAlchemyError as e:
            logger.error("Database error tagging moment %s: %s", moment_id, str(e))
            raise DatabaseError(context={"moment_id": moment_id, "tag_id": tag_id})

        logger.info("Tag %s applied to moment %s", tag_id, moment_id)
        return MomentTagLink(moment_id=moment_id, tag_id=tag_id)

    async def remove_tag(self, db: AsyncSession, moment_id: int, tag_id: int) -> MomentTagLink:
        """
        Raises:
            NotFoundError: the tag is not applied to this moment.
        """
        try:
            result = await db.execute(
                delete(moments_tags)
                .where(
                    moments_tags.c.moment_id == moment_id,
                    moments_tags.c.tag_id == tag_id,
                )
                .returning(moments_tags.c.tag_id)
            )
            removed = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error untagging moment %s: %s", moment_id, str(e))
            raise DatabaseError(context={"moment_id": moment_id, "tag_id": tag_id})

        if removed is None:
            raise NotFoundError(f"Moment {moment_id} has no tag {tag_id}")
        logger.info("Tag %s removed from moment %s", tag_id, moment_id)
        return MomentTagLink(moment_id=moment_id, tag_id=tag_id)


moment_service = MomentService()
