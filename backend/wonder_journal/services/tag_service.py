"""
Wonder Journal Backend — Tag Service
======================================

What:  Tag lookup and creation.
Who:   Tag routes, and MomentService when a moment is created with tag names.

Tag names are normalized (trimmed, lower-cased) before every lookup so
"Travel", " travel" and "travel" are the same tag.
"""

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from wonder_journal.exceptions import BadRequestError, DatabaseError, NotFoundError
from wonder_journal.models.tag import Tag
from wonder_journal.schemas.moment import TagOut, normalize_tag_name

logger = logging.getLogger(__name__)


class TagService:
    """Stateless tag operations; every method receives the request's session."""

    async def _find_by_name(self, db: AsyncSession, name: str) -> Optional[Tag]:
        result = await db.execute(select(Tag).where(Tag.name == name))
        return result.scalar_one_or_none()

    async def create(self, db: AsyncSession, name: str) -> TagOut:
        """
        Create a tag.

        Raises:
            BadRequestError: a tag with that name already exists.
        """
        name = normalize_tag_name(name)
        try:
            if await self._find_by_name(db, name) is not None:
                raise BadRequestError(f"Duplicate tag: {name}")

            tag = Tag(name=name)
            db.add(tag)
            await db.flush()
        except IntegrityError as e:
            # Lost a race with a concurrent create of the same name
            raise BadRequestError(f"Duplicate tag: {name}", context={"error": str(e.orig)})
        except SQLAlchemyError as e:
            logger.error("Database error creating tag %r: %s", name, str(e))
            raise DatabaseError(context={"error_type": type(e).__name__})

        logger.info("Tag created: %s (id=%s)", tag.name, tag.id)
        return TagOut.model_validate(tag)

    async def get_or_create(self, db: AsyncSession, name: str) -> Tag:
        """Return the tag named `name`, creating it on first use."""
        name = normalize_tag_name(name)
        try:
            tag = await self._find_by_name(db, name)
            if tag is not None:
                return tag
            tag = Tag(name=name)
            db.add(tag)
            await db.flush()
        except IntegrityError as e:
            raise BadRequestError(f"Duplicate tag: {name}", context={"error": str(e.orig)})
        except SQLAlchemyError as e:
            logger.error("Database error creating tag %r: %s", name, str(e))
            raise DatabaseError(context={"error_type": type(e).__name__})

        logger.info("Tag created on first use: %s (id=%s)", tag.name, tag.id)
        return tag

    async def find_all(self, db: AsyncSession, name: Optional[str] = None) -> List[TagOut]:
        """All tags ordered by name, optionally filtered by partial name match."""
        query = select(Tag).order_by(Tag.name)
        if name:
            query = query.where(Tag.name.ilike(f"%{normalize_tag_name(name)}%"))

        try:
            result = await db.execute(query)
        except SQLAlchemyError as e:
            logger.error("Database error listing tags: %s", str(e), exc_info=True)
            raise DatabaseError(context={"error_type": type(e).__name__})

        return [TagOut.model_validate(tag) for tag in result.scalars().all()]

    async def get(self, db: AsyncSession, tag_id: int) -> TagOut:
        """
        Raises:
            NotFoundError: no tag with that id.
        """
        try:
            result = await db.execute(select(Tag).where(Tag.id == tag_id))
            tag = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching tag %s: %s", tag_id, str(e))
            raise DatabaseError(context={"tag_id": tag_id})

        if tag is None:
            raise NotFoundError(f"No tag: {tag_id}")
        return TagOut.model_validate(tag)


tag_service = TagService()
