"""
Wonder Journal Backend — Moment, Media and Tag Schemas
========================================================

What:  API contracts for moments (journal entries), their media attachments
       and their tags.
Who:   MomentService builds the response models; moment and tag routes use
       the request models for body validation.
"""

import datetime
from typing import List, Optional, Union

from pydantic import Field, field_validator

from wonder_journal.schemas.common import CamelModel, StrictCamelModel

URL_PATTERN = r"^https?://\S+$"


# ══════════════════════════════════════════════════════════════════════════
# Tags
# ══════════════════════════════════════════════════════════════════════════


def normalize_tag_name(name: str) -> str:
    """Tag names are stored trimmed and lower-cased."""
    return name.strip().lower()


class TagCreate(StrictCamelModel):
    name: str = Field(min_length=1, max_length=50)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = normalize_tag_name(v)
        if not v:
            raise ValueError("Tag name must not be blank")
        return v


class TagOut(CamelModel):
    id: int
    name: str


class TagEnvelope(CamelModel):
    tag: TagOut


class TagsEnvelope(CamelModel):
    tags: List[TagOut]


# ══════════════════════════════════════════════════════════════════════════
# Media
# ══════════════════════════════════════════════════════════════════════════


class MediaCreate(StrictCamelModel):
    type: str = Field(min_length=1, max_length=25, description="e.g. image, video, link")
    url: str = Field(min_length=1, pattern=URL_PATTERN)


class MediaOut(CamelModel):
    id: int
    type: str
    url: str
    moment_id: Optional[int] = None


class MediaEnvelope(CamelModel):
    media: MediaOut


# ══════════════════════════════════════════════════════════════════════════
# Moments
# ══════════════════════════════════════════════════════════════════════════


class MomentCreate(StrictCamelModel):
    """
    Body of POST /moments. The owner comes from the bearer token.

    `tags` are tag names (created on first use); `media` are attachments
    added in the same transaction.
    """
    title: str = Field(min_length=1, max_length=100)
    text: str = Field(default="")
    date: Optional[datetime.date] = None
    tags: List[str] = Field(default_factory=list)
    media: List[MediaCreate] = Field(default_factory=list)

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v: List[str]) -> List[str]:
        names = []
        for name in v:
            name = normalize_tag_name(name)
            if not name or len(name) > 50:
                raise ValueError("Tag names must be 1-50 characters")
            if name not in names:
                names.append(name)
        return names


class MomentUpdate(StrictCamelModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=100)
    text: Optional[str] = None
    date: Optional[datetime.date] = None


class MomentFilters(CamelModel):
    """Optional search filters for GET /moments."""
    title: Optional[str] = None
    text: Optional[str] = None
    tag: Optional[str] = None
    date_start: Optional[datetime.date] = None
    date_end: Optional[datetime.date] = None
    has_media: Optional[bool] = None


class MomentOut(CamelModel):
    id: int
    title: str
    text: str
    date: datetime.date
    username: str


class MomentDetail(MomentOut):
    media: List[MediaOut]
    tags: List[TagOut]


class MomentListItem(CamelModel):
    id: int
    title: str
    text: str
    date: datetime.date
    tags: List[TagOut] = Field(default_factory=list)


class MomentEnvelope(CamelModel):
    moment: Union[MomentDetail, MomentOut]


class MomentsEnvelope(CamelModel):
    moments: List[MomentListItem]


class MomentTagLink(CamelModel):
    moment_id: int
    tag_id: int


class TaggedResponse(CamelModel):
    tagged: MomentTagLink


class UntaggedResponse(CamelModel):
    untagged: MomentTagLink
