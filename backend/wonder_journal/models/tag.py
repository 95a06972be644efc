"""
Wonder Journal Backend — Tag Model and moments_tags Join Table
================================================================

What:  `tags` holds labels (unique, lower-cased names); `moments_tags` links
       tags to moments many-to-many.
Who:   TagService (tag CRUD) and MomentService (apply / remove / filter).
"""

from sqlalchemy import Column, ForeignKey, Integer, String, Table
from sqlalchemy.orm import Mapped, mapped_column

from wonder_journal.database import Base

# Composite primary key: a tag is applied to a moment at most once
moments_tags = Table(
    "moments_tags",
    Base.metadata,
    Column(
        "moment_id",
        Integer,
        ForeignKey("moments.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "tag_id",
        Integer,
        ForeignKey("tags.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class Tag(Base):
    """A label attachable to any number of moments."""

    __tablename__ = "tags"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        unique=True,
        comment="Trimmed, lower-cased tag name",
    )

    def __repr__(self) -> str:
        return f"<Tag(id={self.id}, name='{self.name}')>"
