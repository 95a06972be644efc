"""Create journal tables

Revision ID: 001
Revises: None
Create Date: 2024-03-02 00:00:00.000000+00:00

What:  Creates users, moments, moment_media, tags and moments_tags.
How:   Every child row cascades on delete of its parent, so deleting a user
       removes their moments, and deleting a moment removes its media and
       tag links.

Rollback: downgrade() drops all five tables (destructive, all data lost).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the five tables, their foreign keys and the listing index."""
    op.create_table(
        "users",
        sa.Column("username", sa.String(25), nullable=False),
        # pbkdf2_sha256 hash, never the plain password
        sa.Column("password", sa.Text(), nullable=False),
        sa.Column("first_name", sa.String(50), nullable=False),
        sa.Column("last_name", sa.String(50), nullable=False),
        sa.Column("email", sa.Text(), nullable=False),
        sa.Column(
            "is_admin",
            sa.Boolean(),
            nullable=False,
            server_default=sa.text("false"),
        ),
        sa.PrimaryKeyConstraint("username"),
        sa.UniqueConstraint("email"),
    )

    op.create_table(
        "moments",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("title", sa.String(100), nullable=False),
        sa.Column("text", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column(
            "date",
            sa.Date(),
            nullable=False,
            server_default=sa.text("CURRENT_DATE"),
        ),
        sa.Column("username", sa.String(25), nullable=False),
        sa.ForeignKeyConstraint(["username"], ["users.username"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )

    # "this user's moments, newest first"
    op.create_index(
        "idx_moments_username_date",
        "moments",
        ["username", sa.text("date DESC")],
    )

    op.create_table(
        "moment_media",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("type", sa.String(25), nullable=False),
        sa.Column("url", sa.Text(), nullable=False),
        sa.Column("moment_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["moment_id"], ["moments.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_moment_media_moment_id", "moment_media", ["moment_id"])

    op.create_table(
        "tags",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(50), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )

    op.create_table(
        "moments_tags",
        sa.Column("moment_id", sa.Integer(), nullable=False),
        sa.Column("tag_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["moment_id"], ["moments.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["tag_id"], ["tags.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("moment_id", "tag_id"),
    )


def downgrade() -> None:
    """Drop every journal table, children first."""
    op.drop_table("moments_tags")
    op.drop_table("tags")
    op.drop_index("ix_moment_media_moment_id", table_name="moment_media")
    op.drop_table("moment_media")
    op.drop_index("idx_moments_username_date", table_name="moments")
    op.drop_table("moments")
    op.drop_table("users")
