# Models package init
"""
Wonder Journal Backend — ORM Models
=====================================

Importing this package registers every table with `Base.metadata`
(Alembic autogenerate and test schema creation depend on it).

Tables:
    users ─┬─< moments ─┬─< moment_media
           │            └─< moments_tags >── tags
"""

from wonder_journal.models.user import User
from wonder_journal.models.tag import Tag, moments_tags
from wonder_journal.models.moment import Moment, MomentMedia

__all__ = ["User", "Tag", "moments_tags", "Moment", "MomentMedia"]
