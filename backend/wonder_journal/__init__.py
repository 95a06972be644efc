"""
Wonder Journal Backend — Application Package
=============================================

What:  REST backend for a journaling app: users, moments (diary entries),
       media attachments and tags.
Who:   Imported by uvicorn (`wonder_journal.main:app`), Alembic and pytest.

Architecture Note:
    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns, auth guards
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← queries, not-found / conflicts
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
