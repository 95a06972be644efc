# Services package init
"""
Wonder Journal Backend — Services Layer
=========================================

What:  Business logic between routes (HTTP) and the database.
How:   Stateless classes with a module-level singleton each; every method
       takes the request's AsyncSession and returns Pydantic schemas.
       Missing rows raise NotFoundError, conflicts BadRequestError and
       SQLAlchemy failures DatabaseError.

Service Inventory:
    - UserService:   authenticate, register, list, detail, update, delete
    - MomentService: create, filtered search, detail, update, delete,
                     media attachments, tagging
    - TagService:    create, get-or-create, list, detail
"""
