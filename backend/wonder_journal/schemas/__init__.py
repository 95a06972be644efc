# Schemas package init
"""
Wonder Journal Backend — Pydantic Request/Response Schemas
============================================================

API contracts are camelCase on the wire (`firstName`, `dateStart`) and
snake_case in Python; see `common.CamelModel`.
"""
