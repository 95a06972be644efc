# Helpers package init
"""
Wonder Journal Backend — Helpers
==================================

Small, dependency-free building blocks shared by services and middleware:
    - sql.py:       partial insert / partial update column mappings
    - security.py:  password hashing and bearer token signing
"""
