# Routes package init
"""
Wonder Journal Backend — API Routes Package
=============================================

Route Inventory:
    - auth.py:     POST /auth/token, POST /auth/register
    - users.py:    GET /users, GET/PATCH/DELETE /users/{username},
                   GET /users/{username}/moments
    - moments.py:  POST/GET /moments, GET/PATCH/DELETE /moments/{id},
                   media and tag sub-resources
    - tags.py:     GET/POST /tags
    - health.py:   GET /health

Routes stay thin: validate input (schemas), check authorization (guards in
middleware.auth), call a service, wrap the result in its response envelope.
"""
