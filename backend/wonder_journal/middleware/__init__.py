# Middleware package init
"""
Wonder Journal Backend — Middleware Package
=============================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters!):
    Request → [Rate Limit] → [Request ID] → [JWT Auth] → [Access Log] → [CORS] → Route

    1. Rate Limit: reject abusive clients before any processing
    2. Request ID: correlation ID for logs and error responses
    3. JWT Auth: verifies the bearer token, sets request.state.user
    4. Access Log: method, path, status, duration and username per request
    5. CORS: FastAPI's CORSMiddleware (handles preflight)
"""
