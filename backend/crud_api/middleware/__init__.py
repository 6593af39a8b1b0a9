# Middleware package init
"""
Document CRUD Gateway — Middleware Package
===========================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters!):
    Request → [Rate Limit] → [Request ID] → [Logging] → [CORS] → Route Handler

    1. Rate Limit first: rejects abusive clients before any processing
    2. Request ID: correlation ID for every later log line
    3. Logging: access line with status and duration
    4. CORS: FastAPI's CORSMiddleware (handles preflight)

Responses travel back through the same chain in reverse.
"""
