"""
Document CRUD Gateway — Request ID Middleware
==============================================

What:  Assigns an ID to each incoming request and returns it in the response.
How:   Uses the client's X-Request-ID header or generates a short UUID, stores it
       in a ContextVar and request.state, and echoes it as a response header.
Who:   Applied to every request via Starlette middleware.

Every log line written while handling a request (access log, database failure
log) carries this ID, so a 500 reported by a caller can be matched to the
traceback on the server.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on one event loop each see their own ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Middleware that assigns a unique ID to each request for tracing.

    Behavior:
        1. Use the X-Request-ID header when the client sent one
        2. Otherwise generate the first 8 characters of a UUID4
        3. Store in ContextVar (loggers, services) and request.state (handlers)
        4. Add to response headers
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get("X-Request-ID") or str(uuid.uuid4())[:8]

        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers["X-Request-ID"] = rid
        return response
