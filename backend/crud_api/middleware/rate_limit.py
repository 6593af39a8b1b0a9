"""
Document CRUD Gateway — Rate Limiting Middleware
=================================================

What:  Per-IP sliding window rate limiter.
How:   Tracks request timestamps per IP in memory; once an IP has
       `max_requests` requests inside the last `window` seconds, further
       requests get 429 with a Retry-After header until the oldest expires.
Who:   Applied to every request via Starlette middleware.
When:  Outermost in the middleware chain (rejects before any processing).

Algorithm: Sliding Window Log
    1. Drop the IP's timestamps older than now - window
    2. If the remaining count >= limit, reject with 429
    3. Otherwise record now and let the request through

The state lives in process memory: each uvicorn worker keeps its own window.
"""

import logging
import time
from collections import defaultdict
from typing import Dict, List, Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response

from crud_api.config import settings
from crud_api.exceptions import RateLimitExceededError

logger = logging.getLogger(__name__)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    In-memory sliding window rate limiter.

    Configuration (constructor arguments, defaulting to settings):
        enabled:       RATE_LIMIT_ENABLED (default: True)
        max_requests:  RATE_LIMIT_REQUESTS (default: 100)
        window:        RATE_LIMIT_WINDOW in seconds (default: 3600)

    Excluded paths: /health and the API docs.
    """

    EXCLUDED_PATHS = {"/health", "/docs", "/openapi.json", "/redoc"}
    CLEANUP_EVERY = 1000

    def __init__(
        self,
        app,
        enabled: Optional[bool] = None,
        max_requests: Optional[int] = None,
        window: Optional[int] = None,
    ):
        super().__init__(app)
        self.enabled = settings.rate_limit_enabled if enabled is None else enabled
        self.max_requests = settings.rate_limit_requests if max_requests is None else max_requests
        self.window = settings.rate_limit_window if window is None else window
        self._requests: Dict[str, List[float]] = defaultdict(list)
        self._seen = 0

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if not self.enabled or request.url.path in self.EXCLUDED_PATHS:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"

        now = time.time()
        window_start = now - self.window

        timestamps = [ts for ts in self._requests[client_ip] if ts > window_start]
        self._requests[client_ip] = timestamps

        if len(timestamps) >= self.max_requests:
            retry_after = int(timestamps[0] + self.window - now) + 1
            logger.warning(
                "Rate limit exceeded for IP %s: %d requests in %ds window",
                client_ip,
                len(timestamps),
                self.window,
            )
            # Raised exceptions never reach the app's handlers from here
            error = RateLimitExceededError(retry_after=retry_after)
            return PlainTextResponse(
                error.message,
                status_code=429,
                headers={"Retry-After": str(error.retry_after)},
            )

        timestamps.append(now)

        self._seen += 1
        if self._seen % self.CLEANUP_EVERY == 0:
            self._cleanup_inactive_ips(window_start)

        return await call_next(request)

    def _cleanup_inactive_ips(self, window_start: float) -> None:
        """Remove IPs whose newest request is older than the window."""
        inactive_ips = [
            ip for ip, timestamps in self._requests.items()
            if not timestamps or timestamps[-1] <= window_start
        ]
        for ip in inactive_ips:
            del self._requests[ip]

        if inactive_ips:
            logger.debug("Cleaned up %d inactive IP entries", len(inactive_ips))
