"""Request audit logging middleware for web mode.

Logs every authenticated request with user_id, method, path, status code
and duration. Output goes to stdout for the container log collector.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

logger = logging.getLogger("audit")
logger.setLevel(logging.INFO)

if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(message)s"))
    logger.addHandler(handler)

# Health probes would drown out real traffic
_SKIP_PATHS = ("/health",)


class AuditMiddleware(BaseHTTPMiddleware):
    """Log every request for compliance and debugging."""

    async def dispatch(self, request: Request, call_next):
        if request.url.path in _SKIP_PATHS:
            return await call_next(request)

        start_time = time.time()
        response = await call_next(request)
        duration_ms = round((time.time() - start_time) * 1000, 1)

        logger.info(
            "user=%s method=%s path=%s status=%d duration_ms=%.1f",
            getattr(request.state, "user_id", None) or "anonymous",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
        )
        return response
