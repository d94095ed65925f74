import logging
import time
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger("rankedsearch.requests")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs one line per request and tags the response with its id and timing.

    Search requests also log the raw query, which is the only input that
    affects ranking.
    """

    async def dispatch(self, request: Request, call_next):
        request_id = uuid.uuid4().hex[:8]
        started = time.perf_counter()
        request.state.request_id = request_id

        response = await call_next(request)

        duration_ms = (time.perf_counter() - started) * 1000
        query = request.query_params.get("q")
        if query is not None:
            logger.info(
                "request_id=%s method=%s path=%s query=%r status=%d duration_ms=%.1f",
                request_id,
                request.method,
                request.url.path,
                query,
                response.status_code,
                duration_ms,
            )
        else:
            logger.info(
                "request_id=%s method=%s path=%s status=%d duration_ms=%.1f",
                request_id,
                request.method,
                request.url.path,
                response.status_code,
                duration_ms,
            )

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time-Ms"] = f"{duration_ms:.1f}"
        return response
