import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from estatehub.common.logging import get_logger
from estatehub.config import settings

logger = get_logger("middleware")

DURATION_HEADER = "X-Request-Duration-Ms"


class RequestTimingMiddleware(BaseHTTPMiddleware):
    """Log one line per request; slow or failed requests are logged as warnings."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        started = time.perf_counter()
        response = await call_next(request)
        duration_ms = round((time.perf_counter() - started) * 1000, 1)

        slow = duration_ms >= settings.SLOW_REQUEST_MS
        level = logging.WARNING if slow or response.status_code >= 500 else logging.INFO
        logger.log(
            level,
            "%s %s %d %.1fms%s",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
            " (slow)" if slow else "",
            extra={
                "http_method": request.method,
                "http_path": request.url.path,
                "http_status": response.status_code,
                "duration_ms": duration_ms,
            },
        )

        response.headers[DURATION_HEADER] = f"{duration_ms:.1f}"
        return response
