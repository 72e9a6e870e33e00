"""Access log middleware.

Logs one structlog event per response: server errors at error level,
client errors at warning, everything else at info. Health checks are
skipped so probes don't flood the log.
"""

import time

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = structlog.get_logger()


class RequestLogMiddleware(BaseHTTPMiddleware):

    async def dispatch(self, request: Request, call_next) -> Response:
        path = request.url.path
        if path == "/api/health":
            return await call_next(request)

        started = time.perf_counter()
        response: Response = await call_next(request)
        elapsed_ms = round((time.perf_counter() - started) * 1000, 1)

        fields = {
            "method": request.method,
            "path": path,
            "status": response.status_code,
            "elapsed_ms": elapsed_ms,
        }
        if response.status_code >= 500:
            logger.error("http.response", **fields)
        elif response.status_code >= 400:
            logger.warning("http.response", **fields)
        else:
            logger.info("http.response", **fields)
        return response
