"""
HTTP middleware.

- ``RequestIDMiddleware`` propagates or generates an ``X-Request-ID`` and
  binds it to :data:`~equityhub.core.logging.request_id_var` so every log
  record written while serving the request carries it.
- ``RequestTimingMiddleware`` adds ``X-Process-Time`` and writes one access
  log line per request.
"""

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from equityhub.core.logging import request_id_var

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

# Requests slower than this are logged at WARNING.
SLOW_REQUEST_MS = 500


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Attach a request ID to the request, the logging context and the response.

    An incoming ``X-Request-ID`` (from a gateway or the client) is reused;
    otherwise a UUID4 is generated.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id
        token = request_id_var.set(request_id)
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


class RequestTimingMiddleware(BaseHTTPMiddleware):
    """Measure wall-clock time per request and log it."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        start = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000

        response.headers["X-Process-Time"] = f"{elapsed_ms:.2f}ms"

        extra = {
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "elapsed_ms": round(elapsed_ms, 2),
            "client_ip": request.client.host if request.client else None,
        }
        if elapsed_ms > SLOW_REQUEST_MS:
            logger.warning(
                "%s %s -> %d in %.2fms (SLOW)",
                request.method,
                request.url.path,
                response.status_code,
                elapsed_ms,
                extra=extra,
            )
        else:
            logger.info(
                "%s %s -> %d in %.2fms",
                request.method,
                request.url.path,
                response.status_code,
                elapsed_ms,
                extra=extra,
            )
        return response
