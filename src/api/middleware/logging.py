"""
Per-request access logging.
"""

import time
import uuid
from collections.abc import Awaitable, Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from src.config import bind_log_context, clear_log_context, get_logger

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Tags every log event of a request with its request id.

    The id comes from the caller's ``X-Request-ID`` header when present so a
    cron job can correlate its evaluation call with server logs; it is echoed
    back on the response either way.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:12]
        request.state.request_id = request_id

        clear_log_context()
        bind_log_context(request_id=request_id, method=request.method, path=request.url.path)
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "request_crashed",
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
            )
            raise
        else:
            elapsed = (time.perf_counter() - started) * 1000
            log = logger.warning if response.status_code >= 500 else logger.info
            log("request_finished", status=response.status_code, duration_ms=round(elapsed, 2))
            response.headers[REQUEST_ID_HEADER] = request_id
            response.headers["X-Response-Time"] = f"{elapsed:.2f}ms"
            return response
        finally:
            clear_log_context()
