"""Access logging for the local API."""

import time
import uuid
from collections.abc import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from bgsim.core.logging_config import get_logger

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

# Polled by the desktop client; logged at debug level only
QUIET_PATHS = frozenset({"/health"})


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs one line per request outcome and tags the response with a request id.

    A caller-supplied ``X-Request-ID`` is reused so the builder page (or
    any other client) can correlate its own logs with ours.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:8]
        path = request.url.path
        context = {
            "request_id": request_id,
            "method": request.method,
            "path": path,
        }
        if request.query_params:
            context["query"] = dict(request.query_params)

        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                f"{request.method} {path} raised {type(e).__name__}",
                extra={"extra_data": {**context, "elapsed_ms": _elapsed_ms(started)}},
            )
            raise

        context.update(status=response.status_code, elapsed_ms=_elapsed_ms(started))
        message = f"{request.method} {path} -> {response.status_code}"
        if response.status_code >= 500:
            logger.warning(message, extra={"extra_data": context})
        elif path in QUIET_PATHS:
            logger.debug(message, extra={"extra_data": context})
        else:
            logger.info(message, extra={"extra_data": context})

        response.headers[REQUEST_ID_HEADER] = request_id
        return response


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)
