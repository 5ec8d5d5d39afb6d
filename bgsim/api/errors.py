"""Error responses and exception handlers.

Every error body has the shape ``{"error": "<reason_code>"}``.
"""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from bgsim.core.errors import ErrorCode
from bgsim.core.logging_config import get_logger

logger = get_logger(__name__)

HTTP_ERROR_CODES = {
    status.HTTP_404_NOT_FOUND: ErrorCode.NOT_FOUND,
    status.HTTP_405_METHOD_NOT_ALLOWED: ErrorCode.METHOD_NOT_ALLOWED,
}


def error_response(
    code: ErrorCode,
    status_code: int,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Build an ``{"error": code}`` response."""
    return JSONResponse(status_code=status_code, content={"error": code.value}, headers=headers)


async def http_exception_to_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    code = HTTP_ERROR_CODES.get(exc.status_code)
    if code is None:
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )
    return error_response(code, exc.status_code, headers=getattr(exc, "headers", None))


async def unhandled_exception_to_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        f"Unhandled exception while serving {request.method} {request.url.path}",
        exc_info=exc,
    )
    return error_response(ErrorCode.SERVER_ERROR, status.HTTP_500_INTERNAL_SERVER_ERROR)


def register_exception_handlers(app: FastAPI) -> None:
    """Map routing errors and unhandled exceptions onto error bodies."""
    app.add_exception_handler(StarletteHTTPException, http_exception_to_error)
    app.add_exception_handler(Exception, unhandled_exception_to_error)
