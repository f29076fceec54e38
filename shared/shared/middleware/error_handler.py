import logging
from collections.abc import Awaitable, Callable

from fastapi import Request, status
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


def error_envelope(request: Request, status_code: int, code: str, message: str) -> JSONResponse:
    """Build the ``{"error": {...}, "request_id": ...}`` body every service returns."""
    return JSONResponse(
        status_code=status_code,
        content={
            "error": {"code": code, "message": message},
            "request_id": getattr(request.state, "request_id", None),
        },
    )


async def error_envelope_middleware(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    try:
        return await call_next(request)
    except StarletteHTTPException as exc:
        return error_envelope(
            request,
            exc.status_code,
            exc.detail if isinstance(exc.detail, str) else "http_error",
            exc.detail if isinstance(exc.detail, str) else str(exc.detail),
        )
    except Exception:
        logger.exception("Unhandled exception")
        return error_envelope(
            request,
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "internal_error",
            "An unexpected error occurred",
        )
