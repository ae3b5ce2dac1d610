from __future__ import annotations

import structlog
from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse

logger = structlog.get_logger()


class AppError(HTTPException):
    """Base application error."""

    def __init__(self, detail: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR) -> None:
        super().__init__(status_code=status_code, detail=detail)


class NotFoundError(AppError):
    def __init__(self, detail: str = "Resource not found") -> None:
        super().__init__(detail=detail, status_code=status.HTTP_404_NOT_FOUND)


class ValidationError(AppError):
    def __init__(self, detail: str = "Validation error") -> None:
        super().__init__(detail=detail, status_code=status.HTTP_422_UNPROCESSABLE_ENTITY)


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Render an AppError as a failed envelope.

    Logical failures travel as ``{"success": false, "error": ...}`` with
    HTTP 200 so clients can tell them apart from transport failures.

    Args:
        request: The request that raised.
        exc: The raised application error.

    Returns:
        A 200 JSON response carrying the failed envelope.
    """
    logger.info(
        "request_logical_failure",
        method=request.method,
        path=request.url.path,
        kind=type(exc).__name__,
        detail=exc.detail,
    )
    return JSONResponse(status_code=status.HTTP_200_OK, content={"success": False, "error": exc.detail})
