"""
Response envelope helpers

Every endpoint answers with {"ok": bool, "data": ..., "message": ...}.
Handlers return success(...) and raise HTTPException for failures; the
exception handlers registered by install_exception_handlers() turn those
into the failure envelope.
"""
from typing import Any, Optional
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging

from ..config import settings

logger = logging.getLogger(__name__)


def success(data: Any = None, message: Optional[str] = None) -> dict:
    return {"ok": True, "data": jsonable_encoder(data), "message": message}


def failure_body(message: Any) -> dict:
    if isinstance(message, Exception):
        message = str(message)
    return {"ok": False, "data": None, "message": message}


def failure(status_code: int, message: Any, headers: Optional[dict] = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=failure_body(message), headers=headers)


def format_validation_errors(exc: RequestValidationError) -> str:
    """Collapse pydantic errors into one readable line"""
    parts = []
    for error in exc.errors():
        loc = [str(p) for p in error.get("loc", ()) if p not in ("body", "query", "path", "form")]
        field = ".".join(loc)
        msg = error.get("msg", "Invalid value")
        parts.append(f"{field}: {msg}" if field else msg)
    return "; ".join(parts) or "Invalid request"


def install_exception_handlers(app: FastAPI) -> None:

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
            return failure(exc.status_code, f"Endpoint not found: {request.url.path}")
        return failure(exc.status_code, exc.detail, headers=getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        message = format_validation_errors(exc)
        logger.info(f"Validation failed on {request.method} {request.url.path}: {message}")
        return failure(status.HTTP_400_BAD_REQUEST, message)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        request_id = getattr(request.state, "request_id", "unknown")

        logger.error(
            f"❌ Unhandled exception [Request ID: {request_id}]: {str(exc)}",
            exc_info=True
        )

        # Hide internal errors in production
        message = str(exc) if settings.DEBUG else "Internal server error"
        return failure(status.HTTP_500_INTERNAL_SERVER_ERROR, message)
