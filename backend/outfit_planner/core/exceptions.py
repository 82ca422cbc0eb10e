"""
Error taxonomy of the outfit planner and the FastAPI handlers that render it.

Every planner error carries an HTTP status and a stable ``error_code`` so the
client can decide between a retry affordance and a form error.
"""
import logging
import traceback
from typing import Any, Dict, Optional

from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

logger = logging.getLogger(__name__)


class PlannerException(Exception):
    """Base class. Subclasses set ``status_code`` and ``error_code``."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code: str = "INTERNAL_ERROR"

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        if error_code is not None:
            self.error_code = error_code
        self.details = details or {}


class ValidationError(PlannerException):
    """Malformed or missing request fields. Raised before any I/O."""

    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "VALIDATION_ERROR"

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, details={"field": field} if field else None)


class NotFoundError(PlannerException):
    status_code = status.HTTP_404_NOT_FOUND
    error_code = "NOT_FOUND"

    def __init__(self, resource: str, resource_id: Any = None):
        label = f"{resource} '{resource_id}'" if resource_id else resource
        super().__init__(f"{label} not found", details={"resource": resource, "id": resource_id})


class RecommenderError(PlannerException):
    """Generative recommender failed, timed out, or returned unusable output."""

    status_code = status.HTTP_502_BAD_GATEWAY
    error_code = "RECOMMENDER_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(f"Recommender error: {message}", details=details)


class StoreError(PlannerException):
    """Persistence layer unreachable or a query failed."""

    error_code = "STORE_ERROR"

    def __init__(self, message: str = "Database operation failed"):
        super().__init__(message)


class ResolutionError(PlannerException):
    """None of an outfit's item ids resolve to a wardrobe item any more."""

    status_code = status.HTTP_502_BAD_GATEWAY
    error_code = "RESOLUTION_ERROR"

    def __init__(self, outfit_id: str):
        super().__init__(f"Outfit '{outfit_id}' has no resolvable items", details={"outfit_id": outfit_id})


class DailyOutfitError(PlannerException):
    """The daily outfit could not be produced; clients offer a retry."""

    status_code = status.HTTP_502_BAD_GATEWAY
    error_code = "DAILY_OUTFIT_ERROR"


class ErrorResponse(BaseModel):
    """Body of every error response"""
    success: bool = False
    error_code: str
    message: str
    details: Optional[Dict[str, Any]] = None


def _error_response(status_code: int, error_code: str, message: str, details=None) -> JSONResponse:
    body = ErrorResponse(error_code=error_code, message=message, details=details or None)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


# HTTP status -> error code for framework-raised HTTPExceptions
_HTTP_ERROR_CODES = {
    status.HTTP_400_BAD_REQUEST: "BAD_REQUEST",
    status.HTTP_404_NOT_FOUND: "NOT_FOUND",
    status.HTTP_405_METHOD_NOT_ALLOWED: "METHOD_NOT_ALLOWED",
}


async def planner_exception_handler(request: Request, exc: PlannerException) -> JSONResponse:
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(f"{request.method} {request.url.path} -> {exc.error_code}: {exc.message}")
    return _error_response(exc.status_code, exc.error_code, exc.message, exc.details)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Request body validation failures use the planner's 400 format."""
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(p) for p in first.get("loc", ()) if p != "body") or None
    return _error_response(
        status.HTTP_400_BAD_REQUEST,
        ValidationError.error_code,
        first.get("msg", "Invalid request"),
        {"field": field} if field else None,
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    if exc.status_code >= 500:
        error_code = "SERVER_ERROR"
    else:
        error_code = _HTTP_ERROR_CODES.get(exc.status_code, "HTTP_ERROR")
    return _error_response(exc.status_code, error_code, str(exc.detail))


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last resort: log with traceback, hide details outside development."""
    logger.error(
        f"Unhandled {type(exc).__name__} on {request.method} {request.url.path}: {exc}",
        exc_info=True,
    )
    from ..config import settings

    if settings.is_development:
        return _error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            PlannerException.error_code,
            str(exc),
            {"traceback": traceback.format_exc()},
        )
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        PlannerException.error_code,
        "An unexpected error occurred",
    )
