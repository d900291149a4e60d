"""
Error taxonomy for the Tasklist API and the handlers that render it.

Every error body carries a ``message`` key; the client shows it verbatim.
"""

from typing import Any, Dict, List, Optional

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger

from app.config import settings


class TasklistError(Exception):
    """Base class for errors that map onto an HTTP status."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        return {"message": self.message}


class ValidationError(TasklistError):
    """Malformed or missing input."""

    status_code = 400

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.errors = errors or []

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        if self.errors:
            result["errors"] = self.errors
        return result


class AuthError(TasklistError):
    """Bad credentials or an invalid/expired session token."""

    status_code = 401


class NotFoundError(TasklistError):
    status_code = 404


class ConflictError(TasklistError):
    """A unique field (user email) already exists."""

    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        if self.field:
            result["field"] = self.field
        return result


class StoreError(TasklistError):
    """Persistence-layer failure. The message is never shown in production."""

    status_code = 500


GENERIC_ERROR_MESSAGE = "Something went wrong!"


def _internal_error_response(exc: Exception) -> JSONResponse:
    content: Dict[str, Any] = {"message": GENERIC_ERROR_MESSAGE}
    if settings.is_development:
        content["error"] = str(exc)
    return JSONResponse(status_code=500, content=content)


async def tasklist_exception_handler(request: Request, exc: TasklistError) -> JSONResponse:
    if isinstance(exc, StoreError):
        logger.opt(exception=exc).error(
            f"Store failure on {request.method} {request.url.path}: {exc.message}")
        return _internal_error_response(exc)

    headers = None
    if isinstance(exc, AuthError):
        headers = {"WWW-Authenticate": "Bearer"}

    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
        headers=headers
    )


async def request_validation_exception_handler(
    request: Request,
    exc: RequestValidationError
) -> JSONResponse:
    """Report body/path validation failures as 400 instead of FastAPI's 422."""
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ())[1:])
        messages.append(f"{location}: {error.get('msg')}" if location else error.get("msg"))

    return JSONResponse(
        status_code=400,
        content={"message": "Validation Error", "errors": messages}
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.opt(exception=exc).error(
        f"Unhandled error on {request.method} {request.url.path}")
    return _internal_error_response(exc)
