# flowstate/errors.py

from __future__ import annotations

import logging
import traceback
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger("flowstate.http")


class TaskServiceError(Exception):
    """Base class for errors the service maps onto HTTP responses."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    public_message: str = "Something went wrong!"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.public_message
        super().__init__(self.message)

    def to_response(self, *, debug: bool = False) -> dict[str, Any]:
        body: dict[str, Any] = {"error": self.public_message}
        if debug and self.message != self.public_message:
            body["message"] = self.message
        return body


class ValidationError(TaskServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    public_message = "Validation failed"

    def __init__(self, message: str, fields: list[str] | None = None) -> None:
        super().__init__(message)
        self.fields = list(fields or [])

    def to_response(self, *, debug: bool = False) -> dict[str, Any]:
        return {"error": self.message, "fields": self.fields}


class NotFoundError(TaskServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    public_message = "Task not found"

    def __init__(self, task_id: int | None = None) -> None:
        self.task_id = task_id
        super().__init__(self.public_message)

    def to_response(self, *, debug: bool = False) -> dict[str, Any]:
        return {"error": self.public_message}


class InvalidInputError(TaskServiceError):
    """A storage call received something other than a task list."""

    public_message = "Failed to persist tasks"


class StorageCorruptionError(TaskServiceError):
    """Backing document is unreadable; raised only when reseeding is disabled."""

    public_message = "Task storage is corrupted"


class StorageIOError(TaskServiceError):
    """Disk-level write failure (permissions, disk full, ...)."""

    public_message = "Failed to persist tasks"


# ==========================
#  HANDLERS
# ==========================
def _debug(request: Request) -> bool:
    settings = getattr(request.app.state, "settings", None)
    return bool(settings and settings.is_development)


async def task_service_error_handler(request: Request, exc: TaskServiceError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            "request_failed",
            extra={"path": request.url.path, "error_type": type(exc).__name__, "detail": exc.message},
        )
    return JSONResponse(status_code=exc.status_code, content=exc.to_response(debug=_debug(request)))


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields: list[str] = []
    messages: list[str] = []
    for error in exc.errors():
        loc = [str(x) for x in error.get("loc", ()) if x not in ("body", "query", "path")]
        name = ".".join(loc) or "body"
        if name not in fields:
            fields.append(name)
        messages.append(f"{name}: {error.get('msg', 'invalid value')}")

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Invalid request. " + "; ".join(messages), "fields": fields},
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
        content: dict[str, Any] = {"error": "Route not found", "path": request.url.path}
    else:
        content = {"error": exc.detail}
    return JSONResponse(status_code=exc.status_code, content=content, headers=getattr(exc, "headers", None))


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_error", extra={"path": request.url.path, "error_type": type(exc).__name__})
    content: dict[str, Any] = {"error": "Something went wrong!"}
    if _debug(request):
        content["message"] = str(exc)
        content["stack"] = traceback.format_exception(exc)
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(TaskServiceError, task_service_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, request_validation_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, unhandled_exception_handler)
