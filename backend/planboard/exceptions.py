"""
Errors raised by the scheduling engine and how the API reports them.

Every engine error is a PlanboardException carrying a stable error code and
the HTTP status the facade answers with. The engine raises them; only the
handlers at the bottom of this module know about HTTP responses.
"""

from typing import Any, Dict, List, Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from planboard.config import get_settings
from planboard.logging_config import get_logger

logger = get_logger(__name__)

HTTP_422 = 422


# =============================================================================
# Error Response Schema
# =============================================================================

class ErrorDetail(BaseModel):
    """One problem with the request."""
    loc: Optional[List[str]] = None  # e.g. ["body", "tasks"]
    msg: str
    type: str


class ErrorResponse(BaseModel):
    """Body of every error answered by the API."""
    error: str  # Error code, e.g. "not_found", "cycle_detected"
    message: str
    details: Optional[List[ErrorDetail]] = None


# =============================================================================
# Engine Errors
# =============================================================================

class PlanboardException(Exception):
    """Base exception for all Planboard errors."""

    error_code = "internal_error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, details: Optional[List[Dict[str, Any]]] = None):
        self.message = message
        self.details = details
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(
            error=self.error_code,
            message=self.message,
            details=[ErrorDetail(**d) for d in self.details] if self.details else None,
        )


class NotFoundError(PlanboardException):
    """A referenced task is not in the submitted snapshot."""

    error_code = "not_found"
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, resource: str, resource_id: str):
        super().__init__(f"{resource} with ID {resource_id} not found")
        self.resource = resource
        self.resource_id = resource_id


class CycleDetectedError(PlanboardException):
    """Adding a dependency would create a cycle."""

    error_code = "cycle_detected"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, predecessor_id: str, successor_id: str):
        super().__init__(
            "Adding this dependency would create a cycle in the task graph",
            details=[{
                "loc": ["body"],
                "msg": f"Dependency {predecessor_id} -> {successor_id} would create a cycle",
                "type": "cycle_error",
            }],
        )
        self.predecessor_id = predecessor_id
        self.successor_id = successor_id


class SelfDependencyError(PlanboardException):
    """Task cannot depend on itself."""

    error_code = "self_dependency"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, task_id: str):
        super().__init__(f"Task {task_id} cannot depend on itself")
        self.task_id = task_id


class DuplicateDependencyError(PlanboardException):
    """The successor already depends on the predecessor."""

    error_code = "duplicate_dependency"
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, predecessor_id: str, successor_id: str):
        super().__init__(f"Task {successor_id} already depends on {predecessor_id}")
        self.predecessor_id = predecessor_id
        self.successor_id = successor_id


class InvalidDateError(PlanboardException, ValueError):
    """
    A calendar date could not be parsed as ISO YYYY-MM-DD.

    Also a ValueError, so pydantic validators that parse dates turn it into
    an ordinary validation error.
    """

    error_code = "invalid_date"
    status_code = HTTP_422

    def __init__(self, value: Any):
        super().__init__(
            f"Invalid date {value!r}, expected YYYY-MM-DD",
            details=[{
                "loc": ["body"],
                "msg": f"{value!r} is not an ISO calendar date",
                "type": "date_error",
            }],
        )
        self.value = value


class ValidationError(PlanboardException):
    """A request the engine refuses to process."""

    error_code = "validation_error"
    status_code = HTTP_422


# Documented error bodies for routes, in the form FastAPI's `responses` expects
ERROR_RESPONSES = {
    code: {"model": ErrorResponse}
    for code in (status.HTTP_400_BAD_REQUEST, status.HTTP_404_NOT_FOUND, status.HTTP_409_CONFLICT)
}


# =============================================================================
# Exception Handlers
# =============================================================================

async def planboard_exception_handler(request: Request, exc: PlanboardException) -> JSONResponse:
    logger.info(f"{exc.error_code} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_response().model_dump(),
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Answer unexpected exceptions with a bare 500, logging the traceback."""
    logger.exception(f"Unhandled exception on {request.method} {request.url.path}: {exc}")
    body = ErrorResponse(error="internal_error", message="An unexpected error occurred")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=body.model_dump(),
    )


def register_exception_handlers(app):
    """
    Install the handlers on a FastAPI app.

    In debug mode unexpected exceptions are left to propagate so their
    traceback reaches the developer.
    """
    app.add_exception_handler(PlanboardException, planboard_exception_handler)
    if not get_settings().debug:
        app.add_exception_handler(Exception, generic_exception_handler)
