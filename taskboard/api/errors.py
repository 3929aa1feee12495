"""Exception handlers that render typed errors as JSON responses."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError

from taskboard.errors import AuthenticationError, TaskboardError, TransientError

logger = logging.getLogger(__name__)


async def taskboard_error_handler(request: Request, exc: TaskboardError) -> JSONResponse:
    """Render a TaskboardError as a JSON error response."""
    headers = None
    if isinstance(exc, AuthenticationError):
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code},
        headers=headers,
    )


async def operational_error_handler(request: Request, exc: OperationalError) -> JSONResponse:
    """Database connectivity problems are reported as transient."""
    logger.error(f"Database error on {request.method} {request.url.path}: {exc}")
    return await taskboard_error_handler(request, TransientError("Database unavailable"))


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the error handlers to an application."""
    app.add_exception_handler(TaskboardError, taskboard_error_handler)
    app.add_exception_handler(OperationalError, operational_error_handler)
