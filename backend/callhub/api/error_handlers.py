"""Error Handlers - global exception handlers for the CallHub API.

Invariants:
    - CallHubError -> flat {"error": message, "code", "category"} with its http_status
    - RequestValidationError -> 400 with field-level error details
    - Exception (catch-all) -> 500, never leaks internal details

Design Decisions:
    - Three-layer handler: domain (CallHubError), validation (Pydantic), catch-all (Exception)
    - Kept out of main.py so the app module only wires things together
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from callhub.core.errors import CallHubError

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_callhub_error_handler(app)
    _register_validation_error_handler(app)
    _register_generic_error_handler(app)


def _register_callhub_error_handler(app: FastAPI) -> None:
    """Register domain/infrastructure error handler."""

    @app.exception_handler(CallHubError)
    async def callhub_error_handler(request: Request, exc: CallHubError):
        """Handle all CallHub domain/infrastructure errors."""
        logger.error(
            f"CallHubError: {exc.message}",
            extra={"error_code": exc.code, "path": request.url.path},
        )
        return JSONResponse(
            status_code=exc.http_status, content=exc.to_response(),
        )


def _register_validation_error_handler(app: FastAPI) -> None:
    """Register Pydantic validation error handler."""

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        """Handle Pydantic validation errors."""
        logger.warning(
            f"Validation error on {request.url.path}: {exc.errors()}",
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_build_validation_error_response(exc),
        )


def _register_generic_error_handler(app: FastAPI) -> None:
    """Register catch-all error handler."""

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all: never leaks internal details."""
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            exc_info=True,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": "An unexpected error occurred",
                "code": "INTERNAL_ERROR",
                "category": "internal",
            },
        )


def _build_validation_error_response(exc: RequestValidationError) -> dict:
    """Build structured validation error response."""
    return {
        "error": "Invalid request data",
        "code": "VALIDATION_ERROR",
        "category": "validation",
        "details": [
            {
                "field": ".".join(str(loc) for loc in e["loc"]),
                "message": e["msg"],
                "type": e["type"],
            }
            for e in exc.errors()
        ],
    }
