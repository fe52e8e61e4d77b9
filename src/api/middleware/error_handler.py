"""
Error handling middleware.
"""

import traceback
from typing import Optional

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from src.application.services.retry_handler import CircuitOpenError
from src.config.logging import get_logger
from src.domain.exceptions.lookup_error import ExternalLookupFailed
from src.domain.exceptions.pricing_error import PricingInputError, PricingUnavailable
from src.domain.exceptions.schedule_error import ScheduleError
from src.domain.exceptions.token_error import TokenInvalid
from src.domain.exceptions.transition_error import (
    ActorNotPermitted,
    ConcurrentModification,
    InvalidTransition,
    TransitionPayloadError,
)
from src.domain.exceptions.validation_error import JobNotFound, ValidationError

logger = get_logger(__name__)

# Most specific class first; lookup walks the exception's MRO
CLIENT_ERRORS = {
    InvalidTransition: (status.HTTP_409_CONFLICT, "Invalid Transition", "invalid_transition"),
    ConcurrentModification: (status.HTTP_409_CONFLICT, "Conflict", "concurrent_modification"),
    ActorNotPermitted: (status.HTTP_403_FORBIDDEN, "Forbidden", "actor_not_permitted"),
    TransitionPayloadError: (
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "Invalid Payload",
        "payload_error",
    ),
    ScheduleError: (status.HTTP_422_UNPROCESSABLE_ENTITY, "Schedule Error", "schedule_error"),
    PricingInputError: (
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "Pricing Error",
        "pricing_input_error",
    ),
    PricingUnavailable: (status.HTTP_404_NOT_FOUND, "No Coverage", "no_coverage"),
    TokenInvalid: (status.HTTP_404_NOT_FOUND, "Link Expired", "link_expired"),
    JobNotFound: (status.HTTP_404_NOT_FOUND, "Not Found", "job_not_found"),
    ValidationError: (status.HTTP_400_BAD_REQUEST, "Validation Error", "validation_error"),
    CircuitOpenError: (
        status.HTTP_503_SERVICE_UNAVAILABLE,
        "Service Unavailable",
        "circuit_open",
    ),
}


def error_body(error: str, message: str, error_type: str) -> dict:
    return {"error": error, "message": message, "type": error_type}


def _client_error(exc: Exception) -> Optional[tuple]:
    for cls in type(exc).__mro__:
        if cls in CLIENT_ERRORS:
            return CLIENT_ERRORS[cls]
    return None


class ErrorHandlerMiddleware:
    """Error handling middleware for FastAPI."""

    def __init__(self, app: FastAPI):
        self.app = app
        self.add_error_handlers()

    def add_error_handlers(self) -> None:
        """Add custom error handlers to FastAPI app."""
        add_error_handlers(self.app)


def add_error_handlers(app: FastAPI) -> None:
    """Add custom error handlers to FastAPI app."""

    async def domain_error_handler(request: Request, exc: Exception):
        status_code, error, error_type = _client_error(exc)
        logger.warning(
            "Request rejected",
            error_type=error_type,
            error=str(exc),
            path=request.url.path,
        )
        return JSONResponse(
            status_code=status_code,
            content=error_body(error, str(exc), error_type),
        )

    for exc_class in CLIENT_ERRORS:
        app.add_exception_handler(exc_class, domain_error_handler)

    @app.exception_handler(ExternalLookupFailed)
    async def lookup_error_handler(request: Request, exc: ExternalLookupFailed):
        logger.error("External lookup error", error=str(exc), path=request.url.path)
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content=error_body("Lookup Error", str(exc), "external_lookup_error"),
        )

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError):
        logger.error("Database error", error=str(exc), path=request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_body(
                "Database Error", "A database error occurred", "database_error"
            ),
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body("HTTP Error", exc.detail, "http_error"),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.error(
            "Unhandled exception",
            error=str(exc),
            path=request.url.path,
            traceback=traceback.format_exc(),
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_body(
                "Internal Server Error",
                "An unexpected error occurred",
                "internal_error",
            ),
        )
