"""
FastAPI application factory.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.api.middleware.error_handler import ErrorHandlerMiddleware
from src.api.middleware.logging import LoggingMiddleware
from src.api.routes import engineer, health, jobs, pricing
from src.config.logging import get_logger
from src.config.settings import settings

logger = get_logger(__name__)


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        debug=settings.DEBUG,
        description="Field-service job dispatch: booking, pricing and job lifecycle",
        openapi_url=f"{settings.API_PREFIX}/openapi.json"
        if settings.ENABLE_SWAGGER
        else None,
        docs_url=f"{settings.API_PREFIX}/docs" if settings.ENABLE_SWAGGER else None,
        redoc_url=f"{settings.API_PREFIX}/redoc" if settings.ENABLE_SWAGGER else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    ErrorHandlerMiddleware(app)
    LoggingMiddleware(app)

    app.include_router(health.router, prefix=settings.API_PREFIX)
    app.include_router(jobs.router, prefix=settings.API_PREFIX)
    app.include_router(pricing.router, prefix=settings.API_PREFIX)
    app.include_router(engineer.router, prefix=settings.API_PREFIX)

    return app
