"""
Main application entry point.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from src.api.app import create_app
from src.config.database import async_session_factory
from src.config.logging import configure_logging, get_logger
from src.config.settings import settings

configure_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info(
        "Starting Field Dispatch Service",
        environment=settings.ENVIRONMENT,
        price_lock_point=settings.PRICE_LOCK_POINT,
    )

    yield

    logger.info("Shutting down Field Dispatch Service")
    engine = async_session_factory.kw.get("bind")
    if engine is not None:
        await engine.dispose()


def create_main_app() -> FastAPI:
    """Create the main FastAPI application."""
    app = create_app()
    app.router.lifespan_context = lifespan
    return app


app = create_main_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=False,
        log_level=settings.LOG_LEVEL.lower(),
    )
