"""
Health check endpoints for the application.
"""

from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from src.config.database import get_db_session
from src.config.logging import get_logger
from src.config.settings import settings
from src.infrastructure.monitoring.health_checks import HealthChecker
from src.infrastructure.monitoring.metrics import get_metrics, get_metrics_content_type

logger = get_logger(__name__)
router = APIRouter(prefix="/health", tags=["health"])


async def get_health_checker(
    db: AsyncSession = Depends(get_db_session),
) -> HealthChecker:
    """Get health checker instance."""
    return HealthChecker(db)


@router.get("/")
async def health_check() -> Dict[str, Any]:
    """Liveness: the process is up and serving requests."""
    return {
        "status": "healthy",
        "version": settings.APP_VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/ready")
async def readiness_check(
    health_checker: HealthChecker = Depends(get_health_checker),
) -> Dict[str, Any]:
    """Readiness: the database answers."""
    readiness = await health_checker.check_readiness()

    if not readiness["is_healthy"]:
        logger.warning("Service not ready", checks=readiness["checks"])
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service not ready",
        )

    return readiness


@router.get("/metrics")
async def prometheus_metrics() -> Response:
    """Prometheus metrics endpoint."""
    return Response(content=get_metrics(), media_type=get_metrics_content_type())
