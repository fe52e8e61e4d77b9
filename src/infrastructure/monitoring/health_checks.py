"""
Health check implementations for the application.
"""

import asyncio
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, List, Optional

from src.config.logging import get_logger
from src.config.settings import settings
from src.infrastructure.database.connection import get_database_health
from src.infrastructure.external.redis_event_publisher import get_redis_health

logger = get_logger(__name__)

HealthCheck = Callable[[], Awaitable[Dict[str, Any]]]


class HealthChecker:
    """Runs component checks; only critical components gate readiness."""

    def __init__(
        self,
        db_session=None,
        checks: Optional[Dict[str, HealthCheck]] = None,
        critical: Optional[List[str]] = None,
        timeout: Optional[float] = None,
    ):
        self.db_session = db_session
        self.checks = checks or {
            "database": self._check_database,
            "redis": self._check_redis,
        }
        self.critical = critical if critical is not None else ["database"]
        self.timeout = timeout or settings.HEALTH_CHECK_TIMEOUT

    async def run_health_checks(self) -> Dict[str, Any]:
        """Run all health checks, each bounded by the check timeout."""
        results = {}

        for check_name, check_func in self.checks.items():
            try:
                results[check_name] = await asyncio.wait_for(
                    check_func(), timeout=self.timeout
                )
            except asyncio.TimeoutError:
                logger.error(
                    "Health check timed out", check_name=check_name, timeout=self.timeout
                )
                results[check_name] = {
                    "status": "error",
                    "error": f"timed out after {self.timeout}s",
                }
            except Exception as e:
                logger.error("Health check failed", check_name=check_name, error=str(e))
                results[check_name] = {"status": "error", "error": str(e)}

        return results

    async def check_readiness(self) -> Dict[str, Any]:
        """Check if the service is ready to receive traffic."""
        results = await self.run_health_checks()
        ready = all(
            results.get(name, {}).get("status") == "healthy" for name in self.critical
        )

        return {
            "status": "ready" if ready else "not_ready",
            "is_healthy": ready,
            "checks": results,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    async def _check_database(self) -> Dict[str, Any]:
        if self.db_session is None:
            return {"status": "unhealthy", "error": "no database session"}
        return await get_database_health(self.db_session)

    async def _check_redis(self) -> Dict[str, Any]:
        return await get_redis_health(settings.REDIS_URL)
