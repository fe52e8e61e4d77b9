"""
Unit tests for HealthChecker.
"""

import asyncio
from unittest.mock import AsyncMock

import pytest

from src.infrastructure.monitoring.health_checks import HealthChecker


class TestHealthChecker:
    """Test cases for HealthChecker."""

    @pytest.mark.asyncio
    async def test_ready_when_critical_checks_pass(self):
        # Arrange
        checker = HealthChecker(
            checks={
                "database": AsyncMock(return_value={"status": "healthy"}),
                "redis": AsyncMock(side_effect=RuntimeError("boom")),
            }
        )

        # Act
        result = await checker.check_readiness()

        # Assert
        assert result["status"] == "ready"
        assert result["is_healthy"] is True
        assert result["checks"]["redis"] == {"status": "error", "error": "boom"}
        assert "timestamp" in result

    @pytest.mark.asyncio
    async def test_not_ready_when_database_is_down(self):
        checker = HealthChecker(
            checks={
                "database": AsyncMock(
                    return_value={"status": "unhealthy", "error": "refused"}
                ),
                "redis": AsyncMock(return_value={"status": "healthy"}),
            }
        )

        result = await checker.check_readiness()

        assert result["status"] == "not_ready"
        assert result["is_healthy"] is False

    @pytest.mark.asyncio
    async def test_missing_critical_check_is_not_ready(self):
        checker = HealthChecker(
            checks={"redis": AsyncMock(return_value={"status": "healthy"})},
            critical=["database"],
        )

        result = await checker.check_readiness()

        assert result["status"] == "not_ready"

    @pytest.mark.asyncio
    async def test_database_check_without_session(self):
        result = await HealthChecker()._check_database()

        assert result == {"status": "unhealthy", "error": "no database session"}

    @pytest.mark.asyncio
    async def test_slow_check_times_out(self):
        async def hanging():
            await asyncio.sleep(1)
            return {"status": "healthy"}

        checker = HealthChecker(checks={"database": hanging}, timeout=0.01)

        result = await checker.check_readiness()

        assert result["status"] == "not_ready"
        assert result["checks"]["database"] == {
            "status": "error",
            "error": "timed out after 0.01s",
        }
