"""
Database connection health utilities.
"""

import time
from typing import Any, Dict

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.config.logging import get_logger

logger = get_logger(__name__)


async def get_database_health(session: AsyncSession) -> Dict[str, Any]:
    """Round-trip a trivial query on the given session."""
    start_time = time.time()

    try:
        result = await session.execute(text("SELECT 1"))
        result.fetchone()
    except SQLAlchemyError as e:
        logger.error("Database health check failed", error=str(e))
        return {"status": "unhealthy", "error": str(e)}

    return {
        "status": "healthy",
        "response_time_ms": round((time.time() - start_time) * 1000, 2),
        "dialect": session.bind.dialect.name if session.bind else "unknown",
    }
