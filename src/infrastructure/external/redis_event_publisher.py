"""
Redis-backed publisher for outbox events.
"""

import json
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import redis.asyncio as redis

from src.application.interfaces.services import EventPublisherInterface
from src.config.logging import get_logger
from src.config.settings import settings

logger = get_logger(__name__)


class RedisEventPublisher(EventPublisherInterface):
    """Pushes job events onto a Redis list for the notification service."""

    def __init__(self, redis_client=None, channel: Optional[str] = None):
        self.redis = redis_client or redis.from_url(settings.REDIS_URL)
        self.channel = channel or settings.JOB_EVENTS_CHANNEL

    async def publish(
        self, event_type: str, aggregate_id: str, payload: Dict[str, Any]
    ) -> None:
        message = {
            "event_type": event_type,
            "aggregate_id": aggregate_id,
            "payload": payload,
            "published_at": datetime.now(timezone.utc).isoformat(),
        }

        await self.redis.rpush(self.channel, json.dumps(message, default=str))

        logger.info(
            "Job event published",
            channel=self.channel,
            event_type=event_type,
            aggregate_id=aggregate_id,
        )

    async def close(self) -> None:
        await self.redis.aclose()


async def get_redis_health(redis_url: Optional[str] = None) -> Dict[str, Any]:
    """Ping Redis and report round-trip time."""
    client = redis.from_url(redis_url or settings.REDIS_URL)
    started = datetime.now(timezone.utc)
    try:
        await client.ping()
        elapsed = (datetime.now(timezone.utc) - started).total_seconds() * 1000
        return {"status": "healthy", "response_time_ms": round(elapsed, 2)}
    except redis.RedisError as e:
        logger.error("Redis health check failed", error=str(e))
        return {"status": "unhealthy", "error": str(e)}
    finally:
        await client.aclose()
