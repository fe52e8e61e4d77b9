"""
External integrations package.
"""

from typing import Optional

from src.config.settings import settings

from .geonames_client import GeoNamesClient
from .http_client import HTTPClient
from .log_event_publisher import LogEventPublisher
from .redis_event_publisher import RedisEventPublisher, get_redis_health


def build_event_publisher(backend: Optional[str] = None):
    """Publisher selected by EVENT_PUBLISHER."""
    if (backend or settings.EVENT_PUBLISHER) == "redis":
        return RedisEventPublisher()
    return LogEventPublisher()


__all__ = [
    "GeoNamesClient",
    "HTTPClient",
    "LogEventPublisher",
    "RedisEventPublisher",
    "build_event_publisher",
    "get_redis_health",
]
