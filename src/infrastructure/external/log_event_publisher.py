"""
Publisher that hands outbox events to the log stream.
"""

from typing import Any, Dict

from src.application.interfaces.services import EventPublisherInterface
from src.config.logging import get_logger

logger = get_logger(__name__)


class LogEventPublisher(EventPublisherInterface):
    """Default publisher: notification delivery reads job events from the logs."""

    async def publish(
        self, event_type: str, aggregate_id: str, payload: Dict[str, Any]
    ) -> None:
        logger.info(
            "Job event",
            event_type=event_type,
            aggregate_id=aggregate_id,
            payload=payload,
        )

    async def close(self) -> None:
        return None
