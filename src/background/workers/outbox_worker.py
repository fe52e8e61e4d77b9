"""
Outbox Worker for publishing transactional outbox events.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from src.application.clock import Clock, utc_now
from src.application.interfaces.services import EventPublisherInterface
from src.application.services.transactional_outbox import (
    OutboxEvent,
    OutboxEventStatus,
    TransactionalOutbox,
)
from src.config.logging import get_logger
from src.config.settings import settings
from src.infrastructure.monitoring.metrics import record_outbox_event_processing

logger = get_logger(__name__)


def _as_utc(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


class OutboxWorker:
    """Drains pending outbox events to the event publisher."""

    def __init__(
        self,
        outbox_service: TransactionalOutbox,
        publisher: EventPublisherInterface,
        clock: Optional[Clock] = None,
        retry_base_minutes: int = 5,
    ):
        self.outbox_service = outbox_service
        self.publisher = publisher
        self.clock = clock or utc_now
        self.retry_base_minutes = retry_base_minutes
        self.processed_count = 0
        self.error_count = 0
        self.retry_count = 0

    async def process_pending_events(self, batch_size: Optional[int] = None) -> int:
        """
        Publish one batch of events.

        Pending events go first; a quarter of the batch is kept for failed
        events whose backoff has elapsed.

        Returns:
            Number of events published
        """
        batch_size = batch_size or settings.OUTBOX_BATCH_SIZE
        now = self.clock()

        pending_events = await self.outbox_service.get_pending_events(limit=batch_size)
        failed_events = await self.outbox_service.get_failed_events_for_retry(
            limit=max(1, batch_size // 4)
        )
        retryable = [event for event in failed_events if self._should_retry_event(event, now)]

        all_events = pending_events + retryable
        if not all_events:
            logger.debug("No pending or retryable outbox events")
            return 0

        published = 0
        for event in all_events:
            is_retry = event.status == OutboxEventStatus.FAILED

            # Another worker may have claimed it since we read the batch
            if not await self.outbox_service.mark_event_processing(event.id):
                continue

            try:
                await self.publisher.publish(
                    event.event_type.value, event.aggregate_id, event.event_data
                )
            except Exception as e:
                logger.error(
                    "Error publishing outbox event",
                    event_id=event.id,
                    event_type=event.event_type.value,
                    is_retry=is_retry,
                    error=str(e),
                )
                await self.outbox_service.mark_event_failed(event.id, str(e))
                record_outbox_event_processing(event.event_type.value, "failed")
                self.error_count += 1
                continue

            await self.outbox_service.mark_event_completed(event.id)
            record_outbox_event_processing(event.event_type.value, "completed")
            published += 1
            self.processed_count += 1
            if is_retry:
                self.retry_count += 1

        logger.info(
            "Outbox batch processed",
            pending_count=len(pending_events),
            retry_count=len(retryable),
            published_count=published,
            total_processed=self.processed_count,
            total_errors=self.error_count,
        )

        return published

    def _should_retry_event(self, event: OutboxEvent, now: datetime) -> bool:
        """
        Exponential backoff between attempts: 5, 15, 45 minutes...
        """
        if not event.can_retry:
            return False
        if not event.processed_at:
            return True

        delay = timedelta(minutes=self.retry_base_minutes * (3**event.retry_count))
        return _as_utc(event.processed_at) <= now - delay

    def get_stats(self) -> dict:
        """Get worker statistics."""
        total_operations = self.processed_count + self.error_count
        return {
            "total_processed": self.processed_count,
            "total_errors": self.error_count,
            "total_retries": self.retry_count,
            "success_rate": (self.processed_count / total_operations)
            if total_operations > 0
            else 0,
        }
