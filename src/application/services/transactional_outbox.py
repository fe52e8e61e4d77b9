"""
Transactional Outbox Pattern implementation for job notifications.
"""

import json
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import uuid4

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.config.logging import get_logger
from src.config.settings import settings
from src.domain.value_objects.job_status import JobAction

logger = get_logger(__name__)


class OutboxEventType(str, Enum):
    """Types of outbox events."""

    JOB_CREATED = "job_created"
    JOB_STATUS_CHANGED = "job_status_changed"
    ENGINEER_ASSIGNED = "engineer_assigned"
    ENGINEER_DECLINED = "engineer_declined"
    JOB_COMPLETED = "job_completed"
    JOB_CANCELLED = "job_cancelled"

    @classmethod
    def for_action(cls, action: JobAction) -> "OutboxEventType":
        """Notification type emitted for a lifecycle action."""
        return {
            JobAction.ASSIGN_ENGINEER: cls.ENGINEER_ASSIGNED,
            JobAction.ENGINEER_DECLINE: cls.ENGINEER_DECLINED,
            JobAction.COMPLETE: cls.JOB_COMPLETED,
            JobAction.CANCEL: cls.JOB_CANCELLED,
        }.get(JobAction(action), cls.JOB_STATUS_CHANGED)


class OutboxEventStatus(str, Enum):
    """Status of outbox events."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class OutboxEvent:
    """Outbox event written in the same transaction as the job change."""

    id: str
    event_type: OutboxEventType
    aggregate_id: str
    event_data: Dict[str, Any]
    status: OutboxEventStatus = OutboxEventStatus.PENDING
    retry_count: int = 0
    max_retries: int = 3
    created_at: Optional[datetime] = None
    processed_at: Optional[datetime] = None
    error_message: Optional[str] = None

    @property
    def can_retry(self) -> bool:
        return self.retry_count < self.max_retries


_SELECT_FIELDS = """
    id, event_type, aggregate_id, event_data, status,
    retry_count, max_retries, created_at, processed_at, error_message
"""


class TransactionalOutbox:
    """Transactional Outbox service.

    create_event only flushes: the caller's commit makes the event visible
    together with the job change. The mark_* methods are used by the
    publisher and commit on their own.
    """

    def __init__(self, db_session: AsyncSession):
        self.db_session = db_session
        self.logger = logger

    async def create_event(
        self,
        event_type: OutboxEventType,
        aggregate_id: Any,
        event_data: Dict[str, Any],
        max_retries: Optional[int] = None,
    ) -> OutboxEvent:
        """Create an outbox event within the current transaction."""
        event = OutboxEvent(
            id=str(uuid4()),
            event_type=OutboxEventType(event_type),
            aggregate_id=str(aggregate_id),
            event_data=event_data,
            max_retries=max_retries
            if max_retries is not None
            else settings.OUTBOX_MAX_RETRIES,
            created_at=datetime.now(timezone.utc),
        )

        await self._insert_event(event)

        self.logger.info(
            "Outbox event created",
            event_id=event.id,
            event_type=event.event_type.value,
            aggregate_id=event.aggregate_id,
        )

        return event

    async def _insert_event(self, event: OutboxEvent) -> None:
        stmt = text(
            """
            INSERT INTO outbox_events (
                id, event_type, aggregate_id, event_data, status,
                retry_count, max_retries, created_at
            ) VALUES (
                :id, :event_type, :aggregate_id, :event_data, :status,
                :retry_count, :max_retries, :created_at
            )
        """
        )

        await self.db_session.execute(
            stmt,
            {
                "id": event.id,
                "event_type": event.event_type.value,
                "aggregate_id": event.aggregate_id,
                "event_data": json.dumps(event.event_data, default=str),
                "status": event.status.value,
                "retry_count": event.retry_count,
                "max_retries": event.max_retries,
                "created_at": event.created_at,
            },
        )

        await self.db_session.flush()

    async def mark_event_processing(self, event_id: str) -> bool:
        """Claim an event; False when another worker already has it."""
        stmt = text(
            """
            UPDATE outbox_events
            SET status = :status, processed_at = :processed_at
            WHERE id = :event_id AND status IN (:pending_status, :failed_status)
        """
        )

        result = await self.db_session.execute(
            stmt,
            {
                "event_id": event_id,
                "status": OutboxEventStatus.PROCESSING.value,
                "processed_at": datetime.now(timezone.utc),
                "pending_status": OutboxEventStatus.PENDING.value,
                "failed_status": OutboxEventStatus.FAILED.value,
            },
        )

        await self.db_session.commit()

        return result.rowcount > 0

    async def mark_event_completed(self, event_id: str) -> None:
        stmt = text(
            """
            UPDATE outbox_events
            SET status = :status, processed_at = :processed_at, error_message = NULL
            WHERE id = :event_id
        """
        )

        await self.db_session.execute(
            stmt,
            {
                "event_id": event_id,
                "status": OutboxEventStatus.COMPLETED.value,
                "processed_at": datetime.now(timezone.utc),
            },
        )

        await self.db_session.commit()

    async def mark_event_failed(self, event_id: str, error_message: str) -> None:
        """Mark an event as failed and count the attempt."""
        stmt = text(
            """
            UPDATE outbox_events
            SET status = :status, error_message = :error_message,
                retry_count = retry_count + 1, processed_at = :processed_at
            WHERE id = :event_id
        """
        )

        await self.db_session.execute(
            stmt,
            {
                "event_id": event_id,
                "status": OutboxEventStatus.FAILED.value,
                "error_message": error_message[:1000],
                "processed_at": datetime.now(timezone.utc),
            },
        )

        await self.db_session.commit()

    async def get_pending_events(
        self, event_type: Optional[OutboxEventType] = None, limit: int = 100
    ) -> List[OutboxEvent]:
        """Get pending events, oldest first."""
        where_clause = "WHERE status = :pending_status"
        params: Dict[str, Any] = {
            "pending_status": OutboxEventStatus.PENDING.value,
            "limit": limit,
        }

        if event_type:
            where_clause += " AND event_type = :event_type"
            params["event_type"] = OutboxEventType(event_type).value

        stmt = text(
            f"""
            SELECT {_SELECT_FIELDS}
            FROM outbox_events
            {where_clause}
            ORDER BY created_at ASC
            LIMIT :limit
            """
        )

        try:
            result = await self.db_session.execute(stmt, params)
            events = [self._row_to_event(row) for row in result.fetchall()]
        except Exception as e:
            self.logger.error(
                "Error retrieving pending outbox events",
                error=str(e),
                event_type=params.get("event_type"),
                limit=limit,
                exc_info=True,
            )
            raise

        self.logger.debug("Retrieved pending outbox events", count=len(events))
        return events

    async def get_failed_events_for_retry(self, limit: int = 100) -> List[OutboxEvent]:
        """Failed events that still have retries left."""
        stmt = text(
            f"""
            SELECT {_SELECT_FIELDS}
            FROM outbox_events
            WHERE status = :failed_status AND retry_count < max_retries
            ORDER BY created_at ASC
            LIMIT :limit
            """
        )

        result = await self.db_session.execute(
            stmt,
            {"failed_status": OutboxEventStatus.FAILED.value, "limit": limit},
        )
        return [self._row_to_event(row) for row in result.fetchall()]

    async def cleanup_completed_events(
        self, days_old: Optional[int] = None, now: Optional[datetime] = None
    ) -> int:
        """Delete completed events older than the retention window."""
        days_old = days_old if days_old is not None else settings.OUTBOX_RETENTION_DAYS
        cutoff = (now or datetime.now(timezone.utc)) - timedelta(days=days_old)

        stmt = text(
            """
            DELETE FROM outbox_events
            WHERE status = :completed_status AND created_at < :cutoff
        """
        )

        result = await self.db_session.execute(
            stmt,
            {"completed_status": OutboxEventStatus.COMPLETED.value, "cutoff": cutoff},
        )
        await self.db_session.commit()

        deleted_count = result.rowcount
        self.logger.info(
            "Cleaned up completed outbox events",
            deleted_count=deleted_count,
            days_old=days_old,
        )

        return deleted_count

    def _row_to_event(self, row) -> OutboxEvent:
        # JSON columns come back decoded on PostgreSQL and as text on SQLite
        event_data = row[3] if isinstance(row[3], dict) else json.loads(row[3])

        return OutboxEvent(
            id=str(row[0]),
            event_type=OutboxEventType(row[1]),
            aggregate_id=row[2],
            event_data=event_data,
            status=OutboxEventStatus(row[4]),
            retry_count=row[5],
            max_retries=row[6],
            created_at=row[7],
            processed_at=row[8],
            error_message=row[9],
        )
