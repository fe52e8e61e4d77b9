"""
Celery tasks that publish and prune transactional outbox events.
"""

import asyncio

from celery import current_app

from src.application.services.transactional_outbox import TransactionalOutbox
from src.background.workers.outbox_worker import OutboxWorker
from src.config.database import get_async_session_factory
from src.config.logging import get_logger
from src.config.settings import settings
from src.infrastructure.external import build_event_publisher

logger = get_logger(__name__)


def run_async_in_new_loop(coro):
    """
    Run a coroutine in a fresh event loop.

    Each Celery task gets its own loop so nothing async leaks between
    tasks in the same worker process.
    """
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()
        asyncio.set_event_loop(None)


async def _publish_outbox_events(batch_size: int) -> int:
    # Engine per run: pooled connections are bound to the loop that made them
    session_factory = get_async_session_factory()
    publisher = build_event_publisher()
    try:
        async with session_factory() as session:
            worker = OutboxWorker(TransactionalOutbox(session), publisher)
            return await worker.process_pending_events(batch_size)
    finally:
        await publisher.close()
        await session_factory.kw["bind"].dispose()


async def _cleanup_outbox_events(days_old: int) -> int:
    session_factory = get_async_session_factory()
    try:
        async with session_factory() as session:
            return await TransactionalOutbox(session).cleanup_completed_events(days_old)
    finally:
        await session_factory.kw["bind"].dispose()


@current_app.task(bind=True, max_retries=3, name="publish_outbox_events_task")
def publish_outbox_events_task(self, batch_size: int = None):
    """Publish pending job events."""
    batch_size = batch_size or settings.OUTBOX_BATCH_SIZE

    try:
        published = run_async_in_new_loop(_publish_outbox_events(batch_size))
    except Exception as e:
        logger.error(
            "Outbox publish task failed",
            attempt=self.request.retries + 1,
            error=str(e),
        )
        raise self.retry(exc=e, countdown=30 * (2**self.request.retries))

    return {"status": "success", "published": published}


@current_app.task(bind=True, max_retries=2, name="cleanup_outbox_events_task")
def cleanup_outbox_events_task(self, days_old: int = None):
    """Delete completed events past the retention window."""
    days_old = days_old if days_old is not None else settings.OUTBOX_RETENTION_DAYS

    try:
        deleted = run_async_in_new_loop(_cleanup_outbox_events(days_old))
    except Exception as e:
        logger.error(
            "Outbox cleanup task failed",
            attempt=self.request.retries + 1,
            error=str(e),
        )
        raise self.retry(exc=e, countdown=300)

    return {"status": "success", "deleted": deleted}
