"""
Background tasks package.
"""

from .outbox_tasks import cleanup_outbox_events_task, publish_outbox_events_task

__all__ = [
    "cleanup_outbox_events_task",
    "publish_outbox_events_task",
]
