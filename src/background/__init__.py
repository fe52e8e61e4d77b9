"""
Background processing package: Celery app, beat schedule and outbox worker.
"""
