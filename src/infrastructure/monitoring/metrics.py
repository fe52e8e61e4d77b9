"""
Prometheus metrics for job dispatch monitoring.
"""

import os

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
    multiprocess,
)

from src.config.logging import get_logger
from src.config.settings import settings

logger = get_logger(__name__)


def _build_registry() -> CollectorRegistry:
    registry = CollectorRegistry()
    multiproc_dir = os.getenv("PROMETHEUS_MULTIPROC_DIR")
    if not multiproc_dir:
        return registry

    if not os.path.isdir(multiproc_dir) or not os.access(multiproc_dir, os.W_OK):
        logger.warning(
            "PROMETHEUS_MULTIPROC_DIR is not a writable directory",
            path=multiproc_dir,
        )
        return registry

    try:
        multiprocess.MultiProcessCollector(registry)
    except ValueError as e:
        logger.warning("Failed to initialize multiprocess collector", error=str(e))
        return CollectorRegistry()
    return registry


registry = _build_registry()


class DummyMetric:
    """No-op stand-in when metrics are disabled or a metric cannot be registered."""

    def labels(self, *args, **kwargs):
        return self

    def inc(self, amount=1):
        pass

    def observe(self, value):
        pass


def get_registry() -> CollectorRegistry:
    return registry


def _get_metric(metric_class, *args, **kwargs):
    if not settings.ENABLE_METRICS:
        return DummyMetric()
    try:
        return metric_class(*args, **kwargs, registry=get_registry())
    except ValueError as e:
        # Duplicate registration, e.g. when the module is reloaded
        logger.warning(
            "Failed to create metric", metric=metric_class.__name__, error=str(e)
        )
        return DummyMetric()


JOBS_CREATED = _get_metric(
    Counter,
    "jobs_created_total",
    "Total number of jobs created",
    ["service_level", "is_out_of_hours"],
)

JOB_TRANSITIONS = _get_metric(
    Counter,
    "job_transitions_total",
    "Job status transitions by action and outcome",
    ["action", "outcome"],
)

JOB_TRANSITION_CONFLICTS = _get_metric(
    Counter,
    "job_transition_conflicts_total",
    "Compare-and-set conflicts on job status",
    ["action"],
)

PRICE_QUOTES = _get_metric(
    Counter,
    "price_quotes_total",
    "Price quotes served",
    ["available"],
)

PRICING_CUSTOMER_TOTAL = _get_metric(
    Histogram,
    "pricing_customer_total_cents",
    "Customer total of locked prices in cents",
    buckets=[5000, 10000, 25000, 50000, 100000, 250000, 500000],
)

EXTERNAL_LOOKUP_FAILURES = _get_metric(
    Counter,
    "external_lookup_failures_total",
    "Failed external lookups that fell back to defaults",
    ["provider"],
)

OUTBOX_EVENTS_PROCESSED = _get_metric(
    Counter,
    "outbox_events_processed_total",
    "Outbox events handed to the publisher",
    ["event_type", "status"],
)

API_REQUESTS = _get_metric(
    Counter,
    "api_requests_total",
    "Total number of API requests",
    ["method", "endpoint", "status_code"],
)

API_REQUEST_DURATION = _get_metric(
    Histogram,
    "api_request_duration_seconds",
    "Time spent processing API requests",
    ["method", "endpoint"],
    buckets=[0.05, 0.1, 0.5, 1.0, 2.0, 5.0],
)


def record_job_creation(service_level: str, is_out_of_hours: bool):
    JOBS_CREATED.labels(
        service_level=service_level, is_out_of_hours=str(is_out_of_hours).lower()
    ).inc()


def record_transition(action: str, outcome: str):
    """Record a transition attempt; outcome is applied or the error type."""
    JOB_TRANSITIONS.labels(action=action, outcome=outcome).inc()


def record_transition_conflict(action: str):
    JOB_TRANSITION_CONFLICTS.labels(action=action).inc()


def record_price_quote(available: bool):
    PRICE_QUOTES.labels(available=str(available).lower()).inc()


def record_locked_price(customer_total_cents: int):
    PRICING_CUSTOMER_TOTAL.observe(customer_total_cents)


def record_external_lookup_failure(provider: str):
    EXTERNAL_LOOKUP_FAILURES.labels(provider=provider).inc()


def record_outbox_event_processing(event_type: str, status: str):
    OUTBOX_EVENTS_PROCESSED.labels(event_type=event_type, status=status).inc()


def record_api_request(method: str, endpoint: str, status_code: int, duration: float):
    API_REQUESTS.labels(method=method, endpoint=endpoint, status_code=status_code).inc()
    API_REQUEST_DURATION.labels(method=method, endpoint=endpoint).observe(duration)


def get_metrics():
    """Get all metrics in Prometheus format."""
    return generate_latest(registry)


def get_metrics_content_type():
    """Get the content type for metrics."""
    return CONTENT_TYPE_LATEST
