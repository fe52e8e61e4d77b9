"""
Application interfaces package.
"""

from .repositories import (
    JobHistoryRepositoryInterface,
    JobRepositoryInterface,
    SiteVisitReportRepositoryInterface,
    SupplierRateRepositoryInterface,
)
from .services import (
    EventPublisherInterface,
    ReferencePoint,
    ReferencePointProviderInterface,
    RetryHandlerInterface,
)

__all__ = [
    "EventPublisherInterface",
    "JobHistoryRepositoryInterface",
    "JobRepositoryInterface",
    "ReferencePoint",
    "ReferencePointProviderInterface",
    "RetryHandlerInterface",
    "SiteVisitReportRepositoryInterface",
    "SupplierRateRepositoryInterface",
]
