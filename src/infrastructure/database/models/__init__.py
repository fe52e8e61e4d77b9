"""
Database models package.
"""

from .base import Base, BaseModel
from .job import JobModel
from .job_history import JobLocationModel, JobStatusHistoryModel
from .outbox_event import OutboxEventModel
from .site_visit_report import SiteVisitReportModel
from .supplier_rate import SupplierRateModel

__all__ = [
    "Base",
    "BaseModel",
    "JobLocationModel",
    "JobModel",
    "JobStatusHistoryModel",
    "OutboxEventModel",
    "SiteVisitReportModel",
    "SupplierRateModel",
]
