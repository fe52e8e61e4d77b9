"""
Database repositories package.
"""

from .job_history_repository import JobHistoryRepository
from .job_repository import JobRepository
from .site_visit_report_repository import SiteVisitReportRepository
from .supplier_rate_repository import SupplierRateRepository
from .transaction_repository import TransactionService

__all__ = [
    "JobHistoryRepository",
    "JobRepository",
    "SiteVisitReportRepository",
    "SupplierRateRepository",
    "TransactionService",
]
