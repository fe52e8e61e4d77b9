"""
Domain entities package.
"""

from .job import Job
from .job_history import LocationSample, StatusHistoryEntry, TrackingType
from .site_visit_report import SiteVisitReport
from .supplier_rate import SupplierRate

__all__ = [
    "Job",
    "LocationSample",
    "SiteVisitReport",
    "StatusHistoryEntry",
    "SupplierRate",
    "TrackingType",
]
