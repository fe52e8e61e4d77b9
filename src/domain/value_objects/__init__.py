"""
Domain value objects package.
"""

from .actor import Actor, ActorRole
from .coordinates import Coordinates
from .job_status import JobAction, JobStatus
from .price_breakdown import PriceBreakdown, PriceRange, RemoteSiteFee
from .schedule_result import ScheduleValidationResult
from .service_level import BookingType, ServiceLevel

__all__ = [
    "Actor",
    "ActorRole",
    "BookingType",
    "Coordinates",
    "JobAction",
    "JobStatus",
    "PriceBreakdown",
    "PriceRange",
    "RemoteSiteFee",
    "ScheduleValidationResult",
    "ServiceLevel",
]
