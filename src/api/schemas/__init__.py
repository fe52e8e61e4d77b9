"""
API schemas for the dispatch service.
"""

from .common import ErrorResponse, LocationSchema, TimelineResponse
from .engineer import (
    CompleteJobRequest,
    EngineerActionRequest,
    EngineerDeclineRequest,
    EngineerJobResponse,
    SiteVisitReportSchema,
)
from .job import (
    AcceptJobRequest,
    AssignEngineerRequest,
    JobCreateRequest,
    JobResponse,
    ReasonRequest,
)
from .pricing import PriceEstimateRequest, PriceEstimateResponse

__all__ = [
    "AcceptJobRequest",
    "AssignEngineerRequest",
    "CompleteJobRequest",
    "EngineerActionRequest",
    "EngineerDeclineRequest",
    "EngineerJobResponse",
    "ErrorResponse",
    "JobCreateRequest",
    "JobResponse",
    "LocationSchema",
    "PriceEstimateRequest",
    "PriceEstimateResponse",
    "ReasonRequest",
    "SiteVisitReportSchema",
    "TimelineResponse",
]
