"""
Use cases package.

This package contains the business logic use cases that orchestrate
the application services and repositories.
"""

from .create_job import CreateJobRequest, CreateJobResult, CreateJobUseCase
from .engineer_job import (
    RecordLocationUseCase,
    ResolveEngineerLinkUseCase,
    SubmitSiteVisitReportUseCase,
)
from .estimate_price import EstimatePriceRequest, EstimatePriceUseCase
from .job_queries import GetJobTimelineUseCase, GetJobUseCase
from .transition_job import TransitionJobRequest, TransitionJobUseCase

__all__ = [
    "CreateJobRequest",
    "CreateJobResult",
    "CreateJobUseCase",
    "EstimatePriceRequest",
    "EstimatePriceUseCase",
    "GetJobTimelineUseCase",
    "GetJobUseCase",
    "RecordLocationUseCase",
    "ResolveEngineerLinkUseCase",
    "SubmitSiteVisitReportUseCase",
    "TransitionJobRequest",
    "TransitionJobUseCase",
]
