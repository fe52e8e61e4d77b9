"""Engineer link use cases: resolve the link, report location, submit the report."""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from src.application.clock import Clock, utc_now
from src.application.interfaces.repositories import (
    JobHistoryRepositoryInterface,
    SiteVisitReportRepositoryInterface,
)
from src.application.services.distance_fee_calculator import estimate_eta_minutes
from src.application.services.job_state_machine import available_actions
from src.application.services.token_authority import TokenAuthority
from src.config.logging import get_logger
from src.config.settings import settings
from src.domain.entities.job import Job
from src.domain.entities.job_history import LocationSample, TrackingType
from src.domain.entities.site_visit_report import SiteVisitReport
from src.domain.exceptions.transition_error import (
    InvalidTransition,
    TransitionPayloadError,
)
from src.domain.value_objects.coordinates import Coordinates
from src.domain.value_objects.job_status import JobAction, JobStatus
from src.infrastructure.database.repositories.transaction_repository import (
    TransactionService,
)

logger = get_logger(__name__)


@dataclass
class EngineerJobView:
    """What the engineer sees behind the link."""

    job: Job
    engineer_link: str
    next_actions: List[JobAction]
    report: Optional[SiteVisitReport] = None


class ResolveEngineerLinkUseCase:
    """Use case for opening an engineer link by token or short code."""

    def __init__(
        self,
        token_authority: TokenAuthority,
        report_repo: SiteVisitReportRepositoryInterface,
    ):
        self.token_authority = token_authority
        self.report_repo = report_repo

    async def execute(
        self, engineer_token: Optional[str] = None, short_code: Optional[str] = None
    ) -> EngineerJobView:
        """Raises TokenInvalid for unknown or malformed links."""
        if short_code is not None:
            job = await self.token_authority.resolve_short_code(short_code)
        else:
            job = await self.token_authority.resolve_engineer_token(engineer_token)

        next_actions = [
            action
            for action in available_actions(job.status)
            if action.is_engineer_action()
        ]

        return EngineerJobView(
            job=job,
            engineer_link=self.token_authority.engineer_link(job),
            next_actions=next_actions,
            report=await self.report_repo.get_by_job_id(job.id),
        )


@dataclass
class RecordLocationRequest:
    engineer_token: str
    latitude: float
    longitude: float
    accuracy_m: Optional[float] = None
    recorded_at: Optional[datetime] = None


@dataclass
class RecordLocationResult:
    sample: LocationSample
    eta_minutes: Optional[int] = None


class RecordLocationUseCase:
    """Use case for appending an advisory engineer position.

    Positions are never used for pricing; the latest sample wins.
    """

    def __init__(
        self,
        token_authority: TokenAuthority,
        history_repo: JobHistoryRepositoryInterface,
        transaction_service: TransactionService,
        clock: Optional[Clock] = None,
        average_speed_kmh: Optional[float] = None,
    ):
        self.token_authority = token_authority
        self.history_repo = history_repo
        self.transaction_service = transaction_service
        self.clock = clock or utc_now
        self.average_speed_kmh = (
            average_speed_kmh or settings.TRACKING_AVERAGE_SPEED_KMH
        )

    async def execute(self, request: RecordLocationRequest) -> RecordLocationResult:
        job = await self.token_authority.resolve_engineer_token(request.engineer_token)
        if not job.status.is_engineer_active():
            raise InvalidTransition(job.id, job.status.value, "update_location")

        try:
            sample = LocationSample(
                latitude=request.latitude,
                longitude=request.longitude,
                recorded_at=request.recorded_at or self.clock(),
                accuracy_m=request.accuracy_m,
                tracking_type=_tracking_type_for(job.status),
                job_id=job.id,
            )
        except ValueError as e:
            raise TransitionPayloadError("update_location", "location", str(e))

        saved = await self.transaction_service.execute_in_transaction(
            lambda: self.history_repo.add_location(sample), name="record_location"
        )

        eta = None
        if job.status == JobStatus.EN_ROUTE and job.site_coordinates is not None:
            eta = estimate_eta_minutes(
                Coordinates(saved.latitude, saved.longitude),
                job.site_coordinates,
                self.average_speed_kmh,
            )

        logger.debug("Engineer location recorded", job_id=job.id, eta_minutes=eta)

        return RecordLocationResult(sample=saved, eta_minutes=eta)


def _tracking_type_for(status: JobStatus) -> TrackingType:
    if status == JobStatus.EN_ROUTE:
        return TrackingType.EN_ROUTE
    if status == JobStatus.ON_SITE:
        return TrackingType.ON_SITE
    return TrackingType.MILESTONE


@dataclass
class SubmitReportRequest:
    engineer_token: str
    engineer_name: str
    signature_data: str
    work_completed: Optional[str] = None
    findings: Optional[str] = None
    recommendations: Optional[str] = None
    issue_resolved: bool = True
    onsite_contact_name: Optional[str] = None
    visit_date: Optional[datetime] = None


class SubmitSiteVisitReportUseCase:
    """Use case for saving the site visit report while the engineer is on site."""

    def __init__(
        self,
        token_authority: TokenAuthority,
        report_repo: SiteVisitReportRepositoryInterface,
        transaction_service: TransactionService,
        clock: Optional[Clock] = None,
    ):
        self.token_authority = token_authority
        self.report_repo = report_repo
        self.transaction_service = transaction_service
        self.clock = clock or utc_now

    async def execute(self, request: SubmitReportRequest) -> SiteVisitReport:
        job = await self.token_authority.resolve_engineer_token(request.engineer_token)
        if job.status != JobStatus.ON_SITE:
            raise InvalidTransition(job.id, job.status.value, "submit_report")

        now = self.clock()
        report = SiteVisitReport(
            engineer_name=request.engineer_name,
            signature_data=request.signature_data,
            work_completed=request.work_completed,
            findings=request.findings,
            recommendations=request.recommendations,
            issue_resolved=request.issue_resolved,
            onsite_contact_name=request.onsite_contact_name,
            visit_date=request.visit_date or now,
            job_id=job.id,
            created_at=now,
        )

        missing = report.missing_fields()
        if missing:
            raise TransitionPayloadError(
                "submit_report",
                missing[0],
                f"Site visit report is incomplete: {', '.join(missing)}",
            )

        saved = await self.transaction_service.execute_in_transaction(
            lambda: self.report_repo.save(report), name="submit_site_visit_report"
        )

        logger.info("Site visit report submitted", job_id=job.id)
        return saved
