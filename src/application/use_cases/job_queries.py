"""Read-side use cases: job details, timeline and live tracking."""

from dataclasses import dataclass
from typing import Optional

from src.application.clock import Clock, utc_now
from src.application.interfaces.repositories import (
    JobHistoryRepositoryInterface,
    JobRepositoryInterface,
)
from src.application.services.distance_fee_calculator import estimate_eta_minutes
from src.application.services.timeline import JobTimeline, build_timeline
from src.application.services.token_authority import TokenAuthority, tokens_match
from src.config.settings import settings
from src.domain.entities.job import Job
from src.domain.exceptions.transition_error import ActorNotPermitted
from src.domain.exceptions.validation_error import JobNotFound
from src.domain.value_objects.actor import Actor, ActorRole
from src.domain.value_objects.coordinates import Coordinates
from src.domain.value_objects.job_status import JobStatus


def can_view(job: Job, actor: Actor) -> bool:
    """Parties to a job (and admins) may read it."""
    if actor.role == ActorRole.ADMIN:
        return True
    if actor.role == ActorRole.CUSTOMER:
        return job.is_owned_by(actor.actor_id, actor.email)
    if actor.role == ActorRole.SUPPLIER:
        if job.assigned_supplier_id is not None:
            return job.assigned_supplier_id == actor.supplier_id
        return job.routed_supplier_id in (None, actor.supplier_id)
    return tokens_match(job.engineer_token, actor.engineer_token)


class GetJobUseCase:
    """Use case for reading one job as a party to it."""

    def __init__(self, job_repo: JobRepositoryInterface):
        self.job_repo = job_repo

    async def execute(self, job_id: int, actor: Actor) -> Job:
        job = await self.job_repo.get_by_id(job_id)
        if job is None:
            raise JobNotFound(job_id)
        if not can_view(job, actor):
            raise ActorNotPermitted("view", actor.role.value, "not a party to this job")
        return job


@dataclass
class TrackingView:
    job: Job
    timeline: JobTimeline
    eta_minutes: Optional[int] = None


class GetJobTimelineUseCase:
    """Use case for projecting a job's status and location history."""

    def __init__(
        self,
        job_repo: JobRepositoryInterface,
        history_repo: JobHistoryRepositoryInterface,
        token_authority: Optional[TokenAuthority] = None,
        clock: Optional[Clock] = None,
        average_speed_kmh: Optional[float] = None,
    ):
        self.job_repo = job_repo
        self.history_repo = history_repo
        self.token_authority = token_authority
        self.clock = clock or utc_now
        self.average_speed_kmh = (
            average_speed_kmh or settings.TRACKING_AVERAGE_SPEED_KMH
        )

    async def execute(self, job_id: int, actor: Actor) -> TrackingView:
        job = await GetJobUseCase(self.job_repo).execute(job_id, actor)
        return await self.for_job(job)

    async def for_engineer_token(self, engineer_token: str) -> TrackingView:
        """Raises TokenInvalid for unknown or malformed tokens."""
        job = await self.token_authority.resolve_engineer_token(engineer_token)
        return await self.for_job(job)

    async def for_job(self, job: Job) -> TrackingView:
        history = await self.history_repo.list_status_history(job.id)
        locations = await self.history_repo.list_locations(job.id)
        timeline = build_timeline(job, history, locations, self.clock())

        eta = None
        latest = timeline.latest_location
        if (
            job.status == JobStatus.EN_ROUTE
            and latest is not None
            and job.site_coordinates is not None
        ):
            eta = estimate_eta_minutes(
                Coordinates(latest.latitude, latest.longitude),
                job.site_coordinates,
                self.average_speed_kmh,
            )

        return TrackingView(job=job, timeline=timeline, eta_minutes=eta)
