"""Job booking and lifecycle endpoints for customers, suppliers and admins."""

from typing import Optional

from fastapi import APIRouter, status

from src.api.dependencies import (
    ActorDep,
    CreateJobUseCaseDep,
    GetJobUseCaseDep,
    TimelineUseCaseDep,
    TokenAuthorityDep,
    TransitionJobUseCaseDep,
)
from src.api.schemas.common import TimelineResponse
from src.api.schemas.job import (
    AcceptJobRequest,
    AssignEngineerRequest,
    JobCreateRequest,
    JobResponse,
    ReasonRequest,
)
from src.application.services.job_state_machine import TransitionPayload
from src.application.services.token_authority import TokenAuthority
from src.application.use_cases.create_job import CreateJobRequest
from src.application.use_cases.transition_job import (
    TransitionJobRequest,
    TransitionJobUseCase,
)
from src.config.logging import get_logger
from src.domain.entities.job import Job
from src.domain.exceptions.transition_error import ActorNotPermitted
from src.domain.value_objects.actor import Actor, ActorRole
from src.domain.value_objects.job_status import JobAction, JobStatus

logger = get_logger(__name__)
router = APIRouter(prefix="/jobs", tags=["jobs"])


def _engineer_link(
    job: Job, actor: Actor, token_authority: TokenAuthority
) -> Optional[str]:
    # Only the supplier running the job (or an admin) may forward the link
    if actor.role == ActorRole.ADMIN or (
        actor.role == ActorRole.SUPPLIER
        and job.assigned_supplier_id == actor.supplier_id
    ):
        return token_authority.engineer_link(job)
    return None


async def _transition(
    use_case: TransitionJobUseCase,
    token_authority: TokenAuthority,
    job_id: int,
    actor: Actor,
    action: JobAction,
    payload: TransitionPayload,
    expected_status: Optional[JobStatus],
) -> JobResponse:
    result = await use_case.execute(
        TransitionJobRequest(
            job_id=job_id,
            actor=actor,
            action=action,
            payload=payload,
            expected_status=expected_status,
        )
    )

    return JobResponse.from_job(
        result.job,
        actor.role,
        engineer_link=_engineer_link(result.job, actor, token_authority),
        warnings=result.plan.warnings,
    )


@router.post("/", response_model=JobResponse, status_code=status.HTTP_201_CREATED)
async def create_job(
    job_data: JobCreateRequest,
    actor: ActorDep,
    use_case: CreateJobUseCaseDep,
):
    """Book a job: validate the slot, lock or defer the price and route it."""
    if actor.role not in (ActorRole.CUSTOMER, ActorRole.ADMIN):
        raise ActorNotPermitted("create", actor.role.value, "only customers book jobs")

    customer_id = actor.actor_id if actor.role == ActorRole.CUSTOMER else None
    customer_email = job_data.customer_email
    if actor.role == ActorRole.CUSTOMER:
        customer_email = customer_email or actor.email

    result = await use_case.execute(
        CreateJobRequest(
            service_type=job_data.service_type,
            service_level=job_data.service_level,
            site_address=job_data.site_address,
            country=job_data.country.upper(),
            timezone=job_data.timezone,
            requested_start_date=job_data.requested_start_date,
            requested_start_time=job_data.requested_start_time,
            estimated_duration_minutes=job_data.estimated_duration_minutes,
            customer_id=customer_id,
            customer_email=customer_email,
            description=job_data.description,
            city=job_data.city,
            site_latitude=job_data.site_latitude,
            site_longitude=job_data.site_longitude,
            routed_supplier_id=job_data.routed_supplier_id,
            booking_type=job_data.booking_type.value,
            estimated_days=job_data.estimated_days,
            direct_assignment=job_data.direct_assignment,
        )
    )

    logger.info(
        "Job booked",
        job_id=result.job.id,
        actor=actor.label,
        status=result.job.status.value,
    )

    return JobResponse.from_job(
        result.job,
        actor.role,
        engineer_link=result.engineer_link,
        warnings=result.warnings,
    )


@router.get("/{job_id}", response_model=JobResponse)
async def get_job(
    job_id: int,
    actor: ActorDep,
    use_case: GetJobUseCaseDep,
    token_authority: TokenAuthorityDep,
):
    """Read a job as one of its parties."""
    job = await use_case.execute(job_id, actor)
    return JobResponse.from_job(
        job, actor.role, engineer_link=_engineer_link(job, actor, token_authority)
    )


@router.get("/{job_id}/timeline", response_model=TimelineResponse)
async def get_job_timeline(
    job_id: int,
    actor: ActorDep,
    use_case: TimelineUseCaseDep,
):
    """Status history with time spent in each status."""
    view = await use_case.execute(job_id, actor)
    return TimelineResponse.from_view(view)


@router.post("/{job_id}/accept", response_model=JobResponse)
async def accept_job(
    job_id: int,
    body: AcceptJobRequest,
    actor: ActorDep,
    use_case: TransitionJobUseCaseDep,
    token_authority: TokenAuthorityDep,
):
    """Supplier accepts the job; the first supplier to accept wins it."""
    payload = TransitionPayload(
        notes=body.notes,
        proposed_start_date=body.proposed_start_date,
        proposed_start_time=body.proposed_start_time,
    )
    return await _transition(
        use_case,
        token_authority,
        job_id,
        actor,
        JobAction.ACCEPT,
        payload,
        body.expected_status,
    )


@router.post("/{job_id}/decline", response_model=JobResponse)
async def decline_job(
    job_id: int,
    body: ReasonRequest,
    actor: ActorDep,
    use_case: TransitionJobUseCaseDep,
    token_authority: TokenAuthorityDep,
):
    """Supplier (or admin) declines the job."""
    payload = TransitionPayload(reason=body.reason, notes=body.notes)
    return await _transition(
        use_case,
        token_authority,
        job_id,
        actor,
        JobAction.DECLINE,
        payload,
        body.expected_status,
    )


@router.post("/{job_id}/assign-engineer", response_model=JobResponse)
async def assign_engineer(
    job_id: int,
    body: AssignEngineerRequest,
    actor: ActorDep,
    use_case: TransitionJobUseCaseDep,
    token_authority: TokenAuthorityDep,
):
    """Assigned supplier sends the job to an engineer."""
    payload = TransitionPayload(
        notes=body.notes,
        engineer_name=body.engineer_name,
        engineer_email=body.engineer_email,
        engineer_phone=body.engineer_phone,
    )
    return await _transition(
        use_case,
        token_authority,
        job_id,
        actor,
        JobAction.ASSIGN_ENGINEER,
        payload,
        body.expected_status,
    )


@router.post("/{job_id}/cancel", response_model=JobResponse)
async def cancel_job(
    job_id: int,
    body: ReasonRequest,
    actor: ActorDep,
    use_case: TransitionJobUseCaseDep,
    token_authority: TokenAuthorityDep,
):
    """Customer, assigned supplier or admin cancels the job."""
    payload = TransitionPayload(reason=body.reason, notes=body.notes)
    return await _transition(
        use_case,
        token_authority,
        job_id,
        actor,
        JobAction.CANCEL,
        payload,
        body.expected_status,
    )
