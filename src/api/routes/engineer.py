"""Engineer link endpoints. The token in the path is the only credential."""

from typing import Optional

from fastapi import APIRouter

from src.api.dependencies import (
    ClockDep,
    RecordLocationUseCaseDep,
    ResolveLinkUseCaseDep,
    SubmitReportUseCaseDep,
    TimelineUseCaseDep,
    TransitionJobUseCaseDep,
)
from src.api.schemas.common import LocationSchema, TimelineResponse
from src.api.schemas.engineer import (
    CompleteJobRequest,
    EngineerActionRequest,
    EngineerDeclineRequest,
    EngineerJobResponse,
    LocationResponse,
    SiteVisitReportResponse,
    SiteVisitReportSchema,
)
from src.application.clock import Clock
from src.application.services.job_state_machine import TransitionPayload
from src.application.use_cases.engineer_job import (
    RecordLocationRequest,
    ResolveEngineerLinkUseCase,
    SubmitReportRequest,
)
from src.application.use_cases.transition_job import (
    TransitionJobRequest,
    TransitionJobUseCase,
)
from src.config.logging import get_logger
from src.domain.entities.job_history import LocationSample
from src.domain.entities.site_visit_report import SiteVisitReport
from src.domain.value_objects.actor import Actor
from src.domain.value_objects.job_status import JobAction

logger = get_logger(__name__)
router = APIRouter(tags=["engineer"])


def _sample(location: Optional[LocationSchema], clock: Clock) -> Optional[LocationSample]:
    if location is None:
        return None
    return LocationSample(
        latitude=location.latitude,
        longitude=location.longitude,
        recorded_at=location.recorded_at or clock(),
        accuracy_m=location.accuracy_m,
    )


def _report(report: Optional[SiteVisitReportSchema]) -> Optional[SiteVisitReport]:
    if report is None:
        return None
    return SiteVisitReport(**report.model_dump())


async def _engineer_action(
    engineer_token: str,
    action: JobAction,
    payload: TransitionPayload,
    transition: TransitionJobUseCase,
    resolve: ResolveEngineerLinkUseCase,
) -> EngineerJobResponse:
    # Resolving first turns unknown tokens into "link expired"
    view = await resolve.execute(engineer_token=engineer_token)

    await transition.execute(
        TransitionJobRequest(
            job_id=view.job.id,
            actor=Actor.engineer(engineer_token),
            action=action,
            payload=payload,
        )
    )

    view = await resolve.execute(engineer_token=engineer_token)
    return EngineerJobResponse.from_view(view)


@router.get("/engineer/job/{engineer_token}", response_model=EngineerJobResponse)
async def open_engineer_link(engineer_token: str, resolve: ResolveLinkUseCaseDep):
    """Job details and next actions behind an engineer link."""
    view = await resolve.execute(engineer_token=engineer_token)
    return EngineerJobResponse.from_view(view)


@router.get("/e/{short_code}", response_model=EngineerJobResponse)
async def open_short_link(short_code: str, resolve: ResolveLinkUseCaseDep):
    """Short alias of the engineer link."""
    view = await resolve.execute(short_code=short_code)
    return EngineerJobResponse.from_view(view)


@router.post("/engineer/job/{engineer_token}/accept", response_model=EngineerJobResponse)
async def engineer_accept(
    engineer_token: str,
    body: EngineerActionRequest,
    transition: TransitionJobUseCaseDep,
    resolve: ResolveLinkUseCaseDep,
    clock: ClockDep,
):
    payload = TransitionPayload(notes=body.notes, location=_sample(body.location, clock))
    return await _engineer_action(
        engineer_token, JobAction.ENGINEER_ACCEPT, payload, transition, resolve
    )


@router.post("/engineer/job/{engineer_token}/decline", response_model=EngineerJobResponse)
async def engineer_decline(
    engineer_token: str,
    body: EngineerDeclineRequest,
    transition: TransitionJobUseCaseDep,
    resolve: ResolveLinkUseCaseDep,
):
    """Hands the job back to the supplier to pick another engineer."""
    payload = TransitionPayload(reason=body.reason, notes=body.notes)
    return await _engineer_action(
        engineer_token, JobAction.ENGINEER_DECLINE, payload, transition, resolve
    )


@router.post("/engineer/job/{engineer_token}/en-route", response_model=EngineerJobResponse)
async def engineer_en_route(
    engineer_token: str,
    body: EngineerActionRequest,
    transition: TransitionJobUseCaseDep,
    resolve: ResolveLinkUseCaseDep,
    clock: ClockDep,
):
    payload = TransitionPayload(notes=body.notes, location=_sample(body.location, clock))
    return await _engineer_action(
        engineer_token, JobAction.EN_ROUTE, payload, transition, resolve
    )


@router.post("/engineer/job/{engineer_token}/on-site", response_model=EngineerJobResponse)
async def engineer_on_site(
    engineer_token: str,
    body: EngineerActionRequest,
    transition: TransitionJobUseCaseDep,
    resolve: ResolveLinkUseCaseDep,
    clock: ClockDep,
):
    payload = TransitionPayload(notes=body.notes, location=_sample(body.location, clock))
    return await _engineer_action(
        engineer_token, JobAction.ON_SITE, payload, transition, resolve
    )


@router.post("/engineer/job/{engineer_token}/complete", response_model=EngineerJobResponse)
async def engineer_complete(
    engineer_token: str,
    body: CompleteJobRequest,
    transition: TransitionJobUseCaseDep,
    resolve: ResolveLinkUseCaseDep,
    clock: ClockDep,
):
    """Close the job; needs a signed report in the body or submitted earlier."""
    payload = TransitionPayload(
        notes=body.notes,
        location=_sample(body.location, clock),
        report=_report(body.report),
    )
    return await _engineer_action(
        engineer_token, JobAction.COMPLETE, payload, transition, resolve
    )


@router.post("/engineer/job/{engineer_token}/location", response_model=LocationResponse)
async def record_location(
    engineer_token: str,
    body: LocationSchema,
    use_case: RecordLocationUseCaseDep,
):
    """Advisory position update; never affects pricing."""
    result = await use_case.execute(
        RecordLocationRequest(
            engineer_token=engineer_token,
            latitude=body.latitude,
            longitude=body.longitude,
            accuracy_m=body.accuracy_m,
            recorded_at=body.recorded_at,
        )
    )
    sample = result.sample
    return LocationResponse(
        job_id=sample.job_id,
        latitude=sample.latitude,
        longitude=sample.longitude,
        recorded_at=sample.recorded_at,
        tracking_type=sample.tracking_type.value,
        eta_minutes=result.eta_minutes,
    )


@router.post(
    "/engineer/job/{engineer_token}/report", response_model=SiteVisitReportResponse
)
async def submit_report(
    engineer_token: str,
    body: SiteVisitReportSchema,
    use_case: SubmitReportUseCaseDep,
):
    """Save the site visit report while on site; resubmitting replaces it."""
    report = await use_case.execute(
        SubmitReportRequest(engineer_token=engineer_token, **body.model_dump())
    )
    return SiteVisitReportResponse.from_report(report)


@router.get("/engineer/job/{engineer_token}/tracking", response_model=TimelineResponse)
async def engineer_tracking(engineer_token: str, use_case: TimelineUseCaseDep):
    view = await use_case.for_engineer_token(engineer_token)
    return TimelineResponse.from_view(view)
