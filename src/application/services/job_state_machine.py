"""
Job State Machine service: transition table, actor capabilities and planning.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from src.application.services.pricing_engine import PricingEngine
from src.application.services.schedule_validator import (
    is_weekend,
    minute_of_day,
    parse_date,
    parse_time,
    parse_timezone,
)
from src.application.services.token_authority import tokens_match
from src.config.logging import get_logger
from src.config.settings import settings
from src.domain.entities.job import Job
from src.domain.entities.job_history import LocationSample, TrackingType
from src.domain.entities.site_visit_report import SiteVisitReport
from src.domain.events.job_transitioned import JobTransitioned
from src.domain.exceptions.schedule_error import ScheduleError
from src.domain.exceptions.transition_error import (
    ActorNotPermitted,
    InvalidTransition,
    TransitionPayloadError,
)
from src.domain.value_objects.actor import Actor, ActorRole
from src.domain.value_objects.job_status import JobAction, JobStatus
from src.domain.value_objects.price_breakdown import PriceBreakdown

logger = get_logger(__name__)

PRICE_LOCK_AT_CREATION = "job_creation"
PRICE_LOCK_AT_ACCEPTANCE = "supplier_acceptance"


def _build_transitions() -> Dict[Tuple[JobStatus, JobAction], JobStatus]:
    table = {
        (JobStatus.PENDING_SUPPLIER_ACCEPTANCE, JobAction.ACCEPT): JobStatus.SUPPLIER_ACCEPTED,
        (JobStatus.ASSIGNED_TO_SUPPLIER, JobAction.ACCEPT): JobStatus.ACCEPTED,
        (JobStatus.SUPPLIER_ACCEPTED, JobAction.ASSIGN_ENGINEER): JobStatus.SENT_TO_ENGINEER,
        (JobStatus.SENT_TO_ENGINEER, JobAction.ENGINEER_ACCEPT): JobStatus.ENGINEER_ACCEPTED,
        (JobStatus.SENT_TO_ENGINEER, JobAction.ENGINEER_DECLINE): JobStatus.SUPPLIER_ACCEPTED,
        (JobStatus.ENGINEER_ACCEPTED, JobAction.EN_ROUTE): JobStatus.EN_ROUTE,
        (JobStatus.ACCEPTED, JobAction.EN_ROUTE): JobStatus.EN_ROUTE,
        (JobStatus.EN_ROUTE, JobAction.ON_SITE): JobStatus.ON_SITE,
        (JobStatus.ON_SITE, JobAction.COMPLETE): JobStatus.COMPLETED,
    }
    for status in JobStatus:
        if not status.is_final():
            table[(status, JobAction.CANCEL)] = JobStatus.CANCELLED
            table[(status, JobAction.DECLINE)] = JobStatus.DECLINED
    return table


# Exhaustive: every (status, action) pair not listed here is rejected
TRANSITIONS: Dict[Tuple[JobStatus, JobAction], JobStatus] = _build_transitions()

HISTORY_NOTES = {
    JobAction.ACCEPT: "Supplier accepted the job",
    JobAction.ASSIGN_ENGINEER: "Engineer assigned",
    JobAction.ENGINEER_ACCEPT: "Engineer accepted the job",
    JobAction.ENGINEER_DECLINE: "Engineer declined the job",
    JobAction.EN_ROUTE: "Engineer en route",
    JobAction.ON_SITE: "Engineer on site",
    JobAction.COMPLETE: "Job completed",
    JobAction.CANCEL: "Job cancelled",
    JobAction.DECLINE: "Job declined",
}

TRACKING_TYPES = {
    JobAction.EN_ROUTE: TrackingType.EN_ROUTE,
    JobAction.ON_SITE: TrackingType.ON_SITE,
}


def next_status(status: JobStatus, action: JobAction) -> Optional[JobStatus]:
    """Target status for an action, or None when there is no edge."""
    return TRANSITIONS.get((status, action))


def available_actions(status: JobStatus) -> List[JobAction]:
    """Actions with an outgoing edge from a status."""
    return [action for action in JobAction if (status, action) in TRANSITIONS]


@dataclass
class TransitionPayload:
    """Action-specific inputs."""

    reason: Optional[str] = None
    notes: Optional[str] = None
    engineer_name: Optional[str] = None
    engineer_email: Optional[str] = None
    engineer_phone: Optional[str] = None
    proposed_start_date: Optional[str] = None
    proposed_start_time: Optional[str] = None
    hourly_rate_cents: Optional[int] = None
    rate_currency: Optional[str] = None
    location: Optional[LocationSample] = None
    report: Optional[SiteVisitReport] = None


@dataclass
class TransitionPlan:
    """Everything a successful transition writes, computed without side effects."""

    job_id: int
    action: JobAction
    from_status: JobStatus
    to_status: JobStatus
    changes: Dict[str, Any]
    history_notes: str
    event: JobTransitioned
    location: Optional[LocationSample] = None
    report: Optional[SiteVisitReport] = None
    price_breakdown: Optional[PriceBreakdown] = None
    warnings: List[str] = field(default_factory=list)


class JobStateMachine:
    """Validates transitions and plans their effects.

    Planning is pure: it reads a job snapshot and returns a TransitionPlan.
    Persisting the plan (guarded by compare-and-set) is the caller's job.
    """

    def __init__(
        self,
        pricing_engine: Optional[PricingEngine] = None,
        price_lock_point: Optional[str] = None,
    ):
        self.pricing_engine = pricing_engine or PricingEngine()
        self.price_lock_point = price_lock_point or settings.PRICE_LOCK_POINT

    @property
    def locks_price_on_acceptance(self) -> bool:
        return self.price_lock_point == PRICE_LOCK_AT_ACCEPTANCE

    def plan(
        self,
        job: Job,
        actor: Actor,
        action: JobAction,
        now: datetime,
        payload: Optional[TransitionPayload] = None,
        existing_report: Optional[SiteVisitReport] = None,
    ) -> TransitionPlan:
        """
        Plan a transition.

        Raises:
            InvalidTransition: no edge for this action from the job's status
            ActorNotPermitted: the actor lacks the capability
            TransitionPayloadError: required payload missing or invalid
        """
        action = JobAction(action)
        payload = payload or TransitionPayload()

        target = next_status(job.status, action)
        if target is None:
            raise InvalidTransition(job.id, job.status.value, action.value)

        self.authorize(job, actor, action)

        changes: Dict[str, Any] = {"status": target, "updated_at": now}
        plan = TransitionPlan(
            job_id=job.id,
            action=action,
            from_status=job.status,
            to_status=target,
            changes=changes,
            history_notes=HISTORY_NOTES[action],
            event=JobTransitioned(
                job_id=job.id,
                action=action.value,
                from_status=job.status.value,
                to_status=target.value,
                actor=actor.label,
                occurred_at=now,
            ),
        )

        handler = getattr(self, f"_plan_{action.value}")
        handler(job, actor, payload, now, plan, existing_report)

        if payload.location is not None and action.is_engineer_action():
            sample = payload.location
            plan.location = LocationSample(
                latitude=sample.latitude,
                longitude=sample.longitude,
                recorded_at=sample.recorded_at or now,
                accuracy_m=sample.accuracy_m,
                tracking_type=TRACKING_TYPES.get(action, TrackingType.MILESTONE),
                job_id=job.id,
            )

        if payload.notes:
            plan.history_notes = f"{plan.history_notes}: {payload.notes}"
        plan.event.reason = payload.reason

        logger.debug(
            "Transition planned",
            job_id=job.id,
            action=action.value,
            from_status=plan.from_status.value,
            to_status=plan.to_status.value,
            actor=actor.label,
        )

        return plan

    def authorize(self, job: Job, actor: Actor, action: JobAction) -> None:
        """Raise ActorNotPermitted unless the actor may perform the action."""
        if action.is_engineer_action():
            if actor.role != ActorRole.ENGINEER:
                raise ActorNotPermitted(
                    action.value, actor.role.value, "only the engineer link can do this"
                )
            if not tokens_match(job.engineer_token, actor.engineer_token):
                raise ActorNotPermitted(
                    action.value, actor.role.value, "engineer token does not match"
                )
            return

        if action == JobAction.ACCEPT:
            if actor.role != ActorRole.SUPPLIER:
                raise ActorNotPermitted(
                    action.value, actor.role.value, "only suppliers accept jobs"
                )
            if (
                job.routed_supplier_id is not None
                and job.routed_supplier_id != actor.supplier_id
            ):
                raise ActorNotPermitted(
                    action.value, actor.role.value, "job was routed to another supplier"
                )
            return

        if actor.role == ActorRole.ADMIN:
            return

        if action == JobAction.ASSIGN_ENGINEER:
            if not self._is_assigned_supplier(job, actor):
                raise ActorNotPermitted(
                    action.value,
                    actor.role.value,
                    "only the assigned supplier can assign an engineer",
                )
            return

        if action == JobAction.CANCEL:
            if actor.role == ActorRole.CUSTOMER and job.is_owned_by(
                actor.actor_id, actor.email
            ):
                return
            if self._is_assigned_supplier(job, actor):
                return
            raise ActorNotPermitted(
                action.value, actor.role.value, "not a party to this job"
            )

        if action == JobAction.DECLINE:
            if actor.role != ActorRole.SUPPLIER:
                raise ActorNotPermitted(
                    action.value, actor.role.value, "only suppliers decline jobs"
                )
            if job.assigned_supplier_id is not None:
                responsible = job.assigned_supplier_id
            else:
                responsible = job.routed_supplier_id
            if responsible is None or responsible != actor.supplier_id:
                raise ActorNotPermitted(
                    action.value,
                    actor.role.value,
                    "only the supplier responsible for the job can decline it",
                )
            return

        raise ActorNotPermitted(action.value, actor.role.value, "action not allowed")

    def _is_assigned_supplier(self, job: Job, actor: Actor) -> bool:
        return (
            actor.role == ActorRole.SUPPLIER
            and job.assigned_supplier_id is not None
            and job.assigned_supplier_id == actor.supplier_id
        )

    def _plan_accept(self, job, actor, payload, now, plan, existing_report):
        changes = plan.changes
        changes["assigned_supplier_id"] = actor.supplier_id
        changes["accepted_at"] = now

        if payload.proposed_start_date or payload.proposed_start_time:
            changes["proposed_start_date"] = payload.proposed_start_date
            changes["proposed_start_time"] = payload.proposed_start_time
        changes["confirmed_start_date"] = (
            payload.proposed_start_date or job.requested_start_date
        )
        changes["confirmed_start_time"] = (
            payload.proposed_start_time or job.requested_start_time
        )

        if self.locks_price_on_acceptance and not job.is_price_locked:
            if not payload.hourly_rate_cents:
                raise TransitionPayloadError(
                    plan.action.value,
                    "hourly_rate_cents",
                    "The accepting supplier has no rate for this service",
                )
            breakdown = self.price_for(
                job, payload.hourly_rate_cents, currency=payload.rate_currency
            )
            plan.price_breakdown = breakdown
            changes.update(
                hourly_rate_cents=breakdown.hourly_rate_cents,
                calculated_price_cents=breakdown.customer_total_cents,
                supplier_payout_cents=breakdown.supplier_total_cents,
                platform_revenue_cents=breakdown.platform_total_cents,
                currency=breakdown.currency,
                price_locked_at=now,
            )
            plan.event.metadata["calculated_price_cents"] = breakdown.customer_total_cents
            plan.event.metadata["supplier_price"] = breakdown.supplier_view()

        plan.event.metadata["supplier_id"] = actor.supplier_id

    def _plan_assign_engineer(self, job, actor, payload, now, plan, existing_report):
        name = (payload.engineer_name or "").strip()
        email = (payload.engineer_email or "").strip()
        if not name:
            raise TransitionPayloadError(plan.action.value, "engineer_name")
        if not email or "@" not in email:
            raise TransitionPayloadError(
                plan.action.value, "engineer_email", "A valid engineer email is required"
            )

        plan.changes.update(
            engineer_name=name,
            engineer_email=email,
            engineer_phone=(payload.engineer_phone or "").strip() or None,
        )
        plan.history_notes = f"Engineer {name} assigned"
        plan.event.metadata.update(engineer_name=name, engineer_email=email)

    def _plan_engineer_accept(self, job, actor, payload, now, plan, existing_report):
        plan.changes["engineer_accepted_at"] = now

    def _plan_engineer_decline(self, job, actor, payload, now, plan, existing_report):
        plan.changes.update(
            engineer_name=None,
            engineer_email=None,
            engineer_phone=None,
            engineer_accepted_at=None,
        )
        plan.event.metadata.update(
            declined_engineer_name=job.engineer_name,
            declined_engineer_email=job.engineer_email,
            supplier_id=job.assigned_supplier_id,
        )
        if payload.reason:
            plan.history_notes = f"{plan.history_notes}: {payload.reason.strip()}"

    def _plan_en_route(self, job, actor, payload, now, plan, existing_report):
        plan.changes["en_route_at"] = now

    def _plan_on_site(self, job, actor, payload, now, plan, existing_report):
        plan.changes["arrived_at"] = now

    def _plan_complete(self, job, actor, payload, now, plan, existing_report):
        report = payload.report or existing_report
        if report is None:
            raise TransitionPayloadError(
                plan.action.value,
                "site_visit_report",
                "A site visit report is required before completing the job",
            )

        missing = report.missing_fields()
        if missing:
            raise TransitionPayloadError(
                plan.action.value,
                missing[0],
                f"Site visit report is incomplete: {', '.join(missing)}",
            )

        if payload.report is not None:
            report.job_id = job.id
            plan.report = report
        plan.changes["completed_at"] = now

    def _plan_cancel(self, job, actor, payload, now, plan, existing_report):
        self._plan_termination(job, actor, payload, now, plan)

    def _plan_decline(self, job, actor, payload, now, plan, existing_report):
        self._plan_termination(job, actor, payload, now, plan)

    def _plan_termination(self, job, actor, payload, now, plan):
        reason = (payload.reason or "").strip()
        if plan.action.requires_reason() and not reason:
            raise TransitionPayloadError(plan.action.value, "reason")

        plan.changes.update(
            cancellation_reason=reason,
            cancelled_by=actor.label,
            cancelled_at=now,
        )
        plan.history_notes = f"{plan.history_notes}: {reason}"

    def price_for(
        self, job: Job, hourly_rate_cents: int, currency: Optional[str] = None
    ) -> PriceBreakdown:
        """Price a job from its stored schedule, OOH flag and remote fee."""
        start_minute = None
        weekend = False
        try:
            tz = parse_timezone(job.timezone)
            local_start = datetime.combine(
                parse_date(job.requested_start_date),
                parse_time(job.requested_start_time),
                tzinfo=tz,
            )
            start_minute = minute_of_day(local_start)
            weekend = is_weekend(local_start)
        except ScheduleError:
            logger.warning(
                "Stored schedule could not be parsed, pricing whole job",
                job_id=job.id,
            )

        return self.pricing_engine.calculate(
            hourly_rate_cents,
            job.estimated_duration_minutes,
            job.is_out_of_hours,
            remote_site_fee=job.remote_site_fee,
            start_minute_of_day=start_minute,
            is_weekend=weekend,
            currency=currency or job.currency,
        )
