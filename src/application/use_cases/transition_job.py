"""Transition job use case."""

from dataclasses import dataclass, replace
from typing import Optional

from src.application.clock import Clock, utc_now
from src.application.interfaces.repositories import (
    JobHistoryRepositoryInterface,
    JobRepositoryInterface,
    SiteVisitReportRepositoryInterface,
    SupplierRateRepositoryInterface,
)
from src.application.interfaces.services import RetryHandlerInterface
from src.application.services.job_state_machine import (
    JobStateMachine,
    TransitionPayload,
    TransitionPlan,
)
from src.application.services.transactional_outbox import (
    OutboxEventType,
    TransactionalOutbox,
)
from src.config.logging import get_logger
from src.config.settings import settings
from src.domain.entities.job import Job
from src.domain.entities.job_history import StatusHistoryEntry
from src.domain.exceptions.transition_error import (
    AlreadyAccepted,
    ConcurrentModification,
    TransitionError,
)
from src.domain.exceptions.validation_error import JobNotFound
from src.domain.value_objects.actor import Actor, ActorRole
from src.domain.value_objects.job_status import JobAction, JobStatus
from src.infrastructure.database.repositories.transaction_repository import (
    TransactionService,
)
from src.infrastructure.monitoring.metrics import (
    record_locked_price,
    record_transition,
    record_transition_conflict,
)

logger = get_logger(__name__)


@dataclass
class TransitionJobRequest:
    """Request for moving a job along its lifecycle."""

    job_id: int
    actor: Actor
    action: JobAction
    payload: Optional[TransitionPayload] = None
    # Pinned precondition: fail instead of re-reading when it no longer holds
    expected_status: Optional[JobStatus] = None


@dataclass
class TransitionJobResult:
    """Result of a transition."""

    job: Job
    plan: TransitionPlan

    @property
    def from_status(self) -> JobStatus:
        return self.plan.from_status

    @property
    def to_status(self) -> JobStatus:
        return self.plan.to_status


class TransitionJobUseCase:
    """Use case for applying one lifecycle action to a job.

    The status write is a compare-and-set on the status the plan was made
    from. History, location, report and outbox rows are only written after
    it succeeds, in the same transaction.
    """

    def __init__(
        self,
        job_repo: JobRepositoryInterface,
        history_repo: JobHistoryRepositoryInterface,
        report_repo: SiteVisitReportRepositoryInterface,
        supplier_rate_repo: SupplierRateRepositoryInterface,
        state_machine: JobStateMachine,
        outbox: TransactionalOutbox,
        transaction_service: TransactionService,
        retry_handler: RetryHandlerInterface,
        clock: Optional[Clock] = None,
        max_retries: Optional[int] = None,
        retry_base_delay: Optional[float] = None,
    ):
        self.job_repo = job_repo
        self.history_repo = history_repo
        self.report_repo = report_repo
        self.supplier_rate_repo = supplier_rate_repo
        self.state_machine = state_machine
        self.outbox = outbox
        self.transaction_service = transaction_service
        self.retry_handler = retry_handler
        self.clock = clock or utc_now
        self.max_retries = (
            max_retries if max_retries is not None else settings.TRANSITION_MAX_RETRIES
        )
        self.retry_base_delay = (
            retry_base_delay
            if retry_base_delay is not None
            else settings.TRANSITION_RETRY_BASE_DELAY
        )

    async def execute(self, request: TransitionJobRequest) -> TransitionJobResult:
        """
        Apply an action.

        Raises:
            JobNotFound: unknown job id
            InvalidTransition, ActorNotPermitted, TransitionPayloadError:
                the action is not allowed; nothing is written
            ConcurrentModification: the job changed underneath us
            AlreadyAccepted: another supplier accepted first
        """
        action = JobAction(request.action)

        try:
            if request.expected_status is not None:
                result = await self._attempt(request)
            else:
                result = await self.retry_handler.execute_with_retry(
                    lambda: self._attempt(request),
                    max_retries=self.max_retries,
                    base_delay=self.retry_base_delay,
                    operation_key=f"job_transition:{request.job_id}",
                    retry_on=(ConcurrentModification,),
                    give_up_on=(AlreadyAccepted,),
                    use_circuit_breaker=False,
                )
        except TransitionError as e:
            record_transition(action.value, type(e).__name__)
            raise

        record_transition(action.value, "applied")
        return result

    async def _attempt(self, request: TransitionJobRequest) -> TransitionJobResult:
        now = self.clock()
        action = JobAction(request.action)
        payload = request.payload or TransitionPayload()

        job = await self.job_repo.get_by_id(request.job_id)
        if job is None:
            raise JobNotFound(request.job_id)

        expected = request.expected_status or job.status
        if job.status != expected:
            raise self._conflict(job, expected, action)

        if (
            action == JobAction.ACCEPT
            and job.assigned_supplier_id is not None
            and job.assigned_supplier_id != request.actor.supplier_id
            and not job.status.awaits_supplier()
        ):
            raise AlreadyAccepted(job.id, expected.value)

        existing_report = None
        if action == JobAction.COMPLETE and payload.report is None:
            existing_report = await self.report_repo.get_by_job_id(job.id)

        if (
            action == JobAction.ACCEPT
            and request.actor.role == ActorRole.SUPPLIER
            and self.state_machine.locks_price_on_acceptance
            and not job.is_price_locked
            and payload.hourly_rate_cents is None
        ):
            rate = await self.supplier_rate_repo.get_supplier_rate(
                request.actor.supplier_id,
                job.service_type,
                job.service_level.value,
                job.country,
                job.city,
            )
            if rate is not None and rate.covers(job.is_out_of_hours):
                payload = replace(
                    payload,
                    hourly_rate_cents=rate.hourly_rate_cents,
                    rate_currency=rate.currency,
                )

        plan = self.state_machine.plan(
            job,
            request.actor,
            action,
            now,
            payload=payload,
            existing_report=existing_report,
        )

        try:
            applied = await self.job_repo.compare_and_set(job.id, expected, plan.changes)
            if not applied:
                raise self._conflict(job, expected, action)

            location = plan.location
            await self.history_repo.add_status_entry(
                StatusHistoryEntry(
                    job_id=job.id,
                    status=plan.to_status,
                    recorded_at=now,
                    notes=plan.history_notes,
                    latitude=location.latitude if location else None,
                    longitude=location.longitude if location else None,
                )
            )
            if location is not None:
                await self.history_repo.add_location(location)
            if plan.report is not None:
                await self.report_repo.save(plan.report)

            await self.outbox.create_event(
                event_type=OutboxEventType.for_action(action),
                aggregate_id=job.id,
                event_data=plan.event.to_dict(),
            )

            await self.transaction_service.commit()

        except Exception:
            await self.transaction_service.rollback()
            raise

        if plan.price_breakdown is not None:
            record_locked_price(plan.price_breakdown.customer_total_cents)

        logger.info(
            "Job transition applied",
            job_id=job.id,
            action=action.value,
            from_status=plan.from_status.value,
            to_status=plan.to_status.value,
            actor=request.actor.label,
        )

        updated = await self.job_repo.get_by_id(job.id)
        return TransitionJobResult(job=updated, plan=plan)

    def _conflict(
        self, job: Job, expected: JobStatus, action: JobAction
    ) -> ConcurrentModification:
        record_transition_conflict(action.value)
        logger.warning(
            "Job transition conflict",
            job_id=job.id,
            action=action.value,
            expected_status=expected.value,
        )
        if action == JobAction.ACCEPT:
            return AlreadyAccepted(job.id, expected.value)
        return ConcurrentModification(job.id, expected.value)
