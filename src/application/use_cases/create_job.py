"""Create job use case."""

from dataclasses import dataclass
from typing import List, Optional

from src.application.clock import Clock, utc_now
from src.application.interfaces.repositories import (
    JobHistoryRepositoryInterface,
    JobRepositoryInterface,
    SupplierRateRepositoryInterface,
)
from src.application.services.job_state_machine import PRICE_LOCK_AT_CREATION
from src.application.services.pricing_engine import PricingEngine
from src.application.services.remote_site_fee_resolver import RemoteSiteFeeResolver
from src.application.services.schedule_validator import (
    ScheduleValidator,
    is_weekend,
    minute_of_day,
)
from src.application.services.token_authority import TokenAuthority
from src.application.services.transactional_outbox import (
    OutboxEventType,
    TransactionalOutbox,
)
from src.config.logging import get_logger
from src.config.settings import settings
from src.domain.entities.job import Job
from src.domain.entities.job_history import StatusHistoryEntry
from src.domain.entities.supplier_rate import SupplierRate
from src.domain.events.job_created import JobCreated
from src.domain.exceptions.pricing_error import PricingUnavailable
from src.domain.exceptions.validation_error import RequiredFieldError
from src.domain.value_objects.job_status import JobStatus
from src.domain.value_objects.price_breakdown import PriceBreakdown, RemoteSiteFee
from src.domain.value_objects.schedule_result import ScheduleValidationResult
from src.domain.value_objects.service_level import BookingType, ServiceLevel
from src.infrastructure.database.repositories.transaction_repository import (
    TransactionService,
)
from src.infrastructure.monitoring.metrics import (
    record_job_creation,
    record_locked_price,
)

logger = get_logger(__name__)


@dataclass
class CreateJobRequest:
    """Request for booking a job."""

    service_type: str
    service_level: str
    site_address: str
    country: str
    timezone: str
    requested_start_date: str
    requested_start_time: str
    estimated_duration_minutes: int
    customer_id: Optional[str] = None
    customer_email: Optional[str] = None
    description: Optional[str] = None
    city: Optional[str] = None
    site_latitude: Optional[float] = None
    site_longitude: Optional[float] = None
    routed_supplier_id: Optional[int] = None
    booking_type: str = BookingType.HOURLY.value
    estimated_days: Optional[int] = None
    # Legacy path: the job is handed straight to the routed supplier
    direct_assignment: bool = False


@dataclass
class CreateJobResult:
    """Result of job creation."""

    job: Job
    schedule: ScheduleValidationResult
    remote_site_fee: RemoteSiteFee
    price: Optional[PriceBreakdown] = None
    engineer_link: Optional[str] = None

    @property
    def warnings(self) -> List[str]:
        return list(self.schedule.warnings)


class CreateJobUseCase:
    """Use case for booking a job: validate the slot, price it and persist it."""

    def __init__(
        self,
        job_repo: JobRepositoryInterface,
        history_repo: JobHistoryRepositoryInterface,
        supplier_rate_repo: SupplierRateRepositoryInterface,
        schedule_validator: ScheduleValidator,
        pricing_engine: PricingEngine,
        fee_resolver: RemoteSiteFeeResolver,
        token_authority: TokenAuthority,
        outbox: TransactionalOutbox,
        transaction_service: TransactionService,
        clock: Optional[Clock] = None,
        price_lock_point: Optional[str] = None,
    ):
        self.job_repo = job_repo
        self.history_repo = history_repo
        self.supplier_rate_repo = supplier_rate_repo
        self.schedule_validator = schedule_validator
        self.pricing_engine = pricing_engine
        self.fee_resolver = fee_resolver
        self.token_authority = token_authority
        self.outbox = outbox
        self.transaction_service = transaction_service
        self.clock = clock or utc_now
        self.price_lock_point = price_lock_point or settings.PRICE_LOCK_POINT

    async def execute(self, request: CreateJobRequest) -> CreateJobResult:
        """
        Book a job.

        Raises:
            IncompleteSchedule, InvalidFormat, ScheduleRuleViolation: bad slot
            PricingInputError: duration outside billable bounds
            PricingUnavailable: no supplier covers the service
            RequiredFieldError: direct assignment without a supplier
        """
        now = self.clock()

        logger.info(
            "Starting job creation",
            service_type=request.service_type,
            service_level=request.service_level,
            country=request.country,
            city=request.city,
            routed_supplier_id=request.routed_supplier_id,
        )

        if request.direct_assignment and request.routed_supplier_id is None:
            raise RequiredFieldError("routed_supplier_id")
        if not request.customer_id and not request.customer_email:
            raise RequiredFieldError("customer_email")

        # 1. Slot must be bookable for the service level
        schedule = self.schedule_validator.enforce(
            service_level=request.service_level,
            scheduled_date=request.requested_start_date,
            scheduled_time=request.requested_start_time,
            duration_minutes=request.estimated_duration_minutes,
            site_timezone=request.timezone,
            now=now,
        )
        self.pricing_engine.validate_duration(request.estimated_duration_minutes)
        service_level = ServiceLevel.parse(request.service_level)

        # 2. Someone must cover the service
        rate = await self._select_rate(request, service_level, schedule.is_out_of_hours)

        # 3. External lookups happen before pricing
        job = Job(
            service_type=request.service_type,
            service_level=service_level,
            site_address=request.site_address,
            country=request.country,
            timezone=request.timezone,
            requested_start_date=request.requested_start_date,
            requested_start_time=request.requested_start_time,
            estimated_duration_minutes=request.estimated_duration_minutes,
            status=JobStatus.ASSIGNED_TO_SUPPLIER
            if request.direct_assignment
            else JobStatus.PENDING_SUPPLIER_ACCEPTANCE,
            description=request.description,
            city=request.city,
            site_latitude=request.site_latitude,
            site_longitude=request.site_longitude,
            customer_id=request.customer_id,
            customer_email=request.customer_email,
            routed_supplier_id=request.routed_supplier_id,
            booking_type=request.booking_type,
            estimated_days=request.estimated_days,
            is_out_of_hours=schedule.is_out_of_hours,
            currency=rate.currency,
            created_at=now,
        )

        fee = await self.fee_resolver.resolve(job.site_coordinates)
        job.apply_remote_site_fee(fee)

        # 4. Lock the price now unless it waits for supplier acceptance
        price = None
        if self.price_lock_point == PRICE_LOCK_AT_CREATION:
            price = self.pricing_engine.calculate(
                rate.hourly_rate_cents,
                job.estimated_duration_minutes,
                schedule.is_out_of_hours,
                remote_site_fee=fee,
                start_minute_of_day=minute_of_day(schedule.local_start),
                is_weekend=is_weekend(schedule.local_start),
                currency=rate.currency,
            )
            job.lock_price(price, now)

        # 5. Capabilities are minted once, here
        job.engineer_token = self.token_authority.mint_engineer_token()
        job.job_token = self.token_authority.mint_job_token()
        job.short_code = await self.token_authority.mint_short_code()

        try:
            created_job = await self.job_repo.create(job)

            await self.history_repo.add_status_entry(
                StatusHistoryEntry(
                    job_id=created_job.id,
                    status=created_job.status,
                    recorded_at=now,
                    notes="Job created",
                )
            )

            event = JobCreated(
                job_id=created_job.id,
                service_type=created_job.service_type,
                service_level=created_job.service_level.value,
                status=created_job.status.value,
                created_at=now,
                routed_supplier_id=created_job.routed_supplier_id,
                calculated_price_cents=created_job.calculated_price_cents,
                currency=created_job.currency,
                is_out_of_hours=created_job.is_out_of_hours,
                price=price.customer_view() if price else None,
            )
            await self.outbox.create_event(
                event_type=OutboxEventType.JOB_CREATED,
                aggregate_id=created_job.id,
                event_data=event.to_dict(),
            )

            await self.transaction_service.commit()

        except Exception as e:
            logger.error(
                "Failed to create job, rolling back",
                error=str(e),
                service_type=request.service_type,
                exc_info=True,
            )
            await self.transaction_service.rollback()
            raise

        record_job_creation(service_level.value, created_job.is_out_of_hours)
        if price is not None:
            record_locked_price(price.customer_total_cents)

        logger.info(
            "Job created",
            job_id=created_job.id,
            status=created_job.status.value,
            is_out_of_hours=created_job.is_out_of_hours,
            calculated_price_cents=created_job.calculated_price_cents,
            remote_site_fee_cents=fee.customer_cents,
        )

        return CreateJobResult(
            job=created_job,
            schedule=schedule,
            remote_site_fee=fee,
            price=price,
            engineer_link=self.token_authority.engineer_link(created_job),
        )

    async def _select_rate(
        self,
        request: CreateJobRequest,
        service_level: ServiceLevel,
        is_out_of_hours: bool,
    ) -> SupplierRate:
        """Rate the job is priced at.

        A routed job uses the routed supplier's rate. A broadcast job uses
        the highest covering rate, so the locked payout covers whichever
        supplier wins the job.
        """
        location = request.city or request.country

        if request.routed_supplier_id is not None:
            rate = await self.supplier_rate_repo.get_supplier_rate(
                request.routed_supplier_id,
                request.service_type,
                service_level.value,
                request.country,
                request.city,
            )
            if rate is None or not rate.covers(is_out_of_hours):
                raise PricingUnavailable(request.service_type, location)
            return rate

        rates = await self.supplier_rate_repo.find_rates(
            request.service_type, service_level.value, request.country, request.city
        )
        covering = [rate for rate in rates if rate.covers(is_out_of_hours)]
        if not covering:
            raise PricingUnavailable(request.service_type, location)

        return max(covering, key=lambda rate: rate.hourly_rate_cents)
