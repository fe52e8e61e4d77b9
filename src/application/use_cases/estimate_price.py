"""Estimate price use case."""

from dataclasses import dataclass, field
from typing import List, Optional

from src.application.clock import Clock, utc_now
from src.application.interfaces.repositories import SupplierRateRepositoryInterface
from src.application.services.pricing_engine import PricingEngine
from src.application.services.remote_site_fee_resolver import RemoteSiteFeeResolver
from src.application.services.schedule_validator import (
    ScheduleValidator,
    is_weekend,
    minute_of_day,
)
from src.config.logging import get_logger
from src.domain.exceptions.pricing_error import PricingUnavailable
from src.domain.value_objects.coordinates import Coordinates
from src.domain.value_objects.service_level import ServiceLevel
from src.infrastructure.monitoring.metrics import record_price_quote

logger = get_logger(__name__)


@dataclass
class EstimatePriceRequest:
    """Pricing query for a prospective booking."""

    service_type: str
    service_level: str
    duration_minutes: int
    country: str
    timezone: str
    scheduled_date: str
    scheduled_time: str
    city: Optional[str] = None
    site_latitude: Optional[float] = None
    site_longitude: Optional[float] = None


@dataclass
class EstimatePriceResult:
    """Quote returned to the customer; nothing is persisted."""

    available: bool
    currency: str
    is_out_of_hours: bool
    supplier_count: int = 0
    estimated_price_cents: Optional[int] = None
    min_price_cents: Optional[int] = None
    max_price_cents: Optional[int] = None
    remote_site_fee_cents: int = 0
    message: Optional[str] = None
    warnings: List[str] = field(default_factory=list)


class EstimatePriceUseCase:
    """Use case for quoting a price range without creating a job."""

    def __init__(
        self,
        supplier_rate_repo: SupplierRateRepositoryInterface,
        schedule_validator: ScheduleValidator,
        pricing_engine: PricingEngine,
        fee_resolver: RemoteSiteFeeResolver,
        clock: Optional[Clock] = None,
    ):
        self.supplier_rate_repo = supplier_rate_repo
        self.schedule_validator = schedule_validator
        self.pricing_engine = pricing_engine
        self.fee_resolver = fee_resolver
        self.clock = clock or utc_now

    async def execute(self, request: EstimatePriceRequest) -> EstimatePriceResult:
        """
        Quote a booking.

        Raises:
            IncompleteSchedule, InvalidFormat: the slot cannot be read
            PricingInputError: duration outside billable bounds
        """
        schedule = self.schedule_validator.validate(
            service_level=request.service_level,
            scheduled_date=request.scheduled_date,
            scheduled_time=request.scheduled_time,
            duration_minutes=request.duration_minutes,
            site_timezone=request.timezone,
            now=self.clock(),
        )
        self.pricing_engine.validate_duration(request.duration_minutes)
        service_level = ServiceLevel.parse(request.service_level)
        currency = self.pricing_engine.rules.currency

        if not schedule.is_valid:
            record_price_quote(False)
            return EstimatePriceResult(
                available=False,
                currency=currency,
                is_out_of_hours=schedule.is_out_of_hours,
                message=schedule.message,
                warnings=list(schedule.warnings),
            )

        rates = await self.supplier_rate_repo.find_rates(
            request.service_type, service_level.value, request.country, request.city
        )
        covering = [rate for rate in rates if rate.covers(schedule.is_out_of_hours)]
        if covering:
            # Quotes are in the currency of the area's rates
            currency = covering[0].currency
            covering = [rate for rate in covering if rate.currency == currency]

        if not covering:
            record_price_quote(False)
            message = str(
                PricingUnavailable(request.service_type, request.city or request.country)
            )
            logger.info(
                "No coverage for quote",
                service_type=request.service_type,
                service_level=service_level.value,
                country=request.country,
                city=request.city,
            )
            return EstimatePriceResult(
                available=False,
                currency=currency,
                is_out_of_hours=schedule.is_out_of_hours,
                message=message,
                warnings=list(schedule.warnings),
            )

        site = None
        if request.site_latitude is not None and request.site_longitude is not None:
            site = Coordinates(request.site_latitude, request.site_longitude)
        fee = await self.fee_resolver.resolve(site)

        price_range = self.pricing_engine.calculate_price_range(
            [rate.hourly_rate_cents for rate in covering],
            request.duration_minutes,
            schedule.is_out_of_hours,
            remote_site_fee=fee,
            start_minute_of_day=minute_of_day(schedule.local_start),
            is_weekend=is_weekend(schedule.local_start),
            service_type=request.service_type,
            currency=currency,
        )

        record_price_quote(True)

        return EstimatePriceResult(
            available=True,
            currency=price_range.currency,
            is_out_of_hours=price_range.is_out_of_hours,
            supplier_count=price_range.supplier_count,
            estimated_price_cents=price_range.average_price_cents,
            min_price_cents=price_range.min_price_cents,
            max_price_cents=price_range.max_price_cents,
            remote_site_fee_cents=fee.customer_cents,
            warnings=list(schedule.warnings),
        )
