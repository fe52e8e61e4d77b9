"""
Pricing Engine service for the three-way customer/supplier/platform split.
"""

import math
from dataclasses import dataclass
from typing import Iterable, Optional

from src.config.logging import get_logger
from src.config.settings import settings
from src.domain.exceptions.pricing_error import PricingInputError, PricingUnavailable
from src.domain.value_objects.price_breakdown import (
    PriceBreakdown,
    PriceRange,
    RemoteSiteFee,
)

logger = get_logger(__name__)

MINUTES_PER_DAY = 24 * 60


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from negative infinity."""
    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class PricingRules:
    """Every percentage and bound the pricing engine uses."""

    platform_fee_percent: float = 15.0
    ooh_customer_surcharge_percent: float = 50.0
    ooh_supplier_premium_percent: float = 25.0
    min_duration_minutes: int = 120
    max_duration_minutes: int = 960
    business_hours_start: int = 9
    business_hours_end: int = 17
    prorate_out_of_hours: bool = False
    currency: str = "USD"

    @classmethod
    def from_settings(cls, config=None) -> "PricingRules":
        config = config or settings
        return cls(
            platform_fee_percent=config.PLATFORM_FEE_PERCENT,
            ooh_customer_surcharge_percent=config.OOH_CUSTOMER_SURCHARGE_PERCENT,
            ooh_supplier_premium_percent=config.OOH_SUPPLIER_PREMIUM_PERCENT,
            min_duration_minutes=config.MIN_DURATION_MINUTES,
            max_duration_minutes=config.MAX_DURATION_MINUTES,
            business_hours_start=config.BUSINESS_HOURS_START,
            business_hours_end=config.BUSINESS_HOURS_END,
            prorate_out_of_hours=config.PRORATE_OUT_OF_HOURS,
            currency=config.DEFAULT_CURRENCY,
        )


class PricingEngine:
    """Pure pricing calculator.

    Every intermediate amount is rounded half-up to whole cents before it is
    used in the next step; the totals depend on that order.
    """

    def __init__(self, rules: Optional[PricingRules] = None):
        self.rules = rules or PricingRules.from_settings()

    def validate_duration(self, duration_minutes: int) -> None:
        """Reject durations outside the billable bounds."""
        if duration_minutes < self.rules.min_duration_minutes:
            raise PricingInputError(
                "duration_minutes",
                f"Duration must be at least {self.rules.min_duration_minutes / 60:g} hours",
            )
        if duration_minutes > self.rules.max_duration_minutes:
            raise PricingInputError(
                "duration_minutes",
                f"Duration cannot exceed {self.rules.max_duration_minutes / 60:g} hours",
            )

    def split_hours(
        self,
        duration_minutes: int,
        is_out_of_hours: bool,
        start_minute_of_day: Optional[int] = None,
        is_weekend: bool = False,
    ) -> tuple:
        """Split the duration into (regular_hours, ooh_hours)."""
        duration_hours = duration_minutes / 60
        if not is_out_of_hours:
            return duration_hours, 0.0

        if (
            self.rules.prorate_out_of_hours
            and start_minute_of_day is not None
            and not is_weekend
        ):
            regular_minutes = self.business_minutes_within(
                start_minute_of_day, duration_minutes
            )
            return regular_minutes / 60, (duration_minutes - regular_minutes) / 60

        return 0.0, duration_hours

    def business_minutes_within(
        self, start_minute_of_day: int, duration_minutes: int
    ) -> int:
        """Minutes of a job that fall inside business hours, across midnight."""
        end = start_minute_of_day + duration_minutes
        business_start = self.rules.business_hours_start * 60
        business_end = self.rules.business_hours_end * 60

        regular = 0
        day_offset = 0
        while day_offset < end:
            overlap_start = max(start_minute_of_day, day_offset + business_start)
            overlap_end = min(end, day_offset + business_end)
            if overlap_start < overlap_end:
                regular += overlap_end - overlap_start
            day_offset += MINUTES_PER_DAY
        return regular

    def calculate(
        self,
        hourly_rate_cents: int,
        duration_minutes: int,
        is_out_of_hours: bool,
        remote_site_fee: Optional[RemoteSiteFee] = None,
        start_minute_of_day: Optional[int] = None,
        is_weekend: bool = False,
        currency: Optional[str] = None,
    ) -> PriceBreakdown:
        """Compute the full price breakdown for one supplier rate.

        Amounts are in the currency of the rate; currency defaults to the
        configured one when the caller does not know it.
        """
        if hourly_rate_cents is None or hourly_rate_cents <= 0:
            raise PricingInputError(
                "hourly_rate_cents", "Supplier hourly rate must be positive"
            )
        self.validate_duration(duration_minutes)

        rules = self.rules
        fee = remote_site_fee or RemoteSiteFee.zero()
        duration_hours = duration_minutes / 60
        regular_hours, ooh_hours = self.split_hours(
            duration_minutes, is_out_of_hours, start_minute_of_day, is_weekend
        )

        # Supplier side
        supplier_base = round_half_up(hourly_rate_cents * regular_hours)
        supplier_ooh_base = round_half_up(hourly_rate_cents * ooh_hours)
        supplier_ooh_premium = round_half_up(
            supplier_ooh_base * rules.ooh_supplier_premium_percent / 100
        )
        supplier_total = (
            supplier_base + supplier_ooh_base + supplier_ooh_premium + fee.supplier_cents
        )

        # Customer side
        markup = 1 + rules.platform_fee_percent / 100
        customer_base = round_half_up(supplier_base * markup) + round_half_up(
            supplier_ooh_base * markup
        )
        customer_ooh_surcharge = round_half_up(
            supplier_ooh_base * rules.ooh_customer_surcharge_percent / 100
        )
        customer_total = customer_base + customer_ooh_surcharge + fee.customer_cents

        # Platform side
        platform_fee = customer_base - (supplier_base + supplier_ooh_base)
        platform_ooh_margin = customer_ooh_surcharge - supplier_ooh_premium
        platform_total = platform_fee + platform_ooh_margin + fee.platform_cents

        return PriceBreakdown(
            supplier_base_cents=supplier_base,
            supplier_ooh_base_cents=supplier_ooh_base,
            supplier_ooh_premium_cents=supplier_ooh_premium,
            supplier_remote_fee_cents=fee.supplier_cents,
            supplier_total_cents=supplier_total,
            platform_fee_cents=platform_fee,
            platform_ooh_margin_cents=platform_ooh_margin,
            platform_remote_fee_cents=fee.platform_cents,
            platform_total_cents=platform_total,
            customer_base_cents=customer_base,
            customer_ooh_surcharge_cents=customer_ooh_surcharge,
            customer_remote_fee_cents=fee.customer_cents,
            customer_total_cents=customer_total,
            duration_hours=duration_hours,
            regular_hours=regular_hours,
            ooh_hours=ooh_hours,
            is_out_of_hours=is_out_of_hours,
            hourly_rate_cents=hourly_rate_cents,
            currency=currency or rules.currency,
        )

    def calculate_price_range(
        self,
        hourly_rates_cents: Iterable[int],
        duration_minutes: int,
        is_out_of_hours: bool,
        remote_site_fee: Optional[RemoteSiteFee] = None,
        start_minute_of_day: Optional[int] = None,
        is_weekend: bool = False,
        service_type: str = "service",
        currency: Optional[str] = None,
    ) -> PriceRange:
        """Customer price spread across several supplier rates."""
        rates = list(hourly_rates_cents)
        if not rates:
            raise PricingUnavailable(service_type)

        totals = [
            self.calculate(
                rate,
                duration_minutes,
                is_out_of_hours,
                remote_site_fee=remote_site_fee,
                start_minute_of_day=start_minute_of_day,
                is_weekend=is_weekend,
                currency=currency,
            ).customer_total_cents
            for rate in rates
        ]

        price_range = PriceRange(
            supplier_count=len(rates),
            min_price_cents=min(totals),
            max_price_cents=max(totals),
            average_price_cents=round_half_up(sum(totals) / len(totals)),
            currency=currency or self.rules.currency,
            is_out_of_hours=is_out_of_hours,
        )

        logger.debug(
            "Calculated price range",
            supplier_count=price_range.supplier_count,
            min_price_cents=price_range.min_price_cents,
            max_price_cents=price_range.max_price_cents,
            is_out_of_hours=is_out_of_hours,
        )

        return price_range
