"""
Unit tests for PricingEngine.
"""

import pytest

from src.application.services.pricing_engine import (
    PricingEngine,
    PricingRules,
    round_half_up,
)
from src.domain.exceptions.pricing_error import PricingInputError, PricingUnavailable
from src.domain.value_objects.price_breakdown import RemoteSiteFee


class TestPricingEngine:
    """Test cases for PricingEngine."""

    @pytest.fixture
    def engine(self):
        """Engine with the standard commercial rules."""
        return PricingEngine(PricingRules())

    @pytest.fixture
    def prorating_engine(self):
        return PricingEngine(PricingRules(prorate_out_of_hours=True))

    def test_regular_hours_price(self, engine):
        # Act
        price = engine.calculate(5000, 180, is_out_of_hours=False)

        # Assert
        assert price.supplier_total_cents == 15000
        assert price.customer_total_cents == 17250
        assert price.platform_total_cents == 2250
        assert price.ooh_hours == 0.0
        assert price.customer_ooh_surcharge_cents == 0

    def test_out_of_hours_price_with_remote_site_fee(self, engine):
        # Arrange
        fee = RemoteSiteFee(
            customer_cents=796, supplier_cents=637, platform_cents=159, distance_km=107.96
        )

        # Act
        price = engine.calculate(6493, 300, is_out_of_hours=True, remote_site_fee=fee)

        # Assert
        assert price.supplier_ooh_base_cents == 32465
        assert price.supplier_ooh_premium_cents == 8116
        assert price.supplier_total_cents == 41218
        assert price.customer_base_cents == 37335
        assert price.customer_ooh_surcharge_cents == 16233
        assert price.customer_total_cents == 54364
        assert price.platform_fee_cents == 4870
        assert price.platform_ooh_margin_cents == 8117
        assert price.platform_total_cents == 13146

    @pytest.mark.parametrize("rate", [1, 3333, 4999, 6493, 12345])
    @pytest.mark.parametrize("duration", [120, 185, 300, 960])
    @pytest.mark.parametrize("is_ooh", [False, True])
    def test_totals_always_balance(self, engine, rate, duration, is_ooh):
        price = engine.calculate(rate, duration, is_out_of_hours=is_ooh)

        assert price.customer_total_cents == (
            price.supplier_total_cents + price.platform_total_cents
        )

    def test_out_of_hours_is_all_or_nothing_by_default(self, engine):
        price = engine.calculate(
            5000, 240, is_out_of_hours=True, start_minute_of_day=15 * 60
        )

        assert price.regular_hours == 0.0
        assert price.ooh_hours == 4.0

    def test_prorated_out_of_hours(self, prorating_engine):
        price = prorating_engine.calculate(
            5000, 240, is_out_of_hours=True, start_minute_of_day=15 * 60
        )

        assert price.regular_hours == 2.0
        assert price.ooh_hours == 2.0
        assert price.customer_total_cents == (
            price.supplier_total_cents + price.platform_total_cents
        )

    def test_prorating_never_applies_on_weekends(self, prorating_engine):
        regular, ooh = prorating_engine.split_hours(
            240, True, start_minute_of_day=10 * 60, is_weekend=True
        )

        assert (regular, ooh) == (0.0, 4.0)

    def test_business_minutes_across_midnight(self, engine):
        # 22:00 for 12 hours reaches 09:00-10:00 the next morning
        assert engine.business_minutes_within(22 * 60, 720) == 60

    @pytest.mark.parametrize("duration", [119, 961])
    def test_duration_bounds(self, engine, duration):
        with pytest.raises(PricingInputError) as exc_info:
            engine.calculate(5000, duration, is_out_of_hours=False)

        assert exc_info.value.field_name == "duration_minutes"

    def test_rate_must_be_positive(self, engine):
        with pytest.raises(PricingInputError):
            engine.calculate(0, 120, is_out_of_hours=False)

    def test_price_range(self, engine):
        # Act
        price_range = engine.calculate_price_range([5000, 6000], 120, False)

        # Assert
        assert price_range.supplier_count == 2
        assert price_range.min_price_cents == 11500
        assert price_range.max_price_cents == 13800
        assert price_range.average_price_cents == 12650

    def test_price_range_without_rates(self, engine):
        with pytest.raises(PricingUnavailable):
            engine.calculate_price_range([], 120, False, service_type="network_install")

    def test_customer_view_hides_platform_margin(self, engine):
        price = engine.calculate(5000, 180, is_out_of_hours=False)

        assert "platform_fee_cents" not in price.customer_view()
        assert price.supplier_view()["total_cents"] == 15000


class TestPricingHelpers:
    """Test cases for rounding."""

    @pytest.mark.parametrize(
        "value,expected", [(0.5, 1), (1.49, 1), (2.5, 3), (8116.25, 8116)]
    )
    def test_round_half_up(self, value, expected):
        assert round_half_up(value) == expected
