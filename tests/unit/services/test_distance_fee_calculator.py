"""
Unit tests for DistanceFeeCalculator and RemoteSiteFeeResolver.
"""

import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from src.application.interfaces.services import (
    ReferencePoint,
    ReferencePointProviderInterface,
)
from src.application.services.distance_fee_calculator import (
    DistanceFeeCalculator,
    DistanceFeeRules,
    estimate_eta_minutes,
    haversine_km,
)
from src.application.services.remote_site_fee_resolver import RemoteSiteFeeResolver
from src.domain.exceptions.lookup_error import ExternalLookupFailed
from src.domain.value_objects.coordinates import Coordinates


class TestDistanceFeeCalculator:
    """Test cases for DistanceFeeCalculator."""

    @pytest.fixture
    def calculator(self):
        return DistanceFeeCalculator(DistanceFeeRules())

    def test_haversine(self):
        london = Coordinates(51.5074, -0.1278)
        paris = Coordinates(48.8566, 2.3522)

        assert 340 < haversine_km(london, paris) < 347
        assert haversine_km(london, london) == 0.0

    def test_inside_free_zone(self, calculator):
        fee = calculator.fee_for_distance(50.0, "Leeds")

        assert not fee.applies
        assert fee.distance_km == 50.0
        assert fee.reference_city == "Leeds"

    def test_free_zone_boundary(self, calculator):
        assert not calculator.fee_for_distance(100.0).applies
        assert calculator.fee_for_distance(100.5).customer_cents == 10050

    def test_whole_distance_is_charged_beyond_free_zone(self, calculator):
        # Act
        fee = calculator.fee_for_distance(150.0)

        # Assert
        assert fee.customer_cents == 15000
        assert fee.supplier_cents == 12000
        assert fee.platform_cents == 3000

    def test_fee_is_capped(self, calculator):
        fee = calculator.fee_for_distance(600.0)

        assert fee.customer_cents == 50000
        assert fee.supplier_cents == 40000
        assert fee.platform_cents == 10000

    def test_split_rounds_supplier_share(self, calculator):
        fee = calculator.fee_for_distance(123.47)

        assert fee.customer_cents == 12347
        assert fee.supplier_cents == 9878
        assert fee.platform_cents == 2469

    def test_calculate_from_coordinates(self, calculator):
        # One degree of longitude on the equator is about 111.19 km
        fee = calculator.calculate(Coordinates(0.0, 1.0), Coordinates(0.0, 0.0), "Origin")

        assert fee.customer_cents == 11119
        assert fee.supplier_cents == 8895
        assert fee.platform_cents == 2224
        assert fee.distance_km == 111.19


class TestEstimateEta:
    """Test cases for the straight-line ETA."""

    def test_eta_rounds_up(self):
        eta = estimate_eta_minutes(Coordinates(1.0, 0.0), Coordinates(0.0, 0.0), 50.0)

        assert eta == 134

    def test_zero_distance(self):
        site = Coordinates(40.7, -74.0)

        assert estimate_eta_minutes(site, site, 50.0) == 0

    def test_speed_must_be_positive(self):
        with pytest.raises(ValueError):
            estimate_eta_minutes(Coordinates(0, 0), Coordinates(1, 1), 0)


class TestRemoteSiteFeeResolver:
    """Test cases for RemoteSiteFeeResolver."""

    @pytest.fixture
    def mock_provider(self):
        provider = AsyncMock(spec=ReferencePointProviderInterface)
        provider.nearest_major_city = AsyncMock(
            return_value=ReferencePoint("Origin", Coordinates(0.0, 0.0), 500000)
        )
        return provider

    @pytest.fixture
    def resolver(self, mock_provider):
        return RemoteSiteFeeResolver(
            mock_provider, DistanceFeeCalculator(DistanceFeeRules()), timeout_seconds=1.0
        )

    @pytest.mark.asyncio
    async def test_resolves_fee_from_nearest_city(self, resolver, mock_provider):
        # Arrange
        site = Coordinates(0.0, 1.0)

        # Act
        fee = await resolver.resolve(site)

        # Assert
        mock_provider.nearest_major_city.assert_called_once_with(site)
        assert fee.customer_cents == 11119
        assert fee.reference_city == "Origin"

    @pytest.mark.asyncio
    async def test_no_site_means_no_fee(self, resolver, mock_provider):
        fee = await resolver.resolve(None)

        assert not fee.applies
        mock_provider.nearest_major_city.assert_not_called()

    @pytest.mark.asyncio
    async def test_no_provider_means_no_fee(self):
        resolver = RemoteSiteFeeResolver(None, DistanceFeeCalculator(DistanceFeeRules()))

        fee = await resolver.resolve(Coordinates(0.0, 1.0))

        assert not fee.applies

    @pytest.mark.asyncio
    async def test_no_city_nearby(self, resolver, mock_provider):
        mock_provider.nearest_major_city.return_value = None

        fee = await resolver.resolve(Coordinates(0.0, 1.0))

        assert not fee.applies

    @pytest.mark.asyncio
    async def test_lookup_failure_degrades_to_zero(self, resolver, mock_provider):
        # Arrange
        mock_provider.nearest_major_city.side_effect = ExternalLookupFailed(
            "geonames", "HTTP 503"
        )

        # Act
        with patch(
            "src.application.services.remote_site_fee_resolver.record_external_lookup_failure"
        ) as mock_record:
            fee = await resolver.resolve(Coordinates(0.0, 1.0))

        # Assert
        assert not fee.applies
        mock_record.assert_called_once_with("geonames")

    @pytest.mark.asyncio
    async def test_lookup_timeout_degrades_to_zero(self, mock_provider):
        # Arrange
        async def slow_lookup(site):
            await asyncio.sleep(1)

        mock_provider.nearest_major_city.side_effect = slow_lookup
        resolver = RemoteSiteFeeResolver(
            mock_provider, DistanceFeeCalculator(DistanceFeeRules()), timeout_seconds=0.01
        )

        # Act
        fee = await resolver.resolve(Coordinates(0.0, 1.0))

        # Assert
        assert not fee.applies
