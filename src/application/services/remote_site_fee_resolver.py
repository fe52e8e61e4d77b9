"""
Remote site fee resolution: nearest-city lookup followed by the fee calculation.
"""

import asyncio
from typing import Optional

from src.application.interfaces.services import ReferencePointProviderInterface
from src.application.services.distance_fee_calculator import DistanceFeeCalculator
from src.config.logging import get_logger
from src.config.settings import settings
from src.domain.exceptions.lookup_error import ExternalLookupFailed
from src.domain.value_objects.coordinates import Coordinates
from src.domain.value_objects.price_breakdown import RemoteSiteFee
from src.infrastructure.monitoring.metrics import record_external_lookup_failure

logger = get_logger(__name__)


class RemoteSiteFeeResolver:
    """Resolves the remote site fee for a site before pricing.

    The lookup is bounded by a timeout; any lookup failure degrades to a
    zero fee rather than blocking the booking.
    """

    def __init__(
        self,
        reference_provider: Optional[ReferencePointProviderInterface],
        calculator: Optional[DistanceFeeCalculator] = None,
        timeout_seconds: Optional[float] = None,
        provider_name: str = "geonames",
    ):
        self.reference_provider = reference_provider
        self.calculator = calculator or DistanceFeeCalculator()
        self.timeout_seconds = (
            timeout_seconds
            if timeout_seconds is not None
            else settings.EXTERNAL_LOOKUP_TIMEOUT_SECONDS
        )
        self.provider_name = provider_name

    async def resolve(self, site: Optional[Coordinates]) -> RemoteSiteFee:
        if site is None or self.reference_provider is None:
            return RemoteSiteFee.zero()

        try:
            reference = await asyncio.wait_for(
                self.reference_provider.nearest_major_city(site),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            return self._fallback(
                ExternalLookupFailed(
                    self.provider_name, f"timed out after {self.timeout_seconds}s"
                )
            )
        except ExternalLookupFailed as e:
            return self._fallback(e)

        if reference is None:
            logger.info(
                "No major city near site, no remote fee",
                latitude=site.latitude,
                longitude=site.longitude,
            )
            return RemoteSiteFee.zero()

        fee = self.calculator.calculate(site, reference.coordinates, reference.name)

        logger.debug(
            "Remote site fee resolved",
            reference_city=reference.name,
            distance_km=fee.distance_km,
            customer_cents=fee.customer_cents,
        )

        return fee

    def _fallback(self, error: ExternalLookupFailed) -> RemoteSiteFee:
        logger.warning(
            "Reference city lookup failed, using zero remote fee",
            provider=error.provider,
            reason=error.reason,
        )
        record_external_lookup_failure(error.provider)
        return RemoteSiteFee.zero()
