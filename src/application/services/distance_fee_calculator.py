"""
Distance Fee Calculator service for remote-site surcharges.
"""

import math
from dataclasses import dataclass
from typing import Optional

from src.application.services.pricing_engine import round_half_up
from src.config.settings import settings
from src.domain.value_objects.coordinates import Coordinates
from src.domain.value_objects.price_breakdown import RemoteSiteFee

EARTH_RADIUS_KM = 6371.0


def haversine_km(origin: Coordinates, destination: Coordinates) -> float:
    """Great-circle distance between two points in kilometres."""
    lat1 = math.radians(origin.latitude)
    lat2 = math.radians(destination.latitude)
    delta_lat = lat2 - lat1
    delta_lon = math.radians(destination.longitude - origin.longitude)

    a = (
        math.sin(delta_lat / 2) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin(delta_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


@dataclass(frozen=True)
class DistanceFeeRules:
    """Rate table for remote-site fees."""

    free_zone_km: float = 100.0
    rate_per_km_cents: int = 100
    cap_cents: int = 50000
    supplier_share_percent: float = 80.0

    @classmethod
    def from_settings(cls, config=None) -> "DistanceFeeRules":
        config = config or settings
        return cls(
            free_zone_km=config.REMOTE_SITE_FREE_ZONE_KM,
            rate_per_km_cents=config.REMOTE_SITE_RATE_PER_KM_CENTS,
            cap_cents=config.REMOTE_SITE_FEE_CAP_CENTS,
            supplier_share_percent=config.REMOTE_SITE_SUPPLIER_SHARE_PERCENT,
        )


class DistanceFeeCalculator:
    """Pure remote-site fee calculator."""

    def __init__(self, rules: Optional[DistanceFeeRules] = None):
        self.rules = rules or DistanceFeeRules.from_settings()

    def calculate(
        self,
        site: Coordinates,
        reference_point: Coordinates,
        reference_city: Optional[str] = None,
    ) -> RemoteSiteFee:
        """Fee for a site measured from a reference point (e.g. nearest major city)."""
        distance_km = haversine_km(site, reference_point)
        return self.fee_for_distance(distance_km, reference_city)

    def fee_for_distance(
        self, distance_km: float, reference_city: Optional[str] = None
    ) -> RemoteSiteFee:
        if distance_km <= self.rules.free_zone_km:
            return RemoteSiteFee(
                customer_cents=0,
                supplier_cents=0,
                platform_cents=0,
                distance_km=round(distance_km, 2),
                reference_city=reference_city,
            )

        total = round_half_up(
            min(distance_km * self.rules.rate_per_km_cents, self.rules.cap_cents)
        )
        supplier = round_half_up(total * self.rules.supplier_share_percent / 100)
        platform = total - supplier

        return RemoteSiteFee(
            customer_cents=supplier + platform,
            supplier_cents=supplier,
            platform_cents=platform,
            distance_km=round(distance_km, 2),
            reference_city=reference_city,
        )


def estimate_eta_minutes(
    position: Coordinates, site: Coordinates, average_speed_kmh: float
) -> int:
    """Rough straight-line ETA for live tracking (never used for pricing)."""
    if average_speed_kmh <= 0:
        raise ValueError("Average speed must be positive")
    distance_km = haversine_km(position, site)
    return int(math.ceil(distance_km / average_speed_kmh * 60))
