"""
GeoNames client for nearest-major-city lookups.
"""

from typing import Any, Dict, List, Optional

import httpx

from src.application.interfaces.services import (
    ReferencePoint,
    ReferencePointProviderInterface,
)
from src.config.logging import get_logger
from src.config.settings import settings
from src.domain.exceptions.lookup_error import ExternalLookupFailed
from src.domain.value_objects.coordinates import Coordinates
from src.infrastructure.external.http_client import HTTPClient

logger = get_logger(__name__)

PROVIDER = "geonames"


class GeoNamesClient(ReferencePointProviderInterface):
    """Finds the nearest city above a population threshold via GeoNames.

    findNearbyPlaceNameJSON returns places ordered by distance, so the
    first one large enough is the nearest major city.
    """

    def __init__(
        self,
        username: Optional[str] = None,
        base_url: Optional[str] = None,
        min_population: Optional[int] = None,
        radius_km: Optional[int] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.username = username or settings.GEONAMES_USERNAME
        self.base_url = (base_url or settings.GEONAMES_BASE_URL).rstrip("/")
        self.min_population = min_population or settings.GEONAMES_MIN_POPULATION
        self.radius_km = radius_km or settings.GEONAMES_SEARCH_RADIUS_KM
        self.timeout = timeout or settings.EXTERNAL_LOOKUP_TIMEOUT_SECONDS
        self.transport = transport

    async def nearest_major_city(self, site: Coordinates) -> Optional[ReferencePoint]:
        """
        Raises:
            ExternalLookupFailed: transport error, non-200 or malformed body
        """
        params = {
            "lat": site.latitude,
            "lng": site.longitude,
            "radius": self.radius_km,
            "cities": "cities15000",
            "maxRows": 50,
            "style": "FULL",
            "username": self.username,
        }

        try:
            async with HTTPClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.get(
                    f"{self.base_url}/findNearbyPlaceNameJSON", params=params
                )
        except httpx.HTTPError as e:
            raise ExternalLookupFailed(PROVIDER, str(e) or type(e).__name__)

        if response.status_code != 200:
            raise ExternalLookupFailed(PROVIDER, f"HTTP {response.status_code}")

        try:
            body = response.json()
        except ValueError:
            raise ExternalLookupFailed(PROVIDER, "response is not JSON")

        if "status" in body:
            # GeoNames reports account and quota errors in a 200 body
            message = body["status"].get("message", "unknown error")
            raise ExternalLookupFailed(PROVIDER, message)

        return self._pick_major_city(body.get("geonames") or [])

    def _pick_major_city(self, places: List[Dict[str, Any]]) -> Optional[ReferencePoint]:
        for place in places:
            try:
                population = int(place.get("population") or 0)
                if population < self.min_population:
                    continue
                coordinates = Coordinates(float(place["lat"]), float(place["lng"]))
            except (KeyError, TypeError, ValueError):
                logger.debug("Skipping malformed GeoNames place", place=place)
                continue

            return ReferencePoint(
                name=place.get("name", "unknown"),
                coordinates=coordinates,
                population=population,
            )

        logger.info(
            "No major city within search radius",
            radius_km=self.radius_km,
            min_population=self.min_population,
        )
        return None
