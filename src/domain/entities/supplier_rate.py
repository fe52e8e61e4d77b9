"""Supplier rate domain entity."""

from dataclasses import dataclass
from typing import Optional

from src.domain.value_objects.coordinates import Coordinates


@dataclass
class SupplierRate:
    """Hourly rate a supplier charges for a service in an area."""

    supplier_id: int
    service_type: str
    service_level: str
    country_code: str
    hourly_rate_cents: int
    currency: str = "USD"
    city_name: Optional[str] = None
    offers_out_of_hours: bool = True
    is_serviceable: bool = True
    base_latitude: Optional[float] = None
    base_longitude: Optional[float] = None
    id: Optional[int] = None

    def __post_init__(self):
        """Validate rate data."""
        if self.hourly_rate_cents is None or self.hourly_rate_cents <= 0:
            raise ValueError("Hourly rate must be a positive number of cents")
        if not self.service_type:
            raise ValueError("Service type is required")

    @property
    def base_coordinates(self) -> Optional[Coordinates]:
        if self.base_latitude is None or self.base_longitude is None:
            return None
        return Coordinates(self.base_latitude, self.base_longitude)

    def covers(self, is_out_of_hours: bool) -> bool:
        """Check whether this rate can serve a booking."""
        if not self.is_serviceable:
            return False
        return self.offers_out_of_hours or not is_out_of_hours
