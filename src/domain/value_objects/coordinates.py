"""
Geographic coordinates value object.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Coordinates:
    """Latitude/longitude pair in decimal degrees."""

    latitude: float
    longitude: float

    def __post_init__(self):
        """Validate coordinate ranges."""
        if not -90.0 <= self.latitude <= 90.0:
            raise ValueError("Latitude must be between -90 and 90")
        if not -180.0 <= self.longitude <= 180.0:
            raise ValueError("Longitude must be between -180 and 180")

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {"latitude": self.latitude, "longitude": self.longitude}
