"""
Service level and booking type value objects.
"""

from enum import Enum


class ServiceLevel(str, Enum):
    """Commitment tier requested by the customer."""

    SAME_BUSINESS_DAY = "same_business_day"
    NEXT_BUSINESS_DAY = "next_business_day"
    SCHEDULED = "scheduled"

    @classmethod
    def parse(cls, value: str) -> "ServiceLevel":
        """Parse a service level, accepting the legacy short aliases."""
        aliases = {
            "same_day": cls.SAME_BUSINESS_DAY,
            "next_day": cls.NEXT_BUSINESS_DAY,
        }
        if value in aliases:
            return aliases[value]
        return cls(value)


class BookingType(str, Enum):
    """How the booking is billed."""

    HOURLY = "hourly"
    FULL_DAY = "full_day"
    MULTI_DAY = "multi_day"
