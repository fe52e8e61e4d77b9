"""
Pricing exceptions.
"""

from typing import Optional


class PricingError(Exception):
    """Base exception for pricing errors."""

    pass


class PricingUnavailable(PricingError):
    """Raised when no supplier rate covers the requested service and area."""

    def __init__(self, service_type: str, location: Optional[str] = None):
        self.service_type = service_type
        self.location = location
        where = f" in {location}" if location else ""
        super().__init__(f"No coverage for {service_type}{where}")


class PricingInputError(PricingError):
    """Raised when pricing inputs are outside accepted bounds."""

    def __init__(self, field_name: str, message: str):
        self.field_name = field_name
        super().__init__(message)
