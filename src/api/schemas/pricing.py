"""
Pricing API schemas.
"""

from typing import List, Optional, Tuple

from pydantic import BaseModel, Field


class PriceEstimateRequest(BaseModel):
    """Pricing query for a prospective booking."""

    service_type: str = Field(..., min_length=1, max_length=100)
    service_level: str
    duration_minutes: int = Field(..., gt=0)
    country: str = Field(..., min_length=2, max_length=2)
    city: Optional[str] = Field(None, max_length=100)
    scheduled_date_time: str = Field(
        ..., description="Site-local start as YYYY-MM-DDTHH:MM"
    )
    timezone: str
    site_latitude: Optional[float] = Field(None, ge=-90, le=90)
    site_longitude: Optional[float] = Field(None, ge=-180, le=180)

    def split_scheduled_date_time(self) -> Tuple[str, str]:
        """Date and time parts; either may be empty when missing."""
        date_part, _, time_part = self.scheduled_date_time.strip().replace(
            " ", "T", 1
        ).partition("T")
        return date_part, time_part


class PriceEstimateResponse(BaseModel):
    available: bool
    supplier_count: int = 0
    estimated_price_cents: Optional[int] = None
    min_price_cents: Optional[int] = None
    max_price_cents: Optional[int] = None
    remote_site_fee_cents: int = 0
    currency: str
    is_out_of_hours: bool
    message: Optional[str] = None
    warnings: List[str] = Field(default_factory=list)
