"""
Pricing value objects.
"""

from dataclasses import asdict, dataclass
from typing import Optional


@dataclass(frozen=True)
class RemoteSiteFee:
    """Distance-based site fee, already split three ways (integer cents)."""

    customer_cents: int
    supplier_cents: int
    platform_cents: int
    distance_km: float = 0.0
    reference_city: Optional[str] = None

    def __post_init__(self):
        """Validate the split."""
        if min(self.customer_cents, self.supplier_cents, self.platform_cents) < 0:
            raise ValueError("Remote site fee shares cannot be negative")
        if self.customer_cents != self.supplier_cents + self.platform_cents:
            raise ValueError(
                "Remote site fee customer share must equal supplier + platform shares"
            )

    @classmethod
    def zero(cls) -> "RemoteSiteFee":
        return cls(customer_cents=0, supplier_cents=0, platform_cents=0)

    @property
    def applies(self) -> bool:
        return self.customer_cents > 0


@dataclass(frozen=True)
class PriceBreakdown:
    """Three-way price split for a job.

    All money fields are integer cents. The customer total always equals the
    supplier payout plus the platform revenue.
    """

    supplier_base_cents: int
    supplier_ooh_base_cents: int
    supplier_ooh_premium_cents: int
    supplier_remote_fee_cents: int
    supplier_total_cents: int

    platform_fee_cents: int
    platform_ooh_margin_cents: int
    platform_remote_fee_cents: int
    platform_total_cents: int

    customer_base_cents: int
    customer_ooh_surcharge_cents: int
    customer_remote_fee_cents: int
    customer_total_cents: int

    duration_hours: float
    regular_hours: float
    ooh_hours: float
    is_out_of_hours: bool
    hourly_rate_cents: int
    currency: str = "USD"

    def __post_init__(self):
        """Validate the totals invariant."""
        if self.customer_total_cents != (
            self.supplier_total_cents + self.platform_total_cents
        ):
            raise ValueError(
                "Customer total must equal supplier total plus platform total"
            )

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return asdict(self)

    def customer_view(self) -> dict:
        """Amounts the customer is allowed to see."""
        return {
            "base_cents": self.customer_base_cents,
            "out_of_hours_surcharge_cents": self.customer_ooh_surcharge_cents,
            "remote_site_fee_cents": self.customer_remote_fee_cents,
            "total_cents": self.customer_total_cents,
            "currency": self.currency,
            "is_out_of_hours": self.is_out_of_hours,
        }

    def supplier_view(self) -> dict:
        """Amounts the supplier is allowed to see (no platform margin)."""
        return {
            "hourly_rate_cents": self.hourly_rate_cents,
            "base_cents": self.supplier_base_cents + self.supplier_ooh_base_cents,
            "out_of_hours_premium_cents": self.supplier_ooh_premium_cents,
            "remote_site_fee_cents": self.supplier_remote_fee_cents,
            "total_cents": self.supplier_total_cents,
            "currency": self.currency,
            "is_out_of_hours": self.is_out_of_hours,
        }


@dataclass(frozen=True)
class PriceRange:
    """Customer price spread across the suppliers covering a request."""

    supplier_count: int
    min_price_cents: int
    max_price_cents: int
    average_price_cents: int
    currency: str
    is_out_of_hours: bool
