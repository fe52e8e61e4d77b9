"""Job domain entity."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from src.domain.value_objects.coordinates import Coordinates
from src.domain.value_objects.job_status import JobStatus
from src.domain.value_objects.price_breakdown import PriceBreakdown, RemoteSiteFee
from src.domain.value_objects.service_level import BookingType, ServiceLevel


@dataclass
class Job:
    """Job domain entity.

    Status only changes through the job state machine; commercial facts are
    written once, when the price is locked, and never recomputed.
    """

    service_type: str
    service_level: ServiceLevel
    site_address: str
    country: str
    timezone: str
    requested_start_date: str
    requested_start_time: str
    estimated_duration_minutes: int
    id: Optional[int] = None
    job_token: Optional[str] = None
    engineer_token: Optional[str] = None
    short_code: Optional[str] = None
    status: JobStatus = JobStatus.PENDING_SUPPLIER_ACCEPTANCE
    description: Optional[str] = None
    city: Optional[str] = None
    site_latitude: Optional[float] = None
    site_longitude: Optional[float] = None

    # Parties
    customer_id: Optional[str] = None
    customer_email: Optional[str] = None
    routed_supplier_id: Optional[int] = None
    assigned_supplier_id: Optional[int] = None
    engineer_name: Optional[str] = None
    engineer_email: Optional[str] = None
    engineer_phone: Optional[str] = None

    # Scheduling
    booking_type: BookingType = BookingType.HOURLY
    estimated_days: Optional[int] = None
    proposed_start_date: Optional[str] = None
    proposed_start_time: Optional[str] = None
    confirmed_start_date: Optional[str] = None
    confirmed_start_time: Optional[str] = None

    # Commercial facts
    is_out_of_hours: bool = False
    currency: str = "USD"
    hourly_rate_cents: Optional[int] = None
    calculated_price_cents: Optional[int] = None
    supplier_payout_cents: Optional[int] = None
    platform_revenue_cents: Optional[int] = None
    remote_site_fee_customer_cents: int = 0
    remote_site_fee_supplier_cents: int = 0
    remote_site_fee_platform_cents: int = 0
    remote_site_fee_km: Optional[float] = None
    nearest_major_city: Optional[str] = None
    price_locked_at: Optional[datetime] = None

    # Lifecycle
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    accepted_at: Optional[datetime] = None
    engineer_accepted_at: Optional[datetime] = None
    en_route_at: Optional[datetime] = None
    arrived_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    cancellation_reason: Optional[str] = None
    cancelled_by: Optional[str] = None

    def __post_init__(self):
        """Validate job data."""
        if not self.service_type or not self.service_type.strip():
            raise ValueError("Service type is required")
        if not self.site_address or not self.site_address.strip():
            raise ValueError("Site address is required")
        if not self.customer_id and not self.customer_email:
            raise ValueError("Job must belong to a customer (id or email)")
        if self.estimated_duration_minutes is None or self.estimated_duration_minutes <= 0:
            raise ValueError("Estimated duration must be positive")

        if not isinstance(self.status, JobStatus):
            self.status = JobStatus(self.status)
        if not isinstance(self.service_level, ServiceLevel):
            self.service_level = ServiceLevel.parse(self.service_level)
        if not isinstance(self.booking_type, BookingType):
            self.booking_type = BookingType(self.booking_type)

        if not self.created_at:
            self.created_at = datetime.now(timezone.utc)
        if not self.updated_at:
            self.updated_at = self.created_at

    @property
    def site_coordinates(self) -> Optional[Coordinates]:
        """Site coordinates, when the address was geocoded."""
        if self.site_latitude is None or self.site_longitude is None:
            return None
        return Coordinates(self.site_latitude, self.site_longitude)

    @property
    def is_price_locked(self) -> bool:
        return self.price_locked_at is not None

    @property
    def remote_site_fee(self) -> RemoteSiteFee:
        """Remote site fee recorded on the job."""
        return RemoteSiteFee(
            customer_cents=self.remote_site_fee_customer_cents or 0,
            supplier_cents=self.remote_site_fee_supplier_cents or 0,
            platform_cents=self.remote_site_fee_platform_cents or 0,
            distance_km=self.remote_site_fee_km or 0.0,
            reference_city=self.nearest_major_city,
        )

    def apply_remote_site_fee(self, fee: RemoteSiteFee) -> None:
        """Record the remote site fee resolved before pricing."""
        self.remote_site_fee_customer_cents = fee.customer_cents
        self.remote_site_fee_supplier_cents = fee.supplier_cents
        self.remote_site_fee_platform_cents = fee.platform_cents
        self.remote_site_fee_km = fee.distance_km if fee.applies else None
        self.nearest_major_city = fee.reference_city if fee.applies else None

    def lock_price(self, breakdown: PriceBreakdown, locked_at: datetime) -> None:
        """Freeze commercial facts from a price breakdown."""
        if self.is_price_locked:
            raise ValueError(f"Price for job {self.id} is already locked")

        self.hourly_rate_cents = breakdown.hourly_rate_cents
        self.calculated_price_cents = breakdown.customer_total_cents
        self.supplier_payout_cents = breakdown.supplier_total_cents
        self.platform_revenue_cents = breakdown.platform_total_cents
        self.is_out_of_hours = breakdown.is_out_of_hours
        self.currency = breakdown.currency
        self.price_locked_at = locked_at

    def is_owned_by(self, customer_id: Optional[str], email: Optional[str]) -> bool:
        """Check whether a customer identity owns this job."""
        if customer_id and self.customer_id and customer_id == self.customer_id:
            return True
        if email and self.customer_email:
            return email.strip().lower() == self.customer_email.strip().lower()
        return False
