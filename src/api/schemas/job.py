"""
Job-related API schemas.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from src.domain.entities.job import Job
from src.domain.value_objects.actor import ActorRole
from src.domain.value_objects.job_status import JobStatus
from src.domain.value_objects.service_level import BookingType

from .common import TimestampMixin


class JobCreateRequest(BaseModel):
    """Job creation request schema."""

    service_type: str = Field(..., min_length=1, max_length=100)
    service_level: str = Field(
        ..., description="same_business_day | next_business_day | scheduled"
    )
    site_address: str = Field(..., min_length=1, max_length=500)
    city: Optional[str] = Field(None, max_length=100)
    country: str = Field(..., min_length=2, max_length=2, description="ISO country code")
    timezone: str = Field(..., description="IANA timezone of the site")
    requested_start_date: str = Field(..., description="YYYY-MM-DD, site local")
    requested_start_time: str = Field(..., description="HH:MM, site local")
    estimated_duration_minutes: int = Field(..., gt=0)
    description: Optional[str] = Field(None, max_length=5000)
    customer_email: Optional[str] = Field(None, max_length=255)
    site_latitude: Optional[float] = Field(None, ge=-90, le=90)
    site_longitude: Optional[float] = Field(None, ge=-180, le=180)
    routed_supplier_id: Optional[int] = Field(
        None, description="Supplier the job is routed to; omit to broadcast"
    )
    booking_type: BookingType = BookingType.HOURLY
    estimated_days: Optional[int] = Field(None, gt=0)
    direct_assignment: bool = Field(
        False, description="Hand the job straight to the routed supplier"
    )


class TransitionRequest(BaseModel):
    """Fields shared by every lifecycle action."""

    notes: Optional[str] = Field(None, max_length=2000)
    expected_status: Optional[JobStatus] = Field(
        None, description="Fail instead of retrying if the job is no longer in this status"
    )


class AcceptJobRequest(TransitionRequest):
    proposed_start_date: Optional[str] = None
    proposed_start_time: Optional[str] = None


class ReasonRequest(TransitionRequest):
    """Cancel and decline both require a reason."""

    reason: str = Field(..., min_length=1, max_length=1000)


class AssignEngineerRequest(TransitionRequest):
    engineer_name: str = Field(..., min_length=1, max_length=255)
    engineer_email: str = Field(..., min_length=3, max_length=255)
    engineer_phone: Optional[str] = Field(None, max_length=50)


class JobResponse(TimestampMixin):
    """Job response schema.

    Money is integer cents. Supplier payout is shown to suppliers and
    admins; platform revenue to admins only.
    """

    id: int
    status: JobStatus
    service_type: str
    service_level: str
    booking_type: str
    description: Optional[str] = None
    site_address: str
    city: Optional[str] = None
    country: str
    timezone: str
    requested_start_date: str
    requested_start_time: str
    proposed_start_date: Optional[str] = None
    proposed_start_time: Optional[str] = None
    confirmed_start_date: Optional[str] = None
    confirmed_start_time: Optional[str] = None
    estimated_duration_minutes: int
    estimated_days: Optional[int] = None

    is_out_of_hours: bool
    currency: str
    calculated_price_cents: Optional[int] = None
    supplier_payout_cents: Optional[int] = None
    platform_revenue_cents: Optional[int] = None
    remote_site_fee_cents: int = 0
    remote_site_fee_km: Optional[float] = None
    nearest_major_city: Optional[str] = None
    price_locked_at: Optional[datetime] = None

    routed_supplier_id: Optional[int] = None
    assigned_supplier_id: Optional[int] = None
    engineer_name: Optional[str] = None
    engineer_email: Optional[str] = None
    engineer_phone: Optional[str] = None
    engineer_link: Optional[str] = Field(
        None, description="Shown to the supplier so it can be sent to the engineer"
    )

    accepted_at: Optional[datetime] = None
    engineer_accepted_at: Optional[datetime] = None
    en_route_at: Optional[datetime] = None
    arrived_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    cancellation_reason: Optional[str] = None
    cancelled_by: Optional[str] = None

    warnings: List[str] = Field(default_factory=list)

    @classmethod
    def from_job(
        cls,
        job: Job,
        role: ActorRole,
        engineer_link: Optional[str] = None,
        warnings: Optional[List[str]] = None,
    ) -> "JobResponse":
        sees_payout = role in (ActorRole.SUPPLIER, ActorRole.ADMIN)
        return cls(
            id=job.id,
            status=job.status,
            service_type=job.service_type,
            service_level=job.service_level.value,
            booking_type=job.booking_type.value,
            description=job.description,
            site_address=job.site_address,
            city=job.city,
            country=job.country,
            timezone=job.timezone,
            requested_start_date=job.requested_start_date,
            requested_start_time=job.requested_start_time,
            proposed_start_date=job.proposed_start_date,
            proposed_start_time=job.proposed_start_time,
            confirmed_start_date=job.confirmed_start_date,
            confirmed_start_time=job.confirmed_start_time,
            estimated_duration_minutes=job.estimated_duration_minutes,
            estimated_days=job.estimated_days,
            is_out_of_hours=job.is_out_of_hours,
            currency=job.currency,
            calculated_price_cents=job.calculated_price_cents,
            supplier_payout_cents=job.supplier_payout_cents if sees_payout else None,
            platform_revenue_cents=job.platform_revenue_cents
            if role == ActorRole.ADMIN
            else None,
            remote_site_fee_cents=job.remote_site_fee_customer_cents or 0,
            remote_site_fee_km=job.remote_site_fee_km,
            nearest_major_city=job.nearest_major_city,
            price_locked_at=job.price_locked_at,
            routed_supplier_id=job.routed_supplier_id,
            assigned_supplier_id=job.assigned_supplier_id,
            engineer_name=job.engineer_name,
            engineer_email=job.engineer_email,
            engineer_phone=job.engineer_phone,
            engineer_link=engineer_link if sees_payout else None,
            accepted_at=job.accepted_at,
            engineer_accepted_at=job.engineer_accepted_at,
            en_route_at=job.en_route_at,
            arrived_at=job.arrived_at,
            completed_at=job.completed_at,
            cancelled_at=job.cancelled_at,
            cancellation_reason=job.cancellation_reason,
            cancelled_by=job.cancelled_by,
            created_at=job.created_at,
            updated_at=job.updated_at,
            warnings=list(warnings or []),
        )
