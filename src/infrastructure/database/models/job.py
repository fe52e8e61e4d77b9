"""
Job SQLAlchemy model.
"""

from sqlalchemy import Boolean, Column, DateTime, Float, Index, Integer, String, Text
from sqlalchemy.orm import relationship

from src.domain.value_objects.job_status import JobStatus

from .base import BaseModel


class JobModel(BaseModel):
    """Job database model."""

    __tablename__ = "jobs"

    # Capabilities
    job_token = Column(String(64), unique=True, index=True)
    engineer_token = Column(String(64), unique=True, index=True)
    short_code = Column(String(16), unique=True, index=True)

    status = Column(
        String(40),
        default=JobStatus.PENDING_SUPPLIER_ACCEPTANCE.value,
        nullable=False,
        index=True,
    )

    # Service and site
    service_type = Column(String(100), nullable=False)
    service_level = Column(String(30), nullable=False)
    description = Column(Text)
    site_address = Column(Text, nullable=False)
    city = Column(String(100))
    country = Column(String(2), nullable=False)
    timezone = Column(String(64), nullable=False)
    site_latitude = Column(Float)
    site_longitude = Column(Float)

    # Parties
    customer_id = Column(String(64), index=True)
    customer_email = Column(String(255), index=True)
    routed_supplier_id = Column(Integer, index=True)
    assigned_supplier_id = Column(Integer, index=True)
    engineer_name = Column(String(255))
    engineer_email = Column(String(255))
    engineer_phone = Column(String(32))

    # Scheduling
    booking_type = Column(String(20), nullable=False, default="hourly")
    estimated_days = Column(Integer)
    estimated_duration_minutes = Column(Integer, nullable=False)
    requested_start_date = Column(String(10), nullable=False)
    requested_start_time = Column(String(8), nullable=False)
    proposed_start_date = Column(String(10))
    proposed_start_time = Column(String(8))
    confirmed_start_date = Column(String(10))
    confirmed_start_time = Column(String(8))

    # Commercial facts, immutable once price_locked_at is set
    is_out_of_hours = Column(Boolean, nullable=False, default=False)
    currency = Column(String(3), nullable=False, default="USD")
    hourly_rate_cents = Column(Integer)
    calculated_price_cents = Column(Integer)
    supplier_payout_cents = Column(Integer)
    platform_revenue_cents = Column(Integer)
    remote_site_fee_customer_cents = Column(Integer, nullable=False, default=0)
    remote_site_fee_supplier_cents = Column(Integer, nullable=False, default=0)
    remote_site_fee_platform_cents = Column(Integer, nullable=False, default=0)
    remote_site_fee_km = Column(Float)
    nearest_major_city = Column(String(100))
    price_locked_at = Column(DateTime(timezone=True))

    # Lifecycle
    accepted_at = Column(DateTime(timezone=True))
    engineer_accepted_at = Column(DateTime(timezone=True))
    en_route_at = Column(DateTime(timezone=True))
    arrived_at = Column(DateTime(timezone=True))
    completed_at = Column(DateTime(timezone=True))
    cancelled_at = Column(DateTime(timezone=True))
    cancellation_reason = Column(Text)
    cancelled_by = Column(String(100))

    status_history = relationship(
        "JobStatusHistoryModel", back_populates="job", cascade="all, delete-orphan"
    )
    locations = relationship(
        "JobLocationModel", back_populates="job", cascade="all, delete-orphan"
    )
    site_visit_report = relationship(
        "SiteVisitReportModel", back_populates="job", uselist=False
    )

    __table_args__ = (
        Index("idx_jobs_status_supplier", "status", "routed_supplier_id"),
        Index("idx_jobs_assigned_supplier_status", "assigned_supplier_id", "status"),
    )

    def __repr__(self) -> str:
        return f"<Job(id={self.id}, status={self.status}, service={self.service_type})>"
