"""
Engineer link API schemas.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from src.domain.entities.site_visit_report import SiteVisitReport
from src.domain.value_objects.job_status import JobStatus

from .common import LocationSchema


class EngineerActionRequest(BaseModel):
    notes: Optional[str] = Field(None, max_length=2000)
    location: Optional[LocationSchema] = None


class EngineerDeclineRequest(EngineerActionRequest):
    reason: Optional[str] = Field(None, max_length=1000)


class SiteVisitReportSchema(BaseModel):
    """Site visit report; needs a signature and some narrative."""

    engineer_name: str = Field(..., max_length=255)
    signature_data: str = Field(..., description="Signature image as a data URL")
    work_completed: Optional[str] = None
    findings: Optional[str] = None
    recommendations: Optional[str] = None
    issue_resolved: bool = True
    onsite_contact_name: Optional[str] = Field(None, max_length=255)
    visit_date: Optional[datetime] = None


class CompleteJobRequest(EngineerActionRequest):
    report: Optional[SiteVisitReportSchema] = Field(
        None, description="Omit when the report was already submitted"
    )


class SiteVisitReportResponse(BaseModel):
    job_id: int
    engineer_name: str
    onsite_contact_name: Optional[str] = None
    work_completed: Optional[str] = None
    findings: Optional[str] = None
    recommendations: Optional[str] = None
    issue_resolved: bool
    visit_date: Optional[datetime] = None
    signed: bool

    @classmethod
    def from_report(cls, report: SiteVisitReport) -> "SiteVisitReportResponse":
        return cls(
            job_id=report.job_id,
            engineer_name=report.engineer_name,
            onsite_contact_name=report.onsite_contact_name,
            work_completed=report.work_completed,
            findings=report.findings,
            recommendations=report.recommendations,
            issue_resolved=report.issue_resolved,
            visit_date=report.visit_date,
            signed=bool(report.signature_data),
        )


class EngineerJobResponse(BaseModel):
    """What the engineer sees behind the link; no money."""

    id: int
    status: JobStatus
    service_type: str
    description: Optional[str] = None
    site_address: str
    city: Optional[str] = None
    timezone: str
    start_date: str
    start_time: str
    estimated_duration_minutes: int
    engineer_name: Optional[str] = None
    engineer_link: str
    next_actions: List[str]
    report: Optional[SiteVisitReportResponse] = None

    @classmethod
    def from_view(cls, view) -> "EngineerJobResponse":
        job = view.job
        return cls(
            id=job.id,
            status=job.status,
            service_type=job.service_type,
            description=job.description,
            site_address=job.site_address,
            city=job.city,
            timezone=job.timezone,
            start_date=job.confirmed_start_date or job.requested_start_date,
            start_time=job.confirmed_start_time or job.requested_start_time,
            estimated_duration_minutes=job.estimated_duration_minutes,
            engineer_name=job.engineer_name,
            engineer_link=view.engineer_link,
            next_actions=[action.value for action in view.next_actions],
            report=SiteVisitReportResponse.from_report(view.report)
            if view.report
            else None,
        )


class LocationResponse(BaseModel):
    job_id: int
    latitude: float
    longitude: float
    recorded_at: datetime
    tracking_type: str
    eta_minutes: Optional[int] = None
