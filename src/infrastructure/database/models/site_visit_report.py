"""
Site visit report SQLAlchemy model.
"""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from .base import BaseModel


class SiteVisitReportModel(BaseModel):
    """Site visit report database model (one per job)."""

    __tablename__ = "site_visit_reports"

    job_id = Column(Integer, ForeignKey("jobs.id"), nullable=False, unique=True)
    engineer_name = Column(String(255), nullable=False)
    onsite_contact_name = Column(String(255))
    work_completed = Column(Text)
    findings = Column(Text)
    recommendations = Column(Text)
    issue_resolved = Column(Boolean, nullable=False, default=True)
    signature_data = Column(Text, nullable=False)
    visit_date = Column(DateTime(timezone=True))

    job = relationship("JobModel", back_populates="site_visit_report")

    def __repr__(self) -> str:
        return f"<SiteVisitReport(job_id={self.job_id})>"
