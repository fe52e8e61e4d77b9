"""Site visit report domain entity."""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional


@dataclass
class SiteVisitReport:
    """Engineer's report submitted before a job can be completed."""

    engineer_name: str
    signature_data: str
    work_completed: Optional[str] = None
    findings: Optional[str] = None
    recommendations: Optional[str] = None
    issue_resolved: bool = True
    onsite_contact_name: Optional[str] = None
    visit_date: Optional[datetime] = None
    job_id: Optional[int] = None
    id: Optional[int] = None
    created_at: Optional[datetime] = None

    def __post_init__(self):
        if not self.created_at:
            self.created_at = datetime.now(timezone.utc)

    def missing_fields(self) -> List[str]:
        """List what still prevents the report from closing the job."""
        missing = []
        if not self.engineer_name or not self.engineer_name.strip():
            missing.append("engineer_name")
        if not self.signature_data or not self.signature_data.strip():
            missing.append("signature_data")
        narrative = [self.work_completed, self.findings, self.recommendations]
        if not any(value and value.strip() for value in narrative):
            missing.append("work_completed")
        return missing

    def is_complete(self) -> bool:
        return not self.missing_fields()

    def to_dict(self) -> dict:
        """Convert to dictionary (signature omitted)."""
        return {
            "job_id": self.job_id,
            "engineer_name": self.engineer_name,
            "onsite_contact_name": self.onsite_contact_name,
            "work_completed": self.work_completed,
            "findings": self.findings,
            "recommendations": self.recommendations,
            "issue_resolved": self.issue_resolved,
            "visit_date": self.visit_date.isoformat() if self.visit_date else None,
            "signed": bool(self.signature_data),
        }
