"""
Common API schemas.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from src.domain.value_objects.job_status import JobStatus


class ErrorResponse(BaseModel):
    """Error body returned by the registered exception handlers."""

    error: str
    message: str
    type: str


class TimestampMixin(BaseModel):
    """Created/updated timestamps."""

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class LocationSchema(BaseModel):
    """Engineer position reported from the field."""

    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    accuracy_m: Optional[float] = Field(None, ge=0)
    recorded_at: Optional[datetime] = None


class TimelineEntrySchema(BaseModel):
    status: JobStatus
    recorded_at: datetime
    duration_minutes: int
    is_current: bool = False
    notes: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class TimelineResponse(BaseModel):
    """Status history of a job, oldest first."""

    job_id: int
    current_status: JobStatus
    entries: List[TimelineEntrySchema]
    total_minutes: int
    latest_location: Optional[LocationSchema] = None
    eta_minutes: Optional[int] = Field(
        None, description="Minutes until arrival while the engineer is en route"
    )

    @classmethod
    def from_view(cls, view) -> "TimelineResponse":
        timeline = view.timeline
        latest = timeline.latest_location
        return cls(
            job_id=timeline.job_id,
            current_status=timeline.current_status,
            entries=[TimelineEntrySchema(**entry.to_dict()) for entry in timeline.entries],
            total_minutes=timeline.total_minutes,
            latest_location=LocationSchema(
                latitude=latest.latitude,
                longitude=latest.longitude,
                accuracy_m=latest.accuracy_m,
                recorded_at=latest.recorded_at,
            )
            if latest
            else None,
            eta_minutes=view.eta_minutes,
        )
