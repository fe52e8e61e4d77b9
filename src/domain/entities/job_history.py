"""Job history domain entities: status history and location samples."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from src.domain.value_objects.job_status import JobStatus


class TrackingType(str, Enum):
    """Why a location sample was taken."""

    EN_ROUTE = "en_route"
    ON_SITE = "on_site"
    MILESTONE = "milestone"


@dataclass
class StatusHistoryEntry:
    """One recorded status of a job."""

    job_id: int
    status: JobStatus
    recorded_at: datetime
    notes: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    id: Optional[int] = None

    def __post_init__(self):
        if not isinstance(self.status, JobStatus):
            self.status = JobStatus(self.status)


@dataclass
class LocationSample:
    """Advisory engineer position, append-only."""

    latitude: float
    longitude: float
    recorded_at: datetime
    accuracy_m: Optional[float] = None
    tracking_type: TrackingType = TrackingType.MILESTONE
    job_id: Optional[int] = None
    id: Optional[int] = None

    def __post_init__(self):
        if not -90.0 <= self.latitude <= 90.0:
            raise ValueError("Latitude must be between -90 and 90")
        if not -180.0 <= self.longitude <= 180.0:
            raise ValueError("Longitude must be between -180 and 180")
        if not isinstance(self.tracking_type, TrackingType):
            self.tracking_type = TrackingType(self.tracking_type)
