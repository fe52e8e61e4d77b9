"""
Timeline projection over job status and location history.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from src.domain.entities.job import Job
from src.domain.entities.job_history import LocationSample, StatusHistoryEntry

# Location samples this close to a status entry are shown on that entry
LOCATION_MATCH_SECONDS = 60


@dataclass
class TimelineEntry:
    """One status on the job timeline."""

    status: str
    recorded_at: datetime
    duration_minutes: int
    is_current: bool = False
    notes: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status,
            "recorded_at": self.recorded_at.isoformat(),
            "duration_minutes": self.duration_minutes,
            "is_current": self.is_current,
            "notes": self.notes,
            "latitude": self.latitude,
            "longitude": self.longitude,
        }


@dataclass
class JobTimeline:
    """Read-only view of how a job moved through its lifecycle."""

    job_id: int
    current_status: str
    entries: List[TimelineEntry] = field(default_factory=list)
    latest_location: Optional[LocationSample] = None

    @property
    def total_minutes(self) -> int:
        return sum(entry.duration_minutes for entry in self.entries)


def _minutes_between(start: datetime, end: datetime) -> int:
    return max(0, int((end - start).total_seconds() // 60))


def _nearest_location(
    recorded_at: datetime, locations: List[LocationSample]
) -> Optional[LocationSample]:
    best = None
    best_gap = None
    for sample in locations:
        gap = abs((sample.recorded_at - recorded_at).total_seconds())
        if gap <= LOCATION_MATCH_SECONDS and (best_gap is None or gap < best_gap):
            best, best_gap = sample, gap
    return best


def build_timeline(
    job: Job,
    history: List[StatusHistoryEntry],
    locations: List[LocationSample],
    now: datetime,
) -> JobTimeline:
    """
    Project status history into timeline entries.

    Each entry lasts until the next one; the last entry is still running
    (until now) unless the job has reached a final status.
    """
    ordered = sorted(history, key=lambda entry: entry.recorded_at)
    ordered_locations = sorted(locations, key=lambda sample: sample.recorded_at)

    entries = []
    for index, item in enumerate(ordered):
        is_last = index == len(ordered) - 1
        if not is_last:
            ends_at = ordered[index + 1].recorded_at
        elif job.status.is_final():
            ends_at = item.recorded_at
        else:
            ends_at = now

        latitude, longitude = item.latitude, item.longitude
        if latitude is None or longitude is None:
            sample = _nearest_location(item.recorded_at, ordered_locations)
            if sample is not None:
                latitude, longitude = sample.latitude, sample.longitude

        entries.append(
            TimelineEntry(
                status=item.status.value,
                recorded_at=item.recorded_at,
                duration_minutes=_minutes_between(item.recorded_at, ends_at),
                is_current=is_last and not job.status.is_final(),
                notes=item.notes,
                latitude=latitude,
                longitude=longitude,
            )
        )

    return JobTimeline(
        job_id=job.id,
        current_status=job.status.value,
        entries=entries,
        latest_location=ordered_locations[-1] if ordered_locations else None,
    )
