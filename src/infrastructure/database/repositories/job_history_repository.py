"""Job status and location history repository implementation."""

from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.application.interfaces.repositories import JobHistoryRepositoryInterface
from src.domain.entities.job_history import LocationSample, StatusHistoryEntry
from src.infrastructure.database.models.base import as_utc
from src.infrastructure.database.models.job_history import (
    JobLocationModel,
    JobStatusHistoryModel,
)


class JobHistoryRepository(JobHistoryRepositoryInterface):
    """Append-only history repository."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def add_status_entry(self, entry: StatusHistoryEntry) -> StatusHistoryEntry:
        model = JobStatusHistoryModel(
            job_id=entry.job_id,
            status=entry.status.value,
            notes=entry.notes,
            latitude=entry.latitude,
            longitude=entry.longitude,
            recorded_at=entry.recorded_at,
        )
        self.db.add(model)
        await self.db.flush()

        entry.id = model.id
        return entry

    async def list_status_history(self, job_id: int) -> List[StatusHistoryEntry]:
        stmt = (
            select(JobStatusHistoryModel)
            .where(JobStatusHistoryModel.job_id == job_id)
            .order_by(JobStatusHistoryModel.recorded_at, JobStatusHistoryModel.id)
        )
        result = await self.db.execute(stmt)

        return [
            StatusHistoryEntry(
                id=model.id,
                job_id=model.job_id,
                status=model.status,
                recorded_at=as_utc(model.recorded_at),
                notes=model.notes,
                latitude=model.latitude,
                longitude=model.longitude,
            )
            for model in result.scalars().all()
        ]

    async def add_location(self, sample: LocationSample) -> LocationSample:
        model = JobLocationModel(
            job_id=sample.job_id,
            latitude=sample.latitude,
            longitude=sample.longitude,
            accuracy_m=sample.accuracy_m,
            tracking_type=sample.tracking_type.value,
            recorded_at=sample.recorded_at,
        )
        self.db.add(model)
        await self.db.flush()

        sample.id = model.id
        return sample

    async def list_locations(self, job_id: int) -> List[LocationSample]:
        stmt = (
            select(JobLocationModel)
            .where(JobLocationModel.job_id == job_id)
            .order_by(JobLocationModel.recorded_at, JobLocationModel.id)
        )
        result = await self.db.execute(stmt)

        return [
            LocationSample(
                id=model.id,
                job_id=model.job_id,
                latitude=model.latitude,
                longitude=model.longitude,
                accuracy_m=model.accuracy_m,
                tracking_type=model.tracking_type,
                recorded_at=as_utc(model.recorded_at),
            )
            for model in result.scalars().all()
        ]
