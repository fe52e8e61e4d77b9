"""Job repository implementation."""

from dataclasses import fields
from enum import Enum
from typing import Any, Dict, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.application.interfaces.repositories import JobRepositoryInterface
from src.config.logging import get_logger
from src.domain.entities.job import Job
from src.domain.value_objects.job_status import JobStatus
from src.infrastructure.database.models.base import as_utc
from src.infrastructure.database.models.job import JobModel

logger = get_logger(__name__)

# Entity fields and columns share names
JOB_FIELDS = [f.name for f in fields(Job)]
DATETIME_FIELDS = {
    "created_at",
    "updated_at",
    "price_locked_at",
    "accepted_at",
    "engineer_accepted_at",
    "en_route_at",
    "arrived_at",
    "completed_at",
    "cancelled_at",
}


def _column_value(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


class JobRepository(JobRepositoryInterface):
    """Job repository implementation."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, job_id: int) -> Optional[Job]:
        """Get job by ID."""
        return await self._get_one(JobModel.id == job_id)

    async def get_by_engineer_token(self, engineer_token: str) -> Optional[Job]:
        return await self._get_one(JobModel.engineer_token == engineer_token)

    async def get_by_short_code(self, short_code: str) -> Optional[Job]:
        return await self._get_one(JobModel.short_code == short_code)

    async def create(self, job: Job) -> Job:
        """Create a new job."""
        values = {
            name: _column_value(getattr(job, name))
            for name in JOB_FIELDS
            if name != "id" or job.id is not None
        }
        job_model = JobModel(**values)

        self.db.add(job_model)
        # Use flush instead of commit to maintain transaction atomicity
        await self.db.flush()
        await self.db.refresh(job_model)

        return self._model_to_entity(job_model)

    async def compare_and_set(
        self, job_id: int, expected_status: JobStatus, changes: Dict[str, Any]
    ) -> bool:
        """Conditional UPDATE guarded by the current status."""
        values = {name: _column_value(value) for name, value in changes.items()}

        stmt = (
            update(JobModel)
            .where(JobModel.id == job_id)
            .where(JobModel.status == JobStatus(expected_status).value)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        await self.db.flush()

        applied = result.rowcount == 1
        if not applied:
            logger.info(
                "Compare-and-set rejected",
                job_id=job_id,
                expected_status=JobStatus(expected_status).value,
            )
        return applied

    async def _get_one(self, condition) -> Optional[Job]:
        stmt = (
            select(JobModel)
            .where(condition)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        model = result.scalar_one_or_none()

        return self._model_to_entity(model) if model else None

    def _model_to_entity(self, model: JobModel) -> Job:
        """Convert SQLAlchemy model to domain entity."""
        values = {}
        for name in JOB_FIELDS:
            value = getattr(model, name)
            if name in DATETIME_FIELDS:
                value = as_utc(value)
            values[name] = value
        return Job(**values)
