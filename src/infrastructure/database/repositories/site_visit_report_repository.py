"""Site visit report repository implementation."""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.application.interfaces.repositories import SiteVisitReportRepositoryInterface
from src.domain.entities.site_visit_report import SiteVisitReport
from src.infrastructure.database.models.base import as_utc
from src.infrastructure.database.models.site_visit_report import SiteVisitReportModel

REPORT_FIELDS = [
    "engineer_name",
    "onsite_contact_name",
    "work_completed",
    "findings",
    "recommendations",
    "issue_resolved",
    "signature_data",
    "visit_date",
]


class SiteVisitReportRepository(SiteVisitReportRepositoryInterface):
    """Site visit report repository; a resubmission replaces the report."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_job_id(self, job_id: int) -> Optional[SiteVisitReport]:
        model = await self._get_model(job_id)
        return self._model_to_entity(model) if model else None

    async def save(self, report: SiteVisitReport) -> SiteVisitReport:
        model = await self._get_model(report.job_id)
        if model is None:
            model = SiteVisitReportModel(job_id=report.job_id, created_at=report.created_at)
            self.db.add(model)

        for name in REPORT_FIELDS:
            setattr(model, name, getattr(report, name))

        await self.db.flush()
        await self.db.refresh(model)

        return self._model_to_entity(model)

    async def _get_model(self, job_id: int) -> Optional[SiteVisitReportModel]:
        stmt = select(SiteVisitReportModel).where(SiteVisitReportModel.job_id == job_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    def _model_to_entity(self, model: SiteVisitReportModel) -> SiteVisitReport:
        return SiteVisitReport(
            id=model.id,
            job_id=model.job_id,
            engineer_name=model.engineer_name,
            onsite_contact_name=model.onsite_contact_name,
            work_completed=model.work_completed,
            findings=model.findings,
            recommendations=model.recommendations,
            issue_resolved=model.issue_resolved,
            signature_data=model.signature_data,
            visit_date=as_utc(model.visit_date),
            created_at=as_utc(model.created_at),
        )
