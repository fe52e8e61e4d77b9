"""
Repository interfaces for dependency inversion.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from src.domain.entities.job import Job
from src.domain.entities.job_history import LocationSample, StatusHistoryEntry
from src.domain.entities.site_visit_report import SiteVisitReport
from src.domain.entities.supplier_rate import SupplierRate
from src.domain.value_objects.job_status import JobStatus


class JobRepositoryInterface(ABC):
    """Job repository interface."""

    @abstractmethod
    async def get_by_id(self, job_id: int) -> Optional[Job]:
        """Get job by ID."""
        pass

    @abstractmethod
    async def get_by_engineer_token(self, engineer_token: str) -> Optional[Job]:
        """Get job by engineer token."""
        pass

    @abstractmethod
    async def get_by_short_code(self, short_code: str) -> Optional[Job]:
        """Get job by engineer link short code."""
        pass

    @abstractmethod
    async def create(self, job: Job) -> Job:
        """Create a new job."""
        pass

    @abstractmethod
    async def compare_and_set(
        self, job_id: int, expected_status: JobStatus, changes: Dict[str, Any]
    ) -> bool:
        """
        Atomically apply changes if the job is still in expected_status.

        Returns:
            True when exactly one row was updated, False when the status
            no longer matched.
        """
        pass


class JobHistoryRepositoryInterface(ABC):
    """Status history and location history repository interface."""

    @abstractmethod
    async def add_status_entry(self, entry: StatusHistoryEntry) -> StatusHistoryEntry:
        """Append a status history entry."""
        pass

    @abstractmethod
    async def list_status_history(self, job_id: int) -> List[StatusHistoryEntry]:
        """Status history ordered oldest first."""
        pass

    @abstractmethod
    async def add_location(self, sample: LocationSample) -> LocationSample:
        """Append a location sample."""
        pass

    @abstractmethod
    async def list_locations(self, job_id: int) -> List[LocationSample]:
        """Location samples ordered oldest first."""
        pass


class SiteVisitReportRepositoryInterface(ABC):
    """Site visit report repository interface."""

    @abstractmethod
    async def get_by_job_id(self, job_id: int) -> Optional[SiteVisitReport]:
        """Get the report for a job."""
        pass

    @abstractmethod
    async def save(self, report: SiteVisitReport) -> SiteVisitReport:
        """Create or replace the report for a job."""
        pass


class SupplierRateRepositoryInterface(ABC):
    """Supplier rate repository interface."""

    @abstractmethod
    async def find_rates(
        self,
        service_type: str,
        service_level: str,
        country_code: str,
        city_name: Optional[str] = None,
    ) -> List[SupplierRate]:
        """Serviceable rates covering a service in an area."""
        pass

    @abstractmethod
    async def get_supplier_rate(
        self,
        supplier_id: int,
        service_type: str,
        service_level: str,
        country_code: str,
        city_name: Optional[str] = None,
    ) -> Optional[SupplierRate]:
        """One supplier's rate for a service in an area."""
        pass
