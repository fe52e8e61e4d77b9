"""
Unit tests for the job read-side use cases.
"""

from datetime import timedelta
from unittest.mock import AsyncMock

import pytest

from src.application.interfaces.repositories import JobRepositoryInterface
from src.application.use_cases.job_queries import (
    GetJobTimelineUseCase,
    GetJobUseCase,
    can_view,
)
from src.domain.entities.job_history import LocationSample, StatusHistoryEntry
from src.domain.exceptions.transition_error import ActorNotPermitted
from src.domain.exceptions.validation_error import JobNotFound
from src.domain.value_objects.actor import Actor
from src.domain.value_objects.job_status import JobStatus


class TestCanView:
    """Test cases for job visibility."""

    def test_customer_sees_own_job(self, make_job):
        job = make_job()

        assert can_view(job, Actor.customer("cust-1"))
        assert can_view(job, Actor.customer(email="BUYER@example.com"))
        assert not can_view(job, Actor.customer("cust-2"))

    def test_suppliers(self, make_job):
        broadcast = make_job()
        routed = make_job(routed_supplier_id=3)
        assigned = make_job(assigned_supplier_id=7, status=JobStatus.SUPPLIER_ACCEPTED)

        assert can_view(broadcast, Actor.supplier(8))
        assert can_view(routed, Actor.supplier(3))
        assert not can_view(routed, Actor.supplier(8))
        assert can_view(assigned, Actor.supplier(7))
        assert not can_view(assigned, Actor.supplier(8))

    def test_admin_and_engineer(self, make_job, engineer_token):
        job = make_job()

        assert can_view(job, Actor.admin("ops"))
        assert can_view(job, Actor.engineer(engineer_token))
        assert not can_view(job, Actor.engineer("cd" * 32))


class TestGetJobUseCase:
    """Test cases for GetJobUseCase."""

    @pytest.fixture
    def mock_job_repository(self):
        mock_repo = AsyncMock(spec=JobRepositoryInterface)
        mock_repo.get_by_id = AsyncMock(return_value=None)
        return mock_repo

    @pytest.mark.asyncio
    async def test_get_job(self, mock_job_repository, make_job):
        mock_job_repository.get_by_id.return_value = make_job()

        job = await GetJobUseCase(mock_job_repository).execute(1, Actor.customer("cust-1"))

        assert job.id == 1

    @pytest.mark.asyncio
    async def test_job_not_found(self, mock_job_repository):
        with pytest.raises(JobNotFound):
            await GetJobUseCase(mock_job_repository).execute(5, Actor.admin())

    @pytest.mark.asyncio
    async def test_stranger_is_refused(self, mock_job_repository, make_job):
        mock_job_repository.get_by_id.return_value = make_job()

        with pytest.raises(ActorNotPermitted):
            await GetJobUseCase(mock_job_repository).execute(1, Actor.customer("cust-9"))


class TestGetJobTimelineUseCase:
    """Test cases for GetJobTimelineUseCase."""

    @pytest.mark.asyncio
    async def test_timeline_with_eta(
        self, mock_history_repository, make_job, clock, now
    ):
        # Arrange
        job_repo = AsyncMock(spec=JobRepositoryInterface)
        job_repo.get_by_id = AsyncMock(
            return_value=make_job(
                status=JobStatus.EN_ROUTE, site_latitude=0.0, site_longitude=0.0
            )
        )
        mock_history_repository.list_status_history.return_value = [
            StatusHistoryEntry(1, JobStatus.PENDING_SUPPLIER_ACCEPTANCE, now),
            StatusHistoryEntry(1, JobStatus.EN_ROUTE, now + timedelta(minutes=30)),
        ]
        mock_history_repository.list_locations.return_value = [
            LocationSample(1.0, 0.0, recorded_at=now + timedelta(minutes=35))
        ]
        clock.advance(minutes=45)
        use_case = GetJobTimelineUseCase(
            job_repo, mock_history_repository, clock=clock, average_speed_kmh=50.0
        )

        # Act
        view = await use_case.execute(1, Actor.customer("cust-1"))

        # Assert
        assert [e.duration_minutes for e in view.timeline.entries] == [30, 15]
        assert view.eta_minutes == 134
        assert view.timeline.latest_location.latitude == 1.0

    @pytest.mark.asyncio
    async def test_no_eta_once_on_site(self, mock_history_repository, make_job, clock):
        use_case = GetJobTimelineUseCase(
            AsyncMock(spec=JobRepositoryInterface), mock_history_repository, clock=clock
        )

        view = await use_case.for_job(
            make_job(status=JobStatus.ON_SITE, site_latitude=0.0, site_longitude=0.0)
        )

        assert view.eta_minutes is None
        assert view.timeline.entries == []
