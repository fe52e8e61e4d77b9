"""
Unit tests for the engineer link use cases.
"""

from unittest.mock import AsyncMock

import pytest

from src.application.interfaces.repositories import JobRepositoryInterface
from src.application.services.token_authority import TokenAuthority
from src.application.use_cases.engineer_job import (
    RecordLocationRequest,
    RecordLocationUseCase,
    ResolveEngineerLinkUseCase,
    SubmitReportRequest,
    SubmitSiteVisitReportUseCase,
)
from src.domain.entities.job_history import TrackingType
from src.domain.exceptions.token_error import TokenInvalid
from src.domain.exceptions.transition_error import (
    InvalidTransition,
    TransitionPayloadError,
)
from src.domain.value_objects.job_status import JobAction, JobStatus


@pytest.fixture
def mock_job_repository():
    mock_repo = AsyncMock(spec=JobRepositoryInterface)
    mock_repo.get_by_engineer_token = AsyncMock(return_value=None)
    mock_repo.get_by_short_code = AsyncMock(return_value=None)
    return mock_repo


@pytest.fixture
def token_authority(mock_job_repository):
    return TokenAuthority(
        mock_job_repository,
        engineer_token_bytes=32,
        job_token_bytes=24,
        short_code_length=8,
        max_short_code_attempts=5,
    )


class TestResolveEngineerLinkUseCase:
    """Test cases for opening an engineer link."""

    @pytest.fixture
    def use_case(self, token_authority, mock_report_repository):
        return ResolveEngineerLinkUseCase(token_authority, mock_report_repository)

    @pytest.mark.asyncio
    async def test_open_by_token(
        self, use_case, mock_job_repository, make_job, engineer_token
    ):
        # Arrange
        mock_job_repository.get_by_engineer_token.return_value = make_job(
            status=JobStatus.SENT_TO_ENGINEER
        )

        # Act
        view = await use_case.execute(engineer_token=engineer_token)

        # Assert
        assert view.job.id == 1
        assert view.next_actions == [JobAction.ENGINEER_ACCEPT, JobAction.ENGINEER_DECLINE]
        assert view.engineer_link.endswith("/e/ABCDEFGH")
        assert view.report is None

    @pytest.mark.asyncio
    async def test_open_by_short_code(self, use_case, mock_job_repository, make_job):
        mock_job_repository.get_by_short_code.return_value = make_job(
            status=JobStatus.ON_SITE
        )

        view = await use_case.execute(short_code="abcdefgh")

        assert view.next_actions == [JobAction.COMPLETE]
        mock_job_repository.get_by_short_code.assert_called_once_with("ABCDEFGH")

    @pytest.mark.asyncio
    async def test_unknown_link(self, use_case):
        with pytest.raises(TokenInvalid):
            await use_case.execute(engineer_token="cd" * 32)

    @pytest.mark.asyncio
    async def test_finished_job_has_no_actions(
        self, use_case, mock_job_repository, make_job, engineer_token
    ):
        mock_job_repository.get_by_engineer_token.return_value = make_job(
            status=JobStatus.COMPLETED
        )

        view = await use_case.execute(engineer_token=engineer_token)

        assert view.next_actions == []


class TestRecordLocationUseCase:
    """Test cases for engineer position updates."""

    @pytest.fixture
    def use_case(
        self, token_authority, mock_history_repository, mock_transaction_service, clock
    ):
        return RecordLocationUseCase(
            token_authority,
            mock_history_repository,
            mock_transaction_service,
            clock,
            average_speed_kmh=50.0,
        )

    @pytest.mark.asyncio
    async def test_en_route_position_gives_eta(
        self,
        use_case,
        mock_job_repository,
        mock_history_repository,
        make_job,
        engineer_token,
        now,
    ):
        # Arrange
        mock_job_repository.get_by_engineer_token.return_value = make_job(
            status=JobStatus.EN_ROUTE, site_latitude=0.0, site_longitude=0.0
        )

        # Act
        result = await use_case.execute(
            RecordLocationRequest(engineer_token=engineer_token, latitude=1.0, longitude=0.0)
        )

        # Assert
        assert result.eta_minutes == 134
        assert result.sample.tracking_type == TrackingType.EN_ROUTE
        assert result.sample.recorded_at == now
        assert result.sample.job_id == 1
        mock_history_repository.add_location.assert_called_once()

    @pytest.mark.asyncio
    async def test_on_site_position_has_no_eta(
        self, use_case, mock_job_repository, make_job, engineer_token
    ):
        mock_job_repository.get_by_engineer_token.return_value = make_job(
            status=JobStatus.ON_SITE, site_latitude=0.0, site_longitude=0.0
        )

        result = await use_case.execute(
            RecordLocationRequest(engineer_token=engineer_token, latitude=0.0, longitude=0.0)
        )

        assert result.eta_minutes is None
        assert result.sample.tracking_type == TrackingType.ON_SITE

    @pytest.mark.asyncio
    async def test_rejected_before_engineer_accepts(
        self, use_case, mock_job_repository, mock_history_repository, make_job, engineer_token
    ):
        mock_job_repository.get_by_engineer_token.return_value = make_job(
            status=JobStatus.SENT_TO_ENGINEER
        )

        with pytest.raises(InvalidTransition) as exc_info:
            await use_case.execute(
                RecordLocationRequest(engineer_token, latitude=1.0, longitude=1.0)
            )

        assert exc_info.value.action == "update_location"
        mock_history_repository.add_location.assert_not_called()

    @pytest.mark.asyncio
    async def test_invalid_position(
        self, use_case, mock_job_repository, make_job, engineer_token
    ):
        mock_job_repository.get_by_engineer_token.return_value = make_job(
            status=JobStatus.EN_ROUTE
        )

        with pytest.raises(TransitionPayloadError):
            await use_case.execute(
                RecordLocationRequest(engineer_token, latitude=95.0, longitude=1.0)
            )


class TestSubmitSiteVisitReportUseCase:
    """Test cases for site visit report submission."""

    @pytest.fixture
    def use_case(
        self, token_authority, mock_report_repository, mock_transaction_service, clock
    ):
        return SubmitSiteVisitReportUseCase(
            token_authority, mock_report_repository, mock_transaction_service, clock
        )

    @pytest.mark.asyncio
    async def test_submit_while_on_site(
        self,
        use_case,
        mock_job_repository,
        mock_report_repository,
        make_job,
        engineer_token,
        now,
    ):
        # Arrange
        mock_job_repository.get_by_engineer_token.return_value = make_job(
            status=JobStatus.ON_SITE
        )

        # Act
        report = await use_case.execute(
            SubmitReportRequest(
                engineer_token=engineer_token,
                engineer_name="Jane Smith",
                signature_data="data:image/png;base64,AAA",
                findings="Port 4 was dead",
            )
        )

        # Assert
        assert report.job_id == 1
        assert report.visit_date == now
        mock_report_repository.save.assert_called_once()

    @pytest.mark.asyncio
    async def test_missing_signature(
        self, use_case, mock_job_repository, mock_report_repository, make_job, engineer_token
    ):
        mock_job_repository.get_by_engineer_token.return_value = make_job(
            status=JobStatus.ON_SITE
        )

        with pytest.raises(TransitionPayloadError) as exc_info:
            await use_case.execute(
                SubmitReportRequest(
                    engineer_token, engineer_name="Jane", signature_data="", findings="x"
                )
            )

        assert exc_info.value.field_name == "signature_data"
        mock_report_repository.save.assert_not_called()

    @pytest.mark.asyncio
    async def test_only_while_on_site(
        self, use_case, mock_job_repository, make_job, engineer_token
    ):
        mock_job_repository.get_by_engineer_token.return_value = make_job(
            status=JobStatus.EN_ROUTE
        )

        with pytest.raises(InvalidTransition):
            await use_case.execute(
                SubmitReportRequest(
                    engineer_token, engineer_name="Jane", signature_data="sig", findings="x"
                )
            )
