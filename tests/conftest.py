"""
Pytest configuration and fixtures.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from src.application.interfaces.repositories import (
    JobHistoryRepositoryInterface,
    SiteVisitReportRepositoryInterface,
    SupplierRateRepositoryInterface,
)
from src.domain.entities.job import Job
from src.domain.value_objects.service_level import ServiceLevel
from src.infrastructure.database.models import Base

# Test database URL
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

SITE_TIMEZONE = "America/New_York"


class StepClock:
    """Evaluation clock that only moves when a test moves it."""

    def __init__(self, start: datetime):
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> datetime:
        self.current += timedelta(**kwargs)
        return self.current


@pytest.fixture
def now():
    """Tuesday 2024-03-12, 14:00 in New York."""
    return datetime(2024, 3, 12, 18, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock(now):
    return StepClock(now)


@pytest.fixture
def engineer_token():
    return "ab" * 32


@pytest.fixture
def make_job(now, engineer_token):
    """Factory for jobs booked for tomorrow morning at the site."""

    def _make_job(**overrides) -> Job:
        values = dict(
            id=1,
            service_type="network_install",
            service_level=ServiceLevel.NEXT_BUSINESS_DAY,
            site_address="1 Main St, Springfield",
            country="US",
            city="Springfield",
            timezone=SITE_TIMEZONE,
            requested_start_date="2024-03-13",
            requested_start_time="10:00",
            estimated_duration_minutes=180,
            customer_id="cust-1",
            customer_email="buyer@example.com",
            engineer_token=engineer_token,
            short_code="ABCDEFGH",
            created_at=now,
        )
        values.update(overrides)
        return Job(**values)

    return _make_job


@pytest.fixture
def mock_history_repository():
    """Mock status and location history repository."""
    mock_repo = AsyncMock(spec=JobHistoryRepositoryInterface)

    mock_repo.add_status_entry = AsyncMock(side_effect=lambda entry: entry)
    mock_repo.add_location = AsyncMock(side_effect=lambda sample: sample)
    mock_repo.list_status_history = AsyncMock(return_value=[])
    mock_repo.list_locations = AsyncMock(return_value=[])

    return mock_repo


@pytest.fixture
def mock_report_repository():
    """Mock site visit report repository."""
    mock_repo = AsyncMock(spec=SiteVisitReportRepositoryInterface)

    mock_repo.get_by_job_id = AsyncMock(return_value=None)
    mock_repo.save = AsyncMock(side_effect=lambda report: report)

    return mock_repo


@pytest.fixture
def mock_supplier_rate_repository():
    """Mock supplier rate repository."""
    mock_repo = AsyncMock(spec=SupplierRateRepositoryInterface)

    mock_repo.find_rates = AsyncMock(return_value=[])
    mock_repo.get_supplier_rate = AsyncMock(return_value=None)

    return mock_repo


@pytest.fixture
def mock_transaction_service():
    """Mock transaction service that runs the wrapped operation."""

    async def run(operation, name="operation"):
        return await operation()

    service = AsyncMock()
    service.commit = AsyncMock()
    service.rollback = AsyncMock()
    service.execute_in_transaction = AsyncMock(side_effect=run)

    return service


@pytest.fixture
def mock_outbox():
    """Mock transactional outbox."""
    outbox = AsyncMock()
    outbox.create_event = AsyncMock()
    return outbox


@pytest_asyncio.fixture
async def db_engine():
    """Create test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    # Create all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Cleanup
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine):
    """Create test database session."""
    async_session_factory = async_sessionmaker(
        db_engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
    )

    async with async_session_factory() as session:
        yield session
