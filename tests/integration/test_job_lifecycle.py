"""
Integration tests for the job lifecycle against a real database session.
"""

import pytest
import pytest_asyncio

from src.application.services.job_state_machine import JobStateMachine, TransitionPayload
from src.application.services.pricing_engine import PricingEngine, PricingRules
from src.application.services.remote_site_fee_resolver import RemoteSiteFeeResolver
from src.application.services.retry_handler import RetryHandler
from src.application.services.schedule_validator import ScheduleRules, ScheduleValidator
from src.application.services.token_authority import TokenAuthority
from src.application.services.transactional_outbox import (
    OutboxEventType,
    TransactionalOutbox,
)
from src.application.use_cases.create_job import CreateJobRequest, CreateJobUseCase
from src.application.use_cases.engineer_job import (
    SubmitReportRequest,
    SubmitSiteVisitReportUseCase,
)
from src.application.use_cases.job_queries import GetJobTimelineUseCase
from src.application.use_cases.transition_job import (
    TransitionJobRequest,
    TransitionJobUseCase,
)
from src.domain.entities.job_history import LocationSample
from src.domain.entities.supplier_rate import SupplierRate
from src.domain.exceptions.transition_error import AlreadyAccepted
from src.domain.value_objects.actor import Actor
from src.domain.value_objects.job_status import JobAction, JobStatus
from src.infrastructure.database.connection import get_database_health
from src.infrastructure.database.repositories.job_history_repository import (
    JobHistoryRepository,
)
from src.infrastructure.database.repositories.job_repository import JobRepository
from src.infrastructure.database.repositories.site_visit_report_repository import (
    SiteVisitReportRepository,
)
from src.infrastructure.database.repositories.supplier_rate_repository import (
    SupplierRateRepository,
)
from src.infrastructure.database.repositories.transaction_repository import (
    TransactionService,
)


@pytest_asyncio.fixture
async def seeded_session(db_session):
    """Session with one country-wide rate for supplier 7."""
    await SupplierRateRepository(db_session).create(
        SupplierRate(
            supplier_id=7,
            service_type="network_install",
            service_level="next_business_day",
            country_code="US",
            hourly_rate_cents=6493,
        )
    )
    await db_session.commit()
    return db_session


class TestJobLifecycle:
    """End-to-end lifecycle through the use cases."""

    @pytest.fixture
    def repositories(self, seeded_session):
        return {
            "jobs": JobRepository(seeded_session),
            "history": JobHistoryRepository(seeded_session),
            "reports": SiteVisitReportRepository(seeded_session),
            "rates": SupplierRateRepository(seeded_session),
            "outbox": TransactionalOutbox(seeded_session),
            "transactions": TransactionService(seeded_session),
        }

    @pytest.fixture
    def token_authority(self, repositories):
        return TokenAuthority(
            repositories["jobs"],
            engineer_token_bytes=32,
            job_token_bytes=24,
            short_code_length=8,
            max_short_code_attempts=5,
        )

    @pytest.fixture
    def create_use_case(self, repositories, token_authority, clock):
        return CreateJobUseCase(
            job_repo=repositories["jobs"],
            history_repo=repositories["history"],
            supplier_rate_repo=repositories["rates"],
            schedule_validator=ScheduleValidator(ScheduleRules()),
            pricing_engine=PricingEngine(PricingRules()),
            fee_resolver=RemoteSiteFeeResolver(None),
            token_authority=token_authority,
            outbox=repositories["outbox"],
            transaction_service=repositories["transactions"],
            clock=clock,
        )

    @pytest.fixture
    def transition_use_case(self, repositories, clock):
        return TransitionJobUseCase(
            job_repo=repositories["jobs"],
            history_repo=repositories["history"],
            report_repo=repositories["reports"],
            supplier_rate_repo=repositories["rates"],
            state_machine=JobStateMachine(PricingEngine(PricingRules())),
            outbox=repositories["outbox"],
            transaction_service=repositories["transactions"],
            retry_handler=RetryHandler(),
            clock=clock,
            max_retries=1,
            retry_base_delay=0.0,
        )

    async def _book(self, create_use_case):
        result = await create_use_case.execute(
            CreateJobRequest(
                service_type="network_install",
                service_level="next_business_day",
                site_address="1 Main St, Springfield",
                country="US",
                timezone="America/New_York",
                requested_start_date="2024-03-13",
                requested_start_time="10:00",
                estimated_duration_minutes=180,
                customer_id="cust-1",
                site_latitude=40.0,
                site_longitude=-75.0,
            )
        )
        return result.job

    @pytest.mark.asyncio
    async def test_full_lifecycle(
        self,
        create_use_case,
        transition_use_case,
        token_authority,
        repositories,
        clock,
    ):
        # Arrange
        job = await self._book(create_use_case)
        supplier = Actor.supplier(7)
        engineer = Actor.engineer(job.engineer_token)
        linked_before = await token_authority.resolve_short_code(job.short_code)

        async def step(actor, action, payload=None):
            clock.advance(minutes=30)
            return await transition_use_case.execute(
                TransitionJobRequest(job.id, actor, action, payload)
            )

        # Act
        await step(supplier, JobAction.ACCEPT)
        await step(
            supplier,
            JobAction.ASSIGN_ENGINEER,
            TransitionPayload(engineer_name="Jane Smith", engineer_email="jane@example.com"),
        )
        await step(engineer, JobAction.ENGINEER_ACCEPT)
        await step(
            engineer,
            JobAction.EN_ROUTE,
            TransitionPayload(
                location=LocationSample(39.0, -75.0, recorded_at=clock.advance(seconds=1))
            ),
        )
        await step(engineer, JobAction.ON_SITE)
        await SubmitSiteVisitReportUseCase(
            token_authority, repositories["reports"], repositories["transactions"], clock
        ).execute(
            SubmitReportRequest(
                engineer_token=job.engineer_token,
                engineer_name="Jane Smith",
                signature_data="data:image/png;base64,AAA",
                work_completed="Installed and patched 12 ports",
            )
        )
        result = await step(engineer, JobAction.COMPLETE)

        # Assert
        linked_after = await token_authority.resolve_short_code(job.short_code)
        assert linked_before.engineer_token == job.engineer_token
        assert linked_after.engineer_token == linked_before.engineer_token
        assert linked_after.id == job.id

        stored = await repositories["jobs"].get_by_id(job.id)
        assert result.job.status == JobStatus.COMPLETED
        assert stored.status == JobStatus.COMPLETED
        assert stored.assigned_supplier_id == 7
        assert stored.engineer_name == "Jane Smith"
        assert stored.calculated_price_cents == 22401
        assert stored.supplier_payout_cents == 19479
        assert stored.platform_revenue_cents == 2922
        assert stored.completed_at is not None

        view = await GetJobTimelineUseCase(
            repositories["jobs"], repositories["history"], clock=clock
        ).execute(job.id, Actor.customer("cust-1"))
        statuses = [entry.status for entry in view.timeline.entries]
        assert statuses == [
            JobStatus.PENDING_SUPPLIER_ACCEPTANCE,
            JobStatus.SUPPLIER_ACCEPTED,
            JobStatus.SENT_TO_ENGINEER,
            JobStatus.ENGINEER_ACCEPTED,
            JobStatus.EN_ROUTE,
            JobStatus.ON_SITE,
            JobStatus.COMPLETED,
        ]
        assert len(await repositories["history"].list_locations(job.id)) == 1

        events = await repositories["outbox"].get_pending_events(limit=50)
        assert len(events) == 7
        assert events[0].event_type == OutboxEventType.JOB_CREATED
        assert {e.event_type for e in events} >= {
            OutboxEventType.ENGINEER_ASSIGNED,
            OutboxEventType.JOB_COMPLETED,
        }

    @pytest.mark.asyncio
    async def test_second_supplier_cannot_accept(
        self, create_use_case, transition_use_case, repositories
    ):
        job = await self._book(create_use_case)
        await transition_use_case.execute(
            TransitionJobRequest(job.id, Actor.supplier(7), JobAction.ACCEPT)
        )

        with pytest.raises(AlreadyAccepted):
            await transition_use_case.execute(
                TransitionJobRequest(job.id, Actor.supplier(8), JobAction.ACCEPT)
            )

        stored = await repositories["jobs"].get_by_id(job.id)
        assert stored.assigned_supplier_id == 7


class TestJobRepository:
    """Test cases for the status-guarded update."""

    @pytest.mark.asyncio
    async def test_compare_and_set(self, db_session, make_job, now):
        # Arrange
        repo = JobRepository(db_session)
        job = await repo.create(make_job(id=None))
        await db_session.commit()

        # Act
        applied = await repo.compare_and_set(
            job.id,
            JobStatus.PENDING_SUPPLIER_ACCEPTANCE,
            {
                "status": JobStatus.SUPPLIER_ACCEPTED,
                "assigned_supplier_id": 7,
                "accepted_at": now,
            },
        )
        stale = await repo.compare_and_set(
            job.id,
            JobStatus.PENDING_SUPPLIER_ACCEPTANCE,
            {"status": JobStatus.SUPPLIER_ACCEPTED, "assigned_supplier_id": 8},
        )

        # Assert
        assert applied is True
        assert stale is False
        stored = await repo.get_by_id(job.id)
        assert stored.status == JobStatus.SUPPLIER_ACCEPTED
        assert stored.assigned_supplier_id == 7
        assert stored.accepted_at == now

    @pytest.mark.asyncio
    async def test_lookup_by_link(self, db_session, make_job, engineer_token):
        repo = JobRepository(db_session)
        await repo.create(make_job(id=None))

        assert (await repo.get_by_engineer_token(engineer_token)).short_code == "ABCDEFGH"
        assert (await repo.get_by_short_code("ABCDEFGH")).engineer_token == engineer_token
        assert await repo.get_by_short_code("ZZZZZZZZ") is None


class TestSupplierRateRepository:
    """Test cases for rate lookups."""

    @pytest.mark.asyncio
    async def test_city_rate_wins_over_country_rate(self, db_session):
        # Arrange
        repo = SupplierRateRepository(db_session)
        for city, cents in ((None, 5000), ("Springfield", 5500)):
            await repo.create(
                SupplierRate(
                    supplier_id=7,
                    service_type="network_install",
                    service_level="next_business_day",
                    country_code="US",
                    city_name=city,
                    hourly_rate_cents=cents,
                )
            )

        # Act
        rates = await repo.find_rates(
            "network_install", "next_business_day", "us", "springfield"
        )
        rate = await repo.get_supplier_rate(
            7, "network_install", "next_business_day", "US", "Springfield"
        )

        # Assert
        assert [r.hourly_rate_cents for r in rates] == [5500]
        assert rate.hourly_rate_cents == 5500


class TestDatabaseHealth:
    """Test cases for the database health probe."""

    @pytest.mark.asyncio
    async def test_healthy(self, db_session):
        health = await get_database_health(db_session)

        assert health["status"] == "healthy"
        assert health["dialect"] == "sqlite"
