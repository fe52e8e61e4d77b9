"""
FastAPI dependency injection container.
"""

from typing import Annotated, Optional

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.application.clock import Clock, utc_now
from src.application.services.distance_fee_calculator import DistanceFeeCalculator
from src.application.services.job_state_machine import JobStateMachine
from src.application.services.pricing_engine import PricingEngine
from src.application.services.remote_site_fee_resolver import RemoteSiteFeeResolver
from src.application.services.retry_handler import RetryHandler
from src.application.services.schedule_validator import ScheduleValidator
from src.application.services.token_authority import TokenAuthority
from src.application.services.transactional_outbox import TransactionalOutbox
from src.application.use_cases.create_job import CreateJobUseCase
from src.application.use_cases.engineer_job import (
    RecordLocationUseCase,
    ResolveEngineerLinkUseCase,
    SubmitSiteVisitReportUseCase,
)
from src.application.use_cases.estimate_price import EstimatePriceUseCase
from src.application.use_cases.job_queries import GetJobTimelineUseCase, GetJobUseCase
from src.application.use_cases.transition_job import TransitionJobUseCase
from src.config.database import get_db_session
from src.config.logging import get_logger
from src.config.settings import settings
from src.domain.value_objects.actor import Actor, ActorRole
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
from src.infrastructure.external.geonames_client import GeoNamesClient

logger = get_logger(__name__)

# Circuit breaker state is shared across requests
_retry_handler = RetryHandler()


# Database Dependencies
async def get_job_repository(
    db: AsyncSession = Depends(get_db_session),
) -> JobRepository:
    """Get job repository instance."""
    return JobRepository(db)


async def get_job_history_repository(
    db: AsyncSession = Depends(get_db_session),
) -> JobHistoryRepository:
    """Get job history repository instance."""
    return JobHistoryRepository(db)


async def get_site_visit_report_repository(
    db: AsyncSession = Depends(get_db_session),
) -> SiteVisitReportRepository:
    """Get site visit report repository instance."""
    return SiteVisitReportRepository(db)


async def get_supplier_rate_repository(
    db: AsyncSession = Depends(get_db_session),
) -> SupplierRateRepository:
    """Get supplier rate repository instance."""
    return SupplierRateRepository(db)


async def get_transaction_service(
    db: AsyncSession = Depends(get_db_session),
) -> TransactionService:
    """Get transaction service instance."""
    return TransactionService(db)


async def get_transactional_outbox(
    db: AsyncSession = Depends(get_db_session),
) -> TransactionalOutbox:
    """Get transactional outbox instance."""
    return TransactionalOutbox(db)


# Service Dependencies
async def get_clock() -> Clock:
    """Evaluation clock; overridden in tests."""
    return utc_now


async def get_retry_handler() -> RetryHandler:
    """Get retry handler instance."""
    return _retry_handler


async def get_pricing_engine() -> PricingEngine:
    """Get pricing engine instance."""
    return PricingEngine()


async def get_schedule_validator() -> ScheduleValidator:
    """Get schedule validator instance."""
    return ScheduleValidator()


async def get_fee_resolver() -> RemoteSiteFeeResolver:
    """Remote site fees need a GeoNames account; without one they are zero."""
    provider = GeoNamesClient() if settings.GEONAMES_USERNAME else None
    return RemoteSiteFeeResolver(provider, DistanceFeeCalculator())


async def get_token_authority(
    job_repo: JobRepository = Depends(get_job_repository),
) -> TokenAuthority:
    """Get token authority instance."""
    return TokenAuthority(job_repo)


async def get_state_machine(
    pricing_engine: PricingEngine = Depends(get_pricing_engine),
) -> JobStateMachine:
    """Get job state machine instance."""
    return JobStateMachine(pricing_engine)


# Use Case Dependencies
async def get_create_job_use_case(
    job_repo: JobRepository = Depends(get_job_repository),
    history_repo: JobHistoryRepository = Depends(get_job_history_repository),
    rate_repo: SupplierRateRepository = Depends(get_supplier_rate_repository),
    schedule_validator: ScheduleValidator = Depends(get_schedule_validator),
    pricing_engine: PricingEngine = Depends(get_pricing_engine),
    fee_resolver: RemoteSiteFeeResolver = Depends(get_fee_resolver),
    token_authority: TokenAuthority = Depends(get_token_authority),
    outbox: TransactionalOutbox = Depends(get_transactional_outbox),
    transaction_service: TransactionService = Depends(get_transaction_service),
    clock: Clock = Depends(get_clock),
) -> CreateJobUseCase:
    return CreateJobUseCase(
        job_repo=job_repo,
        history_repo=history_repo,
        supplier_rate_repo=rate_repo,
        schedule_validator=schedule_validator,
        pricing_engine=pricing_engine,
        fee_resolver=fee_resolver,
        token_authority=token_authority,
        outbox=outbox,
        transaction_service=transaction_service,
        clock=clock,
    )


async def get_transition_job_use_case(
    job_repo: JobRepository = Depends(get_job_repository),
    history_repo: JobHistoryRepository = Depends(get_job_history_repository),
    report_repo: SiteVisitReportRepository = Depends(get_site_visit_report_repository),
    rate_repo: SupplierRateRepository = Depends(get_supplier_rate_repository),
    state_machine: JobStateMachine = Depends(get_state_machine),
    outbox: TransactionalOutbox = Depends(get_transactional_outbox),
    transaction_service: TransactionService = Depends(get_transaction_service),
    retry_handler: RetryHandler = Depends(get_retry_handler),
    clock: Clock = Depends(get_clock),
) -> TransitionJobUseCase:
    return TransitionJobUseCase(
        job_repo=job_repo,
        history_repo=history_repo,
        report_repo=report_repo,
        supplier_rate_repo=rate_repo,
        state_machine=state_machine,
        outbox=outbox,
        transaction_service=transaction_service,
        retry_handler=retry_handler,
        clock=clock,
    )


async def get_estimate_price_use_case(
    rate_repo: SupplierRateRepository = Depends(get_supplier_rate_repository),
    schedule_validator: ScheduleValidator = Depends(get_schedule_validator),
    pricing_engine: PricingEngine = Depends(get_pricing_engine),
    fee_resolver: RemoteSiteFeeResolver = Depends(get_fee_resolver),
    clock: Clock = Depends(get_clock),
) -> EstimatePriceUseCase:
    return EstimatePriceUseCase(
        supplier_rate_repo=rate_repo,
        schedule_validator=schedule_validator,
        pricing_engine=pricing_engine,
        fee_resolver=fee_resolver,
        clock=clock,
    )


async def get_job_use_case(
    job_repo: JobRepository = Depends(get_job_repository),
) -> GetJobUseCase:
    return GetJobUseCase(job_repo)


async def get_timeline_use_case(
    job_repo: JobRepository = Depends(get_job_repository),
    history_repo: JobHistoryRepository = Depends(get_job_history_repository),
    token_authority: TokenAuthority = Depends(get_token_authority),
    clock: Clock = Depends(get_clock),
) -> GetJobTimelineUseCase:
    return GetJobTimelineUseCase(job_repo, history_repo, token_authority, clock)


async def get_resolve_link_use_case(
    token_authority: TokenAuthority = Depends(get_token_authority),
    report_repo: SiteVisitReportRepository = Depends(get_site_visit_report_repository),
) -> ResolveEngineerLinkUseCase:
    return ResolveEngineerLinkUseCase(token_authority, report_repo)


async def get_record_location_use_case(
    token_authority: TokenAuthority = Depends(get_token_authority),
    history_repo: JobHistoryRepository = Depends(get_job_history_repository),
    transaction_service: TransactionService = Depends(get_transaction_service),
    clock: Clock = Depends(get_clock),
) -> RecordLocationUseCase:
    return RecordLocationUseCase(
        token_authority, history_repo, transaction_service, clock
    )


async def get_submit_report_use_case(
    token_authority: TokenAuthority = Depends(get_token_authority),
    report_repo: SiteVisitReportRepository = Depends(get_site_visit_report_repository),
    transaction_service: TransactionService = Depends(get_transaction_service),
    clock: Clock = Depends(get_clock),
) -> SubmitSiteVisitReportUseCase:
    return SubmitSiteVisitReportUseCase(
        token_authority, report_repo, transaction_service, clock
    )


# Identity
async def get_actor(
    x_actor_role: Annotated[Optional[str], Header()] = None,
    x_actor_id: Annotated[Optional[str], Header()] = None,
    x_actor_email: Annotated[Optional[str], Header()] = None,
    x_supplier_id: Annotated[Optional[int], Header()] = None,
) -> Actor:
    """Identity asserted by the gateway, trusted as-is."""
    try:
        role = ActorRole(x_actor_role.lower()) if x_actor_role else None
    except ValueError:
        role = None

    if role is None or role == ActorRole.ENGINEER:
        logger.info("Rejected request without actor identity", role=x_actor_role)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="A customer, supplier or admin identity is required",
        )

    try:
        return Actor(
            role=role,
            actor_id=x_actor_id,
            supplier_id=x_supplier_id,
            email=x_actor_email,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e))


# Type aliases for cleaner dependency injection
JobRepositoryDep = Annotated[JobRepository, Depends(get_job_repository)]
SupplierRateRepositoryDep = Annotated[
    SupplierRateRepository, Depends(get_supplier_rate_repository)
]
TransactionServiceDep = Annotated[TransactionService, Depends(get_transaction_service)]
TransactionalOutboxDep = Annotated[TransactionalOutbox, Depends(get_transactional_outbox)]
RetryHandlerDep = Annotated[RetryHandler, Depends(get_retry_handler)]
ClockDep = Annotated[Clock, Depends(get_clock)]
ActorDep = Annotated[Actor, Depends(get_actor)]
TokenAuthorityDep = Annotated[TokenAuthority, Depends(get_token_authority)]

CreateJobUseCaseDep = Annotated[CreateJobUseCase, Depends(get_create_job_use_case)]
TransitionJobUseCaseDep = Annotated[
    TransitionJobUseCase, Depends(get_transition_job_use_case)
]
EstimatePriceUseCaseDep = Annotated[
    EstimatePriceUseCase, Depends(get_estimate_price_use_case)
]
GetJobUseCaseDep = Annotated[GetJobUseCase, Depends(get_job_use_case)]
TimelineUseCaseDep = Annotated[GetJobTimelineUseCase, Depends(get_timeline_use_case)]
ResolveLinkUseCaseDep = Annotated[
    ResolveEngineerLinkUseCase, Depends(get_resolve_link_use_case)
]
RecordLocationUseCaseDep = Annotated[
    RecordLocationUseCase, Depends(get_record_location_use_case)
]
SubmitReportUseCaseDep = Annotated[
    SubmitSiteVisitReportUseCase, Depends(get_submit_report_use_case)
]
