"""
Application settings using Pydantic BaseSettings.
"""

from typing import Any, List, Optional, Union

from pydantic import ValidationInfo, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings."""

    # Application
    APP_NAME: str = "Field Dispatch Service"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "production"
    LOG_LEVEL: str = "INFO"

    # API Configuration
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000
    API_PREFIX: str = "/api/v1"
    CORS_ORIGINS: Union[str, List[str]] = "*"
    PUBLIC_BASE_URL: str = "http://localhost:8000"

    # Database
    POSTGRES_USER: Optional[str] = None
    POSTGRES_PASSWORD: Optional[str] = None
    POSTGRES_SERVER: Optional[str] = None
    POSTGRES_DB: Optional[str] = None
    DATABASE_URL: Optional[str] = None
    DATABASE_POOL_SIZE: int = 10
    DATABASE_MAX_OVERFLOW: int = 20
    DATABASE_ECHO: bool = False
    DATABASE_POOL_TIMEOUT: int = 30
    DATABASE_POOL_RECYCLE: int = 3600

    # Redis / Queue
    REDIS_URL: str = "redis://localhost:6379/0"
    CELERY_BROKER_URL: str = "redis://localhost:6379/0"
    CELERY_RESULT_BACKEND: str = "redis://localhost:6379/0"
    CELERY_TASK_REJECT_ON_WORKER_LOST: bool = True
    CELERY_TASK_TIME_LIMIT: int = 600  # 10 minutes
    CELERY_TASK_SOFT_TIME_LIMIT: int = 480  # 8 minutes
    JOB_EVENTS_CHANNEL: str = "dispatch:job_events"
    EVENT_PUBLISHER: str = "log"

    # Pricing
    DEFAULT_CURRENCY: str = "USD"
    PLATFORM_FEE_PERCENT: float = 15.0
    OOH_CUSTOMER_SURCHARGE_PERCENT: float = 50.0
    OOH_SUPPLIER_PREMIUM_PERCENT: float = 25.0
    MIN_DURATION_MINUTES: int = 120
    MAX_DURATION_MINUTES: int = 960
    PRORATE_OUT_OF_HOURS: bool = False
    PRICE_LOCK_POINT: str = "job_creation"

    # Scheduling
    BUSINESS_HOURS_START: int = 9
    BUSINESS_HOURS_END: int = 17
    SAME_DAY_WINDOW_HOURS: int = 4
    SAME_DAY_MIN_REMAINING_HOURS: int = 4
    SCHEDULED_MIN_LEAD_HOURS: int = 48

    # Remote site fee
    REMOTE_SITE_FREE_ZONE_KM: float = 100.0
    REMOTE_SITE_RATE_PER_KM_CENTS: int = 100
    REMOTE_SITE_FEE_CAP_CENTS: int = 50000
    REMOTE_SITE_SUPPLIER_SHARE_PERCENT: float = 80.0

    # GeoNames reference point lookup
    GEONAMES_BASE_URL: str = "http://api.geonames.org"
    GEONAMES_USERNAME: Optional[str] = None
    GEONAMES_MIN_POPULATION: int = 250000
    GEONAMES_SEARCH_RADIUS_KM: int = 300
    EXTERNAL_LOOKUP_TIMEOUT_SECONDS: float = 5.0

    # Live tracking
    TRACKING_AVERAGE_SPEED_KMH: float = 50.0

    # Engineer links
    ENGINEER_TOKEN_BYTES: int = 32
    JOB_TOKEN_BYTES: int = 24
    SHORT_CODE_LENGTH: int = 8
    SHORT_CODE_MAX_ATTEMPTS: int = 5

    # Transitions
    TRANSITION_MAX_RETRIES: int = 3
    TRANSITION_RETRY_BASE_DELAY: float = 0.05

    # Monitoring
    ENABLE_METRICS: bool = True
    HEALTH_CHECK_TIMEOUT: int = 5

    # Outbox
    OUTBOX_BATCH_SIZE: int = 50
    OUTBOX_MAX_RETRIES: int = 3
    OUTBOX_RETENTION_DAYS: int = 7

    # Celery Beat Scheduler Configuration
    CELERY_PUBLISH_OUTBOX_EVENTS_INTERVAL_SECONDS: int = 30
    CELERY_CLEANUP_OUTBOX_EVENTS_INTERVAL_HOURS: int = 12  # 12 hours
    CELERY_PUBLISH_OUTBOX_EVENTS_TASK_RATE_LIMIT: str = "30/m"

    # Development
    ENABLE_SWAGGER: bool = True

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v: Union[str, List[str]]) -> List[str]:
        if isinstance(v, str):
            if v == "*":
                return ["*"]
            return [i.strip() for i in v.split(",")]
        elif isinstance(v, list):
            return v
        return ["*"]

    @field_validator("DATABASE_URL", mode="before")
    @classmethod
    def assemble_db_connection(cls, v: Optional[str], info: ValidationInfo) -> Any:
        if isinstance(v, str):
            return v
        # Build from individual components if DATABASE_URL is not provided
        user = info.data.get("POSTGRES_USER") or "dispatch_user"
        password = info.data.get("POSTGRES_PASSWORD") or "dispatch_pass"
        host = info.data.get("POSTGRES_SERVER") or "localhost"
        db = info.data.get("POSTGRES_DB") or "dispatch_service"
        return f"postgresql+asyncpg://{user}:{password}@{host}:5432/{db}"

    @field_validator("ENVIRONMENT")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        if v not in ["development", "staging", "production", "test"]:
            raise ValueError(
                "Environment must be one of: development, staging, production, test"
            )
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v.upper()

    @field_validator("PRICE_LOCK_POINT")
    @classmethod
    def validate_price_lock_point(cls, v: str) -> str:
        if v not in ["job_creation", "supplier_acceptance"]:
            raise ValueError(
                "Price lock point must be one of: job_creation, supplier_acceptance"
            )
        return v

    @field_validator("EVENT_PUBLISHER")
    @classmethod
    def validate_event_publisher(cls, v: str) -> str:
        if v not in ["log", "redis"]:
            raise ValueError("Event publisher must be one of: log, redis")
        return v

    @field_validator("BUSINESS_HOURS_END")
    @classmethod
    def validate_business_hours(cls, v: int, info: ValidationInfo) -> int:
        start = info.data.get("BUSINESS_HOURS_START", 9)
        if not 0 <= start < v <= 24:
            raise ValueError("Business hours must satisfy 0 <= start < end <= 24")
        return v

    @field_validator("REMOTE_SITE_SUPPLIER_SHARE_PERCENT")
    @classmethod
    def validate_supplier_share(cls, v: float) -> float:
        if not 0 <= v <= 100:
            raise ValueError("Supplier share must be between 0 and 100 percent")
        return v

    model_config = {
        "env_file": ".env",
        "case_sensitive": True,
        "extra": "ignore",
        "validate_default": True,
    }


# Global settings instance
settings = Settings()
