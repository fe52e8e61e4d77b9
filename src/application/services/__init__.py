"""
Application services package.
"""

from .distance_fee_calculator import DistanceFeeCalculator
from .job_state_machine import JobStateMachine, TransitionPayload
from .pricing_engine import PricingEngine, PricingRules
from .remote_site_fee_resolver import RemoteSiteFeeResolver
from .retry_handler import RetryHandler
from .schedule_validator import ScheduleRules, ScheduleValidator
from .token_authority import TokenAuthority

__all__ = [
    "DistanceFeeCalculator",
    "JobStateMachine",
    "PricingEngine",
    "PricingRules",
    "RemoteSiteFeeResolver",
    "RetryHandler",
    "ScheduleRules",
    "ScheduleValidator",
    "TokenAuthority",
    "TransitionPayload",
]
