"""
Domain exceptions package.
"""

from .lookup_error import ExternalLookupFailed
from .pricing_error import PricingError, PricingInputError, PricingUnavailable
from .schedule_error import (
    IncompleteSchedule,
    InvalidFormat,
    ScheduleError,
    ScheduleRuleViolation,
)
from .token_error import TokenInvalid
from .transition_error import (
    ActorNotPermitted,
    AlreadyAccepted,
    ConcurrentModification,
    InvalidTransition,
    TransitionError,
    TransitionPayloadError,
)
from .validation_error import JobNotFound, RequiredFieldError, ValidationError

__all__ = [
    "ActorNotPermitted",
    "AlreadyAccepted",
    "ConcurrentModification",
    "ExternalLookupFailed",
    "IncompleteSchedule",
    "InvalidFormat",
    "InvalidTransition",
    "JobNotFound",
    "PricingError",
    "PricingInputError",
    "PricingUnavailable",
    "RequiredFieldError",
    "ScheduleError",
    "ScheduleRuleViolation",
    "TokenInvalid",
    "TransitionError",
    "TransitionPayloadError",
    "ValidationError",
]
