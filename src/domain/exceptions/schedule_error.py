"""
Scheduling exceptions.
"""

from typing import List


class ScheduleError(Exception):
    """Base exception for scheduling errors."""

    pass


class IncompleteSchedule(ScheduleError):
    """Raised when date, time or timezone is missing."""

    def __init__(self, missing_fields: List[str]):
        self.missing_fields = missing_fields
        super().__init__(
            f"Schedule is incomplete, missing: {', '.join(missing_fields)}"
        )


class InvalidFormat(ScheduleError):
    """Raised when a schedule field cannot be parsed."""

    def __init__(self, field_name: str, value: object, expected_format: str):
        self.field_name = field_name
        self.value = value
        self.expected_format = expected_format
        super().__init__(
            f"Field '{field_name}' has invalid value {value!r}, expected: {expected_format}"
        )


class ScheduleRuleViolation(ScheduleError):
    """Raised when a well-formed request breaks a service-level rule."""

    def __init__(self, service_level: str, message: str):
        self.service_level = service_level
        self.message = message
        super().__init__(message)
