"""
Schedule Validator service for service-level and out-of-hours rules.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import List, Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from src.config.logging import get_logger
from src.config.settings import settings
from src.domain.exceptions.schedule_error import (
    IncompleteSchedule,
    InvalidFormat,
    ScheduleRuleViolation,
)
from src.domain.value_objects.schedule_result import ScheduleValidationResult
from src.domain.value_objects.service_level import ServiceLevel

logger = get_logger(__name__)

TIME_FORMATS = ("%H:%M", "%H:%M:%S")
WEEKEND_DAYS = (5, 6)


@dataclass(frozen=True)
class ScheduleRules:
    """Business hours and service-level windows."""

    business_hours_start: int = 9
    business_hours_end: int = 17
    same_day_window_hours: int = 4
    same_day_min_remaining_hours: int = 4
    scheduled_min_lead_hours: int = 48

    @classmethod
    def from_settings(cls, config=None) -> "ScheduleRules":
        config = config or settings
        return cls(
            business_hours_start=config.BUSINESS_HOURS_START,
            business_hours_end=config.BUSINESS_HOURS_END,
            same_day_window_hours=config.SAME_DAY_WINDOW_HOURS,
            same_day_min_remaining_hours=config.SAME_DAY_MIN_REMAINING_HOURS,
            scheduled_min_lead_hours=config.SCHEDULED_MIN_LEAD_HOURS,
        )

    @property
    def business_start_minute(self) -> int:
        return self.business_hours_start * 60

    @property
    def business_end_minute(self) -> int:
        return self.business_hours_end * 60


def parse_date(value: str) -> date:
    """Parse a YYYY-MM-DD date."""
    try:
        return datetime.strptime(value.strip(), "%Y-%m-%d").date()
    except (AttributeError, ValueError):
        raise InvalidFormat("date", value, "YYYY-MM-DD")


def parse_time(value: str) -> time:
    """Parse an HH:MM (or HH:MM:SS) time of day."""
    for fmt in TIME_FORMATS:
        try:
            return datetime.strptime(value.strip(), fmt).time()
        except (AttributeError, ValueError):
            continue
    raise InvalidFormat("time", value, "HH:MM")


def parse_timezone(value: str) -> ZoneInfo:
    """Resolve an IANA timezone name."""
    try:
        return ZoneInfo(value.strip())
    except (ZoneInfoNotFoundError, ValueError, AttributeError):
        raise InvalidFormat("timezone", value, "IANA timezone name")


class ScheduleValidator:
    """Validates a requested booking slot in the site's local time.

    The evaluation clock is always passed in; the validator never reads the
    wall clock itself.
    """

    def __init__(self, rules: Optional[ScheduleRules] = None):
        self.rules = rules or ScheduleRules.from_settings()

    def validate(
        self,
        service_level: Union[ServiceLevel, str],
        scheduled_date: Optional[str],
        scheduled_time: Optional[str],
        duration_minutes: Optional[int],
        site_timezone: Optional[str],
        now: datetime,
    ) -> ScheduleValidationResult:
        """
        Validate a booking slot.

        Raises:
            IncompleteSchedule: date, time or timezone missing
            InvalidFormat: a field could not be parsed

        Returns:
            ScheduleValidationResult; rule violations are reported in the
            result, never raised.
        """
        missing = [
            name
            for name, value in (
                ("date", scheduled_date),
                ("time", scheduled_time),
                ("timezone", site_timezone),
            )
            if value is None or not str(value).strip()
        ]
        if missing:
            raise IncompleteSchedule(missing)

        if not isinstance(service_level, ServiceLevel):
            try:
                service_level = ServiceLevel.parse(service_level)
            except ValueError:
                raise InvalidFormat(
                    "service_level",
                    service_level,
                    "same_business_day | next_business_day | scheduled",
                )

        if duration_minutes is None or duration_minutes < 0:
            raise InvalidFormat("duration_minutes", duration_minutes, "minutes >= 0")

        tz = parse_timezone(site_timezone)
        start_date = parse_date(scheduled_date)
        start_time = parse_time(scheduled_time)

        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        local_now = now.astimezone(tz)
        local_start = datetime.combine(start_date, start_time, tzinfo=tz)

        reasons = self.out_of_hours_reasons(local_start, duration_minutes)
        warnings: List[str] = list(reasons)
        message = None

        if service_level == ServiceLevel.SAME_BUSINESS_DAY:
            message = self._check_same_day(local_start, local_now, warnings)
        elif service_level == ServiceLevel.NEXT_BUSINESS_DAY:
            if start_date != local_now.date() + timedelta(days=1):
                message = "Next Business Day service must be scheduled for tomorrow"
        elif service_level == ServiceLevel.SCHEDULED:
            lead = local_start - local_now
            if lead < timedelta(hours=self.rules.scheduled_min_lead_hours):
                message = (
                    "Scheduled service must be booked at least "
                    f"{self.rules.scheduled_min_lead_hours} hours in advance"
                )

        result = ScheduleValidationResult(
            is_valid=message is None,
            is_out_of_hours=bool(reasons),
            message=message,
            reasons=reasons,
            warnings=warnings,
            local_start=local_start,
        )

        logger.debug(
            "Schedule validated",
            service_level=service_level.value,
            scheduled_date=scheduled_date,
            scheduled_time=scheduled_time,
            timezone=site_timezone,
            is_valid=result.is_valid,
            is_out_of_hours=result.is_out_of_hours,
        )

        return result

    def enforce(self, *args, **kwargs) -> ScheduleValidationResult:
        """Validate and raise ScheduleRuleViolation for an invalid slot."""
        result = self.validate(*args, **kwargs)
        if not result.is_valid:
            level = kwargs.get("service_level", args[0] if args else "")
            raise ScheduleRuleViolation(
                level.value if isinstance(level, ServiceLevel) else str(level),
                result.message,
            )
        return result

    def out_of_hours_reasons(
        self, local_start: datetime, duration_minutes: int
    ) -> List[str]:
        """Why a slot is out of hours; empty when it is not."""
        reasons = []
        start_minute = local_start.hour * 60 + local_start.minute
        end_minute = start_minute + duration_minutes

        if local_start.weekday() in WEEKEND_DAYS:
            reasons.append(f"Weekend booking ({local_start.strftime('%A')})")

        if start_minute < self.rules.business_start_minute:
            reasons.append(
                f"Early start (before {self.rules.business_hours_start:02d}:00)"
            )
        elif start_minute > self.rules.business_end_minute:
            reasons.append(
                f"Evening start (after {self.rules.business_hours_end:02d}:00)"
            )

        if end_minute > self.rules.business_end_minute:
            end_at = local_start + timedelta(minutes=duration_minutes)
            reasons.append(
                f"Work extends beyond business hours (ends at {end_at.strftime('%H:%M')})"
            )

        return reasons

    def business_hours_remaining(self, local_now: datetime) -> float:
        """Business hours left today from the given local time."""
        now_minute = local_now.hour * 60 + local_now.minute
        if local_now.weekday() in WEEKEND_DAYS:
            return 0.0
        if now_minute >= self.rules.business_end_minute:
            return 0.0
        if now_minute < self.rules.business_start_minute:
            return float(self.rules.business_hours_end - self.rules.business_hours_start)
        return (self.rules.business_end_minute - now_minute) / 60

    def _check_same_day(
        self, local_start: datetime, local_now: datetime, warnings: List[str]
    ) -> Optional[str]:
        if local_start.date() != local_now.date():
            return "Same Business Day service must be scheduled for today"

        remaining = self.business_hours_remaining(local_now)
        if remaining < self.rules.same_day_min_remaining_hours:
            warnings.append(
                f"Less than {self.rules.same_day_min_remaining_hours} business hours "
                f"remaining today ({remaining:.1f}h left); out-of-hours charges may apply"
            )

        if local_start < local_now.replace(second=0, microsecond=0):
            return "Same Business Day service cannot start in the past"

        window = timedelta(hours=self.rules.same_day_window_hours)
        if local_start - local_now > window:
            return (
                "Same Business Day service must start within "
                f"{self.rules.same_day_window_hours} hours"
            )
        return None


def minute_of_day(local_start: datetime) -> int:
    return local_start.hour * 60 + local_start.minute


def is_weekend(local_start: datetime) -> bool:
    return local_start.weekday() in WEEKEND_DAYS
