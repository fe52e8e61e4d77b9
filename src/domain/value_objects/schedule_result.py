"""
Schedule validation result value object.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


@dataclass(frozen=True)
class ScheduleValidationResult:
    """Outcome of validating a requested booking slot."""

    is_valid: bool
    is_out_of_hours: bool
    message: Optional[str] = None
    reasons: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    local_start: Optional[datetime] = None

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "is_valid": self.is_valid,
            "is_out_of_hours": self.is_out_of_hours,
            "message": self.message,
            "reasons": list(self.reasons),
            "warnings": list(self.warnings),
        }
