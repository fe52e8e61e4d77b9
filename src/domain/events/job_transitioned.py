"""
Job transitioned domain event.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional


@dataclass
class JobTransitioned:
    """Event raised when a job moves from one status to another."""

    job_id: int
    action: str
    from_status: str
    to_status: str
    actor: str
    occurred_at: datetime
    reason: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "job_id": self.job_id,
            "action": self.action,
            "from_status": self.from_status,
            "to_status": self.to_status,
            "actor": self.actor,
            "occurred_at": self.occurred_at.isoformat(),
            "reason": self.reason,
            "metadata": self.metadata,
        }
