"""
Job created domain event.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional


@dataclass
class JobCreated:
    """Event raised when a customer books a job."""

    job_id: int
    service_type: str
    service_level: str
    status: str
    created_at: datetime
    routed_supplier_id: Optional[int] = None
    calculated_price_cents: Optional[int] = None
    currency: Optional[str] = None
    is_out_of_hours: bool = False
    price: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "job_id": self.job_id,
            "service_type": self.service_type,
            "service_level": self.service_level,
            "status": self.status,
            "created_at": self.created_at.isoformat(),
            "routed_supplier_id": self.routed_supplier_id,
            "calculated_price_cents": self.calculated_price_cents,
            "currency": self.currency,
            "is_out_of_hours": self.is_out_of_hours,
            "price": self.price,
        }
