"""
Job status and lifecycle action value objects.
"""

from enum import Enum


class JobStatus(str, Enum):
    """Job lifecycle status enumeration (wire values are stable)."""

    PENDING_SUPPLIER_ACCEPTANCE = "pending_supplier_acceptance"
    SUPPLIER_ACCEPTED = "supplier_accepted"
    SENT_TO_ENGINEER = "sent_to_engineer"
    ENGINEER_ACCEPTED = "engineer_accepted"
    ASSIGNED_TO_SUPPLIER = "assigned_to_supplier"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    EN_ROUTE = "en_route"
    ON_SITE = "on_site"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    def is_final(self) -> bool:
        """Check if status is terminal (no outgoing edges)."""
        return self in [self.COMPLETED, self.CANCELLED, self.DECLINED]

    def awaits_supplier(self) -> bool:
        """Check if the job is still waiting for a supplier to accept it."""
        return self in [self.PENDING_SUPPLIER_ACCEPTANCE, self.ASSIGNED_TO_SUPPLIER]

    def is_engineer_active(self) -> bool:
        """Check if the engineer is working the job and may report location."""
        return self in [
            self.ENGINEER_ACCEPTED,
            self.ACCEPTED,
            self.EN_ROUTE,
            self.ON_SITE,
        ]


class JobAction(str, Enum):
    """Actions that drive job status transitions."""

    ACCEPT = "accept"
    DECLINE = "decline"
    ASSIGN_ENGINEER = "assign_engineer"
    ENGINEER_ACCEPT = "engineer_accept"
    ENGINEER_DECLINE = "engineer_decline"
    EN_ROUTE = "en_route"
    ON_SITE = "on_site"
    COMPLETE = "complete"
    CANCEL = "cancel"

    def requires_reason(self) -> bool:
        """Check if the action must carry a human-readable reason."""
        return self in [self.CANCEL, self.DECLINE]

    def is_engineer_action(self) -> bool:
        """Check if the action is performed through the engineer link."""
        return self in [
            self.ENGINEER_ACCEPT,
            self.ENGINEER_DECLINE,
            self.EN_ROUTE,
            self.ON_SITE,
            self.COMPLETE,
        ]
