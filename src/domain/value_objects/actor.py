"""
Actor identity value object.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ActorRole(str, Enum):
    """Roles that may act on a job."""

    CUSTOMER = "customer"
    SUPPLIER = "supplier"
    ENGINEER = "engineer"
    ADMIN = "admin"


@dataclass(frozen=True)
class Actor:
    """Already-authenticated identity acting on a job.

    Engineers carry the token they presented instead of an account id;
    possession of the token is the whole authorization check.
    """

    role: ActorRole
    actor_id: Optional[str] = None
    supplier_id: Optional[int] = None
    email: Optional[str] = None
    engineer_token: Optional[str] = None

    def __post_init__(self):
        """Validate actor identity."""
        if self.role == ActorRole.SUPPLIER and self.supplier_id is None:
            raise ValueError("Supplier actor requires a supplier id")
        if self.role == ActorRole.ENGINEER and not self.engineer_token:
            raise ValueError("Engineer actor requires an engineer token")

    @property
    def label(self) -> str:
        """Short label recorded in audit fields such as cancelled_by."""
        if self.role == ActorRole.SUPPLIER:
            return f"supplier:{self.supplier_id}"
        if self.role == ActorRole.ENGINEER:
            return "engineer"
        return f"{self.role.value}:{self.actor_id or self.email or 'unknown'}"

    @classmethod
    def engineer(cls, token: str) -> "Actor":
        return cls(role=ActorRole.ENGINEER, engineer_token=token)

    @classmethod
    def supplier(cls, supplier_id: int, actor_id: Optional[str] = None) -> "Actor":
        return cls(role=ActorRole.SUPPLIER, supplier_id=supplier_id, actor_id=actor_id)

    @classmethod
    def customer(
        cls, actor_id: Optional[str] = None, email: Optional[str] = None
    ) -> "Actor":
        return cls(role=ActorRole.CUSTOMER, actor_id=actor_id, email=email)

    @classmethod
    def admin(cls, actor_id: Optional[str] = None) -> "Actor":
        return cls(role=ActorRole.ADMIN, actor_id=actor_id)
