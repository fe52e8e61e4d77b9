"""
Job lifecycle transition exceptions.
"""

from typing import Optional


class TransitionError(Exception):
    """Base exception for job transition failures."""

    pass


class InvalidTransition(TransitionError):
    """Raised when an action has no outgoing edge from the current status."""

    def __init__(self, job_id: Optional[int], current_status: str, action: str):
        self.job_id = job_id
        self.current_status = current_status
        self.action = action
        super().__init__(
            f"Cannot {action} job {job_id} while it is '{current_status}'"
        )


class ActorNotPermitted(TransitionError):
    """Raised when the actor lacks the capability for an action."""

    def __init__(self, action: str, actor_role: str, reason: str):
        self.action = action
        self.actor_role = actor_role
        self.reason = reason
        super().__init__(f"{actor_role} may not {action}: {reason}")


class TransitionPayloadError(TransitionError):
    """Raised when a transition is missing required payload fields."""

    def __init__(self, action: str, field_name: str, message: Optional[str] = None):
        self.action = action
        self.field_name = field_name
        super().__init__(message or f"'{field_name}' is required to {action}")


class ConcurrentModification(TransitionError):
    """Raised when the compare-and-set precondition no longer holds."""

    def __init__(self, job_id: int, expected_status: str, message: Optional[str] = None):
        self.job_id = job_id
        self.expected_status = expected_status
        super().__init__(
            message
            or f"Job {job_id} is no longer '{expected_status}'; re-read and retry"
        )


class AlreadyAccepted(ConcurrentModification):
    """Raised when another supplier won the race to accept the job."""

    def __init__(self, job_id: int, expected_status: str):
        super().__init__(
            job_id,
            expected_status,
            message=f"Job {job_id} has already been accepted by another supplier",
        )
