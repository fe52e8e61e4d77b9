"""
Validation-related domain exceptions.
"""


class ValidationError(Exception):
    """Base exception for validation errors."""

    pass


class RequiredFieldError(ValidationError):
    """Raised when required field is missing."""

    def __init__(self, field_name: str):
        self.field_name = field_name
        super().__init__(f"Required field '{field_name}' is missing")


class JobNotFound(ValidationError):
    """Raised when a job id does not exist."""

    def __init__(self, job_id: int):
        self.job_id = job_id
        super().__init__(f"Job {job_id} not found")
