"""
Domain events package.
"""

from .job_created import JobCreated
from .job_transitioned import JobTransitioned

__all__ = [
    "JobCreated",
    "JobTransitioned",
]
