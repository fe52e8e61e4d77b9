"""
API routes package.
"""

from .engineer import router as engineer_router
from .health import router as health_router
from .jobs import router as jobs_router
from .pricing import router as pricing_router

__all__ = [
    "engineer_router",
    "health_router",
    "jobs_router",
    "pricing_router",
]
