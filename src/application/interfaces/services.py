"""
Service interfaces for dependency inversion.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple, Type

from src.domain.value_objects.coordinates import Coordinates


@dataclass(frozen=True)
class ReferencePoint:
    """Named place used as the origin for remote-site distances."""

    name: str
    coordinates: Coordinates
    population: Optional[int] = None


class ReferencePointProviderInterface(ABC):
    """Interface for nearest-major-city lookups."""

    @abstractmethod
    async def nearest_major_city(self, site: Coordinates) -> Optional[ReferencePoint]:
        """Nearest major city to the site, or None when there is none nearby."""
        pass


class EventPublisherInterface(ABC):
    """Interface for handing outbox events to notification delivery."""

    @abstractmethod
    async def publish(
        self, event_type: str, aggregate_id: str, payload: Dict[str, Any]
    ) -> None:
        """Publish one event; raise on failure so it can be retried."""
        pass


class RetryHandlerInterface(ABC):
    """Interface for retry handling services."""

    @abstractmethod
    async def execute_with_retry(
        self,
        operation: Callable[[], Awaitable[Any]],
        max_retries: int = 3,
        base_delay: float = 1.0,
        operation_key: str = "default",
        retry_on: Tuple[Type[BaseException], ...] = (Exception,),
        give_up_on: Tuple[Type[BaseException], ...] = (),
        use_circuit_breaker: bool = True,
    ) -> Any:
        """Execute operation with retry logic."""
        pass
