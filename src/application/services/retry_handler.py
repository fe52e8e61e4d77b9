"""
Retry Handler service for bounded retries with backoff and a circuit breaker.
"""

import asyncio
import inspect
import random
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple, Type

from src.application.interfaces.services import RetryHandlerInterface
from src.config.logging import get_logger

logger = get_logger(__name__)

CLOSED = "closed"
OPEN = "open"
HALF_OPEN = "half_open"


class CircuitOpenError(RuntimeError):
    """Raised when an operation key has failed too often recently."""

    def __init__(self, operation_key: str):
        self.operation_key = operation_key
        super().__init__(f"Circuit breaker is open for {operation_key}")


@dataclass
class CircuitState:
    """Failure bookkeeping for one operation key."""

    state: str = CLOSED
    failure_count: int = 0
    last_failure: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "state": self.state,
            "failure_count": self.failure_count,
            "last_failure": self.last_failure.isoformat() if self.last_failure else None,
        }


class RetryHandler(RetryHandlerInterface):
    """Retry handler with exponential backoff, jitter and a per-key circuit breaker.

    A key's circuit opens after failure_threshold consecutive failures and
    lets one attempt through again (half open) once reset_after has passed.
    """

    def __init__(
        self,
        failure_threshold: int = 5,
        reset_after: timedelta = timedelta(minutes=5),
        max_delay: float = 60.0,
    ):
        self.failure_threshold = failure_threshold
        self.reset_after = reset_after
        self.max_delay = max_delay
        self.circuits: Dict[str, CircuitState] = {}

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
        """
        Run operation, retrying the errors listed in retry_on.

        Args:
            operation: Function to execute (sync or async)
            max_retries: Retries after the first attempt
            base_delay: First backoff in seconds; doubles per attempt
            operation_key: Circuit breaker key
            retry_on: Exception types that trigger a retry
            give_up_on: Exception types re-raised immediately, even when
                they also match retry_on
            use_circuit_breaker: Count failures against operation_key and
                refuse to run while its circuit is open. Turn off for
                expected contention such as lost compare-and-set races.

        Raises:
            CircuitOpenError: the circuit for operation_key is open
            Exception: the last error once retries are exhausted
        """
        if use_circuit_breaker and self._is_circuit_open(operation_key):
            raise CircuitOpenError(operation_key)

        attempt = 0
        while True:
            try:
                result = operation()
                if inspect.isawaitable(result):
                    result = await result
            except Exception as e:
                if isinstance(e, give_up_on) or not isinstance(e, retry_on):
                    raise

                if use_circuit_breaker:
                    self._record_failure(operation_key)

                if attempt >= max_retries:
                    logger.error(
                        "Giving up after retries",
                        operation_key=operation_key,
                        attempts=attempt + 1,
                        error=str(e),
                    )
                    raise

                delay = self._calculate_delay(attempt, base_delay)
                logger.warning(
                    "Retrying operation",
                    operation_key=operation_key,
                    attempt=attempt + 1,
                    max_retries=max_retries,
                    delay_seconds=round(delay, 3),
                    error=str(e),
                )
                await asyncio.sleep(delay)
                attempt += 1
                continue

            if use_circuit_breaker:
                self._record_success(operation_key)
            return result

    def _calculate_delay(self, attempt: int, base_delay: float) -> float:
        """Exponential backoff with ±25% jitter, capped at max_delay."""
        delay = base_delay * (2**attempt)
        delay += random.uniform(-0.25 * delay, 0.25 * delay)
        return max(0.0, min(delay, self.max_delay))

    def _is_circuit_open(self, operation_key: str) -> bool:
        circuit = self.circuits.get(operation_key)
        if circuit is None or circuit.state != OPEN:
            return False

        if datetime.now(timezone.utc) - circuit.last_failure > self.reset_after:
            circuit.state = HALF_OPEN
            return False
        return True

    def _record_failure(self, operation_key: str) -> None:
        circuit = self.circuits.setdefault(operation_key, CircuitState())
        circuit.failure_count += 1
        circuit.last_failure = datetime.now(timezone.utc)

        if circuit.state != OPEN and circuit.failure_count >= self.failure_threshold:
            circuit.state = OPEN
            logger.warning(
                "Circuit breaker opened",
                operation_key=operation_key,
                failure_count=circuit.failure_count,
            )

    def _record_success(self, operation_key: str) -> None:
        circuit = self.circuits.pop(operation_key, None)
        if circuit is not None and circuit.state == HALF_OPEN:
            logger.info("Circuit breaker closed", operation_key=operation_key)

    def get_circuit_breaker_status(self, operation_key: str) -> dict:
        """Circuit state for monitoring."""
        return self.circuits.get(operation_key, CircuitState()).to_dict()

    def reset_circuit_breaker(self, operation_key: str) -> None:
        """Forget all failures recorded for operation_key."""
        if self.circuits.pop(operation_key, None) is not None:
            logger.info("Circuit breaker manually reset", operation_key=operation_key)
