"""
Fault-tolerance helpers for database access.

1. **Circuit breaker** — after ``failure_threshold`` consecutive
   connection-class failures the circuit OPENs and every call fails fast with
   :class:`CircuitBreakerError`.  Once ``recovery_timeout`` has elapsed the
   circuit is HALF_OPEN: one probe call goes through, and its outcome either
   closes the circuit or re-opens it.

2. **Retry with exponential backoff** — an async decorator used for startup
   work (table creation) that may race the database container coming up.
   Request handling never retries: failures are terminal for the request.
"""

import asyncio
import functools
import logging
import random
import time
from enum import Enum
from typing import Any, Awaitable, Callable, Tuple, Type, TypeVar

from sqlalchemy.exc import InterfaceError, OperationalError

from equityhub.core.config import settings

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Failures that indicate the database itself is unhealthy.  Constraint
# violations and domain errors pass through without touching the breaker.
CONNECTION_ERRORS: Tuple[Type[BaseException], ...] = (
    ConnectionError,
    TimeoutError,
    OSError,
    OperationalError,
    InterfaceError,
)


class CircuitState(str, Enum):
    """Possible states of a circuit breaker."""

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitBreakerError(Exception):
    """Raised when a call is rejected because the circuit is open."""

    def __init__(self, name: str, retry_after: float):
        self.name = name
        self.retry_after = retry_after
        super().__init__(
            f"Circuit breaker '{name}' is OPEN; retry after {retry_after:.1f}s"
        )


class CircuitBreaker:
    """
    Async circuit breaker guarding a single dependency.

    Parameters
    ----------
    name : str
        Identifier used in logs and the health payload.
    failure_threshold : int
        Consecutive failures that open the circuit.
    recovery_timeout : float
        Seconds spent OPEN before a probe is allowed.
    expected_exceptions : tuple
        Exception types that count as failures.
    """

    def __init__(
        self,
        name: str,
        failure_threshold: int = 5,
        recovery_timeout: float = 30.0,
        expected_exceptions: Tuple[Type[BaseException], ...] = CONNECTION_ERRORS,
    ):
        self.name = name
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self.expected_exceptions = expected_exceptions

        self._state = CircuitState.CLOSED
        self._consecutive_failures = 0
        self._opened_at = 0.0
        self._total_failures = 0
        self._total_rejections = 0

    @property
    def state(self) -> CircuitState:
        """Current state; an expired OPEN circuit reports HALF_OPEN."""
        if self._state is CircuitState.OPEN and self._seconds_open() >= self.recovery_timeout:
            self._state = CircuitState.HALF_OPEN
            logger.info("Circuit '%s' half-open, allowing a probe", self.name)
        return self._state

    def _seconds_open(self) -> float:
        return time.monotonic() - self._opened_at

    def _trip(self) -> None:
        self._state = CircuitState.OPEN
        self._opened_at = time.monotonic()
        logger.error(
            "Circuit '%s' opened after %d consecutive failures; failing fast for %.1fs",
            self.name,
            self._consecutive_failures,
            self.recovery_timeout,
        )

    def _on_success(self) -> None:
        if self._state is not CircuitState.CLOSED:
            logger.info("Circuit '%s' closed again", self.name)
        self._state = CircuitState.CLOSED
        self._consecutive_failures = 0

    def _on_failure(self, exc: BaseException) -> None:
        self._consecutive_failures += 1
        self._total_failures += 1
        if (
            self._state is CircuitState.HALF_OPEN
            or self._consecutive_failures >= self.failure_threshold
        ):
            self._trip()
        else:
            logger.warning(
                "Circuit '%s' failure %d/%d: %s",
                self.name,
                self._consecutive_failures,
                self.failure_threshold,
                exc,
            )

    async def call(self, func: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any) -> T:
        """Await ``func(*args, **kwargs)`` unless the circuit is open."""
        if self.state is CircuitState.OPEN:
            self._total_rejections += 1
            raise CircuitBreakerError(
                self.name, max(self.recovery_timeout - self._seconds_open(), 0.0)
            )
        try:
            result = await func(*args, **kwargs)
        except self.expected_exceptions as exc:
            self._on_failure(exc)
            raise
        self._on_success()
        return result

    def reset(self) -> None:
        """Force the circuit closed and zero the counters."""
        self._state = CircuitState.CLOSED
        self._consecutive_failures = 0
        self._total_failures = 0
        self._total_rejections = 0

    def get_status(self) -> dict:
        """Snapshot for the health endpoint."""
        return {
            "name": self.name,
            "state": self.state.value,
            "consecutive_failures": self._consecutive_failures,
            "failure_threshold": self.failure_threshold,
            "total_failures": self._total_failures,
            "rejected_calls": self._total_rejections,
            "recovery_timeout_s": self.recovery_timeout,
        }


db_circuit_breaker = CircuitBreaker(
    name="database",
    failure_threshold=settings.CB_FAILURE_THRESHOLD,
    recovery_timeout=settings.CB_RECOVERY_TIMEOUT,
)


def retry_with_backoff(
    max_retries: int = 3,
    base_delay: float = 0.5,
    max_delay: float = 10.0,
    jitter: bool = True,
    retryable_exceptions: Tuple[Type[BaseException], ...] = CONNECTION_ERRORS,
) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """
    Decorator: retry an async function with exponential backoff.

    ``max_retries`` counts retries after the first attempt.  Delays double
    from ``base_delay`` up to ``max_delay``; ``jitter`` adds up to 50% on top.
    Non-retryable exceptions propagate immediately.
    """

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            delay = base_delay
            attempt = 0
            while True:
                try:
                    return await func(*args, **kwargs)
                except retryable_exceptions as exc:
                    if attempt == max_retries:
                        logger.error(
                            "%s failed after %d attempts", func.__qualname__, max_retries + 1
                        )
                        raise
                    wait = min(delay, max_delay)
                    if jitter:
                        wait += random.uniform(0, wait * 0.5)
                    logger.warning(
                        "Attempt %d/%d of %s failed (%s: %s); retrying in %.2fs",
                        attempt + 1,
                        max_retries + 1,
                        func.__qualname__,
                        type(exc).__name__,
                        exc,
                        wait,
                    )
                    await asyncio.sleep(wait)
                    delay *= 2
                    attempt += 1

        return wrapper

    return decorator
