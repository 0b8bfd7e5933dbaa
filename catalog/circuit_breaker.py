"""
Circuit breaker for calls to the remote catalog.

A full crawl sends thousands of requests. Once PokeAPI fails
`failure_threshold` times in a row the breaker opens and every call fails
fast with `CircuitBreakerError`, which aborts the export. After
`recovery_timeout` seconds the next call is let through as a trial: success
closes the circuit, failure opens it again.
"""

import asyncio
import logging
import time
from enum import Enum
from typing import Any, Callable, Optional

logger = logging.getLogger("dexport.circuit_breaker")


class CircuitState(Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitBreakerError(Exception):
    """Raised instead of calling through while the circuit is open."""


class CircuitBreaker:
    def __init__(
        self,
        failure_threshold: int = 5,
        recovery_timeout: float = 60.0,
        expected_exceptions: tuple = (Exception,),
        name: str = "circuit_breaker",
    ):
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self.expected_exceptions = expected_exceptions
        self.name = name

        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._opened_at: Optional[float] = None  # time.monotonic()
        self._lock = asyncio.Lock()

    @property
    def state(self) -> CircuitState:
        return self._state

    @property
    def failure_count(self) -> int:
        """Consecutive failures since the last success."""
        return self._failure_count

    async def call(self, func: Callable, *args, **kwargs) -> Any:
        """
        Await `func(*args, **kwargs)` unless the circuit is open.

        Only `expected_exceptions` count as failures; anything else passes
        through without touching the breaker.

        Raises:
            CircuitBreakerError: If the circuit is open and still cooling down.
        """
        async with self._lock:
            if self._state is CircuitState.OPEN:
                elapsed = time.monotonic() - (self._opened_at or 0.0)
                if elapsed < self.recovery_timeout:
                    raise CircuitBreakerError(
                        f"Circuit breaker '{self.name}' is open "
                        f"({self.recovery_timeout - elapsed:.0f}s until retry)"
                    )
                logger.info(f"Circuit breaker '{self.name}' trying a request after cooldown")
                self._state = CircuitState.HALF_OPEN

        try:
            result = await func(*args, **kwargs)
        except self.expected_exceptions:
            await self._record(success=False)
            raise

        await self._record(success=True)
        return result

    async def _record(self, success: bool) -> None:
        async with self._lock:
            if success:
                if self._state is CircuitState.HALF_OPEN:
                    logger.info(f"Circuit breaker '{self.name}' closed again")
                self._state = CircuitState.CLOSED
                self._failure_count = 0
                return

            self._failure_count += 1
            trial_failed = self._state is CircuitState.HALF_OPEN
            if trial_failed or self._failure_count >= self.failure_threshold:
                if self._state is not CircuitState.OPEN:
                    logger.error(
                        f"Circuit breaker '{self.name}' opened after "
                        f"{self._failure_count} consecutive failures",
                        extra={"breaker_name": self.name},
                    )
                self._state = CircuitState.OPEN
                self._opened_at = time.monotonic()

    def get_stats(self) -> dict:
        return {
            "breaker_name": self.name,
            "state": self._state.value,
            "failure_count": self._failure_count,
            "failure_threshold": self.failure_threshold,
            "recovery_timeout": self.recovery_timeout,
        }
