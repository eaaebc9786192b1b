"""Failure tracking for the generative backend.

Provides:
- CircuitBreaker: Opens after consecutive failures, auto-recovers
- get_llm_circuit_breaker: Shared instance configured from GenerationSettings
- is_timeout_error: Classify an exception as a call timeout

Failed calls are never repeated with identical input. The breaker only
short-circuits calls that are very likely to fail, so generation drops
straight to the deterministic tier instead of waiting on each timeout.
"""

import sys
import threading
import time
from typing import Optional

from llm_config import GenerationSettings, get_generation_settings

CLOSED = "closed"
OPEN = "open"
HALF_OPEN = "half-open"

TIMEOUT_KEYWORDS = (
    "timeout",
    "timed out",
    "deadline exceeded",
)


class CircuitBreaker:
    """Consecutive-failure circuit breaker shared across worker threads.

    closed -> open after `failure_threshold` failures in a row; open ->
    half-open once `recovery_timeout` seconds have passed since the last
    failure; half-open -> closed on the next success.
    """

    def __init__(
        self,
        name: str,
        failure_threshold: int = 5,
        recovery_timeout: float = 60.0,
    ):
        self.name = name
        self.failure_threshold = max(1, failure_threshold)
        self.recovery_timeout = recovery_timeout
        self._lock = threading.Lock()
        self.reset()

    def _announce(self, transition: str) -> None:
        print(f"   ⚡ Circuit breaker '{self.name}' {transition}", file=sys.stderr)

    def record_failure(self) -> None:
        with self._lock:
            self.failure_count += 1
            self.last_failure_time = time.monotonic()
            if self.state != OPEN and self.failure_count >= self.failure_threshold:
                self.state = OPEN
                self._announce(f"OPENED after {self.failure_count} failures")

    def record_success(self) -> None:
        with self._lock:
            if self.state == HALF_OPEN:
                self._announce("CLOSED after success")
            self.failure_count = 0
            self.state = CLOSED

    def can_execute(self) -> bool:
        """True when a call may go through; flips open to half-open on expiry."""
        with self._lock:
            if self.state != OPEN:
                return True
            waited = time.monotonic() - (self.last_failure_time or 0.0)
            if waited < self.recovery_timeout:
                return False
            self.state = HALF_OPEN
            self._announce("HALF-OPEN, testing...")
            return True

    def reset(self) -> None:
        with self._lock:
            self.failure_count = 0
            self.last_failure_time: Optional[float] = None
            self.state = CLOSED


def is_timeout_error(exc: BaseException) -> bool:
    """Whether an exception represents a timed-out generative call.

    litellm wraps provider timeouts in its own exception types, so the
    class name and message are checked as well as TimeoutError.
    """
    if isinstance(exc, TimeoutError) or "timeout" in type(exc).__name__.lower():
        return True
    message = str(exc).lower()
    return any(keyword in message for keyword in TIMEOUT_KEYWORDS)


_llm_circuit_breaker: Optional[CircuitBreaker] = None
_breaker_lock = threading.Lock()


def get_llm_circuit_breaker(settings: Optional[GenerationSettings] = None) -> CircuitBreaker:
    """Shared breaker for the generative backend.

    The first caller's settings fix the thresholds for the process.
    """
    global _llm_circuit_breaker
    with _breaker_lock:
        if _llm_circuit_breaker is None:
            settings = settings or get_generation_settings()
            _llm_circuit_breaker = CircuitBreaker(
                name="meal_plan_llm",
                failure_threshold=settings.circuit_failure_threshold,
                recovery_timeout=settings.circuit_recovery_timeout,
            )
        return _llm_circuit_breaker


def reset_llm_circuit_breaker() -> None:
    """Close the shared breaker (used between tests)."""
    if _llm_circuit_breaker is not None:
        _llm_circuit_breaker.reset()
