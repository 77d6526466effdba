"""
Circuit breaker for the remote cache tier.

A time-windowed failure counter: once `failure_threshold` consecutive
failures are recorded, calls are skipped until `cooldown_seconds` have
passed since the last failure. After the cooldown the counter is cleared
and the next real call decides; there is no single canary request.
"""

import logging
import time
from typing import Callable, Dict

logger = logging.getLogger(__name__)


class CircuitBreaker:
    """Tracks the health of one remote dependency and gates calls to it."""

    def __init__(
        self,
        name: str = "remote",
        available: bool = True,
        failure_threshold: int = 3,
        cooldown_seconds: float = 30.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Args:
            name: Dependency name used in log messages
            available: False when the dependency is known to be missing
                (e.g. not configured); calls are then always skipped
            failure_threshold: Consecutive failures that open the circuit
            cooldown_seconds: How long the circuit stays open
            clock: Monotonic time source in seconds
        """
        self.name = name
        self.available = available
        self.failure_threshold = failure_threshold
        self.cooldown_seconds = cooldown_seconds
        self.clock = clock

        self.consecutive_failures = 0
        self.last_failure_at = 0.0

    def should_skip(self) -> bool:
        """Return True if calls to the dependency should not be attempted."""
        if not self.available:
            return True

        if (
            self.consecutive_failures
            and self.clock() - self.last_failure_at > self.cooldown_seconds
        ):
            self.consecutive_failures = 0

        return self.consecutive_failures >= self.failure_threshold

    def record_success(self) -> None:
        self.consecutive_failures = 0

    def record_failure(self) -> None:
        self.consecutive_failures += 1
        self.last_failure_at = self.clock()

        if self.consecutive_failures == self.failure_threshold:
            logger.warning(
                f"[CircuitBreaker] {self.name} temporarily disabled after "
                f"{self.failure_threshold} consecutive errors. "
                f"Will retry in {self.cooldown_seconds:g}s."
            )

    def should_log_failure(self) -> bool:
        """Only failures before the circuit opens are worth logging."""
        return self.consecutive_failures < self.failure_threshold

    def snapshot(self) -> Dict:
        """Report breaker state for health checks."""
        return {
            "name": self.name,
            "available": self.available,
            "open": self.should_skip(),
            "consecutive_failures": self.consecutive_failures,
        }
