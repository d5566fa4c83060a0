"""
Retry and wait patterns for control-plane operations.
"""

import asyncio
import logging
import random
import time
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Awaitable, Callable, List, Type

logger = logging.getLogger(__name__)


@dataclass
class RetryConfig:
    """Retry configuration."""
    max_attempts: int = 3
    initial_delay: timedelta = field(default_factory=lambda: timedelta(seconds=1))
    max_delay: timedelta = field(default_factory=lambda: timedelta(seconds=30))
    multiplier: float = 2.0
    jitter: bool = True
    retryable_exceptions: List[Type[Exception]] = field(default_factory=lambda: [Exception])

    def __post_init__(self):
        if not self.retryable_exceptions:
            self.retryable_exceptions = [Exception]
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")


class Retry:
    """Retry handler with exponential backoff."""

    def __init__(self, config: RetryConfig):
        self.config = config
        self._attempt_count = 0

    @property
    def attempt_count(self) -> int:
        return self._attempt_count

    async def execute(self, func: Callable[..., Awaitable[Any]], *args, **kwargs) -> Any:
        """Execute a coroutine function with retry logic."""
        for attempt in range(1, self.config.max_attempts + 1):
            try:
                self._attempt_count = attempt
                result = await func(*args, **kwargs)

                if attempt > 1:
                    logger.info(f"Function succeeded on attempt {attempt}")

                return result

            except Exception as e:
                if not self._is_retryable(e):
                    raise

                if attempt == self.config.max_attempts:
                    logger.error(f"Function failed after {attempt} attempts: {e}")
                    raise

                delay = self._calculate_delay(attempt)
                logger.warning(f"Attempt {attempt} failed: {e}. Retrying in {delay:.2f}s")

                await asyncio.sleep(delay)

    def _is_retryable(self, exception: Exception) -> bool:
        """Check if exception is retryable."""
        return any(isinstance(exception, exc_type) for exc_type in self.config.retryable_exceptions)

    def _calculate_delay(self, attempt: int) -> float:
        """Calculate delay for the given attempt."""
        delay_seconds = backoff_delay(
            attempt,
            self.config.initial_delay,
            self.config.max_delay,
            self.config.multiplier
        )

        if self.config.jitter:
            delay_seconds *= random.uniform(0.5, 1.5)

        return delay_seconds


def backoff_delay(attempt: int, initial_delay: timedelta, max_delay: timedelta,
                  multiplier: float) -> float:
    """Exponential backoff in seconds for a 1-based attempt number, capped at max_delay."""
    delay_seconds = initial_delay.total_seconds() * (multiplier ** (attempt - 1))
    return min(delay_seconds, max_delay.total_seconds())


class WaitTimeoutError(Exception):
    """Raised when a waited-for condition does not hold within the timeout."""

    def __init__(self, description: str, timeout: timedelta, attempts: int):
        self.description = description
        self.timeout = timeout
        self.attempts = attempts
        super().__init__(
            f"Timed out after {timeout.total_seconds():.1f}s "
            f"({attempts} checks) waiting for {description}"
        )


@dataclass
class WaitConfig:
    """Bounded polling configuration."""
    timeout: timedelta = field(default_factory=lambda: timedelta(seconds=60))
    initial_delay: timedelta = field(default_factory=lambda: timedelta(milliseconds=100))
    max_delay: timedelta = field(default_factory=lambda: timedelta(seconds=5))
    multiplier: float = 2.0


async def wait_until(check: Callable[[], Awaitable[bool]], config: WaitConfig,
                     description: str = "condition") -> int:
    """
    Poll an async predicate until it holds, backing off between checks.

    Args:
        check: Coroutine function returning True once the condition holds
        config: Polling configuration
        description: Human readable name used in logs and errors

    Returns:
        Number of checks performed

    Raises:
        WaitTimeoutError: If the condition does not hold within config.timeout
        Exception: Anything raised by ``check`` propagates unchanged
    """
    deadline = time.monotonic() + config.timeout.total_seconds()
    attempt = 0

    while True:
        attempt += 1
        if await check():
            logger.debug(f"{description} reached after {attempt} checks")
            return attempt

        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise WaitTimeoutError(description, config.timeout, attempt)

        delay = backoff_delay(attempt, config.initial_delay, config.max_delay, config.multiplier)
        await asyncio.sleep(min(delay, remaining))
