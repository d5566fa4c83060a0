"""
Resilience patterns used by the schema lifecycle:
- Retry with exponential backoff for transient control-plane errors
- Bounded wait-until polling for table state transitions
"""

from .patterns import (
    RetryConfig,
    Retry,
    backoff_delay,
    WaitConfig,
    WaitTimeoutError,
    wait_until,
)

__all__ = [
    'RetryConfig',
    'Retry',
    'backoff_delay',
    'WaitConfig',
    'WaitTimeoutError',
    'wait_until',
]
