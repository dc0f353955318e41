"""Resilience utilities for external service calls.

- Retry Logic: Handles transient errors with exponential backoff and jitter
"""

from medextract.pipeline.resilience.retry import (
    RetryConfig,
    compute_backoff_delay,
    retry_with_backoff,
)

__all__ = [
    "RetryConfig",
    "compute_backoff_delay",
    "retry_with_backoff",
]
