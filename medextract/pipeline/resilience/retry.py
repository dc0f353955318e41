"""Retry logic with exponential backoff and jitter.

Delays follow ``initial * base ** attempt_index + uniform(0, jitter)``, so with
the defaults the retries after attempts 0, 1, 2 wait at least 1s, 2s and 4s.

Example:
    >>> from medextract.pipeline.resilience.retry import retry_with_backoff, RetryConfig
    >>> config = RetryConfig(max_attempts=4)
    >>> response = retry_with_backoff(
    ...     send_once,
    ...     config,
    ...     (TransientServiceError,),
    ...     url="https://vision.googleapis.com/v1/images:annotate",
    ... )
"""

import logging
import random
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional, Tuple, Type

from medextract.pipeline.core.config import (
    BACKOFF_MULTIPLIER,
    INITIAL_BACKOFF_SECONDS,
    JITTER_SECONDS,
    MAX_ATTEMPTS,
    MAX_BACKOFF_SECONDS,
)

logger = logging.getLogger(__name__)


@dataclass
class RetryConfig:
    """Configuration for retry logic.

    Attributes:
        max_attempts: Maximum number of attempts (including initial)
        initial_delay_seconds: Delay before the first retry, without jitter
        max_delay_seconds: Cap applied to the exponential part of the delay
        exponential_base: Base for exponential backoff (delay *= base ** attempt)
        jitter_seconds: Upper bound of the uniform jitter added to every delay
    """

    max_attempts: int = MAX_ATTEMPTS
    initial_delay_seconds: float = INITIAL_BACKOFF_SECONDS
    max_delay_seconds: float = MAX_BACKOFF_SECONDS
    exponential_base: float = BACKOFF_MULTIPLIER
    jitter_seconds: float = JITTER_SECONDS

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")


def compute_backoff_delay(
    attempt: int,
    config: RetryConfig,
    rng: Optional[random.Random] = None,
) -> float:
    """Delay to wait after the failed attempt with index ``attempt`` (0-based)."""
    delay = min(
        config.initial_delay_seconds * (config.exponential_base**attempt),
        config.max_delay_seconds,
    )
    if config.jitter_seconds > 0:
        delay += (rng or random).uniform(0, config.jitter_seconds)
    return delay


def retry_with_backoff(
    func: Callable[..., Any],
    config: RetryConfig,
    retryable_exceptions: Tuple[Type[Exception], ...],
    *args,
    sleep: Optional[Callable[[float], None]] = None,
    rng: Optional[random.Random] = None,
    **kwargs,
) -> Any:
    """Retry function with exponential backoff and jitter.

    Attempts run strictly one after another. Exceptions outside
    ``retryable_exceptions`` propagate immediately without consuming budget.

    Args:
        func: Function to execute
        config: Retry configuration
        retryable_exceptions: Tuple of exception types that trigger retry
        *args: Positional arguments for func
        sleep: Blocking sleep, ``time.sleep`` when omitted
        rng: Random source for jitter, the ``random`` module when omitted
        **kwargs: Keyword arguments for func

    Returns:
        Result from successful function call

    Raises:
        Last exception if all retry attempts fail
    """
    for attempt in range(config.max_attempts):
        try:
            return func(*args, **kwargs)
        except retryable_exceptions as e:
            if attempt == config.max_attempts - 1:
                logger.error(
                    f"All {config.max_attempts} attempts failed",
                    extra={"attempt": attempt + 1, "exception": str(e)},
                )
                raise

            delay = compute_backoff_delay(attempt, config, rng)

            logger.warning(
                f"Attempt {attempt + 1}/{config.max_attempts} failed: {type(e).__name__}: {e}. "
                f"Retrying in {delay:.2f}s...",
                extra={
                    "attempt": attempt + 1,
                    "max_attempts": config.max_attempts,
                    "delay_seconds": round(delay, 3),
                    "exception_type": type(e).__name__,
                },
            )

            (sleep or time.sleep)(delay)

    # Unreachable: the final failed attempt re-raises inside the loop
    raise RuntimeError("retry loop exited without a result")
