"""Retry utilities with exponential backoff."""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TypeVar

from .exceptions import TransientError

T = TypeVar("T")
logger = logging.getLogger(__name__)


@dataclass
class RetryConfig:
    max_attempts: int = 3
    base_delay: float = 0.5
    multiplier: float = 2.0
    max_delay: float = 30.0
    retryable_exceptions: tuple[type[Exception], ...] = field(
        default_factory=lambda: (TransientError,)
    )

    def delay_for(self, attempt: int) -> float:
        """Backoff delay after the given zero-based attempt."""
        return min(self.base_delay * (self.multiplier**attempt), self.max_delay)


def with_retry_sync(
    operation: Callable[[], T],
    config: RetryConfig | None = None,
    operation_name: str = "operation",
    on_retry: Callable[[Exception, int], None] | None = None,
    sleep: Callable[[float], None] | None = None,
) -> T:
    """Run operation, retrying retryable exceptions with exponential backoff."""
    if config is None:
        config = RetryConfig()

    last_exception: Exception | None = None

    for attempt in range(config.max_attempts):
        try:
            return operation()
        except config.retryable_exceptions as e:
            last_exception = e
            if attempt == config.max_attempts - 1:
                logger.error(
                    "%s failed after %d attempts: %s", operation_name, config.max_attempts, e
                )
                raise

            delay = config.delay_for(attempt)
            logger.warning(
                "%s failed (attempt %d/%d), retrying in %.1fs: %s",
                operation_name,
                attempt + 1,
                config.max_attempts,
                delay,
                e,
            )

            if on_retry:
                on_retry(e, attempt)

            (sleep or time.sleep)(delay)

    raise last_exception  # type: ignore
