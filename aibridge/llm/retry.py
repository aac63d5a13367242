"""
Retry with exponential backoff around backend calls.

Every exception raised by the wrapped operation counts as retryable: the
engine layer has already narrowed transport and protocol faults down to
BackendUnavailableError / MalformedResponseError, and a flaky backend can
produce either. When all attempts fail the caller gets one
ServiceUnavailableError chained to the last underlying failure.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, TypeVar

from aibridge.errors import InvalidConfigurationError, ServiceUnavailableError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_BASE_DELAY = 1.0
DEFAULT_MAX_DELAY = 8.0


def backoff_delay(retry_number: int, base_delay: float, max_delay: float) -> float:
    """Seconds to wait before retry ``retry_number`` (1-based): base, 2x, 4x, ... capped."""
    return min(base_delay * (2 ** (retry_number - 1)), max_delay)


def execute_with_retry(
    operation: Callable[[], T],
    max_attempts: int,
    context: str,
    *,
    base_delay: float = DEFAULT_BASE_DELAY,
    max_delay: float = DEFAULT_MAX_DELAY,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """
    Run ``operation`` until it succeeds or ``max_attempts`` is used up.

    Args:
        operation: Zero-argument callable to run
        max_attempts: Total attempts, including the first (>= 1)
        context: Label used in log lines and the final error message
        base_delay: Seconds before the first retry
        max_delay: Cap for any single wait
        sleep: Blocking sleep function (injectable for tests)

    Returns:
        Whatever ``operation`` returns on its first successful attempt.

    Raises:
        InvalidConfigurationError: If max_attempts < 1 (the operation is not run)
        ServiceUnavailableError: If every attempt raised
    """
    if max_attempts < 1:
        raise InvalidConfigurationError("maxAttempts must be at least 1")

    last_error: Exception | None = None
    for attempt in range(1, max_attempts + 1):
        try:
            return operation()
        except Exception as e:
            last_error = e
            logger.warning(f"{context}: attempt {attempt}/{max_attempts} failed: {e}")

        if attempt < max_attempts:
            delay = backoff_delay(attempt, base_delay, max_delay)
            logger.debug(f"{context}: retrying in {delay:.1f}s")
            sleep(delay)

    error = ServiceUnavailableError(context, max_attempts, cause=last_error)
    logger.error(str(error))
    raise error from last_error


class RetryExecutor:
    """
    execute_with_retry() bound to one retry policy.

    Example::

        retry = RetryExecutor(max_attempts=3)
        text = retry.run(lambda: engine.get_completion("Hi"), "GetCompletion")
    """

    def __init__(
        self,
        max_attempts: int = 3,
        base_delay: float = DEFAULT_BASE_DELAY,
        max_delay: float = DEFAULT_MAX_DELAY,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if max_attempts < 1:
            raise InvalidConfigurationError("maxAttempts must be at least 1")
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.max_delay = max_delay
        self._sleep = sleep

    def run(self, operation: Callable[[], T], context: str) -> T:
        return execute_with_retry(
            operation,
            self.max_attempts,
            context,
            base_delay=self.base_delay,
            max_delay=self.max_delay,
            sleep=self._sleep,
        )
