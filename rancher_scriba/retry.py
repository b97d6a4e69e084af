"""
Exponential backoff for outbound calls.

Every failure is treated as transient: the retrier does not inspect the
exception, it only counts attempts.
"""

import logging
import time
from typing import Any, Callable, Optional, TypeVar

from tenacity import RetryCallState, RetryError, Retrying, stop_after_attempt

from .errors import RetriesExhaustedError

T = TypeVar("T")

DEFAULT_MAX_RETRIES = 5


class BackoffRetrier:
    """
    Runs an operation up to ``max_retries + 1`` times.

    After the n-th failed attempt the retrier waits ``2 ** n`` seconds before
    trying again (2, 4, 8, ...). There is no jitter and no ceiling on the
    delay. When the last attempt fails a RetriesExhaustedError is raised with
    the last underlying error chained as its cause.
    """

    def __init__(self, max_retries: int = DEFAULT_MAX_RETRIES,
                 sleep: Optional[Callable[[float], None]] = None):
        """
        Initialize the retrier.

        Args:
            max_retries: Number of retries after the first attempt
            sleep: Function used to wait between attempts (defaults to time.sleep)
        """
        if max_retries < 0:
            raise ValueError(f"max_retries must not be negative, got {max_retries}")
        self.max_retries = max_retries
        self._sleep = sleep or time.sleep

    @staticmethod
    def delay_for(attempt: int) -> float:
        """Seconds to wait after the given (1-based) failed attempt."""
        return float(2 ** attempt)

    def _wait(self, retry_state: RetryCallState) -> float:
        return self.delay_for(retry_state.attempt_number)

    def _before_sleep(self, description: str) -> Callable[[RetryCallState], None]:
        def log_retry(retry_state: RetryCallState) -> None:
            error = retry_state.outcome.exception() if retry_state.outcome else None
            delay = retry_state.next_action.sleep if retry_state.next_action else 0
            logging.warning(
                f"{description}: attempt {retry_state.attempt_number}/{self.max_retries + 1} "
                f"failed with {error}. Retrying in {delay:g} seconds"
            )
        return log_retry

    def call(self, operation: Callable[..., T], *args: Any,
             description: str = "operation", **kwargs: Any) -> T:
        """
        Run an operation with retries.

        Args:
            operation: Callable to run; any exception counts as a failure
            description: Human-readable name used in log messages and errors

        Returns:
            Whatever the operation returns on its first successful attempt

        Raises:
            RetriesExhaustedError: If every attempt failed
        """
        retrying = Retrying(
            stop=stop_after_attempt(self.max_retries + 1),
            wait=self._wait,
            sleep=self._sleep,
            before_sleep=self._before_sleep(description),
            reraise=False,
        )
        try:
            return retrying(operation, *args, **kwargs)
        except RetryError as e:
            attempt = e.last_attempt
            last_error = attempt.exception()
            logging.error(f"{description}: giving up after {attempt.attempt_number} attempts")
            raise RetriesExhaustedError(description, attempt.attempt_number, last_error) from last_error
