"""Retry utilities for the GitLab provider."""

from collections.abc import Callable
from typing import Any, TypeVar

from tenacity import (
    RetryCallState,
    RetryError,
    Retrying,
    retry,
    retry_if_exception_type,
    retry_if_result,
    stop_after_attempt,
    stop_after_delay,
    wait_exponential,
    wait_fixed,
)

from glprovider.core.exceptions import DeletionTimeoutError
from glprovider.utils.logging import get_logger

logger = get_logger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def retry_on_exception(
    exceptions: tuple[type[Exception], ...] = (Exception,),
    max_attempts: int = 3,
    min_wait: float = 1,
    max_wait: float = 10,
) -> Callable[[F], F]:
    """Decorator to retry a function on specific exceptions.

    Args:
        exceptions: Tuple of exception types to retry on
        max_attempts: Maximum number of retry attempts
        min_wait: Minimum wait time between retries (seconds)
        max_wait: Maximum wait time between retries (seconds)

    Returns:
        Decorated function with retry logic
    """

    def before_sleep(retry_state: RetryCallState) -> None:
        """Log before sleeping between retries."""
        if retry_state.outcome and retry_state.outcome.failed:
            exception = retry_state.outcome.exception()
            logger.warning(
                "retry_attempt",
                attempt=retry_state.attempt_number,
                max_attempts=max_attempts,
                exception=type(exception).__name__,
                message=str(exception),
            )

    return retry(
        retry=retry_if_exception_type(exceptions),
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(multiplier=1, min=min_wait, max=max_wait),
        before_sleep=before_sleep,
        reraise=True,
    )


def wait_until_gone(
    is_gone: Callable[[], bool],
    resource_id: str,
    timeout: float,
    interval: float,
) -> None:
    """Poll until a deleted object is no longer observable.

    Args:
        is_gone: Returns True once the object is gone; exceptions it raises
            are not retried and propagate unchanged
        resource_id: Identity used in log events and the timeout error
        timeout: Maximum time to wait (seconds)
        interval: Delay between checks (seconds)

    Raises:
        DeletionTimeoutError: If the object is still present after timeout
    """

    def before_sleep(retry_state: RetryCallState) -> None:
        logger.debug(
            "waiting_for_deletion",
            resource_id=resource_id,
            attempt=retry_state.attempt_number,
        )

    retrying = Retrying(
        retry=retry_if_result(lambda gone: not gone),
        stop=stop_after_delay(timeout),
        wait=wait_fixed(interval),
        before_sleep=before_sleep,
    )

    try:
        retrying(is_gone)
    except RetryError as e:
        logger.error("deletion_wait_timed_out", resource_id=resource_id, timeout=timeout)
        raise DeletionTimeoutError(
            f"{resource_id} was still present {timeout:.0f}s after deletion"
        ) from e

    logger.debug("deletion_confirmed", resource_id=resource_id)
