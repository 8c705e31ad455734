"""Retry policy for transient network failures while fetching reports."""

import logging

import httpx
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)

logger = logging.getLogger(__name__)

# A status error means the report for that day does not exist and the
# locator moves on, so only transport failures are retried in place.
TRANSIENT_ERRORS = (httpx.ConnectError, httpx.TimeoutException)


def _log_before_retry(retry_state):
    exception = retry_state.outcome.exception()
    logger.warning(
        f"Retrying {retry_state.fn.__name__} in "
        f"{retry_state.next_action.sleep:.2f}s after "
        f"{type(exception).__name__} (attempt {retry_state.attempt_number})"
    )


def transport_retry(attempts: int = 3, min_wait: float = 1, max_wait: float = 10):
    """
    Build a decorator retrying a coroutine on transport errors.

    The last error is re-raised unchanged once `attempts` is used up.
    """
    return retry(
        stop=stop_after_attempt(attempts),
        wait=wait_exponential(multiplier=1, min=min_wait, max=max_wait),
        retry=retry_if_exception_type(TRANSIENT_ERRORS),
        before_sleep=_log_before_retry,
        reraise=True,
    )
