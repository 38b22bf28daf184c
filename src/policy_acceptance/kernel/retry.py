"""
Retry policy for transient transport failures.

The core never retries on its own: a failed fetch or submission is reported
and the caller decides whether to try again. Deployments that want the
transport to absorb short network blips opt in through
``ApiSettings.max_attempts``; with the default of 1 the retrying wrapper makes
exactly one attempt.
"""

import httpx
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from policy_acceptance.kernel.logging import get_logger

logger = get_logger(__name__)


def transport_retrying(
    max_attempts: int = 1,
    min_wait_ms: int = 100,
    max_wait_ms: int = 1000,
) -> AsyncRetrying:
    """
    Build an async retrying controller for httpx transport errors.

    Only connection-level failures (``httpx.TransportError``) are retried.
    A response with a non-success status is an answer from the server, not a
    transient failure, and is never retried.

    Args:
        max_attempts: Total attempts including the first (1 = no retry)
        min_wait_ms: Minimum backoff in milliseconds
        max_wait_ms: Maximum backoff in milliseconds

    Example:
        async for attempt in transport_retrying(3):
            with attempt:
                response = await client.post(url, json=body)
    """
    return AsyncRetrying(
        retry=retry_if_exception_type(httpx.TransportError),
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(
            multiplier=1,
            min=min_wait_ms / 1000.0,
            max=max_wait_ms / 1000.0,
        ),
        before_sleep=lambda retry_state: logger.warning(
            "Transport error, retrying",
            attempt=retry_state.attempt_number,
            exception=str(retry_state.outcome.exception()) if retry_state.outcome else None,
        ),
        reraise=True,
    )
