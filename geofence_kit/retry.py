"""
HTTP fetching with retry for geofence-kit.

fetch_with_retry performs a GET with httpx, following redirects, and retries
transient failures (timeouts, connection and network errors) with
exponential backoff via tenacity. HTTP status errors are raised at once.
The timeout defaults to Settings.http_timeout, which is unset (no timeout)
unless configured.

Environment variables:
    RETRY_MAX_ATTEMPTS  Attempts when the caller passes none (default: 3)
    RETRY_MIN_WAIT      Shortest backoff in seconds (default: 1)
    RETRY_MAX_WAIT      Longest backoff in seconds (default: 10)

The routing extractor passes ``Settings.routing_max_attempts`` (1 by
default), so route requests are not retried unless configured.
"""

import logging
import os
from typing import Any

import httpx
from tenacity import (
    AsyncRetrying,
    after_log,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from geofence_kit.config import get_settings
from geofence_kit.logger import get_logger

logger = get_logger(__name__)
settings = get_settings()

RETRY_MAX_ATTEMPTS = int(os.environ.get("RETRY_MAX_ATTEMPTS", "3"))
RETRY_MIN_WAIT = float(os.environ.get("RETRY_MIN_WAIT", "1"))
RETRY_MAX_WAIT = float(os.environ.get("RETRY_MAX_WAIT", "10"))

RETRYABLE_EXCEPTIONS = (
    httpx.TimeoutException,
    httpx.NetworkError,
    httpx.ConnectError,
)


def _create_retry_config(
    max_attempts: int | None = None,
    min_wait: float | None = None,
    max_wait: float | None = None,
) -> dict[str, Any]:
    """Keyword arguments for tenacity.AsyncRetrying; unset values use the module defaults."""
    return {
        "stop": stop_after_attempt(max_attempts or RETRY_MAX_ATTEMPTS),
        "wait": wait_exponential(
            multiplier=1,
            min=min_wait or RETRY_MIN_WAIT,
            max=max_wait or RETRY_MAX_WAIT,
        ),
        "retry": retry_if_exception_type(RETRYABLE_EXCEPTIONS),
        "before_sleep": before_sleep_log(logger, log_level=logging.INFO),
        "after": after_log(logger, log_level=logging.DEBUG),
        "reraise": True,
    }


async def fetch_with_retry(
    url: str,
    params: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
    timeout: float | None = None,
    max_attempts: int | None = None,
) -> Any:
    """
    GET `url` and return the decoded JSON body.

    Args:
        url: Request URL
        params: Query parameters
        headers: Request headers
        timeout: Seconds per attempt (default: Settings.http_timeout; None
            means no timeout)
        max_attempts: Total attempts (default: RETRY_MAX_ATTEMPTS)

    Raises:
        httpx.HTTPStatusError: Non-2xx response
        httpx.TimeoutException, httpx.NetworkError: Last transient failure
            once attempts run out
        ValueError: Body is not JSON
    """
    request_timeout = timeout if timeout is not None else settings.http_timeout

    async for attempt in AsyncRetrying(**_create_retry_config(max_attempts=max_attempts)):
        with attempt:
            logger.debug(
                f"GET {url}",
                extra={"attempt": attempt.retry_state.attempt_number},
            )
            async with httpx.AsyncClient(timeout=request_timeout, follow_redirects=True) as client:
                response = await client.get(url, params=params, headers=headers)
                response.raise_for_status()
                return response.json()

    # reraise=True means tenacity raises before the loop can end
    raise RuntimeError("retry loop ended without a result")
