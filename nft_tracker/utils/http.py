"""HTTP helpers with bounded retry and exponential backoff."""
import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

import httpx
from tenacity import (
    AsyncRetrying,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
    before_log,
    before_sleep_log
)


logger = logging.getLogger(__name__)

BACKOFF_FACTOR = 1.5


async def fetch_with_retry(
    client: httpx.AsyncClient,
    url: str,
    *,
    params: Optional[dict] = None,
    max_retries: int = 3,
    delay_ms: int = 1000,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep
) -> httpx.Response:
    """
    GET a URL, retrying transport failures and non-2xx responses.

    Attempt ``n`` (1-based) that fails is followed by a wait of
    ``delay_ms * 1.5 ** (n - 1)`` milliseconds. Once ``max_retries``
    attempts have failed the last error is raised.

    Args:
        client: Shared httpx client
        url: Target URL
        params: Optional query parameters
        max_retries: Total number of attempts (>= 1)
        delay_ms: Base backoff delay in milliseconds
        sleep: Coroutine used to wait between attempts

    Returns:
        The first successful response

    Raises:
        httpx.HTTPStatusError: Last attempt returned a non-2xx status
        httpx.HTTPError: Last attempt failed at the transport level
    """
    if max_retries < 1:
        raise ValueError("max_retries must be at least 1")

    retrying = AsyncRetrying(
        stop=stop_after_attempt(max_retries),
        wait=wait_exponential(multiplier=delay_ms / 1000, exp_base=BACKOFF_FACTOR),
        retry=retry_if_exception_type(httpx.HTTPError),
        before=before_log(logger, logging.DEBUG),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        sleep=sleep,
        reraise=True
    )

    response = None
    async for attempt in retrying:
        with attempt:
            response = await client.get(url, params=params)
            response.raise_for_status()
    return response
