"""Deadline helper for awaitables."""
import asyncio
import logging
from typing import Awaitable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class TimeoutExceeded(Exception):
    """Raised when an awaited operation misses its deadline."""

    def __init__(self, timeout_ms: int, description: str):
        self.timeout_ms = timeout_ms
        self.description = description
        super().__init__(f"{description} timed out after {timeout_ms}ms")


def _log_late_failure(task: asyncio.Future) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.warning(f"Abandoned operation failed after its deadline: {exc}")


async def with_timeout(operation: Awaitable[T], timeout_ms: int, description: str) -> T:
    """
    Wait for an operation for at most ``timeout_ms`` milliseconds.

    The operation itself is not cancelled when the deadline passes; it keeps
    running in the background and only its result is abandoned.

    Raises:
        TimeoutExceeded: The deadline passed first
    """
    task = asyncio.ensure_future(operation)
    try:
        return await asyncio.wait_for(asyncio.shield(task), timeout=timeout_ms / 1000)
    except asyncio.TimeoutError as e:
        task.add_done_callback(_log_late_failure)
        raise TimeoutExceeded(timeout_ms, description) from e
