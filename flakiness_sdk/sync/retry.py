"""
Retry with a fixed backoff schedule
"""
import asyncio
import logging
from typing import Awaitable, Callable, Sequence, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def retry_with_backoff(
    job: Callable[[], Awaitable[T]],
    backoff_ms: Sequence[int] = (),
    debug: bool = False,
) -> T:
    """
    Run a job, retrying it after each delay of the schedule.

    Every failure before the schedule is exhausted is logged and followed by
    the next delay. The final attempt runs unguarded, so its exception
    reaches the caller.

    Args:
        job: Coroutine factory; called once per attempt
        backoff_ms: Delays between attempts, in milliseconds
        debug: Log full tracebacks of retried failures

    Returns:
        Result of the first successful attempt
    """
    for delay in backoff_ms:
        try:
            return await job()
        except Exception as e:
            logger.error(f"[flakiness.io err] {e}", exc_info=debug)
            await asyncio.sleep(delay / 1000)
    return await job()
