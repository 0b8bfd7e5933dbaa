"""
Reusable decorators for the catalog client.

Currently holds the retry-with-backoff wrapper applied to every remote lookup.
"""

import asyncio
import logging
from functools import wraps
from typing import Callable, Type, Union

import aiohttp

from catalog.constants import (
    DEFAULT_RETRY_ATTEMPTS,
    RETRY_BASE_DELAY,
    RETRY_MAX_DELAY,
)

logger = logging.getLogger("dexport.decorators")


def retry_on_error(
    max_retries: int = DEFAULT_RETRY_ATTEMPTS,
    exceptions: Union[Type[Exception], tuple] = (
        aiohttp.ClientError,
        asyncio.TimeoutError,
    ),
    base_delay: float = RETRY_BASE_DELAY,
    max_delay: float = RETRY_MAX_DELAY,
):
    """
    Decorator to retry async functions on specific exceptions with exponential backoff.

    The delay formula is: `delay = min(base_delay * (2^attempt), max_delay)`.

    `max_retries`, `base_delay` and `max_delay` may be overridden per instance:
    when the decorated function is a method and `self` has `max_retries`,
    `retry_base_delay` or `retry_max_delay` attributes, those win.

    Args:
        max_retries: Maximum number of attempts before giving up.
        exceptions: Exception type or tuple of exceptions to catch and retry.
        base_delay: Initial delay in seconds.
        max_delay: Maximum delay in seconds between retries (caps the backoff).

    Returns:
        Decorated function wrapper.

    Raises:
        Exception: The last exception encountered if all retries fail.
    """

    def decorator(func: Callable):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            owner = args[0] if args else None
            attempts = getattr(owner, "max_retries", max_retries)
            first_delay = getattr(owner, "retry_base_delay", base_delay)
            delay_cap = getattr(owner, "retry_max_delay", max_delay)

            for attempt in range(attempts):
                try:
                    return await func(*args, **kwargs)
                except exceptions as e:
                    if attempt == attempts - 1:
                        logger.error(
                            f"{func.__name__} failed after {attempts} attempts: {e}"
                        )
                        raise

                    delay = min(first_delay * (2**attempt), delay_cap)

                    logger.warning(
                        f"{func.__name__} attempt {attempt + 1}/{attempts} failed: {e}. "
                        f"Retrying in {delay:.1f}s..."
                    )

                    await asyncio.sleep(delay)

        return wrapper

    return decorator
