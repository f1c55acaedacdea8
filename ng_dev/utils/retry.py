"""Retry decorator for GitHub API calls that hit rate limits.

Primary and secondary rate limit responses are retried after the delay requested by
GitHub (``retry-after`` or ``x-ratelimit-reset``), falling back to exponential backoff.
Every other error is raised immediately.
"""

import asyncio
import functools
import time
from typing import Any, Awaitable, Callable, TypeVar

import structlog
from githubkit.exception import PrimaryRateLimitExceeded, RequestFailed, SecondaryRateLimitExceeded

logger = structlog.get_logger(__name__)

F = TypeVar("F", bound=Callable[..., Awaitable[Any]])


def _is_rate_limit_failure(exc: RequestFailed) -> bool:
    status_code = exc.response.status_code
    return status_code == 429 or (status_code == 403 and "rate limit" in str(exc).lower())


def _requested_wait_time(exc: Exception) -> float | None:
    """Extracts the wait time GitHub asked for, if any."""
    if isinstance(exc, (PrimaryRateLimitExceeded, SecondaryRateLimitExceeded)) and exc.retry_after:
        return exc.retry_after.total_seconds()
    if not isinstance(exc, RequestFailed):
        return None
    headers = exc.response.headers
    retry_after = headers.get("retry-after")
    if retry_after:
        try:
            return float(retry_after)
        except ValueError:
            logger.warning("Invalid retry-after header value", retry_after=retry_after)
    rate_limit_reset = headers.get("x-ratelimit-reset")
    if rate_limit_reset:
        try:
            return max(int(rate_limit_reset) - int(time.time()) + 1, 0)
        except ValueError:
            logger.warning("Invalid x-ratelimit-reset header value", rate_limit_reset=rate_limit_reset)
    return None


def retry_on_rate_limit(
    max_retries: int = 5,
    initial_delay: float = 10.0,
    max_delay: float = 300.0,
    exponential_base: float = 2.0,
) -> Callable[[F], F]:
    """Decorator retrying an async GitHub call when it is rate limited.

    Args:
        max_retries: Maximum number of retry attempts
        initial_delay: Delay in seconds before the first retry when GitHub gives no hint
        max_delay: Upper bound for any single delay
        exponential_base: Growth factor of the fallback delay between attempts
    """

    def decorator(func: F) -> F:
        if not asyncio.iscoroutinefunction(func):
            raise TypeError(f"Function {func.__name__} decorated with @retry_on_rate_limit must be async.")

        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            delay = initial_delay
            attempt = 0
            while True:
                try:
                    return await func(*args, **kwargs)
                except RequestFailed as exc:
                    if not isinstance(exc, (PrimaryRateLimitExceeded, SecondaryRateLimitExceeded)) and not _is_rate_limit_failure(exc):
                        raise
                    if attempt >= max_retries:
                        logger.error("Max retries reached for GitHub rate limit", function=func.__name__, attempts=attempt + 1)
                        raise
                    requested = _requested_wait_time(exc)
                    wait_time = min(requested if requested is not None else delay, max_delay)
                    logger.warning(
                        "GitHub rate limit exceeded, retrying",
                        function=func.__name__,
                        attempt=attempt + 1,
                        max_retries=max_retries,
                        wait_time=wait_time,
                    )
                    await asyncio.sleep(wait_time)
                    delay = min(delay * exponential_base, max_delay)
                    attempt += 1

        return wrapper  # type: ignore

    return decorator
