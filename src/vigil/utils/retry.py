"""
Retry utility with exponential backoff for handling transient failures.

Provides decorator and configuration for automatic retry logic around
GitHub API requests.
"""

import os
import asyncio
import logging
import random
from functools import wraps
from typing import Callable, TypeVar, Optional
from dataclasses import dataclass

import httpx

logger = logging.getLogger(__name__)

T = TypeVar('T')


@dataclass
class RetryConfig:
    """Configuration for retry behavior"""
    max_retries: int = 3
    base_delay: float = 1.0
    max_delay: float = 60.0
    exponential_base: float = 2.0
    jitter: bool = True

    @classmethod
    def from_env(cls) -> "RetryConfig":
        """
        Build configuration from environment variables.

        - MAX_RETRIES: Maximum number of retry attempts (default: 3)
        - RETRY_BASE_DELAY: Delay before the first retry (default: 1.0)
        - RETRY_MAX_DELAY: Maximum delay between retries (default: 60.0)
        - RETRY_BACKOFF_BASE: Exponential base for backoff (default: 2.0)
        """
        return cls(
            max_retries=int(os.getenv("MAX_RETRIES", "3")),
            base_delay=float(os.getenv("RETRY_BASE_DELAY", "1.0")),
            max_delay=float(os.getenv("RETRY_MAX_DELAY", "60.0")),
            exponential_base=float(os.getenv("RETRY_BACKOFF_BASE", "2.0")),
        )


# HTTP status codes that should be retried
RETRYABLE_STATUS_CODES = {
    429,  # Too Many Requests (rate limit)
    500,  # Internal Server Error
    502,  # Bad Gateway
    503,  # Service Unavailable
    504,  # Gateway Timeout
}

# HTTP status codes that should NOT be retried
NON_RETRYABLE_STATUS_CODES = {
    400,  # Bad Request
    401,  # Unauthorized
    403,  # Forbidden
    404,  # Not Found
    422,  # Unprocessable Entity
}


def is_retryable_error(error: BaseException) -> bool:
    """
    Determine if an error should be retried.

    Errors carrying a ``status_code`` attribute are judged by that code.
    Otherwise transport failures are retried, looking through the
    exception chain for the original httpx error.

    Args:
        error: The exception to check

    Returns:
        True if the error should be retried
    """
    status_code = getattr(error, "status_code", None)
    if status_code is not None:
        if status_code in NON_RETRYABLE_STATUS_CODES:
            return False
        return status_code in RETRYABLE_STATUS_CODES

    if isinstance(error, httpx.HTTPStatusError):
        return error.response.status_code in RETRYABLE_STATUS_CODES

    if isinstance(error, (httpx.TransportError, ConnectionError, TimeoutError)):
        return True

    cause = error.__cause__
    if cause is not None and cause is not error:
        return is_retryable_error(cause)

    return False


def calculate_delay(
    attempt: int,
    base_delay: float,
    exponential_base: float,
    max_delay: float,
    jitter: bool
) -> float:
    """
    Calculate delay for retry attempt with exponential backoff.

    Args:
        attempt: Current attempt number (0-indexed)
        base_delay: Base delay in seconds
        exponential_base: Base for exponential backoff
        max_delay: Maximum delay in seconds
        jitter: Whether to add random jitter

    Returns:
        Delay in seconds
    """
    delay = min(base_delay * (exponential_base ** attempt), max_delay)

    # Jitter spreads out retries from concurrent callers
    if jitter:
        delay = delay * (0.5 + random.random() * 0.5)

    return delay


def retry_with_backoff(
    max_retries: Optional[int] = None,
    base_delay: Optional[float] = None,
    max_delay: Optional[float] = None,
    exponential_base: Optional[float] = None,
    jitter: bool = True
):
    """
    Decorator for retrying async functions with exponential backoff.

    Values not given explicitly come from :meth:`RetryConfig.from_env`.

    Example:
        @retry_with_backoff(max_retries=3, base_delay=1.0)
        async def fetch():
            ...

    Args:
        max_retries: Maximum retry attempts
        base_delay: Base delay in seconds
        max_delay: Maximum delay in seconds
        exponential_base: Base for exponential backoff
        jitter: Add random jitter to delays

    Returns:
        Decorated function with retry logic
    """
    env_config = RetryConfig.from_env()
    config = RetryConfig(
        max_retries=env_config.max_retries if max_retries is None else max_retries,
        base_delay=env_config.base_delay if base_delay is None else base_delay,
        max_delay=env_config.max_delay if max_delay is None else max_delay,
        exponential_base=(
            env_config.exponential_base if exponential_base is None else exponential_base
        ),
        jitter=jitter,
    )

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        async def wrapper(*args, **kwargs) -> T:
            for attempt in range(config.max_retries + 1):
                try:
                    result = await func(*args, **kwargs)

                    if attempt > 0:
                        logger.info(f"{func.__name__} succeeded on attempt {attempt + 1}")

                    return result

                except Exception as e:
                    if not is_retryable_error(e):
                        logger.debug(f"{func.__name__} failed with non-retryable error: {e}")
                        raise

                    if attempt >= config.max_retries:
                        logger.error(f"{func.__name__} failed after {config.max_retries + 1} attempts")
                        raise

                    delay = calculate_delay(
                        attempt,
                        config.base_delay,
                        config.exponential_base,
                        config.max_delay,
                        config.jitter
                    )

                    logger.warning(
                        f"{func.__name__} failed on attempt {attempt + 1}/{config.max_retries + 1}, "
                        f"retrying in {delay:.2f}s: {e}"
                    )

                    await asyncio.sleep(delay)

        wrapper.retry_config = config
        return wrapper

    return decorator
