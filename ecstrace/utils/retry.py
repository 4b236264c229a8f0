"""Retry logic for transient AWS transport failures."""

import functools
import time
from typing import Any, Callable, Optional, Sequence, Tuple, Type

from botocore.exceptions import ConnectTimeoutError, EndpointConnectionError, ReadTimeoutError

from ecstrace.utils.logging import log_warning

# API errors (ClientError) are answers from AWS, not transport failures, and are never retried.
TRANSIENT_AWS_ERRORS: Tuple[Type[Exception], ...] = (
    EndpointConnectionError,
    ConnectTimeoutError,
    ReadTimeoutError,
)


def _expand_delays(retries: int, delays: Optional[Sequence[float]]) -> Tuple[float, ...]:
    if not delays:
        # Default exponential backoff: 1s, 2s, 4s
        return tuple(float(2**i) for i in range(retries))
    delays = tuple(delays)
    if len(delays) < retries:
        # Pad delays with the last value if not enough provided
        delays = delays + (delays[-1],) * (retries - len(delays))
    return delays


def retry_with_backoff(
    retries: int = 3,
    delays: Optional[Sequence[float]] = None,
    exceptions: Tuple[Type[Exception], ...] = TRANSIENT_AWS_ERRORS,
) -> Callable:
    """
    Decorator for retrying a function with exponential backoff.

    Args:
        retries: Number of retries (default: 3)
        delays: Delays in seconds for each retry (default: (1, 2, 4))
        exceptions: Exception types that trigger a retry (default: transient
            botocore connection errors)

    Example:
        @retry_with_backoff(retries=2, delays=(0.5, 1.0))
        def describe(client, cluster):
            return client.describe_clusters(clusters=[cluster])

        # Wrapping a bound client method at call time
        get_page = retry_with_backoff(retries=2)(logs_client.get_log_events)
        response = get_page(logGroupName=group, logStreamName=stream)
    """
    backoff = _expand_delays(retries, delays)

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            for attempt in range(retries + 1):  # +1 for initial attempt
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    if attempt == retries:
                        raise
                    delay = backoff[attempt]
                    log_warning(
                        f"{getattr(func, '__name__', func)} failed ({e}); "
                        f"retry {attempt + 1}/{retries} in {delay}s"
                    )
                    time.sleep(delay)

        return wrapper

    return decorator


def call_with_retry(
    func: Callable,
    retries: int,
    delays: Optional[Sequence[float]] = None,
    **kwargs: Any,
) -> Any:
    """Call ``func(**kwargs)`` retrying transient AWS errors."""
    return retry_with_backoff(retries=retries, delays=delays)(func)(**kwargs)
