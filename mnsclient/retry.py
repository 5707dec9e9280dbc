"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
mnsclient, a product of Garudex Labs

Retry logic utilities for mnsclient.

This module applies a RetryPolicy to a single request. Whether a failure is
retried is decided by is_retryable_error(); everything else propagates on the
first attempt.
"""

import functools
import time
from typing import Callable, TypeVar, Any, Optional

from mnsclient.config import RetryPolicy
from mnsclient.exceptions import is_retryable_error
from mnsclient.logging_config import get_logger

logger = get_logger(__name__)

T = TypeVar('T')


def call_with_retry(
    operation: Callable[[], T],
    operation_name: str,
    policy: RetryPolicy,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """
    Execute an operation under a retry policy.

    Args:
        operation: Callable to execute
        operation_name: Name of the operation for logging
        policy: Retry policy to apply
        sleep: Function used to wait between attempts

    Returns:
        Result of the operation

    Raises:
        Exception: The first non-retryable exception, or the last retryable
            one once all attempts are used
    """
    attempt = 1
    while True:
        try:
            return operation()
        except Exception as e:
            if not is_retryable_error(e, retry_on_throttle=policy.retry_on_throttle):
                raise

            if attempt >= policy.max_attempts:
                if policy.max_attempts > 1:
                    logger.error(
                        "retry_exhausted",
                        operation=operation_name,
                        total_attempts=attempt,
                        exception_type=type(e).__name__,
                        exception_message=str(e),
                    )
                raise

            delay = policy.delay_for(attempt)
            logger.warning(
                "retrying_request",
                operation=operation_name,
                attempt=attempt,
                max_attempts=policy.max_attempts,
                delay_seconds=delay,
                exception_type=type(e).__name__,
                exception_message=str(e),
            )
            sleep(delay)
            attempt += 1


def retry_with_policy(
    policy: RetryPolicy,
    operation_name: Optional[str] = None,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """
    Decorator form of call_with_retry.

    Example:
        @retry_with_policy(RetryPolicy(max_attempts=3))
        def list_names(client):
            return client.list_queue().queue_names
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            return call_with_retry(
                lambda: func(*args, **kwargs),
                operation_name or func.__name__,
                policy,
            )

        return wrapper
    return decorator
