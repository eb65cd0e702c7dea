"""
Bounded retry for single UI actions.

Retries belong to actions only. Waits are already bounded, deterministic
blocks and are never wrapped in ``retry``.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar

from loguru import logger

from .errors import ContextClosedError


T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """
    Configuration for action retry behavior.

    Attributes:
        max_attempts: Total number of attempts, including the first one
        backoff_delay: Fixed delay in seconds between failed attempts
    """
    max_attempts: int = 3
    backoff_delay: float = 0.2

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.backoff_delay < 0:
            raise ValueError(f"backoff_delay must be >= 0, got {self.backoff_delay}")


def is_retryable(error: BaseException) -> bool:
    """A closed context never recovers, so retrying it only adds latency."""
    return not isinstance(error, ContextClosedError)


def retry(
    operation: Callable[[], T],
    policy: Optional[RetryPolicy] = None,
    sleep: Callable[[float], None] = time.sleep,
    description: str = "",
    should_retry: Callable[[BaseException], bool] = is_retryable,
) -> T:
    """
    Run ``operation`` until it succeeds or the policy is exhausted.

    Sleeps ``policy.backoff_delay`` between failed attempts, so n failing
    attempts observe n - 1 delays. The last error is re-raised unchanged.

    Args:
        operation: Zero-argument callable performing one attempt
        policy: RetryPolicy, defaults to 3 attempts with 200ms backoff
        sleep: Delay function, injectable for tests
        description: Human-readable name for logging
        should_retry: Predicate deciding whether an error is worth retrying

    Returns:
        The result of the first successful attempt
    """
    policy = policy or RetryPolicy()
    name = description or getattr(operation, "__name__", "operation")

    for attempt in range(1, policy.max_attempts + 1):
        try:
            return operation()
        except Exception as e:
            if attempt == policy.max_attempts or not should_retry(e):
                logger.error(
                    f"Attempt {attempt}/{policy.max_attempts} failed for "
                    f"{name}, giving up: {e}"
                )
                raise
            logger.warning(
                f"Attempt {attempt}/{policy.max_attempts} failed for "
                f"{name}: {e}. Retrying in {policy.backoff_delay}s..."
            )
            sleep(policy.backoff_delay)

    # max_attempts >= 1 guarantees the loop returns or raises
    raise AssertionError("unreachable")


__all__ = [
    "RetryPolicy",
    "is_retryable",
    "retry",
]
