"""Retry-with-backoff wrapper for asynchronous fetches"""

import asyncio
import random
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Tuple, Type, TypeVar

from ..config import settings
from ..exceptions import NetworkError, RetryExhausted
from .log_service import log_service

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """
    How often and how patiently to retry a failing operation.

    max_attempts is the number of retries after the first call, so an
    operation that always fails is invoked max_attempts + 1 times.
    """

    max_attempts: int = 2
    base_delay_ms: int = 1000
    jitter_ms: int = 250

    def __post_init__(self):
        if self.max_attempts < 0:
            raise ValueError("max_attempts must be >= 0")
        if self.base_delay_ms < 0 or self.jitter_ms < 0:
            raise ValueError("delays must be >= 0")

    @classmethod
    def from_settings(cls) -> "RetryPolicy":
        return cls(
            max_attempts=settings.RETRY_MAX_ATTEMPTS,
            base_delay_ms=settings.RETRY_BASE_DELAY_MS,
            jitter_ms=settings.RETRY_JITTER_MS,
        )

    def delay_for(self, attempt: int, jitter: float = 0.0) -> float:
        """Delay in milliseconds before retry number `attempt` (0-based)"""
        return self.base_delay_ms * (2**attempt) + jitter


async def retry_async(
    operation: Callable[[], Awaitable[T]],
    policy: Optional[RetryPolicy] = None,
    *,
    description: str = "operation",
    retry_on: Tuple[Type[BaseException], ...] = (NetworkError,),
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    jitter: Optional[Callable[[float], float]] = None,
) -> T:
    """
    Run `operation`, retrying on `retry_on` errors with exponential backoff.

    Between attempts waits base_delay * 2**attempt + random jitter. Errors
    outside `retry_on` propagate immediately. When the policy is used up,
    RetryExhausted is raised wrapping the last error.
    """
    policy = policy or RetryPolicy.from_settings()
    jitter = jitter or (lambda ceiling: random.uniform(0, ceiling))
    total = policy.max_attempts + 1

    for attempt in range(total):
        try:
            return await operation()
        except retry_on as e:
            log_service.warning(
                f"{description} failed (attempt {attempt + 1}/{total}): {e}"
            )
            if attempt + 1 >= total:
                log_service.error(f"{description} gave up after {total} attempts: {e}")
                raise RetryExhausted(e, total) from e

            delay_ms = policy.delay_for(attempt, jitter(policy.jitter_ms))
            await sleep(delay_ms / 1000)

    # Unreachable: the loop either returns or raises
    raise AssertionError("retry loop exited without result")
