"""Minimal async retry with explicit error contracts.

One policy covers every wait-style call: bounded retries with exponential
backoff. Get-style calls are never retried here; their cadence lives in the
poller.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
import logging
import random
import time
from typing import TYPE_CHECKING, TypeVar

from longrun.errors import TransportError, _walk_exception_chain

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

T = TypeVar("T")

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded retry policy with exponential backoff and optional jitter."""

    #: Retries after the first attempt; 3 means up to 4 calls in total.
    max_retries: int = 3
    initial_delay_s: float = 0.5
    backoff_multiplier: float = 2.0
    max_delay_s: float = 30.0
    jitter: bool = False  # "full jitter" when enabled
    max_elapsed_s: float | None = None

    def __post_init__(self) -> None:
        """Validate invariants to keep retry behavior predictable."""
        if self.max_retries < 0:
            raise ValueError("RetryPolicy.max_retries must be >= 0")
        if self.initial_delay_s < 0:
            raise ValueError("RetryPolicy.initial_delay_s must be >= 0")
        if self.backoff_multiplier <= 0:
            raise ValueError("RetryPolicy.backoff_multiplier must be > 0")
        if self.max_delay_s < 0:
            raise ValueError("RetryPolicy.max_delay_s must be >= 0")
        if self.max_elapsed_s is not None and self.max_elapsed_s < 0:
            raise ValueError("RetryPolicy.max_elapsed_s must be >= 0 or None")

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1


def _is_transient_network_error(exc: BaseException) -> bool:
    for e in _walk_exception_chain(exc):
        if isinstance(e, (TimeoutError, ConnectionError)):
            return True
    return False


def should_retry_wait(exc: BaseException) -> bool:
    """Return True when a failed wait call should be retried.

    Contract:
    - Cancellation is never retried.
    - TransportError is retried unless the transport marked it
      ``retryable=False`` (auth, not found, bad request).
    - Raw timeouts and connection errors are retried as a pragmatic fallback.
    - Anything else (including service status errors) propagates at once.
    """
    if isinstance(exc, asyncio.CancelledError):
        return False

    if isinstance(exc, TransportError):
        return exc.retryable is not False

    return _is_transient_network_error(exc)


def compute_backoff_delay(policy: RetryPolicy, *, retry_index: int) -> float:
    # retry_index starts at 1 for the first retry sleep.
    base = policy.initial_delay_s * (
        policy.backoff_multiplier ** max(0, retry_index - 1)
    )
    base = min(policy.max_delay_s, base)
    if base <= 0:
        return 0.0
    if not policy.jitter:
        return base
    # Full jitter: random in [0, base] to avoid thundering herd.
    return random.random() * base  # noqa: S311


async def retry_async(
    factory: Callable[[], Awaitable[T]],
    *,
    policy: RetryPolicy,
    should_retry: Callable[[BaseException], bool] = should_retry_wait,
    on_failure: Callable[[int, BaseException, float | None], None] | None = None,
) -> T:
    """Run an async factory with bounded retries.

    ``on_failure(attempt, exc, delay)`` is called for every failed attempt;
    ``delay`` is ``None`` when the failure is about to propagate.
    """
    start = time.monotonic()

    for attempt in range(1, policy.max_attempts + 1):
        try:
            return await factory()
        except Exception as exc:
            if not should_retry(exc) or attempt >= policy.max_attempts:
                if isinstance(exc, TransportError) and exc.attempts is None:
                    exc.attempts = attempt
                if on_failure is not None:
                    on_failure(attempt, exc, None)
                raise

            delay = compute_backoff_delay(policy, retry_index=attempt)
            if policy.max_elapsed_s is not None:
                remaining = policy.max_elapsed_s - (time.monotonic() - start)
                if remaining <= 0:
                    if isinstance(exc, TransportError) and exc.attempts is None:
                        exc.attempts = attempt
                    if on_failure is not None:
                        on_failure(attempt, exc, None)
                    raise
                delay = min(delay, remaining)

            if on_failure is not None:
                on_failure(attempt, exc, delay)
            logger.debug(
                "Attempt %d/%d failed (%s); retrying in %.2fs",
                attempt,
                policy.max_attempts,
                exc,
                delay,
            )
            if delay > 0:
                await asyncio.sleep(delay)

    # Defensive: loop should always return or raise.
    raise RuntimeError("retry_async exhausted without an exception")  # pragma: no cover
