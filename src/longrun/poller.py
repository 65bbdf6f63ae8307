"""Drive an operation to a terminal snapshot.

Two strategies share one loop:

- ``wait``: each ``wait_operation`` call blocks server-side for up to the
  per-attempt timeout and may come back undone; transport failures are
  retried under ``RetryPolicy``.
- ``get``: each ``get_operation`` call returns immediately; failures propagate
  at once and the loop sleeps ``poll_interval_s`` between undone snapshots.

The snapshot only ever moves forward: once ``done`` is observed no further
calls are issued.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
import logging
import time
from typing import TYPE_CHECKING

from longrun.config import PollingConfig
from longrun.errors import OperationTimeoutError
from longrun.retry import retry_async
from longrun.transports._errors import wrap_transport_error

if TYPE_CHECKING:
    from collections.abc import Callable

    from longrun.config import PollStrategy
    from longrun.transports.base import OperationsTransport
    from longrun.types import Operation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PollAttempt:
    """Outcome of one transport call, passed to ``on_attempt`` hooks."""

    operation_name: str
    #: 1-based count of transport calls made by this polling loop.
    attempt: int
    strategy: PollStrategy
    done: bool
    error: BaseException | None = None
    #: Sleep before the next call; None when no further call follows.
    next_delay_s: float | None = None


@dataclass
class _LoopState:
    name: str
    calls: int = 0
    deadline_at: float | None = None

    def clamp(self, timeout: float | None) -> float | None:
        if self.deadline_at is None:
            return timeout
        remaining = max(0.0, self.deadline_at - time.monotonic())
        return remaining if timeout is None else min(timeout, remaining)


class OperationPoller:
    """Poll or wait on one operation at a time until it is done.

    Holds no per-operation state; a single instance may drive many
    concurrent loops over a shared transport.
    """

    def __init__(
        self,
        transport: OperationsTransport,
        config: PollingConfig | None = None,
        *,
        on_attempt: Callable[[PollAttempt], None] | None = None,
    ) -> None:
        self._transport = transport
        self._config = config or PollingConfig()
        self._on_attempt = on_attempt

    @property
    def config(self) -> PollingConfig:
        return self._config

    async def poll_until_done(
        self,
        operation: Operation,
        per_attempt_timeout: float | None = None,
        *,
        deadline_s: float | None = None,
    ) -> Operation:
        """Return the first snapshot of ``operation`` with ``done=True``.

        Args:
            operation: Latest known snapshot; returned as-is when already done.
            per_attempt_timeout: Server-side wait hint for each wait call.
            deadline_s: Overall bound for this loop; defaults to the config.

        Raises:
            TransportError: A get call failed, or a wait call kept failing
                after the retry policy was exhausted.
            OperationTimeoutError: The overall deadline elapsed.
        """
        if operation.done:
            return operation

        deadline = deadline_s if deadline_s is not None else self._config.deadline_s
        if deadline is None:
            state = _LoopState(operation.name)
            return await self._loop(operation, per_attempt_timeout, state)

        state = _LoopState(operation.name, deadline_at=time.monotonic() + deadline)
        timeout_cm = asyncio.timeout(deadline)
        try:
            async with timeout_cm:
                return await self._loop(operation, per_attempt_timeout, state)
        except TimeoutError as exc:
            if not timeout_cm.expired():
                raise
            logger.warning(
                "Operation %s not done after %.2fs (%d calls)",
                operation.name,
                deadline,
                state.calls,
            )
            raise OperationTimeoutError(operation.name, deadline_s=deadline) from exc

    async def _loop(
        self,
        operation: Operation,
        per_attempt_timeout: float | None,
        state: _LoopState,
    ) -> Operation:
        strategy = self._config.strategy
        while not operation.done:
            if strategy == "wait":
                operation = await self._wait_step(state, per_attempt_timeout)
                self._emit(
                    PollAttempt(state.name, state.calls, strategy, operation.done)
                )
            else:
                operation = await self._get_step(state)
                delay = None if operation.done else self._config.poll_interval_s
                self._emit(
                    PollAttempt(
                        state.name,
                        state.calls,
                        strategy,
                        operation.done,
                        next_delay_s=delay,
                    )
                )
                if delay is not None:
                    await asyncio.sleep(delay)

        logger.debug("Operation %s done after %d calls", state.name, state.calls)
        return operation

    async def _wait_step(
        self, state: _LoopState, per_attempt_timeout: float | None
    ) -> Operation:
        async def call() -> Operation:
            state.calls += 1
            try:
                return await self._transport.wait_operation(
                    state.name, state.clamp(per_attempt_timeout)
                )
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                error = wrap_transport_error(
                    exc, operation_name=state.name, phase="WaitOperation"
                )
                if error is exc:
                    raise
                raise error from exc

        def on_failure(_retry: int, exc: BaseException, delay: float | None) -> None:
            if delay is None:
                logger.warning(
                    "Giving up waiting on %s after %d calls: %s",
                    state.name,
                    state.calls,
                    exc,
                )
            self._emit(
                PollAttempt(
                    state.name,
                    state.calls,
                    "wait",
                    done=False,
                    error=exc,
                    next_delay_s=delay,
                )
            )

        return await retry_async(call, policy=self._config.retry, on_failure=on_failure)

    async def _get_step(self, state: _LoopState) -> Operation:
        state.calls += 1
        try:
            return await self._transport.get_operation(state.name)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            error = wrap_transport_error(
                exc, operation_name=state.name, phase="GetOperation"
            )
            logger.warning("GetOperation failed for %s: %s", state.name, error)
            self._emit(PollAttempt(state.name, state.calls, "get", False, error=error))
            if error is exc:
                raise
            raise error from exc

    def _emit(self, attempt: PollAttempt) -> None:
        if self._on_attempt is not None:
            self._on_attempt(attempt)


async def poll_until_done(
    transport: OperationsTransport,
    operation: Operation,
    per_attempt_timeout: float | None = None,
    *,
    config: PollingConfig | None = None,
    on_attempt: Callable[[PollAttempt], None] | None = None,
) -> Operation:
    """Functional shortcut for ``OperationPoller(...).poll_until_done(...)``."""
    poller = OperationPoller(transport, config, on_attempt=on_attempt)
    return await poller.poll_until_done(operation, per_attempt_timeout)
