"""Compose polling and decoding for operation-producing calls."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, TypeVar

from longrun import decoder
from longrun.errors import ServiceStatusError
from longrun.poller import OperationPoller

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from longrun.config import PollingConfig
    from longrun.poller import PollAttempt
    from longrun.transports.base import OperationsTransport
    from longrun.types import Operation, OperationResult

R = TypeVar("R")

logger = logging.getLogger(__name__)


class OperationLifecycleManager:
    """Submit → wait → decode for every asynchronous endpoint.

    Example:
        manager = OperationLifecycleManager(GrpcOperationsTransport(stub))
        operation = Operation.from_proto(await vizier.SuggestTrials(request))
        response = await manager.run_to_completion(
            operation, SuggestTrialsResponse, per_attempt_timeout=4.0
        )
    """

    def __init__(
        self,
        transport: OperationsTransport,
        config: PollingConfig | None = None,
        *,
        on_attempt: Callable[[PollAttempt], None] | None = None,
    ) -> None:
        self._transport = transport
        self._poller = OperationPoller(transport, config, on_attempt=on_attempt)

    @property
    def config(self) -> PollingConfig:
        return self._poller.config

    async def run_to_completion(
        self,
        operation: Operation,
        response_type: type[R],
        expected_type_id: str | None = None,
        per_attempt_timeout: float | None = None,
    ) -> R:
        """Poll ``operation`` until done and decode its result.

        ``response_type`` and ``expected_type_id`` are checked before the
        first poll. Polling errors propagate before any decoding is attempted.
        """
        expected = decoder.expected_type_id_for(response_type, expected_type_id)
        terminal = await self._poller.poll_until_done(operation, per_attempt_timeout)
        try:
            return decoder.decode_as(terminal.result, response_type, expected)
        except ServiceStatusError as exc:
            exc.operation_name = terminal.name
            logger.debug(
                "Operation %s failed with status %d: %s",
                terminal.name,
                exc.code,
                exc.status_message,
            )
            raise

    async def resolve(
        self,
        operation: Operation,
        response_type: type[R],
        expected_type_id: str | None = None,
    ) -> R:
        """Like ``run_to_completion`` with the configured default cadence."""
        return await self.run_to_completion(
            operation,
            response_type,
            expected_type_id,
            per_attempt_timeout=self.config.default_wait_timeout_s,
        )

    async def submit(
        self,
        call: Callable[[], Awaitable[Operation]],
        response_type: type[R],
        expected_type_id: str | None = None,
        per_attempt_timeout: float | None = None,
    ) -> R:
        """Issue an operation-producing call and run it to completion.

        A bad ``response_type``/``expected_type_id`` fails before ``call`` runs.
        """
        expected = decoder.expected_type_id_for(response_type, expected_type_id)
        operation = await call()
        logger.debug("Submitted operation %s", operation.name)
        return await self.run_to_completion(
            operation, response_type, expected, per_attempt_timeout
        )

    async def fetch_result(self, name: str) -> OperationResult | None:
        """Return the result of ``name`` if it is done, else None."""
        operation = await self._transport.get_operation(name)
        return operation.result if operation.done else None


async def run_to_completion(
    transport: OperationsTransport,
    operation: Operation,
    response_type: type[R],
    expected_type_id: str | None = None,
    per_attempt_timeout: float | None = None,
    *,
    config: PollingConfig | None = None,
) -> R:
    """Functional shortcut for ``OperationLifecycleManager.run_to_completion``."""
    manager = OperationLifecycleManager(transport, config)
    return await manager.run_to_completion(
        operation, response_type, expected_type_id, per_attempt_timeout
    )
