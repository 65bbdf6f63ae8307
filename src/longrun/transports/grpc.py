"""Adapter over a ``google.longrunning.Operations`` gRPC stub.

Channel construction, TLS and credentials stay with the caller: pass any
``grpc.aio``-style stub exposing awaitable ``GetOperation`` and
``WaitOperation`` methods.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from google.longrunning import operations_pb2
from google.protobuf import duration_pb2

from longrun.transports._errors import wrap_transport_error
from longrun.types import Operation

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = logging.getLogger(__name__)


def _duration(seconds: float) -> duration_pb2.Duration:
    whole = int(seconds)
    return duration_pb2.Duration(seconds=whole, nanos=int((seconds - whole) * 1e9))


class GrpcOperationsTransport:
    """OperationsTransport backed by a long-running operations stub."""

    def __init__(
        self,
        stub: Any,
        *,
        metadata: Sequence[tuple[str, str]] | None = None,
        rpc_timeout_margin_s: float = 5.0,
    ) -> None:
        self._stub = stub
        self._metadata = tuple(metadata) if metadata else None
        #: Client-side RPC deadline = server wait window + this margin.
        self._rpc_timeout_margin_s = rpc_timeout_margin_s

    async def wait_operation(
        self, name: str, timeout: float | None = None
    ) -> Operation:
        request = operations_pb2.WaitOperationRequest(name=name)
        if timeout is not None:
            request.timeout.CopyFrom(_duration(timeout))
        rpc_timeout = (
            timeout + self._rpc_timeout_margin_s if timeout is not None else None
        )
        try:
            response = await self._stub.WaitOperation(
                request, timeout=rpc_timeout, metadata=self._metadata
            )
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            raise wrap_transport_error(
                exc, operation_name=name, phase="WaitOperation"
            ) from exc
        operation = Operation.from_proto(response)
        logger.debug("WaitOperation %s -> done=%s", name, operation.done)
        return operation

    async def get_operation(self, name: str) -> Operation:
        request = operations_pb2.GetOperationRequest(name=name)
        try:
            response = await self._stub.GetOperation(
                request, metadata=self._metadata
            )
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            raise wrap_transport_error(
                exc, operation_name=name, phase="GetOperation"
            ) from exc
        operation = Operation.from_proto(response)
        logger.debug("GetOperation %s -> done=%s", name, operation.done)
        return operation
