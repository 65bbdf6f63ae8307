"""Test helpers (small, reusable builders and doubles)."""

from __future__ import annotations

import asyncio

from google.protobuf import wrappers_pb2
from pydantic import BaseModel

from longrun.types import (
    Operation,
    OperationError,
    OperationResponse,
    Status,
    TypedPayload,
)

FOO_TYPE = "type/Foo"


class Foo(BaseModel):
    """JSON-encoded response model."""

    x: int


def pending(name: str = "op-1") -> Operation:
    return Operation(name=name, done=False)


def finished(
    message: object, name: str = "op-1", type_url: str | None = None
) -> Operation:
    """Build a done operation whose response packs ``message``."""
    if isinstance(message, BaseModel) and type_url is None:
        type_url = FOO_TYPE
    return Operation(
        name=name,
        done=True,
        result=OperationResponse(TypedPayload.pack(message, type_url)),
    )


def failed(code: int, message: str, name: str = "op-1") -> Operation:
    return Operation(
        name=name, done=True, result=OperationError(Status(code=code, message=message))
    )


def int_value(value: int) -> wrappers_pb2.Int64Value:
    return wrappers_pb2.Int64Value(value=value)


class HangingTransport:
    """Transport whose calls never return until cancelled."""

    def __init__(self) -> None:
        self.calls = 0
        self.timeouts: list[float | None] = []

    async def wait_operation(
        self, name: str, timeout: float | None = None
    ) -> Operation:
        self.calls += 1
        self.timeouts.append(timeout)
        await asyncio.Event().wait()
        raise AssertionError("unreachable")

    async def get_operation(self, name: str) -> Operation:
        self.calls += 1
        await asyncio.Event().wait()
        raise AssertionError("unreachable")
