"""Operation snapshots and their result payloads.

All types are frozen: a fresher snapshot replaces an older one wholesale.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from google.protobuf.message import Message
from pydantic import BaseModel

from longrun.errors import ConfigurationError

if TYPE_CHECKING:
    from google.longrunning import operations_pb2
    from google.protobuf import any_pb2
    from google.rpc import status_pb2

TYPE_URL_PREFIX = "type.googleapis.com/"


def type_url_for(message_type: type[Message] | Message) -> str:
    """Return the ``Any`` type URL for a protobuf message class or instance."""
    return f"{TYPE_URL_PREFIX}{message_type.DESCRIPTOR.full_name}"


@dataclass(frozen=True)
class TypedPayload:
    """Raw encoded bytes tagged with the type identifier of their schema."""

    type_url: str
    value: bytes = b""

    @classmethod
    def from_any(cls, message: any_pb2.Any) -> TypedPayload:
        return cls(type_url=message.type_url, value=bytes(message.value))

    @classmethod
    def pack(cls, message: Any, type_url: str | None = None) -> TypedPayload:
        """Encode a protobuf message or pydantic model into a payload.

        Protobuf messages use their canonical binary encoding and default to
        the ``type.googleapis.com/`` type URL. Pydantic models are encoded as
        JSON and need an explicit ``type_url``.
        """
        if isinstance(message, Message):
            return cls(
                type_url=type_url or type_url_for(message),
                value=message.SerializeToString(),
            )
        if isinstance(message, BaseModel):
            if type_url is None:
                raise ConfigurationError(
                    "type_url is required for pydantic payloads",
                    hint="Pass TypedPayload.pack(model, type_url='type/MyModel').",
                )
            return cls(type_url=type_url, value=message.model_dump_json().encode())
        raise ConfigurationError(
            f"Cannot encode {type(message).__name__} as a payload",
            hint="Pass a protobuf Message or a pydantic BaseModel instance.",
        )


@dataclass(frozen=True)
class Status:
    """Machine-readable error status reported by the service."""

    code: int
    message: str = ""
    details: tuple[TypedPayload, ...] = ()

    @classmethod
    def from_proto(cls, status: status_pb2.Status) -> Status:
        return cls(
            code=status.code,
            message=status.message,
            details=tuple(TypedPayload.from_any(d) for d in status.details),
        )


@dataclass(frozen=True)
class OperationError:
    """Terminal result: the service reported failure."""

    status: Status


@dataclass(frozen=True)
class OperationResponse:
    """Terminal result: a type-tagged success payload."""

    payload: TypedPayload


OperationResult = OperationError | OperationResponse


@dataclass(frozen=True)
class Operation:
    """Snapshot of a server-tracked unit of asynchronous work."""

    name: str
    done: bool = False
    metadata: TypedPayload | None = None
    #: Present only once ``done`` is True.
    result: OperationResult | None = None

    def __post_init__(self) -> None:
        if not self.done and self.result is not None:
            raise ValueError(f"Operation {self.name!r} has a result but is not done")

    @classmethod
    def from_proto(cls, operation: operations_pb2.Operation) -> Operation:
        """Convert a ``google.longrunning.Operation`` message."""
        metadata = (
            TypedPayload.from_any(operation.metadata)
            if operation.HasField("metadata")
            else None
        )
        which = operation.WhichOneof("result")
        result: OperationResult | None = None
        if which == "error":
            result = OperationError(Status.from_proto(operation.error))
        elif which == "response":
            result = OperationResponse(TypedPayload.from_any(operation.response))
        # The result oneof is only meaningful on a done operation.
        if not operation.done:
            result = None
        return cls(
            name=operation.name,
            done=operation.done,
            metadata=metadata,
            result=result,
        )
