"""Typed decoding of completed operation payloads.

Decoding is pure: no I/O, no retries. The payload's type identifier must match
the caller's expectation exactly before any bytes are parsed.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypeVar, overload

from google.protobuf.message import DecodeError as ProtoDecodeError
from google.protobuf.message import Message
from pydantic import BaseModel, ValidationError

from longrun.errors import (
    ConfigurationError,
    DecodeError,
    InvalidTypeError,
    ServiceStatusError,
)
from longrun.types import OperationError, type_url_for

if TYPE_CHECKING:
    from longrun.types import Operation, OperationResult, TypedPayload

M = TypeVar("M", bound=Message)
B = TypeVar("B", bound=BaseModel)


def _is_protobuf(response_type: Any) -> bool:
    return isinstance(response_type, type) and issubclass(response_type, Message)


def _is_pydantic(response_type: Any) -> bool:
    return isinstance(response_type, type) and issubclass(response_type, BaseModel)


def expected_type_id_for(
    response_type: type[Any], expected_type_id: str | None = None
) -> str:
    """Resolve the type URL a payload must carry to decode as ``response_type``.

    Validates ``response_type`` without touching any payload, so callers can
    reject a bad request before polling starts.
    """
    if not (_is_protobuf(response_type) or _is_pydantic(response_type)):
        raise ConfigurationError(
            f"Unsupported response type: {response_type!r}",
            hint="Pass a protobuf Message subclass or a pydantic BaseModel subclass.",
        )
    if expected_type_id is not None:
        return expected_type_id
    if _is_protobuf(response_type):
        return type_url_for(response_type)
    raise ConfigurationError(
        f"expected_type_id is required for {response_type.__name__!r}",
        hint="Only protobuf message classes have a default type URL.",
    )


def _parse(response_type: type[Any], payload: TypedPayload) -> Any:
    if _is_protobuf(response_type):
        try:
            return response_type.FromString(payload.value)
        except ProtoDecodeError as exc:
            raise DecodeError(
                f"Cannot decode {payload.type_url}: {exc}",
                hint="The payload bytes do not match the local message schema.",
                type_url=payload.type_url,
            ) from exc

    # Pydantic; expected_type_id_for already rejected anything else.
    try:
        return response_type.model_validate_json(payload.value)
    except ValidationError as exc:
        raise DecodeError(
            f"Cannot decode {payload.type_url}: {exc.error_count()} validation error(s)",
            hint="The payload JSON does not match the local model.",
            type_url=payload.type_url,
        ) from exc


@overload
def decode_as(
    result: OperationResult | None,
    response_type: type[M],
    expected_type_id: str | None = None,
) -> M: ...


@overload
def decode_as(
    result: OperationResult | None,
    response_type: type[B],
    expected_type_id: str | None = None,
) -> B: ...


def decode_as(
    result: OperationResult | None,
    response_type: type[Any],
    expected_type_id: str | None = None,
) -> Any:
    """Decode a terminal operation result into ``response_type``.

    Args:
        result: The ``result`` of a done operation.
        response_type: Protobuf message class or pydantic model class.
        expected_type_id: Type URL the payload must carry. Defaults to the
            ``type.googleapis.com/`` URL of a protobuf ``response_type``.

    Raises:
        ServiceStatusError: The operation finished with an error status.
        InvalidTypeError: The payload carries a different type URL.
        DecodeError: The bytes do not parse, or there is no result at all.
    """
    if result is None:
        raise DecodeError(
            "Operation completed without a result",
            hint="The service returned done=true with neither error nor response.",
            type_url=expected_type_id,
        )

    if isinstance(result, OperationError):
        raise ServiceStatusError.from_status(result.status)

    expected = expected_type_id_for(response_type, expected_type_id)
    payload = result.payload
    if payload.type_url != expected:
        raise InvalidTypeError(payload.type_url, expected=expected)

    return _parse(response_type, payload)


def decode_metadata(
    operation: Operation,
    metadata_type: type[Any],
    expected_type_id: str | None = None,
) -> Any:
    """Decode an operation's in-progress metadata, or return None if absent."""
    if operation.metadata is None:
        return None
    expected = expected_type_id_for(metadata_type, expected_type_id)
    if operation.metadata.type_url != expected:
        raise InvalidTypeError(operation.metadata.type_url, expected=expected)
    return _parse(metadata_type, operation.metadata)
