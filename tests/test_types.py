from __future__ import annotations

from google.longrunning import operations_pb2
from google.protobuf import any_pb2, wrappers_pb2
from google.rpc import status_pb2
import pytest

from longrun.errors import ConfigurationError
from longrun.types import (
    Operation,
    OperationError,
    OperationResponse,
    Status,
    TypedPayload,
    type_url_for,
)
from longrun.vizier import SUGGEST_TRIALS_RESPONSE
from tests.helpers import FOO_TYPE, Foo

pytestmark = pytest.mark.unit


def _any(message) -> any_pb2.Any:
    packed = any_pb2.Any()
    packed.Pack(message)
    return packed


def test_type_url_for_uses_any_convention() -> None:
    assert (
        type_url_for(wrappers_pb2.Int64Value)
        == "type.googleapis.com/google.protobuf.Int64Value"
    )
    assert type_url_for(wrappers_pb2.Int64Value(value=3)) == type_url_for(
        wrappers_pb2.Int64Value
    )
    assert SUGGEST_TRIALS_RESPONSE.startswith("type.googleapis.com/")


def test_operation_not_done_cannot_carry_result() -> None:
    with pytest.raises(ValueError, match="not done"):
        Operation(
            name="op-1",
            done=False,
            result=OperationError(Status(code=2)),
        )


def test_operation_is_frozen() -> None:
    op = Operation(name="op-1")
    with pytest.raises(AttributeError):
        op.done = True  # type: ignore[misc]


def test_pack_protobuf_defaults_type_url() -> None:
    payload = TypedPayload.pack(wrappers_pb2.Int64Value(value=7))
    assert payload.type_url == "type.googleapis.com/google.protobuf.Int64Value"
    assert wrappers_pb2.Int64Value.FromString(payload.value).value == 7


def test_pack_pydantic_requires_type_url() -> None:
    with pytest.raises(ConfigurationError):
        TypedPayload.pack(Foo(x=1))
    payload = TypedPayload.pack(Foo(x=1), FOO_TYPE)
    assert payload.type_url == FOO_TYPE
    assert payload.value == b'{"x":1}'


def test_pack_rejects_unknown_values() -> None:
    with pytest.raises(ConfigurationError):
        TypedPayload.pack({"x": 1}, "type/dict")


def test_from_proto_pending_with_metadata() -> None:
    pb = operations_pb2.Operation(
        name="projects/p/locations/l/operations/1",
        done=False,
        metadata=_any(wrappers_pb2.StringValue(value="halfway")),
    )

    op = Operation.from_proto(pb)

    assert op.name == "projects/p/locations/l/operations/1"
    assert op.done is False
    assert op.result is None
    assert op.metadata is not None
    assert op.metadata.type_url.endswith("google.protobuf.StringValue")


def test_from_proto_response() -> None:
    pb = operations_pb2.Operation(
        name="op-1", done=True, response=_any(wrappers_pb2.Int64Value(value=1))
    )

    op = Operation.from_proto(pb)

    assert op.done is True
    assert op.metadata is None
    assert isinstance(op.result, OperationResponse)
    assert op.result.payload.type_url == type_url_for(wrappers_pb2.Int64Value)
    assert wrappers_pb2.Int64Value.FromString(op.result.payload.value).value == 1


def test_from_proto_error_keeps_status_and_details() -> None:
    pb = operations_pb2.Operation(
        name="op-1",
        done=True,
        error=status_pb2.Status(
            code=5,
            message="study not found",
            details=[_any(wrappers_pb2.StringValue(value="why"))],
        ),
    )

    op = Operation.from_proto(pb)

    assert isinstance(op.result, OperationError)
    assert op.result.status.code == 5
    assert op.result.status.message == "study not found"
    assert len(op.result.status.details) == 1
    assert op.result.status.details[0].type_url.endswith("StringValue")


def test_from_proto_done_without_result_keeps_none() -> None:
    op = Operation.from_proto(operations_pb2.Operation(name="op-1", done=True))
    assert op.done is True
    assert op.result is None
