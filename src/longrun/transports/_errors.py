"""Shared transport-side error helpers.

Transports attach retry metadata via TransportError so the poller's retry
logic stays bounded and deterministic without brittle substring matching.
"""

from __future__ import annotations

import asyncio
from typing import Any

from longrun.errors import TransportError, _walk_exception_chain

# google.rpc.Code values.
OK = 0
UNKNOWN = 2
INVALID_ARGUMENT = 3
DEADLINE_EXCEEDED = 4
NOT_FOUND = 5
PERMISSION_DENIED = 7
RESOURCE_EXHAUSTED = 8
ABORTED = 10
INTERNAL = 13
UNAVAILABLE = 14
UNAUTHENTICATED = 16

RETRYABLE_STATUS_CODES: frozenset[int] = frozenset(
    {UNKNOWN, DEADLINE_EXCEEDED, RESOURCE_EXHAUSTED, ABORTED, INTERNAL, UNAVAILABLE}
)


def extract_status_code(exc: BaseException) -> int | None:
    """Walk the exception chain to find a gRPC status code.

    ``grpc.aio.AioRpcError.code()`` returns a ``grpc.StatusCode`` whose
    ``value`` is an ``(int, str)`` tuple.
    """
    for e in _walk_exception_chain(exc):
        code: Any = getattr(e, "code", None)
        if callable(code):
            try:
                code = code()
            except Exception:
                code = None
        value = getattr(code, "value", code)
        if isinstance(value, tuple) and value and isinstance(value[0], int):
            return value[0]
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    return None


def _error_message(exc: BaseException) -> str:
    details: Any = getattr(exc, "details", None)
    if callable(details):
        try:
            details = details()
        except Exception:
            details = None
    if isinstance(details, str) and details:
        return details
    return str(exc) or type(exc).__name__


def _auth_hint(status_code: int | None) -> str | None:
    if status_code in {PERMISSION_DENIED, UNAUTHENTICATED}:
        return (
            "Check the credentials attached to the channel "
            "(e.g. GOOGLE_APPLICATION_CREDENTIALS)."
        )
    if status_code == NOT_FOUND:
        return "The operation name is unknown to the service; it may have expired."
    return None


def wrap_transport_error(
    exc: BaseException, *, operation_name: str, phase: str
) -> TransportError:
    """Map an arbitrary RPC failure to TransportError with retry metadata."""
    if isinstance(exc, asyncio.CancelledError):
        raise exc
    if isinstance(exc, TransportError):
        return exc

    status_code = extract_status_code(exc)
    if status_code is not None:
        retryable = status_code in RETRYABLE_STATUS_CODES
    else:
        retryable = isinstance(exc, (TimeoutError, ConnectionError))

    return TransportError(
        f"{phase} failed for {operation_name!r}: {_error_message(exc)}",
        hint=_auth_hint(status_code),
        retryable=retryable,
        status_code=status_code,
        operation_name=operation_name,
    )
