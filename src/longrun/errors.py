"""Exception hierarchy for longrun.

The four operational kinds stay distinguishable because each one calls for a
different remedy:

- ``TransportError``: the service could not be reached (retry / network).
- ``ServiceStatusError``: the service ran the operation and reported failure.
- ``InvalidTypeError`` / ``DecodeError``: the success payload could not be
  understood (client/server schema skew).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator

    from longrun.types import Status, TypedPayload


class LongrunError(Exception):
    """Base exception for all longrun errors."""

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint = hint


class ConfigurationError(LongrunError):
    """Configuration or argument validation failed."""


class TransportError(LongrunError):
    """Querying or waiting on an operation failed.

    Transports attach retry metadata so the poller can perform bounded
    retries without brittle substring matching.
    """

    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        retryable: bool | None = None,
        status_code: int | None = None,
        operation_name: str | None = None,
        attempts: int | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.retryable = retryable
        self.status_code = status_code
        self.operation_name = operation_name
        self.attempts = attempts


class ServiceStatusError(LongrunError):
    """The operation completed with an error status."""

    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        code: int,
        status_message: str = "",
        details: tuple[TypedPayload, ...] = (),
        operation_name: str | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.code = code
        self.status_message = status_message
        self.details = details
        self.operation_name = operation_name

    @classmethod
    def from_status(
        cls, status: Status, *, operation_name: str | None = None
    ) -> ServiceStatusError:
        """Wrap a remote status without interpreting its code."""
        return cls(
            f"Status: {status.message}",
            code=status.code,
            status_message=status.message,
            details=status.details,
            operation_name=operation_name,
        )


class InvalidTypeError(LongrunError):
    """The payload type identifier did not match the expected one."""

    def __init__(self, found: str, *, expected: str) -> None:
        super().__init__(
            f"Invalid type {found}",
            hint=f"Expected payload of type {expected!r}.",
        )
        self.found = found
        self.expected = expected


class DecodeError(LongrunError):
    """The payload bytes could not be parsed as the expected schema."""

    def __init__(
        self, message: str, *, hint: str | None = None, type_url: str | None = None
    ) -> None:
        super().__init__(message, hint=hint)
        self.type_url = type_url


class OperationTimeoutError(LongrunError):
    """The overall polling deadline elapsed before the operation finished."""

    def __init__(self, operation_name: str, *, deadline_s: float) -> None:
        super().__init__(
            f"Operation {operation_name!r} not done after {deadline_s:g}s",
            hint="Raise deadline_s or keep the operation name and resume later.",
        )
        self.operation_name = operation_name
        self.deadline_s = deadline_s


def _walk_exception_chain(exc: BaseException) -> Iterator[BaseException]:
    """Yield *exc* and its ``__cause__``/``__context__`` chain, with cycle protection."""
    seen: set[int] = set()
    stack: list[BaseException] = [exc]
    while stack:
        cur = stack.pop()
        if id(cur) in seen:
            continue
        seen.add(id(cur))
        yield cur

        cause = cur.__cause__
        if isinstance(cause, BaseException):
            stack.append(cause)
        context = cur.__context__
        if isinstance(context, BaseException):
            stack.append(context)
