"""Transport protocol: the two operation queries the poller depends on."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from longrun.types import Operation


@runtime_checkable
class OperationsTransport(Protocol):
    """Minimal operations protocol: wait_operation, get_operation.

    Implementations raise ``TransportError`` on failure and must be safe for
    concurrent use by many polling loops.
    """

    async def wait_operation(
        self, name: str, timeout: float | None = None
    ) -> Operation:
        """Block server-side up to ``timeout`` seconds; may return undone."""
        ...

    async def get_operation(self, name: str) -> Operation:
        """Return the current snapshot immediately."""
        ...
