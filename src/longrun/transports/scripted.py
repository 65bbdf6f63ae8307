"""In-memory transport for testing without a service."""

from __future__ import annotations

from collections import defaultdict, deque
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from longrun.errors import TransportError
from longrun.transports._errors import NOT_FOUND

if TYPE_CHECKING:
    from collections.abc import Iterable

    from longrun.types import Operation


@dataclass(frozen=True)
class TransportCall:
    """One recorded call against the scripted transport."""

    method: Literal["wait", "get"]
    name: str
    timeout: float | None = None


class ScriptedTransport:
    """Replays scripted snapshots or exceptions per operation name.

    Each call pops the next step for the operation. When only one step is
    left it is repeated, so a terminal snapshot keeps answering like a real
    service would.
    """

    def __init__(self) -> None:
        self._steps: dict[str, deque[Operation | BaseException]] = defaultdict(deque)
        self.calls: list[TransportCall] = []

    def script(
        self, name: str, steps: Iterable[Operation | BaseException]
    ) -> ScriptedTransport:
        """Append steps for ``name``; returns self for chaining."""
        self._steps[name].extend(steps)
        return self

    def calls_for(self, name: str) -> list[TransportCall]:
        return [c for c in self.calls if c.name == name]

    async def wait_operation(
        self, name: str, timeout: float | None = None
    ) -> Operation:
        self.calls.append(TransportCall("wait", name, timeout))
        return self._next(name)

    async def get_operation(self, name: str) -> Operation:
        self.calls.append(TransportCall("get", name))
        return self._next(name)

    def _next(self, name: str) -> Operation:
        steps = self._steps.get(name)
        if not steps:
            raise TransportError(
                f"Operation {name!r} is not scripted",
                retryable=False,
                status_code=NOT_FOUND,
                operation_name=name,
            )
        step = steps.popleft() if len(steps) > 1 else steps[0]
        if isinstance(step, BaseException):
            raise step
        return step
