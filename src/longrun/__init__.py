"""longrun: track long-running operations of a remote optimization service.

Public API:
    - OperationLifecycleManager: poll an operation, then decode its result
    - OperationPoller / poll_until_done(): drive an operation to done
    - decode_as(): typed decoding of a terminal result
    - PollingConfig / RetryPolicy: polling cadence and retry settings
    - vizier: type URLs of Vizier operation payloads
"""

from __future__ import annotations

import logging

from longrun import vizier
from longrun.config import PollingConfig
from longrun.decoder import decode_as, decode_metadata, expected_type_id_for
from longrun.errors import (
    ConfigurationError,
    DecodeError,
    InvalidTypeError,
    LongrunError,
    OperationTimeoutError,
    ServiceStatusError,
    TransportError,
)
from longrun.lifecycle import OperationLifecycleManager, run_to_completion
from longrun.poller import OperationPoller, PollAttempt, poll_until_done
from longrun.retry import RetryPolicy
from longrun.transports import (
    GrpcOperationsTransport,
    OperationsTransport,
    ScriptedTransport,
)
from longrun.types import (
    Operation,
    OperationError,
    OperationResponse,
    OperationResult,
    Status,
    TypedPayload,
    type_url_for,
)

try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("longrun")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"

# Library-level NullHandler: stay silent unless the consumer configures logging.
logging.getLogger("longrun").addHandler(logging.NullHandler())

__all__ = [
    "ConfigurationError",
    "DecodeError",
    "GrpcOperationsTransport",
    "InvalidTypeError",
    "LongrunError",
    "Operation",
    "OperationError",
    "OperationLifecycleManager",
    "OperationPoller",
    "OperationResponse",
    "OperationResult",
    "OperationTimeoutError",
    "OperationsTransport",
    "PollAttempt",
    "PollingConfig",
    "RetryPolicy",
    "ScriptedTransport",
    "ServiceStatusError",
    "Status",
    "TransportError",
    "TypedPayload",
    "decode_as",
    "decode_metadata",
    "expected_type_id_for",
    "poll_until_done",
    "run_to_completion",
    "type_url_for",
    "vizier",
]
