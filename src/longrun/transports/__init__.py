"""Operation transports."""

from longrun.transports.base import OperationsTransport
from longrun.transports.grpc import GrpcOperationsTransport
from longrun.transports.scripted import ScriptedTransport, TransportCall

__all__ = [
    "GrpcOperationsTransport",
    "OperationsTransport",
    "ScriptedTransport",
    "TransportCall",
]
