"""
Gateway service module.

Client-facing text protocol in front of the binary-RPC workers.
"""

from .api import router
from .batch_runner import BatchRunner
from .errors import (
    BatchPartialFailureError,
    GatewayError,
    PayloadTooLargeError,
    RequestValidationFailed,
    WorkerUnavailableError,
)
from .orchestrator import Orchestrator
from .rpc_client import RPCClient, RPCError, RPCServiceError, RPCTimeoutError


__all__ = [
    "BatchPartialFailureError",
    "BatchRunner",
    "GatewayError",
    "Orchestrator",
    "PayloadTooLargeError",
    "RPCClient",
    "RPCError",
    "RPCServiceError",
    "RPCTimeoutError",
    "RequestValidationFailed",
    "WorkerUnavailableError",
    "router",
]
