"""
Client-facing error kinds raised by the gateway.

Each subclass fixes its kind and HTTP status; the app-level handler turns
any of them into the standard error body.
"""

from typing import Any

from chatgate.enums import ErrorKind


class GatewayError(Exception):
    """Base class for errors reported to gateway clients."""

    kind: ErrorKind = ErrorKind.WORKER_UNAVAILABLE
    status_code: int = 502

    def __init__(self, message: str, details: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_body(self) -> dict[str, Any]:
        return {
            "success": False,
            "error_kind": self.kind.value,
            "error": self.message,
            "details": self.details,
        }


class RequestValidationFailed(GatewayError):
    """Missing or malformed input."""

    kind = ErrorKind.VALIDATION_ERROR
    status_code = 400


class PayloadTooLargeError(GatewayError):
    """Audio blob above the configured limit."""

    kind = ErrorKind.PAYLOAD_TOO_LARGE
    status_code = 413


class WorkerUnavailableError(GatewayError):
    """Worker unreachable, failed, or returned success=false."""

    kind = ErrorKind.WORKER_UNAVAILABLE
    status_code = 502


class BatchPartialFailureError(GatewayError):
    """At least one call in a concurrent batch failed."""

    kind = ErrorKind.BATCH_PARTIAL_FAILURE
    status_code = 502

    def __init__(self, message: str, failed_index: int, details: Any = None) -> None:
        super().__init__(message, details)
        self.failed_index = failed_index
