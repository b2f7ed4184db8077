import logging

import orjson
from starlette.types import ASGIApp, Receive, Scope, Send

from .enums import ErrorKind
from .telemetry import error_counter


logger = logging.getLogger(__name__)


class BodySizeLimitMiddleware:
    """
    Reject requests whose declared Content-Length exceeds ``max_body_bytes``.

    The check runs before the body is read, so oversized audio uploads never
    reach the JSON parser.
    """

    def __init__(self, app: ASGIApp, max_body_bytes: int, node_label: str = "0") -> None:
        self.app = app
        self.max_body_bytes = max_body_bytes
        self.node_label = node_label

    async def _reject(self, send: Send, declared: int) -> None:
        body = orjson.dumps(
            {
                "success": False,
                "error_kind": ErrorKind.PAYLOAD_TOO_LARGE.value,
                "error": f"Request body of {declared} bytes exceeds the limit of "
                f"{self.max_body_bytes} bytes",
                "details": {"size": declared, "limit": self.max_body_bytes},
            }
        )
        await send(
            {
                "type": "http.response.start",
                "status": 413,
                "headers": [
                    (b"content-type", b"application/json"),
                    (b"content-length", str(len(body)).encode("latin-1")),
                ],
            }
        )
        await send({"type": "http.response.body", "body": body, "more_body": False})

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = dict(scope.get("headers", []))
        raw_length = headers.get(b"content-length")
        if raw_length is not None:
            try:
                declared = int(raw_length)
            except ValueError:
                declared = -1
            if declared > self.max_body_bytes:
                logger.warning(
                    "Rejected %s %s: body of %d bytes over limit %d",
                    scope.get("method"),
                    scope.get("path"),
                    declared,
                    self.max_body_bytes,
                )
                error_counter.labels(
                    node=self.node_label,
                    service="gateway",
                    error_kind=ErrorKind.PAYLOAD_TOO_LARGE.value,
                ).inc()
                await self._reject(send, declared)
                return

        await self.app(scope, receive, send)
