"""
RPC client for the gateway's calls to the worker nodes (Node 1 and Node 2).

Requests and responses are binary messages; the caller encodes the request
so it can time the call separately from serialization.
"""

import logging
import time
from typing import Any, cast

import httpx
import msgspec

from chatgate.base_schemas import RPC_CONTENT_TYPE, S, decode_message
from chatgate.telemetry import rpc_duration_histogram


logger = logging.getLogger(__name__)


class RPCError(Exception):
    """Base exception for RPC errors."""


class RPCTimeoutError(RPCError):
    """Raised when RPC call times out."""


class RPCServiceError(RPCError):
    """Raised when the worker answers with a non-2xx status."""


class RPCClient:
    """
    Async HTTP client for binary RPC calls to one worker.

    No retries: a failed call is reported to the caller immediately.
    """

    def __init__(
        self,
        base_url: str,
        service_name: str = "worker",
        timeout_seconds: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize RPC client.

        Args:
            base_url: Base URL for the worker
            service_name: Label used in logs and metrics
            timeout_seconds: Per-call timeout; None waits indefinitely
            transport: Optional transport override (in-process workers in tests)
        """
        self.base_url = base_url.rstrip("/")
        self.service_name = service_name
        self.timeout_seconds = timeout_seconds

        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(timeout_seconds),
            limits=httpx.Limits(
                max_connections=100,
                max_keepalive_connections=20,
            ),
            http2=True,
            transport=transport,
        )

        logger.info(
            "RPCClient initialized: service=%s, base_url=%s, timeout=%s",
            self.service_name,
            self.base_url,
            "none" if timeout_seconds is None else f"{timeout_seconds:.1f}s",
        )

    async def close(self) -> None:
        """Close the HTTP client and cleanup resources."""
        await self._client.aclose()
        logger.info("RPCClient closed: base_url=%s", self.base_url)

    async def call(self, endpoint: str, payload: bytes, response_type: type[S]) -> S:
        """
        POST an encoded binary message and decode the reply.

        Args:
            endpoint: RPC path (e.g., /rpc/TranslateText)
            payload: Already-encoded request message
            response_type: Struct type of the expected reply

        Returns:
            The decoded reply message

        Raises:
            RPCTimeoutError: If the call times out
            RPCServiceError: If the worker returns a non-2xx status
            RPCError: For connection failures and undecodable replies
        """
        url = f"{self.base_url}{endpoint}"
        method = endpoint.rsplit("/", 1)[-1]
        start = time.perf_counter()

        try:
            response = await self._client.post(
                endpoint,
                content=payload,
                headers={"Content-Type": RPC_CONTENT_TYPE, "Accept": RPC_CONTENT_TYPE},
            )
            response.raise_for_status()
            result = decode_message(response.content, response_type)

        except httpx.TimeoutException as e:
            logger.warning("RPC timeout for %s after %ss", url, self.timeout_seconds)
            msg = f"Request to {url} timed out"
            raise RPCTimeoutError(msg) from e

        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            logger.warning("RPC service error: %s returned %d", url, status_code)
            msg = f"Service error {status_code} from {url}"
            raise RPCServiceError(msg) from e

        except httpx.TransportError as e:
            logger.warning("RPC connection error for %s: %s", url, e)
            msg = f"Failed to connect to {url}"
            raise RPCError(msg) from e

        except msgspec.DecodeError as e:
            logger.exception("Undecodable reply from %s", url)
            msg = f"Malformed {response_type.__name__} from {url}: {e}"
            raise RPCError(msg) from e

        finally:
            rpc_duration_histogram.labels(
                target_service=self.service_name,
                method=method,
            ).observe(time.perf_counter() - start)

        logger.debug("RPC POST %s succeeded", url)
        return result

    async def get(self, endpoint: str) -> dict[str, Any]:
        """
        Make a GET request to the worker and parse the JSON reply.

        Used for health probes.

        Raises:
            RPCError: If request fails
        """
        url = f"{self.base_url}{endpoint}"

        try:
            logger.debug("RPC GET %s", url)

            response = await self._client.get(endpoint)
            response.raise_for_status()

            result = response.json()
            logger.debug("RPC GET %s succeeded", url)

        except httpx.TimeoutException as e:
            logger.warning("RPC timeout for %s", url)
            msg = f"Request to {url} timed out"
            raise RPCTimeoutError(msg) from e

        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            logger.warning("RPC error: %s returned %d", url, status_code)
            msg = f"HTTP {status_code} from {url}"
            raise RPCServiceError(msg) from e

        except Exception as e:
            logger.warning("Unexpected RPC error for %s: %s", url, e)
            msg = f"Unexpected error calling {url}: {e}"
            raise RPCError(msg) from e
        else:
            return cast("dict[str, Any]", result)
