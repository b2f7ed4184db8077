"""
Concurrent batch runner for load-testing the translation worker.

Fans out N Translate calls at once and joins them all-or-nothing. Batch
calls never touch history or the performance samples.
"""

import asyncio
from dataclasses import dataclass
import json
import logging
import time

from opentelemetry import trace

from chatgate.base_schemas import encode_message
from chatgate.config import ChatGateSettings, get_settings
from chatgate.enums import ServiceEndpoint
from chatgate.services.translation.schemas import TranslateRequest, TranslateResponse

from .errors import BatchPartialFailureError, RequestValidationFailed
from .metrics import batch_size_histogram
from .rpc_client import RPCClient, RPCError
from .schemas import BatchResult, ConcurrentTestResponse


logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

BATCH_SOURCE_LANGUAGE = "en"
BATCH_TARGET_LANGUAGE = "es"


class BatchItemError(Exception):
    """One call in a batch failed; carries its 1-based index."""

    def __init__(self, index: int, reason: str) -> None:
        super().__init__(f"Message {index} failed: {reason}")
        self.index = index
        self.reason = reason


@dataclass
class _ItemOutcome:
    index: int
    reply: TranslateResponse
    elapsed_ms: float


class BatchRunner:
    """
    Runs a batch of synthetic Translate calls concurrently.
    """

    def __init__(
        self,
        translation_client: RPCClient,
        settings: ChatGateSettings | None = None,
    ) -> None:
        self.translation_client = translation_client
        self.settings = settings or get_settings()

    def _validate_count(self, count: object) -> int:
        limit = self.settings.max_batch_messages
        if isinstance(count, bool) or not isinstance(count, int):
            raise RequestValidationFailed(f"messages must be an integer (got {count!r})")
        if not 1 <= count <= limit:
            raise RequestValidationFailed(
                f"messages must be between 1 and {limit} (got {count})",
                details={"messages": count, "max": limit},
            )
        return count

    async def _run_one(self, index: int) -> _ItemOutcome:
        message = TranslateRequest(
            text=f"Test message {index}",
            source_language=BATCH_SOURCE_LANGUAGE,
            target_language=BATCH_TARGET_LANGUAGE,
            user_id=f"test-user-{index}",
            timestamp=int(time.time() * 1000),
        )
        payload = encode_message(message)

        start = time.perf_counter()
        try:
            reply = await self.translation_client.call(
                ServiceEndpoint.TRANSLATE_TEXT.value, payload, TranslateResponse
            )
        except RPCError as e:
            raise BatchItemError(index, str(e)) from e
        except Exception as e:
            logger.exception("Unexpected error in batch message %d", index)
            raise BatchItemError(index, str(e)) from e
        elapsed_ms = (time.perf_counter() - start) * 1000

        if not reply.success:
            raise BatchItemError(index, reply.error_message or "worker reported failure")
        return _ItemOutcome(index=index, reply=reply, elapsed_ms=elapsed_ms)

    async def run(self, count: int) -> ConcurrentTestResponse:
        """
        Launch ``count`` Translate calls concurrently and wait for all of them.

        Raises:
            RequestValidationFailed: If count is not within 1..MAX_BATCH_MESSAGES
            BatchPartialFailureError: If any call fails; carries the lowest
                failing index
        """
        count = self._validate_count(count)
        batch_size_histogram.observe(count)
        logger.info("Starting concurrent batch of %d messages", count)

        start = time.perf_counter()
        with tracer.start_as_current_span(
            "gateway.concurrent_batch",
            attributes={"chatgate.batch_size": count},
        ):
            settled = await asyncio.gather(
                *(self._run_one(index) for index in range(1, count + 1)),
                return_exceptions=True,
            )
        total_ms = (time.perf_counter() - start) * 1000

        outcomes: list[_ItemOutcome] = []
        failures: list[BatchItemError] = []
        for result in settled:
            if isinstance(result, BatchItemError):
                failures.append(result)
            elif isinstance(result, BaseException):
                raise result
            else:
                outcomes.append(result)

        if failures:
            first = min(failures, key=lambda failure: failure.index)
            logger.error(
                "Concurrent batch failed: %d of %d messages, first at message %d: %s",
                len(failures),
                count,
                first.index,
                first.reason,
            )
            raise BatchPartialFailureError(
                f"Batch failed at message {first.index}",
                failed_index=first.index,
                details={
                    "failed_index": first.index,
                    "reason": first.reason,
                    "failed_count": len(failures),
                },
            ) from first

        logger.info(
            json.dumps(
                {
                    "event": "batch_completed",
                    "size": count,
                    "latency_ms": round(total_ms, 2),
                    "avg_latency_ms": round(total_ms / count, 2),
                }
            )
        )

        return ConcurrentTestResponse(
            messages_processed=count,
            total_time_ms=round(total_ms, 3),
            avg_time_per_message_ms=round(total_ms / count, 3),
            results=[
                BatchResult(
                    index=outcome.index,
                    translated_text=outcome.reply.translated_text,
                    elapsed_ms=round(outcome.elapsed_ms, 3),
                    worker_processing_ms=outcome.reply.processing_time_ms,
                )
                for outcome in outcomes
            ],
        )
