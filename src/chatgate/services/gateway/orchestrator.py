"""
Orchestrator for one client request end to end.

Takes a text-protocol request, forwards it to the right worker over the
binary protocol, and correlates timings and payload sizes across both hops.
"""

import base64
import binascii
from datetime import datetime, timezone
import json
import logging
import math
import time
from typing import Any

from opentelemetry import trace

from chatgate.base_schemas import S, RPCStruct, encode_message, json_size
from chatgate.components import (
    AudioHistoryEntry,
    MetricsRecorder,
    PerformanceSample,
    SessionStore,
    TextHistoryEntry,
)
from chatgate.components.metrics_recorder import AggregateMetrics, HopAggregate
from chatgate.config import ChatGateSettings, get_settings
from chatgate.enums import Hop, MessageKind, ServiceEndpoint
from chatgate.services.audio.schemas import ProcessAudioRequest, ProcessAudioResponse
from chatgate.services.translation.schemas import (
    SupportedLanguagesRequest,
    SupportedLanguagesResponse,
    TranslateRequest,
    TranslateResponse,
)

from .errors import (
    GatewayError,
    PayloadTooLargeError,
    RequestValidationFailed,
    WorkerUnavailableError,
)
from .metrics import hop_latency_histogram, hop_payload_histogram
from .rpc_client import RPCClient, RPCError
from .schemas import (
    AudioMessageResponse,
    AudioPerformanceBlock,
    CategoryMetrics,
    HealthResponse,
    HistoryResponse,
    HopMetrics,
    LanguageInfo,
    LanguagePreferenceResponse,
    LanguagesResponse,
    MetricsAnalysis,
    MetricsResponse,
    OriginalAudio,
    PerformanceBlock,
    PerformanceMetrics,
    ProcessedAudio,
    SendAudioRequest,
    SendTextRequest,
    SetLanguageResponse,
    TextContent,
    TextMessageResponse,
)

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

AUDIO_NOTE = (
    "The text protocol must base64-encode audio (+33% size); "
    "the binary protocol sends raw bytes"
)
RECOMMENDATION = "Use the binary RPC protocol for service-to-service communication"


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000


def _now_ms() -> int:
    return int(time.time() * 1000)


def size_reduction(gateway_size: int, worker_size: int) -> str:
    """Percentage saved by the worker hop, formatted to one decimal."""
    if gateway_size <= 0:
        return "0.0%"
    return f"{(1 - worker_size / gateway_size) * 100:.1f}%"


def _hop_metrics(aggregate: HopAggregate) -> HopMetrics:
    return HopMetrics(
        avg_response_time_ms=round(aggregate.avg_response_time_ms, 2),
        avg_payload_size=round(aggregate.avg_payload_size),
        sample_count=aggregate.sample_count,
    )


def _category_metrics(snapshot: AggregateMetrics, category: MessageKind) -> CategoryMetrics:
    return CategoryMetrics(
        gateway=_hop_metrics(snapshot.get(category, Hop.GATEWAY)),
        worker=_hop_metrics(snapshot.get(category, Hop.WORKER)),
    )


class Orchestrator:
    """
    Gateway core: validation, worker calls, history and performance samples.

    Every public operation raises only GatewayError subclasses.
    """

    def __init__(
        self,
        translation_client: RPCClient,
        audio_client: RPCClient,
        session_store: SessionStore,
        metrics_recorder: MetricsRecorder,
        settings: ChatGateSettings | None = None,
    ) -> None:
        self.translation_client = translation_client
        self.audio_client = audio_client
        self.session_store = session_store
        self.metrics_recorder = metrics_recorder
        self.settings = settings or get_settings()

    # === Session operations ===

    def set_language(self, user_id: str | None, language: str | None) -> SetLanguageResponse:
        if not user_id or not language:
            raise RequestValidationFailed("user_id and language are required")

        self.session_store.set_language(user_id, language)
        return SetLanguageResponse(
            user_id=user_id,
            language=language,
            message=f"Language preference set to {language}",
        )

    def get_language(self, user_id: str) -> LanguagePreferenceResponse:
        return LanguagePreferenceResponse(
            user_id=user_id,
            language=self.session_store.get_language(user_id),
        )

    def get_history(self, user_id: str | None = None, limit: int | None = None) -> HistoryResponse:
        if limit is None:
            limit = self.settings.history_default_limit
        try:
            entries = self.session_store.query_history(user_id=user_id, limit=limit)
        except ValueError as e:
            raise RequestValidationFailed(str(e)) from e
        return HistoryResponse(count=len(entries), messages=entries)

    def _resolve_target(self, user_id: str, explicit: str | None) -> str:
        if explicit:
            return explicit
        return self.session_store.get_preference(user_id) or self.settings.fallback_target_language

    # === Worker calls ===

    async def _call_worker(
        self,
        client: RPCClient,
        endpoint: ServiceEndpoint,
        message: RPCStruct,
        response_type: type[S],
    ) -> tuple[S, float, int]:
        """
        Encode ``message``, then time only the RPC itself.

        Returns:
            (reply, worker elapsed ms, encoded request size)

        Raises:
            WorkerUnavailableError: If the call fails at the transport level
        """
        payload = encode_message(message)

        with tracer.start_as_current_span(
            f"gateway.call_{client.service_name}",
            attributes={
                "chatgate.service": "gateway",
                "chatgate.rpc.method": endpoint.value,
                "chatgate.rpc.request_bytes": len(payload),
            },
        ):
            start = time.perf_counter()
            try:
                reply = await client.call(endpoint.value, payload, response_type)
            except RPCError as e:
                logger.error("Worker call %s failed: %s", endpoint.value, e)
                raise WorkerUnavailableError(
                    f"{client.service_name.capitalize()} service unavailable",
                    details=str(e),
                ) from e
            worker_ms = _elapsed_ms(start)

        return reply, worker_ms, len(payload)

    def _finish_exchange(
        self,
        category: MessageKind,
        start: float,
        worker_ms: float,
        gateway_size: int,
        worker_size: int,
    ) -> dict[str, Any]:
        """Record both hop samples and build the shared performance fields."""
        total_ms = _elapsed_ms(start)
        overhead_ms = total_ms - worker_ms
        clock_anomaly = overhead_ms < 0
        if clock_anomaly:
            logger.warning(
                "Negative gateway overhead (total=%.3fms, worker=%.3fms); clamping to 0",
                total_ms,
                worker_ms,
            )
            overhead_ms = 0.0

        self.metrics_recorder.record_exchange(
            category,
            PerformanceSample(elapsed_ms=total_ms, payload_size_bytes=gateway_size),
            PerformanceSample(elapsed_ms=worker_ms, payload_size_bytes=worker_size),
        )

        hop_latency_histogram.labels(hop=Hop.GATEWAY.value, category=category.value).observe(
            total_ms / 1000
        )
        hop_latency_histogram.labels(hop=Hop.WORKER.value, category=category.value).observe(
            worker_ms / 1000
        )
        hop_payload_histogram.labels(hop=Hop.GATEWAY.value, category=category.value).observe(
            gateway_size
        )
        hop_payload_histogram.labels(hop=Hop.WORKER.value, category=category.value).observe(
            worker_size
        )

        return {
            "total_response_time_ms": round(total_ms, 3),
            "worker_service_time_ms": round(worker_ms, 3),
            "gateway_overhead_ms": round(overhead_ms, 3),
            "clock_anomaly": clock_anomaly,
            "gateway_payload_size": gateway_size,
            "worker_payload_size": worker_size,
            "size_reduction": size_reduction(gateway_size, worker_size),
        }

    # === Messages ===

    async def send_text(self, request: SendTextRequest) -> TextMessageResponse:
        """
        Translate one text message through the translation worker.

        Raises:
            RequestValidationFailed: If user_id or text is missing
            WorkerUnavailableError: If the worker fails or reports success=false
        """
        start = time.perf_counter()
        try:
            return await self._send_text(request, start)
        except GatewayError:
            raise
        except Exception as e:
            logger.exception("Unexpected error while sending text message")
            raise WorkerUnavailableError("Translation failed", details=str(e)) from e

    async def _send_text(self, request: SendTextRequest, start: float) -> TextMessageResponse:
        if not request.user_id or not request.text:
            raise RequestValidationFailed("user_id and text are required")

        user_id = request.user_id
        text = request.text
        source = request.source_language or self.settings.default_source_language
        target = self._resolve_target(user_id, request.target_language)

        gateway_size = json_size(
            {
                "user_id": user_id,
                "text": text,
                "source_language": source,
                "target_language": target,
            }
        )
        worker_size = math.floor(gateway_size * self.settings.text_worker_size_ratio)

        with tracer.start_as_current_span(
            "gateway.send_text",
            attributes={
                "chatgate.user_id": user_id,
                "chatgate.source_language": source,
                "chatgate.target_language": target,
            },
        ):
            reply, worker_ms, measured_size = await self._call_worker(
                self.translation_client,
                ServiceEndpoint.TRANSLATE_TEXT,
                TranslateRequest(
                    text=text,
                    source_language=source,
                    target_language=target,
                    user_id=user_id,
                    timestamp=_now_ms(),
                ),
                TranslateResponse,
            )

        if not reply.success:
            logger.error("Translation worker reported failure: %s", reply.error_message)
            raise WorkerUnavailableError(
                "Translation service unavailable", details=reply.error_message
            )

        entry = TextHistoryEntry(
            user_id=user_id,
            source_language=source,
            target_language=target,
            original_text=text,
            translated_text=reply.translated_text,
        )
        self.session_store.append_history(entry)

        performance = self._finish_exchange(
            MessageKind.TEXT, start, worker_ms, gateway_size, worker_size
        )
        logger.info(
            json.dumps(
                {
                    "event": "exchange_completed",
                    "category": MessageKind.TEXT.value,
                    "message_id": entry.id,
                    **performance,
                    "measured_worker_payload_size": measured_size,
                }
            )
        )

        return TextMessageResponse(
            message_id=entry.id,
            original=TextContent(text=text, language=source),
            translated=TextContent(text=reply.translated_text, language=target),
            performance=PerformanceBlock(
                **performance, measured_worker_payload_size=measured_size
            ),
        )

    async def send_audio(self, request: SendAudioRequest) -> AudioMessageResponse:
        """
        Process one audio clip through the audio worker.

        Raises:
            RequestValidationFailed: If user_id or audio is missing or not valid base64
            PayloadTooLargeError: If the decoded clip exceeds MAX_AUDIO_BYTES
            WorkerUnavailableError: If the worker fails or reports success=false
        """
        start = time.perf_counter()
        try:
            return await self._send_audio(request, start)
        except GatewayError:
            raise
        except Exception as e:
            logger.exception("Unexpected error while sending audio message")
            raise WorkerUnavailableError("Audio processing failed", details=str(e)) from e

    async def _send_audio(self, request: SendAudioRequest, start: float) -> AudioMessageResponse:
        if not request.user_id or not request.audio_data:
            raise RequestValidationFailed("user_id and audio_data are required")

        try:
            raw = base64.b64decode(request.audio_data, validate=True)
        except (binascii.Error, ValueError) as e:
            raise RequestValidationFailed("audio_data is not valid base64", details=str(e)) from e

        if not raw:
            raise RequestValidationFailed("audio_data decodes to an empty clip")

        if len(raw) > self.settings.max_audio_bytes:
            raise PayloadTooLargeError(
                f"Audio clip of {len(raw)} bytes exceeds the limit of "
                f"{self.settings.max_audio_bytes} bytes",
                details={"size": len(raw), "limit": self.settings.max_audio_bytes},
            )

        user_id = request.user_id
        source = request.source_language or self.settings.default_source_language
        target = self._resolve_target(user_id, request.target_language)

        gateway_size = len(base64.b64encode(raw)) + self.settings.audio_json_wrapper_bytes
        worker_size = len(raw) + self.settings.audio_binary_framing_bytes

        with tracer.start_as_current_span(
            "gateway.send_audio",
            attributes={
                "chatgate.user_id": user_id,
                "chatgate.audio_bytes": len(raw),
                "chatgate.audio_format": request.audio_format,
            },
        ):
            reply, worker_ms, measured_size = await self._call_worker(
                self.audio_client,
                ServiceEndpoint.PROCESS_AUDIO,
                ProcessAudioRequest(
                    audio_data=raw,
                    audio_format=request.audio_format,
                    source_language=source,
                    target_language=target,
                    user_id=user_id,
                    timestamp=_now_ms(),
                ),
                ProcessAudioResponse,
            )

        if not reply.success:
            logger.error("Audio worker reported failure: %s", reply.error_message)
            raise WorkerUnavailableError("Audio service unavailable", details=reply.error_message)

        entry = AudioHistoryEntry(
            user_id=user_id,
            source_language=source,
            target_language=target,
            original_size_bytes=len(raw),
            processed_size_bytes=reply.processed_size,
        )
        self.session_store.append_history(entry)

        performance = self._finish_exchange(
            MessageKind.AUDIO, start, worker_ms, gateway_size, worker_size
        )
        logger.info(
            json.dumps(
                {
                    "event": "exchange_completed",
                    "category": MessageKind.AUDIO.value,
                    "message_id": entry.id,
                    **performance,
                    "measured_worker_payload_size": measured_size,
                }
            )
        )

        return AudioMessageResponse(
            message_id=entry.id,
            original=OriginalAudio(size=len(raw), format=request.audio_format, language=source),
            processed=ProcessedAudio(
                audio_data=base64.b64encode(reply.translated_audio).decode("ascii"),
                size=reply.processed_size,
                format=reply.audio_format,
                language=target,
            ),
            performance=AudioPerformanceBlock(
                **performance,
                measured_worker_payload_size=measured_size,
                note=AUDIO_NOTE,
            ),
        )

    # === Reporting ===

    def get_metrics(self) -> MetricsResponse:
        snapshot = self.metrics_recorder.snapshot()
        return MetricsResponse(
            metrics=PerformanceMetrics(
                text=_category_metrics(snapshot, MessageKind.TEXT),
                audio=_category_metrics(snapshot, MessageKind.AUDIO),
                analysis=MetricsAnalysis(
                    text_speed_improvement=snapshot.speed_improvement(MessageKind.TEXT),
                    audio_speed_improvement=snapshot.speed_improvement(MessageKind.AUDIO),
                    recommendation=RECOMMENDATION,
                ),
            )
        )

    async def get_languages(self) -> LanguagesResponse:
        """
        Fetch the supported languages from the translation worker.

        Raises:
            WorkerUnavailableError: If the worker cannot be reached
        """
        try:
            reply, _, _ = await self._call_worker(
                self.translation_client,
                ServiceEndpoint.SUPPORTED_LANGUAGES,
                SupportedLanguagesRequest(),
                SupportedLanguagesResponse,
            )
        except GatewayError:
            raise
        except Exception as e:
            logger.exception("Unexpected error while fetching languages")
            raise WorkerUnavailableError("Failed to fetch languages", details=str(e)) from e

        return LanguagesResponse(
            languages=[LanguageInfo(code=lang.code, name=lang.name) for lang in reply.languages]
        )

    async def _probe(self, client: RPCClient) -> dict[str, Any]:
        try:
            await client.get(ServiceEndpoint.HEALTH.value)
        except RPCError as e:
            logger.warning("Health probe to %s failed: %s", client.base_url, e)
            return {"url": client.base_url, "reachable": False, "error": str(e)}
        return {"url": client.base_url, "reachable": True}

    async def health(self) -> HealthResponse:
        """Liveness plus worker reachability. Never raises for an unreachable worker."""
        translation = await self._probe(self.translation_client)
        audio = await self._probe(self.audio_client)
        healthy = translation["reachable"] and audio["reachable"]

        return HealthResponse(
            status="healthy" if healthy else "degraded",
            services={
                "gateway": {"status": "running"},
                "translation": translation,
                "audio": audio,
            },
            timestamp=datetime.now(timezone.utc),
        )
