"""
Pydantic schemas for the gateway's client-facing (text protocol) API.
"""

from datetime import datetime
from typing import Any

from pydantic import Field, StrictInt

from chatgate.base_schemas import BaseJSONModel
from chatgate.components.schemas import HistoryEntry


# === Requests ===


class SetLanguageRequest(BaseJSONModel):
    """Body of POST /api/users/language."""

    user_id: str | None = Field(None, description="User whose preference is set")
    language: str | None = Field(None, description="Preferred language code")


class SendTextRequest(BaseJSONModel):
    """Body of POST /api/messages/text. Emptiness is checked by the orchestrator."""

    user_id: str | None = Field(None, description="Sender")
    text: str | None = Field(None, description="Message text")
    source_language: str | None = Field(None, description="Defaults to 'en'")
    target_language: str | None = Field(
        None, description="Defaults to the user's preference, then 'es'"
    )


class SendAudioRequest(BaseJSONModel):
    """Body of POST /api/messages/audio."""

    user_id: str | None = Field(None, description="Sender")
    audio_data: str | None = Field(None, description="Base64-encoded audio clip")
    audio_format: str = Field("wav", description="Container format of the clip")
    source_language: str | None = Field(None, description="Defaults to 'en'")
    target_language: str | None = Field(
        None, description="Defaults to the user's preference, then 'es'"
    )


class ConcurrentTestRequest(BaseJSONModel):
    """Body of POST /api/test/concurrent."""

    messages: StrictInt = Field(5, description="Number of concurrent Translate calls")


# === Responses ===


class SetLanguageResponse(BaseJSONModel):
    success: bool = True
    user_id: str
    language: str
    message: str


class LanguagePreferenceResponse(BaseJSONModel):
    success: bool = True
    user_id: str
    language: str


class PerformanceBlock(BaseJSONModel):
    """Timing and size data for one exchange, both hops."""

    total_response_time_ms: float
    worker_service_time_ms: float
    gateway_overhead_ms: float
    clock_anomaly: bool = Field(
        False, description="True when the overhead was negative and clamped to 0"
    )
    gateway_payload_size: int
    worker_payload_size: int = Field(..., description="Estimated binary payload size")
    measured_worker_payload_size: int = Field(
        ..., description="Actual encoded size of the outbound binary message"
    )
    size_reduction: str


class AudioPerformanceBlock(PerformanceBlock):
    note: str


class TextContent(BaseJSONModel):
    text: str
    language: str


class TextMessageResponse(BaseJSONModel):
    success: bool = True
    message_id: str
    original: TextContent
    translated: TextContent
    performance: PerformanceBlock


class OriginalAudio(BaseJSONModel):
    size: int
    format: str
    language: str


class ProcessedAudio(BaseJSONModel):
    audio_data: str = Field(..., description="Base64-encoded synthetic audio")
    size: int
    format: str
    language: str


class AudioMessageResponse(BaseJSONModel):
    success: bool = True
    message_id: str
    original: OriginalAudio
    processed: ProcessedAudio
    performance: AudioPerformanceBlock


class HistoryResponse(BaseJSONModel):
    success: bool = True
    count: int
    messages: list[HistoryEntry]


class HopMetrics(BaseJSONModel):
    avg_response_time_ms: float
    avg_payload_size: float
    sample_count: int


class CategoryMetrics(BaseJSONModel):
    gateway: HopMetrics
    worker: HopMetrics


class MetricsAnalysis(BaseJSONModel):
    text_speed_improvement: str
    audio_speed_improvement: str
    recommendation: str


class PerformanceMetrics(BaseJSONModel):
    text: CategoryMetrics
    audio: CategoryMetrics
    analysis: MetricsAnalysis


class MetricsResponse(BaseJSONModel):
    success: bool = True
    metrics: PerformanceMetrics


class LanguageInfo(BaseJSONModel):
    code: str
    name: str


class LanguagesResponse(BaseJSONModel):
    success: bool = True
    languages: list[LanguageInfo]


class BatchResult(BaseJSONModel):
    index: int = Field(..., description="1-based position in the batch")
    translated_text: str
    elapsed_ms: float = Field(..., description="Gateway-observed time for this call")
    worker_processing_ms: float = Field(..., description="Worker-reported processing time")


class ConcurrentTestResponse(BaseJSONModel):
    success: bool = True
    messages_processed: int
    total_time_ms: float
    avg_time_per_message_ms: float
    results: list[BatchResult]


class HealthResponse(BaseJSONModel):
    success: bool = True
    status: str = Field(..., description="'healthy' or 'degraded'")
    services: dict[str, dict[str, Any]]
    timestamp: datetime


class ErrorResponse(BaseJSONModel):
    success: bool = False
    error_kind: str
    error: str
    details: Any = None
