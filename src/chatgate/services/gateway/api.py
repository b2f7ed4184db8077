"""
Gateway service API

Client-facing JSON endpoints, mounted under /api. Failures are raised as
GatewayError and rendered by the app-level handlers.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from chatgate.config import get_settings
from chatgate.dependencies import get_component
from chatgate.enums import ComponentType
from chatgate.telemetry import record_memory_usage, request_counter

from .batch_runner import BatchRunner
from .orchestrator import Orchestrator
from .schemas import (
    AudioMessageResponse,
    ConcurrentTestRequest,
    ConcurrentTestResponse,
    HealthResponse,
    HistoryResponse,
    LanguagePreferenceResponse,
    LanguagesResponse,
    MetricsResponse,
    SendAudioRequest,
    SendTextRequest,
    SetLanguageRequest,
    SetLanguageResponse,
    TextMessageResponse,
)


logger = logging.getLogger(__name__)
settings = get_settings()
NODE_LABEL = str(settings.node_number)

router = APIRouter()

GatewayDep = Annotated[Orchestrator, Depends(get_component(ComponentType.GATEWAY))]
BatchRunnerDep = Annotated[BatchRunner, Depends(get_component(ComponentType.BATCH_RUNNER))]


def _count(operation: str) -> None:
    request_counter.labels(
        node=NODE_LABEL,
        service="gateway",
        operation=operation,
        status="success",
    ).inc()


@router.post("/users/language")
async def set_language(
    body: SetLanguageRequest,
    orchestrator: GatewayDep,
) -> SetLanguageResponse:
    """Set a user's preferred target language."""
    response = orchestrator.set_language(body.user_id, body.language)
    _count("SetLanguage")
    return response


@router.get("/users/{user_id}/language")
async def get_language(user_id: str, orchestrator: GatewayDep) -> LanguagePreferenceResponse:
    """Get a user's preferred language ('en' when never set)."""
    response = orchestrator.get_language(user_id)
    _count("GetLanguage")
    return response


@router.post("/messages/text")
async def send_text(body: SendTextRequest, orchestrator: GatewayDep) -> TextMessageResponse:
    """Translate a text message via the translation worker."""
    logger.info("POST /api/messages/text user=%s", body.user_id)
    response = await orchestrator.send_text(body)
    _count("SendText")
    return response


@router.post("/messages/audio")
async def send_audio(body: SendAudioRequest, orchestrator: GatewayDep) -> AudioMessageResponse:
    """Process a base64-encoded audio clip via the audio worker."""
    logger.info("POST /api/messages/audio user=%s format=%s", body.user_id, body.audio_format)
    record_memory_usage(settings.node_number, "gateway")
    response = await orchestrator.send_audio(body)
    _count("SendAudio")
    return response


@router.get("/messages/history")
async def get_history(
    orchestrator: GatewayDep,
    user_id: str | None = None,
    limit: Annotated[int | None, Query(description="Most recent entries to return")] = None,
) -> HistoryResponse:
    """Most recent history entries, oldest first."""
    response = orchestrator.get_history(user_id=user_id, limit=limit)
    _count("GetHistory")
    return response


@router.get("/performance/metrics")
async def get_metrics(orchestrator: GatewayDep) -> MetricsResponse:
    """Averages per category and hop, plus speed comparisons."""
    response = orchestrator.get_metrics()
    _count("GetMetrics")
    return response


@router.get("/languages")
async def get_languages(orchestrator: GatewayDep) -> LanguagesResponse:
    """Supported languages, fetched from the translation worker."""
    response = await orchestrator.get_languages()
    _count("GetLanguages")
    return response


@router.post("/test/concurrent")
async def run_concurrent_batch(
    body: ConcurrentTestRequest,
    batch_runner: BatchRunnerDep,
) -> ConcurrentTestResponse:
    """Fire N Translate calls at once and report the join time."""
    response = await batch_runner.run(body.messages)
    _count("RunConcurrentBatch")
    return response


@router.get("/health")
async def health(orchestrator: GatewayDep) -> HealthResponse:
    """Gateway liveness and worker reachability."""
    return await orchestrator.health()
