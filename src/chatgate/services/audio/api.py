"""
Audio worker API

Binary RPC endpoints called by the gateway, never by clients.
"""

import logging

from fastapi import APIRouter, Request

from chatgate.config import get_settings
from chatgate.services.rpc_server import RPCResponse, read_message
from chatgate.telemetry import request_counter

from .schemas import AudioInfoRequest, ProcessAudioRequest
from .service import AudioService


logger = logging.getLogger(__name__)
settings = get_settings()
NODE_LABEL = str(settings.node_number)

router = APIRouter()
_service = AudioService()


@router.post("/ProcessAudio", response_class=RPCResponse)
async def process_audio(request: Request) -> RPCResponse:
    """Turn an audio clip into a synthetic translated clip."""
    message = await read_message(request, ProcessAudioRequest)
    response = _service.process(message)

    request_counter.labels(
        node=NODE_LABEL,
        service="audio",
        operation="ProcessAudio",
        status="success" if response.success else "error",
    ).inc()
    return RPCResponse(response)


@router.post("/GetAudioInfo", response_class=RPCResponse)
async def get_audio_info(request: Request) -> RPCResponse:
    """Describe an audio clip."""
    message = await read_message(request, AudioInfoRequest)
    request_counter.labels(
        node=NODE_LABEL, service="audio", operation="GetAudioInfo", status="success"
    ).inc()
    return RPCResponse(_service.info(message.audio_data))
