"""
Translation worker API

Binary RPC endpoints called by the gateway, never by clients.
"""

import logging

from fastapi import APIRouter, Request

from chatgate.config import get_settings
from chatgate.services.rpc_server import RPCResponse, read_message
from chatgate.telemetry import request_counter

from .schemas import SupportedLanguagesRequest, SupportedLanguagesResponse, TranslateRequest
from .service import TranslationService


logger = logging.getLogger(__name__)
settings = get_settings()
NODE_LABEL = str(settings.node_number)

router = APIRouter()
_service = TranslationService()


@router.post("/TranslateText", response_class=RPCResponse)
async def translate_text(request: Request) -> RPCResponse:
    """Translate one text message."""
    message = await read_message(request, TranslateRequest)
    response = _service.translate(message)

    request_counter.labels(
        node=NODE_LABEL,
        service="translation",
        operation="TranslateText",
        status="success" if response.success else "error",
    ).inc()
    return RPCResponse(response)


@router.post("/GetSupportedLanguages", response_class=RPCResponse)
async def get_supported_languages(request: Request) -> RPCResponse:
    """Return the fixed list of supported languages."""
    await read_message(request, SupportedLanguagesRequest)
    request_counter.labels(
        node=NODE_LABEL,
        service="translation",
        operation="GetSupportedLanguages",
        status="success",
    ).inc()
    return RPCResponse(SupportedLanguagesResponse(languages=_service.supported_languages()))
