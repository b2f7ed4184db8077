"""
Audio worker module.

Synthetic audio "translation" served over the binary RPC protocol.
"""

from .api import router
from .schemas import (
    AudioInfoRequest,
    AudioInfoResponse,
    ProcessAudioRequest,
    ProcessAudioResponse,
)
from .service import AudioService, analyze_audio, generate_translated_audio


__all__ = [
    "AudioInfoRequest",
    "AudioInfoResponse",
    "AudioService",
    "ProcessAudioRequest",
    "ProcessAudioResponse",
    "analyze_audio",
    "generate_translated_audio",
    "router",
]
