"""
Binary message schemas for the audio worker.

Audio travels as raw bytes; no base64 step on this hop.
"""

from chatgate.base_schemas import RPCStruct


class ProcessAudioRequest(RPCStruct):
    """Request sent by the gateway to /rpc/ProcessAudio."""

    audio_data: bytes
    audio_format: str
    source_language: str
    target_language: str
    user_id: str
    timestamp: int  # epoch milliseconds at the gateway
    sample_rate: int = 44100
    channels: int = 2


class ProcessAudioResponse(RPCStruct):
    """Response from /rpc/ProcessAudio."""

    translated_audio: bytes
    audio_format: str
    source_language: str
    target_language: str
    success: bool
    error_message: str = ""
    processing_time_ms: float = 0.0
    original_size: int = 0
    processed_size: int = 0


class AudioInfoRequest(RPCStruct):
    audio_data: bytes


class AudioInfoResponse(RPCStruct):
    format: str
    duration_ms: int
    sample_rate: int
    channels: int
    bit_depth: int
    size_bytes: int
