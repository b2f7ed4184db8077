"""
Synthetic audio processing used by the audio worker.

There is no speech processing: every request yields a reproducible
sine-pattern waveform behind a header naming the language pair.
"""

import logging
import time

import numpy as np

from .schemas import AudioInfoResponse, ProcessAudioRequest, ProcessAudioResponse


logger = logging.getLogger(__name__)

MIN_SYNTHETIC_BYTES = 1024
DEFAULT_SAMPLE_RATE = 44100
DEFAULT_CHANNELS = 2
DEFAULT_BIT_DEPTH = 16


def synthetic_header(source_language: str, target_language: str) -> bytes:
    return f"TRANSLATED_AUDIO:{source_language}->{target_language}|".encode()


def generate_translated_audio(
    original_audio: bytes, source_language: str, target_language: str
) -> bytes:
    """
    Build the synthetic "translated" clip.

    Output length is ``len(header) + max(len(original_audio), 1024)``; the
    body is ``floor(128 + 127 * sin(i * 0.01))`` for each byte index ``i``.
    """
    size = max(len(original_audio), MIN_SYNTHETIC_BYTES)
    wave = np.floor(128 + 127 * np.sin(np.arange(size, dtype=np.float64) * 0.01))
    return synthetic_header(source_language, target_language) + wave.astype(np.uint8).tobytes()


def analyze_audio(audio_data: bytes) -> AudioInfoResponse:
    """Describe a clip assuming 44.1kHz stereo 16-bit wav."""
    return AudioInfoResponse(
        format="wav",
        duration_ms=int(len(audio_data) / 44.1),
        sample_rate=DEFAULT_SAMPLE_RATE,
        channels=DEFAULT_CHANNELS,
        bit_depth=DEFAULT_BIT_DEPTH,
        size_bytes=len(audio_data),
    )


class AudioService:
    """
    Handles audio RPCs.

    Faults inside a handler are reported in the response (success=False).
    """

    def process(self, request: ProcessAudioRequest) -> ProcessAudioResponse:
        start = time.perf_counter()
        audio_format = request.audio_format or "wav"
        logger.info(
            "ProcessAudio: user_id=%s, format=%s, %s -> %s, size=%d bytes",
            request.user_id,
            audio_format,
            request.source_language,
            request.target_language,
            len(request.audio_data),
        )

        try:
            translated = generate_translated_audio(
                request.audio_data, request.source_language, request.target_language
            )
        except Exception as e:
            logger.exception("Audio processing failed for user_id=%s", request.user_id)
            return ProcessAudioResponse(
                translated_audio=b"",
                audio_format=audio_format,
                source_language=request.source_language,
                target_language=request.target_language,
                success=False,
                error_message=str(e),
                processing_time_ms=(time.perf_counter() - start) * 1000,
                original_size=len(request.audio_data),
                processed_size=0,
            )

        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(
            "Audio processed: original=%d bytes, processed=%d bytes, time=%.3fms",
            len(request.audio_data),
            len(translated),
            elapsed_ms,
        )
        return ProcessAudioResponse(
            translated_audio=translated,
            audio_format=audio_format,
            source_language=request.source_language,
            target_language=request.target_language,
            success=True,
            processing_time_ms=elapsed_ms,
            original_size=len(request.audio_data),
            processed_size=len(translated),
        )

    def info(self, audio_data: bytes) -> AudioInfoResponse:
        return analyze_audio(audio_data)
