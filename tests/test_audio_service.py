"""
Tests for the audio worker: synthetic audio generation and its RPC endpoints.
"""

from fastapi import FastAPI
from fastapi.testclient import TestClient
import numpy as np

from chatgate.base_schemas import RPC_CONTENT_TYPE, decode_message, encode_message
from chatgate.services.audio import (
    AudioInfoRequest,
    AudioInfoResponse,
    AudioService,
    ProcessAudioRequest,
    ProcessAudioResponse,
    analyze_audio,
    generate_translated_audio,
)


HEADER = b"TRANSLATED_AUDIO:en->es|"


def _request(audio: bytes) -> ProcessAudioRequest:
    return ProcessAudioRequest(
        audio_data=audio,
        audio_format="wav",
        source_language="en",
        target_language="es",
        user_id="u1",
        timestamp=1700000000000,
    )


class TestGenerateTranslatedAudio:
    def test_header_names_language_pair(self) -> None:
        assert generate_translated_audio(b"\x00" * 10, "en", "es").startswith(HEADER)

    def test_short_input_padded_to_minimum(self) -> None:
        output = generate_translated_audio(b"\x00" * 10, "en", "es")
        assert len(output) == len(HEADER) + 1024

    def test_long_input_keeps_length(self) -> None:
        output = generate_translated_audio(b"\x00" * 10240, "en", "es")
        assert len(output) == len(HEADER) + 10240

    def test_waveform_values(self) -> None:
        body = generate_translated_audio(b"", "en", "es")[len(HEADER) :]

        expected = [int(np.floor(128 + 127 * np.sin(i * 0.01))) for i in (0, 1, 157, 471)]
        assert [body[i] for i in (0, 1, 157, 471)] == expected
        assert body[0] == 128

    def test_deterministic(self) -> None:
        assert generate_translated_audio(b"abc", "en", "fr") == generate_translated_audio(
            b"xyz", "en", "fr"
        )


class TestAnalyzeAudio:
    def test_duration_and_defaults(self) -> None:
        info = analyze_audio(b"\x00" * 44100)

        assert info.duration_ms == 1000
        assert info.sample_rate == 44100
        assert info.channels == 2
        assert info.bit_depth == 16
        assert info.size_bytes == 44100
        assert info.format == "wav"

    def test_duration_is_floored(self) -> None:
        assert analyze_audio(b"\x00" * 100).duration_ms == 2


class TestAudioService:
    def test_process_reports_sizes(self) -> None:
        response = AudioService().process(_request(b"\x01" * 2048))

        assert response.success is True
        assert response.original_size == 2048
        assert response.processed_size == len(HEADER) + 2048
        assert len(response.translated_audio) == response.processed_size

    def test_empty_format_defaults_to_wav(self) -> None:
        request = _request(b"\x01")
        request.audio_format = ""

        assert AudioService().process(request).audio_format == "wav"


class TestAudioRPC:
    def test_process_audio(self, audio_app: FastAPI) -> None:
        with TestClient(audio_app) as client:
            response = client.post(
                "/rpc/ProcessAudio",
                content=encode_message(_request(b"\x02" * 4096)),
                headers={"Content-Type": RPC_CONTENT_TYPE},
            )

        assert response.status_code == 200
        reply = decode_message(response.content, ProcessAudioResponse)
        assert reply.success is True
        assert reply.translated_audio.startswith(HEADER)
        assert reply.processed_size == len(HEADER) + 4096

    def test_get_audio_info(self, audio_app: FastAPI) -> None:
        with TestClient(audio_app) as client:
            response = client.post(
                "/rpc/GetAudioInfo",
                content=encode_message(AudioInfoRequest(audio_data=b"\x00" * 441)),
                headers={"Content-Type": RPC_CONTENT_TYPE},
            )

        reply = decode_message(response.content, AudioInfoResponse)
        assert reply.duration_ms == 10
        assert reply.size_bytes == 441
