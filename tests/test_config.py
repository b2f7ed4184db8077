"""
Tests for chatgate configuration and environment variable parsing.

These tests verify that ChatGateSettings derives node roles, parses
environment variables, and validates its constraints.
"""

import os
from unittest.mock import patch

from pydantic import ValidationError
import pytest

from chatgate.config import ChatGateSettings, get_settings
from chatgate.enums import NodeRole


class TestChatGateSettings:
    """Test suite for ChatGateSettings configuration class."""

    def test_default_values(self) -> None:
        """Test that default values are set correctly."""
        settings = ChatGateSettings()
        assert settings.node_0_ip == "localhost:3000"
        assert settings.node_1_ip == "localhost:50051"
        assert settings.node_2_ip == "localhost:50052"
        assert settings.worker_timeout_seconds is None
        assert settings.max_audio_bytes == 50 * 1024 * 1024
        assert settings.max_batch_messages == 1000
        assert settings.fallback_target_language == "es"
        assert settings.default_user_language == "en"

    def test_env_var_parsing(self) -> None:
        """Test that environment variables are correctly parsed."""
        env_vars = {
            "NODE_NUMBER": "1",
            "NODE_0_IP": "192.168.1.100:3000",
            "NODE_1_IP": "192.168.1.101:50051",
            "NODE_2_IP": "192.168.1.102:50052",
            "WORKER_TIMEOUT_SECONDS": "2.5",
            "MAX_AUDIO_BYTES": "1024",
            "MAX_BATCH_MESSAGES": "10",
            "FALLBACK_TARGET_LANGUAGE": "fr",
        }

        with patch.dict(os.environ, env_vars, clear=False):
            settings = ChatGateSettings()
            assert settings.node_number == 1
            assert settings.node_0_ip == "192.168.1.100:3000"
            assert settings.node_1_ip == "192.168.1.101:50051"
            assert settings.node_2_ip == "192.168.1.102:50052"
            assert settings.worker_timeout_seconds == 2.5
            assert settings.max_audio_bytes == 1024
            assert settings.max_batch_messages == 10
            assert settings.fallback_target_language == "fr"

    @pytest.mark.parametrize(
        ("node_number", "role"),
        [("0", NodeRole.GATEWAY), ("1", NodeRole.TRANSLATION), ("2", NodeRole.AUDIO)],
    )
    def test_node_role_derivation(self, node_number: str, role: NodeRole) -> None:
        """Test that each node number maps to its role."""
        with patch.dict(os.environ, {"NODE_NUMBER": node_number}, clear=False):
            assert ChatGateSettings().role == role

    def test_invalid_node_number(self) -> None:
        """Test that validation fails if NODE_NUMBER is not 0, 1, or 2."""
        with patch.dict(os.environ, {"NODE_NUMBER": "3"}, clear=False):
            with pytest.raises(ValidationError) as exc_info:
                ChatGateSettings()

            error = exc_info.value.errors()[0]
            assert "NODE_NUMBER" in error["loc"]

    def test_non_positive_timeout_rejected(self) -> None:
        """Test that a zero worker timeout is rejected."""
        with patch.dict(os.environ, {"WORKER_TIMEOUT_SECONDS": "0"}, clear=False):
            with pytest.raises(ValidationError):
                ChatGateSettings()

    def test_log_level_normalized(self) -> None:
        """Test that log level is uppercased and validated."""
        with patch.dict(os.environ, {"LOG_LEVEL": "debug"}, clear=False):
            assert ChatGateSettings().log_level == "DEBUG"

        with patch.dict(os.environ, {"LOG_LEVEL": "chatty"}, clear=False):
            with pytest.raises(ValidationError):
                ChatGateSettings()

    def test_service_urls(self) -> None:
        """Test that service URL properties are correctly formatted."""
        env_vars = {
            "NODE_0_IP": "gateway.local:3000",
            "NODE_1_IP": "translation.local:50051",
            "NODE_2_IP": "audio.local:50052",
        }

        with patch.dict(os.environ, env_vars, clear=False):
            settings = ChatGateSettings()

            assert settings.gateway_url == "http://gateway.local:3000"
            assert settings.translation_url == "http://translation.local:50051"
            assert settings.audio_url == "http://audio.local:50052"

    def test_listen_host_and_port(self) -> None:
        """Test that a worker node listens on its own address."""
        env_vars = {"NODE_NUMBER": "2", "NODE_2_IP": "10.0.0.3:7002"}

        with patch.dict(os.environ, env_vars, clear=False):
            settings = ChatGateSettings()
            assert settings.listen_host == "10.0.0.3"
            assert settings.listen_port == 7002

    def test_listen_host_default_port(self) -> None:
        """Test that listen_port defaults to 8000 if not in IP string."""
        env_vars = {"NODE_NUMBER": "0", "NODE_0_IP": "localhost"}

        with patch.dict(os.environ, env_vars, clear=False):
            settings = ChatGateSettings()
            assert settings.listen_host == "localhost"
            assert settings.listen_port == 8000

    def test_max_gateway_body_fits_base64_audio(self) -> None:
        """Test that the body limit leaves room for a max-size base64 clip."""
        settings = ChatGateSettings(MAX_AUDIO_BYTES=3000)
        assert settings.max_gateway_body_bytes >= 4000 + settings.audio_json_wrapper_bytes


class TestGetSettings:
    def test_returns_cached_instance(self) -> None:
        assert get_settings() is get_settings()
