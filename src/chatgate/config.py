"""
Configuration management for the chat gateway and its workers.

This module uses Pydantic Settings to load configuration from environment
variables (and an optional .env file).
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .enums import NodeRole, derive_node_role


MIB = 1024 * 1024


class ChatGateSettings(BaseSettings):
    """
    Central configuration shared by the gateway and worker nodes.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
        populate_by_name=True,
    )

    # === Node Configuration ===
    node_number: int = Field(
        default=0,
        alias="NODE_NUMBER",
        description="This node's number: 0=gateway, 1=translation, 2=audio",
    )

    node_0_ip: str = Field(
        default="localhost:3000",
        alias="NODE_0_IP",
        description="host:port of the gateway",
    )

    node_1_ip: str = Field(
        default="localhost:50051",
        alias="NODE_1_IP",
        description="host:port of the translation worker",
    )

    node_2_ip: str = Field(
        default="localhost:50052",
        alias="NODE_2_IP",
        description="host:port of the audio worker",
    )

    # === Worker RPC ===
    worker_timeout_seconds: float | None = Field(
        default=None,
        alias="WORKER_TIMEOUT_SECONDS",
        gt=0,
        description="Per-call timeout for worker RPCs; unset means no timeout",
    )

    # === Gateway Limits ===
    max_audio_bytes: int = Field(
        default=50 * MIB,
        alias="MAX_AUDIO_BYTES",
        ge=1,
        description="Largest raw audio blob accepted by the gateway",
    )

    max_batch_messages: int = Field(
        default=1000,
        alias="MAX_BATCH_MESSAGES",
        ge=1,
        description="Upper bound on messages in one concurrent batch run",
    )

    history_default_limit: int = Field(
        default=50,
        ge=1,
        description="Number of history entries returned when no limit is given",
    )

    # === Language Defaults ===
    default_source_language: str = Field(
        default="en",
        description="Source language used when a request omits it",
    )

    fallback_target_language: str = Field(
        default="es",
        alias="FALLBACK_TARGET_LANGUAGE",
        description="Target language when neither request nor user preference has one",
    )

    default_user_language: str = Field(
        default="en",
        description="Language reported for users without a stored preference",
    )

    # === Payload Size Estimation (Do Not Change) ===
    text_worker_size_ratio: float = Field(
        default=0.6,
        gt=0.0,
        lt=1.0,
        description="Estimated binary/JSON size ratio for text messages",
    )

    audio_json_wrapper_bytes: int = Field(
        default=200,
        ge=0,
        description="Approximate JSON envelope around base64 audio",
    )

    audio_binary_framing_bytes: int = Field(
        default=50,
        ge=0,
        description="Approximate binary framing around raw audio",
    )

    # === Logging & Telemetry ===
    log_level: str = Field(
        default="INFO",
        alias="LOG_LEVEL",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    enable_tracing: bool = Field(
        default=True,
        alias="ENABLE_TRACING",
        description="If true, emit OpenTelemetry spans for gateway and worker calls",
    )

    otel_exporter_endpoint: str = Field(
        default="http://127.0.0.1:4317",
        alias="OTEL_EXPORTER_OTLP_ENDPOINT",
        description="OTLP gRPC endpoint for exporting traces; empty exports to stdout",
    )

    otel_exporter_insecure: bool = Field(
        default=True,
        alias="OTEL_EXPORTER_OTLP_INSECURE",
        description="Use insecure (non-TLS) connection for OTLP exporter",
    )

    # Computed properties
    @property
    def role(self) -> NodeRole:
        """Derive this node's role from its node_number."""
        return derive_node_role(self.node_number)

    @property
    def node_ips(self) -> dict[int, str]:
        """Map of node numbers to their addresses."""
        return {
            0: self.node_0_ip,
            1: self.node_1_ip,
            2: self.node_2_ip,
        }

    @property
    def gateway_url(self) -> str:
        return f"http://{self.node_0_ip}"

    @property
    def translation_url(self) -> str:
        return f"http://{self.node_1_ip}"

    @property
    def audio_url(self) -> str:
        return f"http://{self.node_2_ip}"

    @property
    def listen_host(self) -> str:
        """Host address for this node to listen on."""
        return self.node_ips[self.node_number].split(":")[0]

    @property
    def listen_port(self) -> int:
        """Port for this node to listen on."""
        ip_port = self.node_ips[self.node_number]
        return int(ip_port.split(":")[1]) if ":" in ip_port else 8000

    @property
    def max_gateway_body_bytes(self) -> int:
        """Largest request body that can still carry a max-size base64 audio blob."""
        base64_len = 4 * ((self.max_audio_bytes + 2) // 3)
        return base64_len + self.audio_json_wrapper_bytes + 64 * 1024

    @field_validator("node_number")
    @classmethod
    def validate_node_number(cls, v: int) -> int:
        """Ensure node_number is 0, 1, or 2."""
        if v not in {0, 1, 2}:
            raise ValueError(f"NODE_NUMBER must be 0, 1, or 2 (got {v})")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log_level is valid."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"log_level must be one of {valid_levels} (got {v})")
        return v_upper


# Global settings instance
_settings: ChatGateSettings | None = None


def get_settings() -> ChatGateSettings:
    """
    Get the global ChatGateSettings instance.

    Settings are loaded once and reused throughout the process.
    """
    global _settings
    if _settings is None:
        _settings = ChatGateSettings()
    return _settings
