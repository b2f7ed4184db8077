"""
Enumerations and constants for the chat gateway.
"""

from enum import Enum


class NodeRole(str, Enum):
    """Role assignment for each node in the deployment."""

    GATEWAY = "gateway"
    TRANSLATION = "translation"
    AUDIO = "audio"


class ServiceEndpoint(str, Enum):
    """API endpoints exposed by services."""

    # Every node
    HEALTH = "/health"
    METRICS = "/metrics"

    # Translation worker RPCs
    TRANSLATE_TEXT = "/rpc/TranslateText"
    SUPPORTED_LANGUAGES = "/rpc/GetSupportedLanguages"

    # Audio worker RPCs
    PROCESS_AUDIO = "/rpc/ProcessAudio"
    AUDIO_INFO = "/rpc/GetAudioInfo"


class ComponentType(str, Enum):
    """Component types hosted by a node."""

    SESSION_STORE = "session_store"
    METRICS_RECORDER = "metrics_recorder"
    TRANSLATION_CLIENT = "translation_client"
    AUDIO_CLIENT = "audio_client"
    GATEWAY = "gateway"
    BATCH_RUNNER = "batch_runner"


class MessageKind(str, Enum):
    """Kind of a chat message; also the metrics category."""

    TEXT = "text"
    AUDIO = "audio"


class Hop(str, Enum):
    """One leg of the request path."""

    GATEWAY = "gateway"  # client <-> gateway, text protocol
    WORKER = "worker"  # gateway <-> worker, binary protocol


class ErrorKind(str, Enum):
    """Machine-checkable failure kinds reported to clients."""

    VALIDATION_ERROR = "ValidationError"
    PAYLOAD_TOO_LARGE = "PayloadTooLarge"
    WORKER_UNAVAILABLE = "WorkerUnavailable"
    BATCH_PARTIAL_FAILURE = "BatchPartialFailure"


_ROLE_MAP = {
    0: NodeRole.GATEWAY,
    1: NodeRole.TRANSLATION,
    2: NodeRole.AUDIO,
}


def derive_node_role(node_number: int) -> NodeRole:
    """
    Derive the role of a node based on its number.

    Args:
        node_number: The node number (0-based index)

    Returns:
        NodeRole: The role assigned to this node

    Raises:
        ValueError: If node_number is invalid
    """
    try:
        return _ROLE_MAP[node_number]
    except KeyError:
        raise ValueError(f"Invalid node_number {node_number}.") from None
