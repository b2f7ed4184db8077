"""
Chat gateway with binary-RPC translation and audio workers.
"""

from .config import ChatGateSettings, get_settings
from .enums import NodeRole, ServiceEndpoint, derive_node_role


__version__ = "0.1.0"

__all__ = [
    "ChatGateSettings",
    "NodeRole",
    "ServiceEndpoint",
    "derive_node_role",
    "get_settings",
]
