"""
Binary message schemas for the translation worker.
"""

from chatgate.base_schemas import RPCStruct


class TranslateRequest(RPCStruct):
    """Request sent by the gateway to /rpc/TranslateText."""

    text: str
    source_language: str
    target_language: str
    user_id: str
    timestamp: int  # epoch milliseconds at the gateway


class TranslateResponse(RPCStruct):
    """Response from /rpc/TranslateText."""

    original_text: str
    translated_text: str
    source_language: str
    target_language: str
    success: bool
    error_message: str = ""
    processing_time_ms: float = 0.0


class Language(RPCStruct):
    code: str
    name: str


class SupportedLanguagesRequest(RPCStruct):
    """Empty request for /rpc/GetSupportedLanguages."""


class SupportedLanguagesResponse(RPCStruct):
    languages: list[Language]
