"""
Translation worker module.

Dictionary-based text translation served over the binary RPC protocol.
"""

from .api import router
from .schemas import (
    Language,
    SupportedLanguagesRequest,
    SupportedLanguagesResponse,
    TranslateRequest,
    TranslateResponse,
)
from .service import SUPPORTED_LANGUAGES, TranslationService, translate_text


__all__ = [
    "SUPPORTED_LANGUAGES",
    "Language",
    "SupportedLanguagesRequest",
    "SupportedLanguagesResponse",
    "TranslateRequest",
    "TranslateResponse",
    "TranslationService",
    "router",
    "translate_text",
]
