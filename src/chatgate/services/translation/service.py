"""
Dictionary-backed translation used by the translation worker.

No external APIs are involved: phrases are looked up in fixed per-pair
tables, falling back to word-by-word substitution.
"""

from dataclasses import dataclass
import logging
import time

from .schemas import Language, TranslateRequest, TranslateResponse


logger = logging.getLogger(__name__)


TRANSLATIONS: dict[str, dict[str, str]] = {
    "en-es": {
        "hello": "hola",
        "goodbye": "adiós",
        "good morning": "buenos días",
        "good night": "buenas noches",
        "how are you": "cómo estás",
        "thank you": "gracias",
        "please": "por favor",
        "yes": "sí",
        "no": "no",
        "welcome": "bienvenido",
        "friend": "amigo",
        "love": "amor",
        "water": "agua",
        "food": "comida",
        "help": "ayuda",
        "i am fine": "estoy bien",
        "what is your name": "cuál es tu nombre",
        "my name is": "mi nombre es",
        "nice to meet you": "mucho gusto",
        "see you later": "hasta luego",
    },
    "en-fr": {
        "hello": "bonjour",
        "goodbye": "au revoir",
        "good morning": "bonjour",
        "good night": "bonne nuit",
        "how are you": "comment allez-vous",
        "thank you": "merci",
        "please": "s'il vous plaît",
        "yes": "oui",
        "no": "non",
        "welcome": "bienvenue",
        "friend": "ami",
        "love": "amour",
        "water": "eau",
        "food": "nourriture",
        "help": "aide",
        "i am fine": "je vais bien",
        "what is your name": "comment vous appelez-vous",
        "my name is": "je m'appelle",
        "nice to meet you": "enchanté",
        "see you later": "à plus tard",
    },
    "en-de": {
        "hello": "hallo",
        "goodbye": "auf wiedersehen",
        "good morning": "guten morgen",
        "good night": "gute nacht",
        "how are you": "wie geht es dir",
        "thank you": "danke",
        "please": "bitte",
        "yes": "ja",
        "no": "nein",
        "welcome": "willkommen",
        "friend": "freund",
        "love": "liebe",
        "water": "wasser",
        "food": "essen",
        "help": "hilfe",
        "i am fine": "mir geht es gut",
        "what is your name": "wie heißt du",
        "my name is": "ich heiße",
        "nice to meet you": "freut mich",
        "see you later": "bis später",
    },
    "en-ur": {
        "hello": "السلام علیکم",
        "goodbye": "خدا حافظ",
        "good morning": "صبح بخیر",
        "good night": "شب بخیر",
        "how are you": "آپ کیسے ہیں",
        "thank you": "شکریہ",
        "please": "براہ کرم",
        "yes": "ہاں",
        "no": "نہیں",
        "welcome": "خوش آمدید",
        "friend": "دوست",
        "love": "محبت",
        "water": "پانی",
        "food": "کھانا",
        "help": "مدد",
        "i am fine": "میں ٹھیک ہوں",
        "what is your name": "آپ کا نام کیا ہے",
        "my name is": "میرا نام ہے",
        "nice to meet you": "آپ سے مل کر خوشی ہوئی",
        "see you later": "پھر ملیں گے",
    },
    "es-en": {
        "hola": "hello",
        "adiós": "goodbye",
        "buenos días": "good morning",
        "buenas noches": "good night",
        "cómo estás": "how are you",
        "gracias": "thank you",
        "por favor": "please",
        "sí": "yes",
        "no": "no",
        "bienvenido": "welcome",
    },
    "fr-en": {
        "bonjour": "hello",
        "au revoir": "goodbye",
        "bonne nuit": "good night",
        "merci": "thank you",
        "oui": "yes",
        "non": "no",
        "bienvenue": "welcome",
    },
}

SUPPORTED_LANGUAGES: tuple[Language, ...] = (
    Language(code="en", name="English"),
    Language(code="es", name="Spanish"),
    Language(code="fr", name="French"),
    Language(code="de", name="German"),
    Language(code="ur", name="Urdu"),
)


@dataclass(frozen=True)
class TranslationResult:
    translated: str
    processing_time_ms: float


def translate_text(text: str, source_language: str, target_language: str) -> TranslationResult:
    """
    Translate text using the fixed dictionaries.

    Same-language requests return the text unchanged. Otherwise the whole
    normalized phrase is looked up first, then each word. When nothing
    translates, the original text is returned with a ``[TARGET]`` marker.
    """
    start = time.perf_counter()

    if source_language == target_language:
        return TranslationResult(text, (time.perf_counter() - start) * 1000)

    mappings = TRANSLATIONS.get(f"{source_language}-{target_language}", {})
    normalized = text.lower().strip()

    if normalized in mappings:
        return TranslationResult(mappings[normalized], (time.perf_counter() - start) * 1000)

    result = " ".join(mappings.get(word, word) for word in normalized.split(" "))
    if result == normalized:
        result = f"[{target_language.upper()}] {text}"

    return TranslationResult(result, (time.perf_counter() - start) * 1000)


class TranslationService:
    """
    Handles translation RPCs.

    Faults inside a handler are reported in the response (success=False)
    rather than raised, so the gateway sees a well-formed failure.
    """

    def translate(self, request: TranslateRequest) -> TranslateResponse:
        start = time.perf_counter()
        logger.info(
            "TranslateText: user_id=%s, %s -> %s, chars=%d",
            request.user_id,
            request.source_language,
            request.target_language,
            len(request.text),
        )

        try:
            result = translate_text(
                request.text, request.source_language, request.target_language
            )
        except Exception as e:
            logger.exception("Translation failed for user_id=%s", request.user_id)
            return TranslateResponse(
                original_text=request.text,
                translated_text="",
                source_language=request.source_language,
                target_language=request.target_language,
                success=False,
                error_message=str(e),
                processing_time_ms=(time.perf_counter() - start) * 1000,
            )

        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.debug("Translated in %.3fms: %r", elapsed_ms, result.translated)
        return TranslateResponse(
            original_text=request.text,
            translated_text=result.translated,
            source_language=request.source_language,
            target_language=request.target_language,
            success=True,
            processing_time_ms=elapsed_ms,
        )

    def supported_languages(self) -> list[Language]:
        return list(SUPPORTED_LANGUAGES)
