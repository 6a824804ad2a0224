"""Supported synthesis languages and per-language text limits.

Responsibilities:
- List language codes the vocabulary and models were trained on.
- Provide chunk length limits and demo sentences per language.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..errors import InvalidConfigurationError

KOREAN_MAX_CHUNK_LENGTH = 120
DEFAULT_MAX_CHUNK_LENGTH = 300


@dataclass(frozen=True, slots=True)
class Language:
    """Declarative language entry.

    Attributes:
        code: Short language code used in model language tags.
        name: English language name.
        native_name: Language name in the language itself.
    """

    code: str
    name: str
    native_name: str


ENGLISH = Language(code="en", name="English", native_name="English")
KOREAN = Language(code="ko", name="Korean", native_name="한국어")
SPANISH = Language(code="es", name="Spanish", native_name="Español")
PORTUGUESE = Language(code="pt", name="Portuguese", native_name="Português")
FRENCH = Language(code="fr", name="French", native_name="Français")

SUPPORTED_LANGUAGES: tuple[Language, ...] = (ENGLISH, KOREAN, SPANISH, PORTUGUESE, FRENCH)

_SAMPLE_TEXTS = {
    "en": (
        "Hello, this is a test of the Supertonic text-to-speech system. "
        "The quick brown fox jumps over the lazy dog."
    ),
    "ko": (
        "안녕하세요, 이것은 슈퍼토닉 텍스트 음성 변환 시스템 테스트입니다. "
        "빠른 갈색 여우가 게으른 개를 뛰어넘습니다."
    ),
    "es": (
        "Hola, esta es una prueba del sistema de síntesis de voz Supertonic. "
        "El rápido zorro marrón salta sobre el perro perezoso."
    ),
    "pt": (
        "Olá, este é um teste do sistema de síntese de voz Supertonic. "
        "A rápida raposa marrom salta sobre o cachorro preguiçoso."
    ),
    "fr": (
        "Bonjour, ceci est un test du système de synthèse vocale Supertonic. "
        "Le rapide renard brun saute par-dessus le chien paresseux."
    ),
}

_SHORT_SAMPLE_TEXTS = {
    "en": "Hello, this is a test.",
    "ko": "안녕하세요, 이것은 테스트입니다.",
    "es": "Hola, esta es una prueba.",
    "pt": "Olá, este é um teste.",
    "fr": "Bonjour, ceci est un test.",
}


def language_for_code(code: str) -> Language:
    """Return the language entry for a code, falling back to English."""

    for language in SUPPORTED_LANGUAGES:
        if language.code == code:
            return language
    return ENGLISH


def require_supported_language(code: str) -> Language:
    """Return the language entry for a code or fail for unsupported codes."""

    for language in SUPPORTED_LANGUAGES:
        if language.code == code:
            return language
    supported = ", ".join(language.code for language in SUPPORTED_LANGUAGES)
    raise InvalidConfigurationError(
        stage="config",
        detail=f"Unsupported language `{code}`; supported: {supported}.",
    )


def max_chunk_length(code: str) -> int:
    """Return the maximum chunk length in characters for a language."""

    if code == KOREAN.code:
        return KOREAN_MAX_CHUNK_LENGTH
    return DEFAULT_MAX_CHUNK_LENGTH


def sample_text(code: str, short: bool = False) -> str:
    """Return a demo sentence for a language, defaulting to English."""

    texts = _SHORT_SAMPLE_TEXTS if short else _SAMPLE_TEXTS
    return texts.get(code, texts[ENGLISH.code])
