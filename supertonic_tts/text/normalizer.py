"""Text normalization stage.

Responsibilities:
- Decompose Hangul syllables and accented Latin letters into model codepoints.
- Strip pictographs and symbols the vocabulary does not cover.
- Canonicalize punctuation spacing and guarantee terminal punctuation.

Key types:
- `TextNormalizer`: applies the ordered rule sequence and returns a
  `NormalizedUtterance` carrying the language tag separately from the text.
"""

from __future__ import annotations

import re
import unicodedata
from typing import Protocol

from ..models.datatypes import NormalizedUtterance

HANGUL_SYLLABLE_BASE = 0xAC00
HANGUL_SYLLABLE_END = 0xD7A3
LEADING_JAMO_BASE = 0x1100
VOWEL_JAMO_BASE = 0x1161
TRAILING_JAMO_BASE = 0x11A7
VOWEL_COUNT = 21
TRAILING_COUNT = 28

# Accented letters used by Spanish, Portuguese and French.
_DECOMPOSABLE_LATIN = "ÁÉÍÓÚáéíóúÀÈÌÒÙàèìòùÂÊÎÔÛâêîôûÃÑÕãñõÄËÏÖÜäëïöüÇç"
LATIN_DECOMPOSITIONS: dict[int, str] = {
    ord(character): unicodedata.normalize("NFD", character)
    for character in _DECOMPOSABLE_LATIN
}


def decompose_hangul_syllable(code_point: int) -> list[int]:
    """Split a precomposed Hangul syllable into its 2 or 3 conjoining jamo.

    Code points outside U+AC00..U+D7A3 are returned unchanged as a single item.
    """

    if code_point < HANGUL_SYLLABLE_BASE or code_point > HANGUL_SYLLABLE_END:
        return [code_point]

    syllable_index = code_point - HANGUL_SYLLABLE_BASE
    leading_index = syllable_index // (VOWEL_COUNT * TRAILING_COUNT)
    vowel_index = (syllable_index % (VOWEL_COUNT * TRAILING_COUNT)) // TRAILING_COUNT
    trailing_index = syllable_index % TRAILING_COUNT

    jamo = [LEADING_JAMO_BASE + leading_index, VOWEL_JAMO_BASE + vowel_index]
    if trailing_index > 0:
        jamo.append(TRAILING_JAMO_BASE + trailing_index)
    return jamo


class NormalizationRule(Protocol):
    """Protocol for text normalization rules."""

    def apply(self, text: str) -> str:
        """Apply a single normalization transformation."""


class DecomposeCharacters:
    """Decompose Hangul syllables and table-listed accented Latin letters."""

    def apply(self, text: str) -> str:
        parts: list[str] = []
        for character in text:
            code_point = ord(character)
            if HANGUL_SYLLABLE_BASE <= code_point <= HANGUL_SYLLABLE_END:
                parts.append("".join(chr(jamo) for jamo in decompose_hangul_syllable(code_point)))
            else:
                parts.append(LATIN_DECOMPOSITIONS.get(code_point, character))
        return "".join(parts)


class RemoveEmoji:
    """Remove emoji, pictographs, dingbats and regional indicator flags."""

    _EMOJI_RE = re.compile(
        "["
        "\U0001F600-\U0001F64F"
        "\U0001F300-\U0001F5FF"
        "\U0001F680-\U0001F6FF"
        "\U0001F700-\U0001F77F"
        "\U0001F780-\U0001F7FF"
        "\U0001F800-\U0001F8FF"
        "\U0001F900-\U0001F9FF"
        "\U0001FA00-\U0001FA6F"
        "\U0001FA70-\U0001FAFF"
        "☀-⛿"
        "✀-➿"
        "\U0001F1E6-\U0001F1FF"
        "]"
    )

    def apply(self, text: str) -> str:
        return self._EMOJI_RE.sub("", text)


class ReplaceSymbols:
    """Normalize dashes and quotes, and blank out brackets, pipes and arrows."""

    _REPLACEMENTS = (
        ("–", "-"),
        ("‑", "-"),
        ("—", "-"),
        ("_", " "),
        ("“", '"'),
        ("”", '"'),
        ("‘", "'"),
        ("’", "'"),
        ("´", "'"),
        ("`", "'"),
        ("[", " "),
        ("]", " "),
        ("|", " "),
        ("/", " "),
        ("#", " "),
        ("→", " "),
        ("←", " "),
    )
    _SPECIAL_SYMBOLS_RE = re.compile(r"[♥☆♡©\\]")

    def apply(self, text: str) -> str:
        for source, target in self._REPLACEMENTS:
            text = text.replace(source, target)
        return self._SPECIAL_SYMBOLS_RE.sub("", text)


class ExpandExpressions:
    """Spell out `@` and common Latin abbreviations."""

    _EXPANSIONS = (
        ("@", " at "),
        ("e.g.,", "for example, "),
        ("i.e.,", "that is, "),
    )

    def apply(self, text: str) -> str:
        for source, target in self._EXPANSIONS:
            text = text.replace(source, target)
        return text


class FixPunctuationSpacing:
    """Drop spaces before punctuation and collapse repeated quote characters."""

    _SPACED_PUNCTUATION = (" ,", " .", " !", " ?", " ;", " :", " '")
    _REPEATED_QUOTES = ('""', "''", "``")

    def apply(self, text: str) -> str:
        for spaced in self._SPACED_PUNCTUATION:
            text = text.replace(spaced, spaced[1])
        for repeated in self._REPEATED_QUOTES:
            while repeated in text:
                text = text.replace(repeated, repeated[0])
        return text


class CollapseWhitespace:
    """Collapse whitespace runs to one space and trim both ends."""

    _WHITESPACE_RE = re.compile(r"\s+")

    def apply(self, text: str) -> str:
        return self._WHITESPACE_RE.sub(" ", text).strip()


class EnsureTerminalPunctuation:
    """Append a period unless text already ends with a closer character."""

    _CLOSER_RE = re.compile(r"[.!?;:,'\"‘’)\]}…。」』】〉》›»]$")

    def apply(self, text: str) -> str:
        if text and not self._CLOSER_RE.search(text):
            return f"{text}."
        return text


class TextNormalizer:
    """Normalize raw text into a language-tagged canonical utterance."""

    def __init__(self, rules: list[NormalizationRule] | None = None) -> None:
        """Initialize with custom rules or the default rule sequence."""

        self.rules = rules or [
            DecomposeCharacters(),
            RemoveEmoji(),
            ReplaceSymbols(),
            ExpandExpressions(),
            FixPunctuationSpacing(),
            CollapseWhitespace(),
            EnsureTerminalPunctuation(),
        ]

    def clean(self, text: str) -> str:
        """Apply all configured rules in order without attaching a language."""

        current = text
        for rule in self.rules:
            current = rule.apply(current)
        return current

    def normalize(self, text: str | NormalizedUtterance, language: str) -> NormalizedUtterance:
        """Normalize text for model input.

        Already-normalized utterances are returned unchanged, so repeated
        normalization never re-wraps language tags.
        """

        if isinstance(text, NormalizedUtterance):
            return text
        return NormalizedUtterance(text=self.clean(text), language=language)
