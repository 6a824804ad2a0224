"""Text-to-chunk segmentation logic.

Responsibilities:
- Split long input text into bounded chunks for per-chunk synthesis.
- Keep sentences whole; split only on paragraph and sentence boundaries.
"""

from __future__ import annotations

import re

from ..errors import InvalidConfigurationError
from ..models.datatypes import TextChunk


class TextChunker:
    """Greedily pack whole sentences into chunks of bounded length."""

    _PARAGRAPH_RE = re.compile(r"\n\s*\n+")
    # Lookbehinds are fixed-width, so each abbreviation gets its own guard.
    _SENTENCE_BOUNDARY_RE = re.compile(
        r"(?<!Mr\.)(?<!Mrs\.)(?<!Ms\.)(?<!Dr\.)(?<!Prof\.)(?<!\b[A-Z]\.)(?<=[.!?])\s+"
    )

    def split_paragraphs(self, text: str) -> list[str]:
        """Split text on blank lines, dropping empty paragraphs."""

        paragraphs = self._PARAGRAPH_RE.split(text.strip())
        return [paragraph.strip() for paragraph in paragraphs if paragraph.strip()]

    def split_sentences(self, paragraph: str) -> list[str]:
        """Split one paragraph at sentence punctuation, skipping abbreviations and initials."""

        return [
            sentence
            for sentence in self._SENTENCE_BOUNDARY_RE.split(paragraph)
            if sentence
        ]

    def chunk(self, text: str, max_len: int) -> list[TextChunk]:
        """Split text into ordered chunks no longer than `max_len` where possible.

        Args:
            text: Raw input text.
            max_len: Maximum chunk length in characters.

        Returns:
            Ordered chunk list; empty only for empty or whitespace-only input.
            A single sentence longer than `max_len` becomes its own chunk.
        """

        if max_len <= 0:
            raise InvalidConfigurationError(
                stage="chunk",
                detail=f"`max_len` must be a positive integer, got {max_len}.",
            )

        texts: list[str] = []
        for paragraph in self.split_paragraphs(text):
            current = ""
            for sentence in self.split_sentences(paragraph):
                if len(current) + len(sentence) + 1 <= max_len:
                    current = f"{current} {sentence}" if current else sentence
                    continue
                if current:
                    texts.append(current.strip())
                current = sentence
            if current:
                texts.append(current.strip())

        return [TextChunk(index=index, text=chunk_text) for index, chunk_text in enumerate(texts)]
