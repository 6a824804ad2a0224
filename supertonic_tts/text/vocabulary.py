"""Codepoint vocabulary loading and batch tokenization.

Responsibilities:
- Parse the persisted codepoint table from either of its two encodings.
- Tokenize normalized, language-tagged text into padded id batches and masks.

Key types:
- `VocabularyIndexer`: codepoint-to-token lookup plus batch encoder.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping, Sequence

import numpy as np

from ..errors import AssetLoadError, InvalidConfigurationError
from ..models.datatypes import NormalizedUtterance, Tensor
from .normalizer import TextNormalizer

UNKNOWN_TOKEN_ID = 0


def length_to_mask(lengths: Sequence[int], max_len: int | None = None) -> Tensor:
    """Convert row lengths into a float32 mask tensor of shape [batch, 1, max_len]."""

    lengths_array = np.asarray(lengths, dtype=np.int64)
    width = int(max_len) if max_len is not None else int(lengths_array.max(initial=0))
    positions = np.arange(width, dtype=np.int64)
    mask = (positions[np.newaxis, :] < lengths_array[:, np.newaxis]).astype(np.float32)
    return Tensor(mask.reshape(len(lengths_array), 1, width))


def _parse_list_table(payload: list[Any]) -> dict[int, int]:
    """Read the positional encoding where list index is the codepoint."""

    return {
        code_point: value
        for code_point, value in enumerate(payload)
        if isinstance(value, int) and not isinstance(value, bool) and value >= 0
    }


def _parse_mapping_table(payload: Mapping[str, Any], source_label: str) -> dict[int, int]:
    """Read the explicit encoding where keys are decimal codepoint strings."""

    table: dict[int, int] = {}
    for key, value in payload.items():
        try:
            code_point = int(key)
        except (TypeError, ValueError) as exc:
            raise AssetLoadError(
                stage="vocabulary",
                detail=f"{source_label} has non-integer codepoint key `{key}`.",
            ) from exc
        if not isinstance(value, int) or isinstance(value, bool):
            raise AssetLoadError(
                stage="vocabulary",
                detail=f"{source_label} maps codepoint {code_point} to non-integer `{value}`.",
            )
        table[code_point] = value
    return table


class VocabularyIndexer:
    """Map normalized codepoints to token ids and build padded batches."""

    def __init__(
        self,
        table: Mapping[int, int],
        normalizer: TextNormalizer | None = None,
    ) -> None:
        """Initialize with a canonical codepoint table and optional normalizer."""

        self.table = dict(table)
        self.normalizer = normalizer or TextNormalizer()

    @classmethod
    def from_payload(
        cls,
        payload: object,
        source_label: str = "Vocabulary table",
        normalizer: TextNormalizer | None = None,
    ) -> VocabularyIndexer:
        """Build an indexer from a decoded JSON list or codepoint-keyed mapping."""

        if isinstance(payload, list):
            table = _parse_list_table(payload)
        elif isinstance(payload, Mapping):
            table = _parse_mapping_table(payload, source_label)
        else:
            raise AssetLoadError(
                stage="vocabulary",
                detail=(
                    f"{source_label} must be a JSON list or object, "
                    f"got `{type(payload).__name__}`."
                ),
            )
        return cls(table, normalizer=normalizer)

    @classmethod
    def from_file(cls, path: Path, normalizer: TextNormalizer | None = None) -> VocabularyIndexer:
        """Load an indexer from a `unicode_indexer.json` style file."""

        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError as exc:
            raise AssetLoadError(
                stage="vocabulary",
                detail=f"Vocabulary file not found: `{path}`.",
                hint="Check that the model directory contains `unicode_indexer.json`.",
            ) from exc
        except (OSError, ValueError) as exc:
            raise AssetLoadError(
                stage="vocabulary",
                detail=f"Vocabulary file `{path}` is not readable JSON: {exc}",
            ) from exc
        return cls.from_payload(payload, source_label=f"Vocabulary file `{path}`", normalizer=normalizer)

    def token_id(self, code_point: int) -> int:
        """Return the token id for a codepoint, or 0 when it is not in the table."""

        return self.table.get(code_point, UNKNOWN_TOKEN_ID)

    def encode(
        self,
        texts: Sequence[str | NormalizedUtterance],
        languages: Sequence[str],
    ) -> tuple[Tensor, Tensor]:
        """Tokenize texts into right-padded ids and a matching text mask.

        Args:
            texts: Raw chunk texts or already-normalized utterances.
            languages: Language code per text.

        Returns:
            `(token_ids, text_mask)` with shapes `[batch, max_len]` (int64) and
            `[batch, 1, max_len]` (float32).
        """

        if not texts:
            raise InvalidConfigurationError(stage="encode", detail="Cannot encode an empty batch.")
        if len(texts) != len(languages):
            raise InvalidConfigurationError(
                stage="encode",
                detail=f"Got {len(texts)} texts but {len(languages)} language codes.",
            )

        tagged = [
            self.normalizer.normalize(text, language).tagged()
            for text, language in zip(texts, languages)
        ]
        lengths = [len(text) for text in tagged]
        max_len = max(lengths)

        token_ids = np.full((len(tagged), max_len), UNKNOWN_TOKEN_ID, dtype=np.int64)
        for row, text in enumerate(tagged):
            token_ids[row, : len(text)] = [self.token_id(ord(character)) for character in text]

        return Tensor(token_ids), length_to_mask(lengths, max_len)
