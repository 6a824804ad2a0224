"""Text preprocessing and segmentation components.

This package provides normalization, vocabulary lookup, and chunking building
blocks used before the model stages.
"""

from .chunking import TextChunker
from .languages import SUPPORTED_LANGUAGES, Language, max_chunk_length
from .normalizer import TextNormalizer, decompose_hangul_syllable
from .vocabulary import VocabularyIndexer, length_to_mask

__all__ = [
    "TextNormalizer",
    "TextChunker",
    "VocabularyIndexer",
    "Language",
    "SUPPORTED_LANGUAGES",
    "max_chunk_length",
    "decompose_hangul_syllable",
    "length_to_mask",
]
