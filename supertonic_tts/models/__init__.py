"""Shared datatypes for synthesis stages."""

from .datatypes import (
    ChunkSynthesis,
    NormalizedUtterance,
    SynthesisResult,
    Tensor,
    TextChunk,
    VoiceStyle,
)

__all__ = [
    "Tensor",
    "NormalizedUtterance",
    "TextChunk",
    "VoiceStyle",
    "ChunkSynthesis",
    "SynthesisResult",
]
