"""Chunk waveform assembly.

Responsibilities:
- Concatenate chunk waveforms in chunk order with silence between them.
- Accumulate the total duration reported for the synthesized audio.
"""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np

from ..errors import InvalidConfigurationError
from ..models.datatypes import ChunkSynthesis, SynthesisResult


class AudioAssembler:
    """Stitch ordered chunk waveforms into one synthesis result."""

    def assemble(
        self,
        chunk_waveforms: Sequence[Sequence[float] | np.ndarray],
        chunk_durations: Sequence[float],
        silence_duration: float,
        sample_rate: int,
    ) -> SynthesisResult:
        """Concatenate waveforms, inserting `floor(silence * rate)` zeros between chunks.

        Total duration is the first chunk's duration plus `duration + silence`
        for every later chunk.
        """

        if not chunk_waveforms:
            raise InvalidConfigurationError(stage="assemble", detail="No chunk waveforms to assemble.")
        if len(chunk_waveforms) != len(chunk_durations):
            raise InvalidConfigurationError(
                stage="assemble",
                detail=(
                    f"Got {len(chunk_waveforms)} waveforms but "
                    f"{len(chunk_durations)} durations."
                ),
            )
        if silence_duration < 0:
            raise InvalidConfigurationError(
                stage="assemble",
                detail=f"`silence_duration` must be non-negative, got {silence_duration}.",
            )

        silence = np.zeros(math.floor(silence_duration * sample_rate), dtype=np.float32)
        pieces = [np.asarray(chunk_waveforms[0], dtype=np.float32).reshape(-1)]
        total_duration = float(chunk_durations[0])
        for waveform, duration in zip(chunk_waveforms[1:], chunk_durations[1:]):
            pieces.append(silence)
            pieces.append(np.asarray(waveform, dtype=np.float32).reshape(-1))
            total_duration += float(duration) + silence_duration

        return SynthesisResult(
            audio=np.concatenate(pieces),
            sample_rate=sample_rate,
            duration=total_duration,
            chunk_count=len(chunk_waveforms),
        )

    def assemble_chunks(
        self,
        chunks: Sequence[ChunkSynthesis],
        silence_duration: float,
        sample_rate: int,
    ) -> SynthesisResult:
        """Assemble chunk results ordered by chunk index, regardless of completion order."""

        ordered = sorted(chunks, key=lambda item: item.index)
        return self.assemble(
            [chunk.waveform for chunk in ordered],
            [chunk.duration for chunk in ordered],
            silence_duration,
            sample_rate,
        )
