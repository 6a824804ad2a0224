"""Core datatypes shared across synthesis modules.

Responsibilities:
- Represent immutable records exchanged between pipeline stages.
- Validate tensor dtype and shape at construction so mismatches fail loudly.

Key types:
- `Tensor`, `NormalizedUtterance`, `TextChunk`, `VoiceStyle`,
  `ChunkSynthesis`, and `SynthesisResult`.
"""

from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Sequence

import numpy as np

from ..errors import ModelExecutionError

_SUPPORTED_DTYPES = (np.dtype(np.float32), np.dtype(np.int64))


@dataclass(frozen=True, slots=True, eq=False)
class Tensor:
    """Shaped numeric buffer exchanged with model executors.

    Attributes:
        array: Backing array; dtype is `float32` or `int64`.
    """

    array: np.ndarray

    def __post_init__(self) -> None:
        """Reject dtypes other than float32/int64 instead of silently casting."""

        if not isinstance(self.array, np.ndarray):
            raise ModelExecutionError(
                stage="tensor",
                detail=f"Tensor requires a numpy array, got `{type(self.array).__name__}`.",
            )
        if self.array.dtype not in _SUPPORTED_DTYPES:
            raise ModelExecutionError(
                stage="tensor",
                detail=f"Unsupported tensor dtype `{self.array.dtype}`; expected float32 or int64.",
            )

    @classmethod
    def float32(cls, values: object, shape: Sequence[int] | None = None) -> Tensor:
        """Build a float32 tensor, optionally reshaping flat values to `shape`."""

        return cls(_shaped_array(values, np.float32, shape))

    @classmethod
    def int64(cls, values: object, shape: Sequence[int] | None = None) -> Tensor:
        """Build an int64 tensor, optionally reshaping flat values to `shape`."""

        return cls(_shaped_array(values, np.int64, shape))

    @classmethod
    def from_array(cls, array: object) -> Tensor:
        """Wrap an executor output array without changing its dtype."""

        return cls(np.asarray(array))

    @property
    def shape(self) -> tuple[int, ...]:
        return tuple(int(dim) for dim in self.array.shape)

    @property
    def dtype(self) -> np.dtype:
        return self.array.dtype

    @property
    def size(self) -> int:
        return int(self.array.size)

    def flat(self) -> np.ndarray:
        """Return a one-dimensional view of the tensor values."""

        return self.array.reshape(-1)


def _shaped_array(values: object, dtype: type, shape: Sequence[int] | None) -> np.ndarray:
    """Convert values to `dtype` and validate element count against `shape`."""

    try:
        array = np.asarray(values, dtype=dtype)
    except (TypeError, ValueError) as exc:
        raise ModelExecutionError(
            stage="tensor",
            detail=f"Tensor values cannot be converted to {np.dtype(dtype).name}: {exc}",
        ) from exc
    if shape is None:
        return array

    dims = tuple(int(dim) for dim in shape)
    if any(dim < 0 for dim in dims):
        raise ModelExecutionError(stage="tensor", detail=f"Negative tensor dim in {dims}.")
    expected = math.prod(dims)
    if array.size != expected:
        raise ModelExecutionError(
            stage="tensor",
            detail=(
                f"Tensor has {array.size} elements but shape {list(dims)} "
                f"requires {expected}."
            ),
        )
    return array.reshape(dims)


@dataclass(frozen=True, slots=True)
class NormalizedUtterance:
    """Canonical utterance text paired with its language code.

    The language tags live outside `text` and are only rendered by `tagged()`,
    so normalizing an utterance twice cannot nest tags.

    Attributes:
        text: Decomposed and cleaned text, ending with terminal punctuation.
        language: Short language code used for tagging.
    """

    text: str
    language: str

    def tagged(self) -> str:
        """Render the model input string `<lang>text</lang>`."""

        return f"<{self.language}>{self.text}</{self.language}>"


@dataclass(frozen=True, slots=True)
class TextChunk:
    """A bounded text segment derived from one input text.

    Attributes:
        index: 0-based position in the chunk plan.
        text: Chunk text content.
    """

    index: int
    text: str

    def __len__(self) -> int:
        return len(self.text)


@dataclass(frozen=True, slots=True, eq=False)
class VoiceStyle:
    """Immutable style tensor pair for one voice.

    Attributes:
        code: Voice code the style was loaded for.
        ttl: Text-to-latent style tensor with batch dimension 1.
        dp: Duration-predictor style tensor with batch dimension 1.
    """

    code: str
    ttl: Tensor
    dp: Tensor

    @property
    def ttl_shape(self) -> tuple[int, ...]:
        return self.ttl.shape

    @property
    def dp_shape(self) -> tuple[int, ...]:
        return self.dp.shape


@dataclass(frozen=True, slots=True, eq=False)
class ChunkSynthesis:
    """Waveform and scaled duration produced for one chunk.

    Attributes:
        index: 0-based chunk index.
        waveform: Raw vocoder samples for the chunk.
        duration: Predicted chunk duration in seconds after speed scaling.
    """

    index: int
    waveform: np.ndarray
    duration: float


@dataclass(frozen=True, slots=True, eq=False)
class SynthesisResult:
    """Final synthesized audio for one top-level call.

    Attributes:
        audio: Float samples, nominally within [-1, 1].
        sample_rate: Sample rate in Hz.
        duration: Total duration in seconds including inserted silence.
        chunk_count: Number of text chunks synthesized.
    """

    audio: np.ndarray
    sample_rate: int
    duration: float
    chunk_count: int = 1

    @property
    def sample_count(self) -> int:
        return int(self.audio.shape[0])

    def to_wav_bytes(self) -> bytes:
        """Encode the audio as a 16-bit PCM mono WAV byte stream."""

        from ..audio.wav import WavEncoder

        return WavEncoder().encode(self.audio, self.sample_rate)

