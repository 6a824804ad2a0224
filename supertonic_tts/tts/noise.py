"""Initial latent noise sampling for the denoising loop.

Responsibilities:
- Size the latent from predicted durations and model geometry.
- Draw standard-normal noise via the Box-Muller transform.
- Build the latent mask and zero every padded latent position.
"""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np

from ..config import ModelConfig
from ..errors import ModelExecutionError
from ..models.datatypes import Tensor
from ..text.vocabulary import length_to_mask

_MIN_UNIFORM = 1e-10


class NoiseSampler:
    """Sample masked Gaussian latents shaped for a batch of durations."""

    def __init__(self, seed: int | None = None, rng: np.random.Generator | None = None) -> None:
        """Initialize with an explicit generator or a seed for reproducible draws."""

        self._rng = rng if rng is not None else np.random.default_rng(seed)

    def standard_normal(self, shape: tuple[int, ...]) -> np.ndarray:
        """Draw standard-normal values with the Box-Muller transform."""

        u1 = np.maximum(_MIN_UNIFORM, self._rng.random(shape))
        u2 = self._rng.random(shape)
        return np.sqrt(-2.0 * np.log(u1)) * np.cos(2.0 * math.pi * u2)

    def sample(
        self,
        durations: Sequence[float],
        sample_rate: int,
        chunk_size: int,
        channels: int,
    ) -> tuple[Tensor, Tensor]:
        """Sample a noisy latent and its mask.

        Args:
            durations: Predicted per-row durations in seconds.
            sample_rate: Waveform sample rate in Hz.
            chunk_size: Waveform samples covered by one latent time step.
            channels: Channel count of the compressed latent.

        Returns:
            `(latent, latent_mask)` with shapes `[batch, channels, time]`
            and `[batch, 1, time]`.
        """

        duration_array = np.asarray(durations, dtype=np.float64).reshape(-1)
        if duration_array.size == 0:
            raise ModelExecutionError(stage="noise", detail="No durations to sample a latent for.")
        if not np.all(np.isfinite(duration_array)) or np.any(duration_array < 0):
            raise ModelExecutionError(
                stage="noise",
                detail=f"Predicted durations must be finite and non-negative, got {duration_array.tolist()}.",
            )

        wav_length_max = float(duration_array.max()) * sample_rate
        latent_length = int((wav_length_max + chunk_size - 1) // chunk_size)

        wav_lengths = np.floor(duration_array * sample_rate).astype(np.int64)
        latent_lengths = (wav_lengths + chunk_size - 1) // chunk_size
        latent_mask = length_to_mask(latent_lengths.tolist(), latent_length)

        noise = self.standard_normal((duration_array.size, channels, latent_length))
        latent = (noise * latent_mask.array).astype(np.float32)
        return Tensor(latent), latent_mask

    def sample_for(self, durations: Sequence[float], model_config: ModelConfig) -> tuple[Tensor, Tensor]:
        """Sample using the geometry of a loaded model configuration."""

        return self.sample(
            durations,
            sample_rate=model_config.sample_rate,
            chunk_size=model_config.chunk_size,
            channels=model_config.latent_channels,
        )
