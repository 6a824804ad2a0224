"""Unit tests for masked latent noise sampling."""

from __future__ import annotations

import math

import numpy as np
import pytest

from supertonic_tts.config import ModelConfig
from supertonic_tts.errors import ModelExecutionError
from supertonic_tts.tts.noise import NoiseSampler


class _FixedUniforms:
    """Uniform source returning queued constant fills."""

    def __init__(self, *values: float) -> None:
        self._values = list(values)

    def random(self, shape: tuple[int, ...]) -> np.ndarray:
        return np.full(shape, self._values.pop(0))


def test_latent_and_mask_shapes_follow_durations(small_model_config: ModelConfig) -> None:
    """Latent time should cover the longest duration; shorter rows are masked."""

    latent, mask = NoiseSampler(seed=0).sample_for([0.5, 0.25], small_model_config)

    # 50 and 25 samples at chunk size 8 give 7 and 4 latent frames.
    assert latent.shape == (2, small_model_config.latent_channels, 7)
    assert mask.shape == (2, 1, 7)
    assert mask.array[:, 0, :].tolist() == [[1] * 7, [1, 1, 1, 1, 0, 0, 0]]
    assert latent.dtype == np.float32
    assert mask.dtype == np.float32


def test_padded_latent_positions_are_zero(small_model_config: ModelConfig) -> None:
    """Noise beyond each row's length should be zeroed by the mask."""

    latent, _ = NoiseSampler(seed=0).sample_for([0.5, 0.25], small_model_config)

    assert np.all(latent.array[1, :, 4:] == 0.0)
    assert np.all(latent.array[1, :, :4] != 0.0)
    assert np.all(latent.array[0] != 0.0)


def test_explicit_geometry_sets_channels_and_frame_size() -> None:
    """Direct sampling should use the given channel count and samples per frame."""

    latent, mask = NoiseSampler(seed=0).sample([1.0], sample_rate=100, chunk_size=30, channels=5)

    assert latent.shape == (1, 5, 4)
    assert mask.array[0, 0].tolist() == [1.0] * 4


@pytest.mark.parametrize("duration", [0.01, 0.333, 1.0, 2.71, 3.14159])
def test_mask_width_matches_latent_length(
    small_model_config: ModelConfig, duration: float
) -> None:
    """The longest row should fill the full latent width exactly."""

    latent, mask = NoiseSampler(seed=1).sample_for([duration, duration / 3], small_model_config)

    assert mask.shape[2] == latent.shape[2]
    assert int(mask.array[0, 0].sum()) == latent.shape[2]


def test_seeded_samplers_are_reproducible(small_model_config: ModelConfig) -> None:
    """Samplers built with the same seed should draw identical latents."""

    first, _ = NoiseSampler(seed=42).sample_for([1.0], small_model_config)
    second, _ = NoiseSampler(seed=42).sample_for([1.0], small_model_config)
    other, _ = NoiseSampler(seed=43).sample_for([1.0], small_model_config)

    assert np.array_equal(first.array, second.array)
    assert not np.array_equal(first.array, other.array)


def test_box_muller_transform_uses_both_uniforms() -> None:
    """Values should equal sqrt(-2 ln u1) * cos(2 pi u2)."""

    sampler = NoiseSampler(rng=_FixedUniforms(0.5, 0.0))  # type: ignore[arg-type]

    values = sampler.standard_normal((2,))

    assert values.tolist() == pytest.approx([math.sqrt(-2.0 * math.log(0.5))] * 2)


def test_zero_uniform_is_clamped_before_log() -> None:
    """A zero first uniform should be clamped so the log stays finite."""

    sampler = NoiseSampler(rng=_FixedUniforms(0.0, 0.0))  # type: ignore[arg-type]

    values = sampler.standard_normal((1,))

    assert np.isfinite(values).all()
    assert values[0] == pytest.approx(math.sqrt(-2.0 * math.log(1e-10)))


def test_standard_normal_moments() -> None:
    """Large draws should have mean near 0 and standard deviation near 1."""

    values = NoiseSampler(seed=7).standard_normal((200_000,))

    assert abs(float(values.mean())) < 0.02
    assert abs(float(values.std()) - 1.0) < 0.02


@pytest.mark.parametrize("durations", [[], [float("nan")], [float("inf")], [-0.1]])
def test_invalid_durations_are_rejected(
    small_model_config: ModelConfig, durations: list[float]
) -> None:
    """Empty, non-finite or negative durations should fail at the noise stage."""

    with pytest.raises(ModelExecutionError) as exc_info:
        NoiseSampler().sample_for(durations, small_model_config)

    assert exc_info.value.stage == "noise"
