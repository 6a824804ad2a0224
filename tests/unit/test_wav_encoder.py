"""Unit tests for 16-bit PCM WAV encoding."""

from __future__ import annotations

import struct

import numpy as np
import pytest

from supertonic_tts.audio.wav import PCM_SCALE, WavEncoder, decode_wav_bytes, quantize_samples
from supertonic_tts.models.datatypes import SynthesisResult


def test_header_describes_mono_16_bit_pcm() -> None:
    """The 44-byte header should carry canonical RIFF/WAVE fields."""

    payload = WavEncoder().encode([0.0, 0.5, -0.5, 1.0], 24000)

    assert len(payload) == 44 + 8
    assert payload[0:4] == b"RIFF"
    assert struct.unpack("<I", payload[4:8])[0] == 36 + 8
    assert payload[8:12] == b"WAVE"
    assert payload[12:16] == b"fmt "
    fmt = struct.unpack("<IHHIIHH", payload[16:36])
    assert fmt == (16, 1, 1, 24000, 48000, 2, 16)
    assert payload[36:40] == b"data"
    assert struct.unpack("<I", payload[40:44])[0] == 8


def test_samples_are_clamped_and_rounded_half_away_from_zero() -> None:
    """Out-of-range samples should clamp; halves should round away from zero."""

    near_step = 0.6 / PCM_SCALE

    payload = WavEncoder().encode([2.0, -2.0, 0.5, -0.5, near_step, -near_step], 16000)

    assert struct.unpack("<6h", payload[44:]) == (32767, -32767, 16384, -16384, 1, -1)


def test_quantize_samples_returns_little_endian_int16() -> None:
    """Quantized samples should use the little-endian int16 dtype."""

    quantized = quantize_samples(np.array([0.0, 1.0], dtype=np.float32))

    assert quantized.dtype == np.dtype("<i2")
    assert quantized.tolist() == [0, 32767]


def test_decoded_samples_match_input_within_one_step() -> None:
    """Decoding should recover clamped input within one quantization step."""

    samples = np.random.default_rng(3).uniform(-1.5, 1.5, size=1000)

    decoded, sample_rate = decode_wav_bytes(WavEncoder().encode(samples, 22050))

    assert sample_rate == 22050
    assert decoded.shape == samples.shape
    assert np.max(np.abs(decoded - np.clip(samples, -1.0, 1.0))) <= 1.0 / PCM_SCALE


def test_empty_audio_produces_header_only() -> None:
    """Zero samples should still produce a valid 44-byte WAV."""

    assert len(WavEncoder().encode([], 24000)) == 44


def test_non_positive_sample_rate_is_rejected() -> None:
    """Encoding requires a positive sample rate."""

    with pytest.raises(ValueError, match="sample_rate"):
        WavEncoder().encode([0.0], 0)


def test_synthesis_result_encodes_its_audio() -> None:
    """Results should serialize through the WAV encoder at their sample rate."""

    result = SynthesisResult(audio=np.zeros(5, dtype=np.float32), sample_rate=8000, duration=0.1)

    decoded, sample_rate = decode_wav_bytes(result.to_wav_bytes())

    assert sample_rate == 8000
    assert decoded.tolist() == [0.0] * 5


def test_non_finite_samples_quantize_to_silence_or_full_scale() -> None:
    """NaN should become silence while infinities clamp like other overflow."""

    quantized = quantize_samples(np.array([np.nan, np.inf, -np.inf, 0.25]))

    assert quantized.tolist() == [0, 32767, -32767, 8192]
