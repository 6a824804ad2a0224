"""16-bit PCM WAV serialization.

Responsibilities:
- Quantize float samples to little-endian int16 PCM.
- Wrap them in a canonical 44-byte RIFF/WAVE header.
"""

from __future__ import annotations

import io
import wave
from typing import Sequence

import numpy as np

PCM_SCALE = 32767
SAMPLE_WIDTH_BYTES = 2
CHANNELS = 1


def quantize_samples(samples: Sequence[float] | np.ndarray) -> np.ndarray:
    """Clamp to [-1, 1], scale by 32767 and round half away from zero to int16.

    NaN maps to silence and infinities saturate to full scale.
    """

    finite = np.nan_to_num(
        np.asarray(samples, dtype=np.float64).reshape(-1), nan=0.0, posinf=1.0, neginf=-1.0
    )
    scaled = np.clip(finite, -1.0, 1.0) * PCM_SCALE
    rounded = np.where(scaled >= 0, np.floor(scaled + 0.5), np.ceil(scaled - 0.5))
    return rounded.astype("<i2")


class WavEncoder:
    """Serialize float samples into a mono 16-bit PCM WAV byte stream."""

    def encode(self, samples: Sequence[float] | np.ndarray, sample_rate: int) -> bytes:
        """Return header plus `2 * len(samples)` bytes of PCM data."""

        if sample_rate <= 0:
            raise ValueError(f"`sample_rate` must be positive, got {sample_rate}.")

        buffer = io.BytesIO()
        with wave.open(buffer, "wb") as wav_file:
            wav_file.setnchannels(CHANNELS)
            wav_file.setsampwidth(SAMPLE_WIDTH_BYTES)
            wav_file.setframerate(sample_rate)
            wav_file.writeframes(quantize_samples(samples).tobytes())
        return buffer.getvalue()


def decode_wav_bytes(payload: bytes) -> tuple[np.ndarray, int]:
    """Decode mono 16-bit PCM WAV bytes into normalized floats and sample rate."""

    with wave.open(io.BytesIO(payload), "rb") as wav_file:
        if wav_file.getnchannels() != CHANNELS or wav_file.getsampwidth() != SAMPLE_WIDTH_BYTES:
            raise ValueError("Only mono 16-bit PCM WAV payloads are supported.")
        sample_rate = wav_file.getframerate()
        frames = wav_file.readframes(wav_file.getnframes())
    samples = np.frombuffer(frames, dtype="<i2").astype(np.float64) / PCM_SCALE
    return samples, sample_rate
