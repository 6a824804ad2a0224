"""Shared pytest fixtures for the full Supertonic TTS test suite."""

from __future__ import annotations

from collections.abc import Callable
import json
from pathlib import Path
from typing import Mapping

import numpy as np
import pytest

from supertonic_tts.config import ModelConfig
from supertonic_tts.models.datatypes import Tensor, VoiceStyle
from supertonic_tts.tts.executor import ModelSet

SMALL_MODEL_CONFIG = ModelConfig(
    sample_rate=100,
    base_chunk_size=4,
    chunk_compress_factor=2,
    latent_dim=3,
)
FAKE_RAW_DURATION = 0.5
FAKE_EMBEDDING_CHANNELS = 4


class RecordingExecutor:
    """Model executor test double that records inputs and returns canned outputs."""

    def __init__(self, respond: Callable[[Mapping[str, Tensor]], np.ndarray]) -> None:
        """Initialize with a response function over recorded inputs."""

        self.respond = respond
        self.calls: list[dict[str, Tensor]] = []

    def run(self, inputs: Mapping[str, Tensor]) -> Mapping[str, Tensor]:
        """Record inputs and return a single named output."""

        self.calls.append(dict(inputs))
        return {"output": Tensor.from_array(self.respond(inputs))}


def _durations(inputs: Mapping[str, Tensor]) -> np.ndarray:
    batch = inputs["text_ids"].shape[0]
    return np.full(batch, FAKE_RAW_DURATION, dtype=np.float32)


def _embedding(inputs: Mapping[str, Tensor]) -> np.ndarray:
    batch, length = inputs["text_ids"].shape
    return np.ones((batch, FAKE_EMBEDDING_CHANNELS, length), dtype=np.float32)


def _next_latent(inputs: Mapping[str, Tensor]) -> np.ndarray:
    latent = inputs["noisy_latent"].array
    return (latent * 0.5 + inputs["latent_mask"].array).astype(np.float32)


def _waveform(inputs: Mapping[str, Tensor]) -> np.ndarray:
    batch, _, time = inputs["latent"].shape
    return np.full((batch, time * SMALL_MODEL_CONFIG.chunk_size), 0.25, dtype=np.float32)


def build_fake_executors() -> dict[str, RecordingExecutor]:
    """Return recording executors keyed by model name."""

    return {
        "duration_predictor": RecordingExecutor(_durations),
        "text_encoder": RecordingExecutor(_embedding),
        "vector_estimator": RecordingExecutor(_next_latent),
        "vocoder": RecordingExecutor(_waveform),
    }


@pytest.fixture
def fake_executors() -> dict[str, RecordingExecutor]:
    """Provide a fresh set of recording executors."""

    return build_fake_executors()


@pytest.fixture
def fake_model_set(fake_executors: dict[str, RecordingExecutor]) -> ModelSet:
    """Provide a `ModelSet` backed by recording executors."""

    return ModelSet(**fake_executors)


@pytest.fixture
def small_model_config() -> ModelConfig:
    """Provide compact model geometry that keeps tensors small."""

    return SMALL_MODEL_CONFIG


@pytest.fixture
def voice_style() -> VoiceStyle:
    """Provide an in-memory voice style with batch dimension 1."""

    return VoiceStyle(
        code="M1",
        ttl=Tensor.float32(np.arange(6), shape=(1, 2, 3)),
        dp=Tensor.float32(np.arange(4), shape=(1, 2, 2)),
    )


@pytest.fixture
def vocabulary_table() -> dict[int, int]:
    """Provide a codepoint table covering ASCII and conjoining Hangul jamo."""

    table = {code_point: code_point for code_point in range(32, 127)}
    table.update({code_point: 200 + code_point - 0x1100 for code_point in range(0x1100, 0x1200)})
    return table


def write_style_file(path: Path, ttl_dims: list[int], dp_dims: list[int]) -> None:
    """Write a voice style JSON file with nested data matching the dims."""

    def _nested(dims: list[int]) -> list[list[list[float]]]:
        values = np.linspace(-1.0, 1.0, num=int(np.prod(dims))).reshape(dims)
        return values.tolist()

    payload = {
        "style_ttl": {"dims": ttl_dims, "data": _nested(ttl_dims), "type": "float32"},
        "style_dp": {"dims": dp_dims, "data": _nested(dp_dims), "type": "float32"},
    }
    path.write_text(json.dumps(payload), encoding="utf-8")


@pytest.fixture
def asset_dirs(tmp_path: Path, vocabulary_table: dict[int, int]) -> tuple[Path, Path]:
    """Write model config, vocabulary and voice style files; return both directories."""

    model_dir = tmp_path / "onnx"
    voice_style_dir = tmp_path / "voice_styles"
    model_dir.mkdir()
    voice_style_dir.mkdir()

    (model_dir / "tts.json").write_text(
        json.dumps(
            {
                "ae": {
                    "sample_rate": SMALL_MODEL_CONFIG.sample_rate,
                    "base_chunk_size": SMALL_MODEL_CONFIG.base_chunk_size,
                },
                "ttl": {
                    "chunk_compress_factor": SMALL_MODEL_CONFIG.chunk_compress_factor,
                    "latent_dim": SMALL_MODEL_CONFIG.latent_dim,
                },
            }
        ),
        encoding="utf-8",
    )
    (model_dir / "unicode_indexer.json").write_text(
        json.dumps({str(key): value for key, value in vocabulary_table.items()}),
        encoding="utf-8",
    )
    for name in ("duration_predictor", "text_encoder", "vector_estimator", "vocoder"):
        (model_dir / f"{name}.onnx").write_bytes(b"")

    write_style_file(voice_style_dir / "M1.json", [1, 2, 3], [1, 2, 2])
    write_style_file(voice_style_dir / "F2.json", [1, 2, 3], [1, 2, 2])
    return model_dir, voice_style_dir


@pytest.fixture
def fake_executor_factory() -> Callable[[Path], RecordingExecutor]:
    """Provide an executor factory that maps model file stems to recording executors."""

    executors = build_fake_executors()

    def _factory(model_path: Path) -> RecordingExecutor:
        return executors[model_path.stem]

    _factory.executors = executors  # type: ignore[attr-defined]
    return _factory
