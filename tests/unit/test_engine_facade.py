"""Unit tests for the public engine lifecycle over fake executors."""

from __future__ import annotations

import io
import json
from pathlib import Path

import numpy as np
import pytest

from supertonic_tts import SupertonicTTS, SynthesisConfig
from supertonic_tts.errors import AssetLoadError, InvalidConfigurationError, NotInitializedError
from supertonic_tts.pipeline.orchestrator import ChunkStage
from supertonic_tts.telemetry.logger import RunLogger
from supertonic_tts.tts.executor import OnnxModelExecutor, load_model_set


def _initialized_engine(asset_dirs: tuple[Path, Path], factory, **kwargs: object) -> SupertonicTTS:
    engine = SupertonicTTS(executor_factory=factory, **kwargs)
    engine.initialize(*asset_dirs)
    return engine


def test_synthesis_before_initialize_is_rejected() -> None:
    """Calls before `initialize` should raise a not-initialized error."""

    engine = SupertonicTTS()

    with pytest.raises(NotInitializedError) as exc_info:
        engine.synthesize("Hello.")

    assert exc_info.value.stage == "initialize"
    assert not engine.is_initialized
    with pytest.raises(NotInitializedError):
        _ = engine.sample_rate


def test_initialize_loads_assets_and_synthesizes(
    asset_dirs: tuple[Path, Path], fake_executor_factory
) -> None:
    """An initialized engine should synthesize at the configured sample rate."""

    engine = _initialized_engine(asset_dirs, fake_executor_factory, seed=5)

    result = engine.synthesize("Hello world.", language="en", voice_code="F2")

    assert engine.is_initialized
    assert engine.sample_rate == 100
    assert result.sample_rate == 100
    assert result.chunk_count == 1
    assert result.audio.dtype == np.float32
    assert len(fake_executor_factory.executors["vector_estimator"].calls) == 5


def test_initialize_is_idempotent(asset_dirs: tuple[Path, Path], fake_executor_factory) -> None:
    """A second `initialize` should keep the already-loaded networks."""

    built: list[Path] = []

    def _factory(model_path: Path):
        built.append(model_path)
        return fake_executor_factory(model_path)

    engine = _initialized_engine(asset_dirs, _factory)
    engine.initialize(*asset_dirs)

    assert len(built) == 4


def test_unknown_voice_falls_back_to_default(
    asset_dirs: tuple[Path, Path], fake_executor_factory
) -> None:
    """Unknown voice codes should use the default style and log a warning."""

    sink = io.StringIO()
    engine = _initialized_engine(
        asset_dirs, fake_executor_factory, run_logger=RunLogger(sink=sink)
    )

    fallback = engine.voice_style("Z9")

    assert fallback is engine.voice_style("M1")
    assert fallback is engine.voice_style(None)
    assert "event=fallback requested=Z9 voice=M1" in sink.getvalue()


def test_known_voice_without_style_file_fails(
    asset_dirs: tuple[Path, Path], fake_executor_factory
) -> None:
    """A catalog voice whose file is missing should raise an asset load error."""

    engine = _initialized_engine(asset_dirs, fake_executor_factory)

    with pytest.raises(AssetLoadError) as exc_info:
        engine.synthesize("Hello.", voice_code="F3")

    assert exc_info.value.stage == "voice_style"


def test_unsupported_language_is_rejected(
    asset_dirs: tuple[Path, Path], fake_executor_factory
) -> None:
    """Languages outside the supported set should fail before any model runs."""

    engine = _initialized_engine(asset_dirs, fake_executor_factory)

    with pytest.raises(InvalidConfigurationError, match="Unsupported language `de`"):
        engine.synthesize("Hallo.", language="de")

    assert fake_executor_factory.executors["duration_predictor"].calls == []


def test_empty_text_is_rejected(asset_dirs: tuple[Path, Path], fake_executor_factory) -> None:
    """Whitespace-only text should be reported as invalid input."""

    engine = _initialized_engine(asset_dirs, fake_executor_factory)

    with pytest.raises(InvalidConfigurationError):
        engine.synthesize("  \n ")


def test_dispose_requires_reinitialization(
    asset_dirs: tuple[Path, Path], fake_executor_factory
) -> None:
    """After `dispose` the engine should behave as never initialized."""

    engine = _initialized_engine(asset_dirs, fake_executor_factory)

    engine.dispose()

    assert not engine.is_initialized
    with pytest.raises(NotInitializedError):
        engine.synthesize("Hello.")
    engine.initialize(*asset_dirs)
    assert engine.synthesize("Hello.").chunk_count == 1


def test_seeded_engines_produce_identical_audio(
    asset_dirs: tuple[Path, Path], fake_executor_factory
) -> None:
    """Engines with the same seed should produce the same waveform."""

    config = SynthesisConfig(denoising_steps=0)
    first = _initialized_engine(asset_dirs, fake_executor_factory, seed=11)
    second = _initialized_engine(asset_dirs, fake_executor_factory, seed=11)

    first_audio = first.synthesize("Hello.", config=config).audio
    second_audio = second.synthesize("Hello.", config=config).audio

    assert np.array_equal(first_audio, second_audio)


def test_stage_callback_and_chunk_plan(
    asset_dirs: tuple[Path, Path], fake_executor_factory
) -> None:
    """Engines should expose the chunk plan and report per-chunk stages."""

    stages: list[tuple[int, ChunkStage]] = []
    engine = _initialized_engine(
        asset_dirs,
        fake_executor_factory,
        stage_callback=lambda index, stage: stages.append((index, stage)),
    )

    plan = engine.chunk_text("One.\n\nTwo.", language="en")
    engine.synthesize("One.\n\nTwo.")

    assert [chunk.text for chunk in plan] == ["One.", "Two."]
    assert stages.count((1, ChunkStage.DONE)) == 1
    assert stages[-1] == (1, ChunkStage.DONE)


def test_missing_model_config_fails_initialize(tmp_path: Path, fake_executor_factory) -> None:
    """A model directory without `tts.json` should fail with an asset load error."""

    engine = SupertonicTTS(executor_factory=fake_executor_factory)

    with pytest.raises(AssetLoadError) as exc_info:
        engine.initialize(tmp_path, tmp_path)

    assert exc_info.value.stage == "config"
    assert not engine.is_initialized


def test_list_encoded_vocabulary_file_is_accepted(
    asset_dirs: tuple[Path, Path], fake_executor_factory, vocabulary_table: dict[int, int]
) -> None:
    """The positional vocabulary encoding should load like the keyed one."""

    model_dir, _ = asset_dirs
    size = max(vocabulary_table) + 1
    positional = [vocabulary_table.get(code_point, -1) for code_point in range(size)]
    (model_dir / "unicode_indexer.json").write_text(json.dumps(positional), encoding="utf-8")

    engine = _initialized_engine(asset_dirs, fake_executor_factory)

    assert engine.synthesize("Hello.").chunk_count == 1


def test_onnx_executor_reports_missing_model_files(tmp_path: Path) -> None:
    """Loading networks from an empty directory should fail at the model stage."""

    with pytest.raises(AssetLoadError) as exc_info:
        load_model_set(tmp_path)

    assert exc_info.value.stage == "model"
    with pytest.raises(AssetLoadError, match="Model file not found"):
        OnnxModelExecutor(tmp_path / "vocoder.onnx")
