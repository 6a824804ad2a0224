"""Integration-test fixtures for deterministic model behavior."""

from __future__ import annotations

from pathlib import Path

import pytest

from supertonic_tts.tts.executor import ExecutorFactory, ModelSet, load_model_set


@pytest.fixture(autouse=True)
def _mock_onnx_model_loading(
    monkeypatch: pytest.MonkeyPatch, fake_executor_factory: ExecutorFactory
) -> None:
    """Serve fake executors to the CLI engine and ignore host `SUPERTONIC_*` settings."""

    def _load_fake_models(model_dir: Path, factory: ExecutorFactory | None = None) -> ModelSet:
        """Load the network set through the recording executor factory."""

        _ = factory
        return load_model_set(model_dir, fake_executor_factory)

    monkeypatch.setattr("supertonic_tts.engine.load_model_set", _load_fake_models)
    for env_key in (
        "SUPERTONIC_MODEL_DIR",
        "SUPERTONIC_VOICE_STYLE_DIR",
        "SUPERTONIC_LANGUAGE",
        "SUPERTONIC_VOICE",
        "SUPERTONIC_DENOISING_STEPS",
        "SUPERTONIC_SPEECH_SPEED",
        "SUPERTONIC_SILENCE_DURATION",
        "SUPERTONIC_SEED",
    ):
        monkeypatch.delenv(env_key, raising=False)
