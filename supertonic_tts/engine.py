"""Public synthesis engine facade.

Responsibilities:
- Load model assets once and own the per-instance voice style cache.
- Resolve languages and voices, then delegate to `SynthesisOrchestrator`.

Key types:
- `SupertonicTTS`: `initialize` / `synthesize` / `dispose` lifecycle.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

from .config import (
    DEFAULT_MODEL_DIR,
    DEFAULT_VOICE_STYLE_DIR,
    ModelConfig,
    SynthesisConfig,
)
from .errors import NotInitializedError
from .models.datatypes import SynthesisResult, TextChunk, VoiceStyle
from .pipeline.orchestrator import ChunkStage, SynthesisOrchestrator
from .telemetry.logger import RunLogger
from .text.languages import require_supported_language
from .text.vocabulary import VocabularyIndexer
from .tts.executor import ExecutorFactory, load_model_set
from .tts.noise import NoiseSampler
from .tts.style_cache import VoiceStyleCache, VoiceStyleFileLoader
from .tts.voices import DEFAULT_VOICE_CODE, is_known_voice

MODEL_CONFIG_FILENAME = "tts.json"
VOCABULARY_FILENAME = "unicode_indexer.json"


class SupertonicTTS:
    """Text-to-speech engine over four ONNX networks and per-voice style tensors."""

    def __init__(
        self,
        run_logger: RunLogger | None = None,
        executor_factory: ExecutorFactory | None = None,
        seed: int | None = None,
        stage_callback: Callable[[int, ChunkStage], None] | None = None,
        concurrent_encoders: bool = False,
    ) -> None:
        """Initialize optional logging, executor injection and noise seeding hooks."""

        self._run_logger = run_logger
        self._executor_factory = executor_factory
        self._seed = seed
        self._stage_callback = stage_callback
        self._concurrent_encoders = concurrent_encoders
        self._orchestrator: SynthesisOrchestrator | None = None
        self._model_config: ModelConfig | None = None
        self._style_cache: VoiceStyleCache | None = None

    @property
    def is_initialized(self) -> bool:
        return self._orchestrator is not None

    @property
    def model_config(self) -> ModelConfig:
        if self._model_config is None:
            raise NotInitializedError()
        return self._model_config

    @property
    def sample_rate(self) -> int:
        return self.model_config.sample_rate

    def initialize(
        self,
        model_dir: Path = DEFAULT_MODEL_DIR,
        voice_style_dir: Path = DEFAULT_VOICE_STYLE_DIR,
    ) -> None:
        """Load `tts.json`, the vocabulary and the four networks; no-op when ready."""

        if self.is_initialized:
            return

        self._log("initialize", "start", model_dir=model_dir)
        model_config = ModelConfig.from_file(model_dir / MODEL_CONFIG_FILENAME)
        indexer = VocabularyIndexer.from_file(model_dir / VOCABULARY_FILENAME)
        models = load_model_set(model_dir, self._executor_factory)

        self._model_config = model_config
        self._style_cache = VoiceStyleCache(
            VoiceStyleFileLoader(voice_style_dir, run_logger=self._run_logger)
        )
        self._orchestrator = SynthesisOrchestrator(
            models=models,
            indexer=indexer,
            model_config=model_config,
            noise_sampler=NoiseSampler(seed=self._seed),
            run_logger=self._run_logger,
            stage_callback=self._stage_callback,
            concurrent_encoders=self._concurrent_encoders,
        )
        self._log("initialize", "complete", sample_rate=model_config.sample_rate)

    def voice_style(self, voice_code: str | None = None) -> VoiceStyle:
        """Return the cached style for a voice, falling back to the default voice."""

        if self._style_cache is None:
            raise NotInitializedError()
        resolved = voice_code or DEFAULT_VOICE_CODE
        if not is_known_voice(resolved):
            self._log(
                "voice_style",
                "fallback",
                level="WARNING",
                requested=resolved,
                voice=DEFAULT_VOICE_CODE,
            )
            resolved = DEFAULT_VOICE_CODE
        return self._style_cache.get(resolved)

    def chunk_text(self, text: str, language: str = "en") -> list[TextChunk]:
        """Return the chunk plan `synthesize` would use for `text`."""

        orchestrator = self._require_orchestrator()
        require_supported_language(language)
        return orchestrator.plan_chunks(text, language)

    def synthesize(
        self,
        text: str,
        language: str = "en",
        voice_code: str | None = None,
        config: SynthesisConfig | None = None,
    ) -> SynthesisResult:
        """Synthesize `text` into one waveform with silence between chunks."""

        orchestrator = self._require_orchestrator()
        effective_config = config or SynthesisConfig()
        effective_config.validate()
        require_supported_language(language)
        style = self.voice_style(voice_code)
        return orchestrator.synthesize(text, language, style, effective_config)

    def dispose(self) -> None:
        """Release networks and cached styles; `initialize` must run again before use."""

        if self._style_cache is not None:
            self._style_cache.clear()
        self._style_cache = None
        self._orchestrator = None
        self._model_config = None

    def _require_orchestrator(self) -> SynthesisOrchestrator:
        if self._orchestrator is None:
            raise NotInitializedError("Engine is not initialized; synthesis is unavailable.")
        return self._orchestrator

    def _log(self, stage: str, event: str, level: str = "INFO", **context: object) -> None:
        if self._run_logger is not None:
            self._run_logger.log_event(stage, event, level=level, **context)
