"""Per-chunk synthesis orchestration.

Responsibilities:
- Drive the four model stages for each chunk as an explicit stage sequence:
  encoded, duration predicted, text encoded, denoising, vocoded, done.
- Convert executor failures into stage-scoped `ModelExecutionError`s.
- Assemble chunk waveforms in chunk order into one result.

Key types:
- `SynthesisOrchestrator`: stage driver over a `ModelSet`.
- `ChunkStage`: stage identifiers reported to progress callbacks.
- `ChunkState`: mutable per-chunk state, owned by one synthesis call.
"""

from __future__ import annotations

from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from typing import TypeVar

import numpy as np

from ..audio.assembler import AudioAssembler
from ..config import ModelConfig, SynthesisConfig
from ..errors import InvalidConfigurationError, ModelExecutionError, PipelineStageError
from ..models.datatypes import ChunkSynthesis, SynthesisResult, Tensor, TextChunk, VoiceStyle
from ..telemetry.logger import RunLogger
from ..text.chunking import TextChunker
from ..text.languages import max_chunk_length
from ..text.vocabulary import VocabularyIndexer
from ..tts.executor import ModelSet, first_output
from ..tts.noise import NoiseSampler

_StageResult = TypeVar("_StageResult")


class ChunkStage(str, Enum):
    """Stages a chunk passes through, strictly in declaration order."""

    ENCODED = "encoded"
    DURATION_PREDICTED = "duration_predicted"
    TEXT_ENCODED = "text_encoded"
    DENOISING = "denoising"
    VOCODED = "vocoded"
    DONE = "done"


@dataclass(slots=True)
class ChunkState:
    """Working state for one chunk; the latent is replaced on every denoising step."""

    chunk: TextChunk
    stage: ChunkStage
    token_ids: Tensor
    text_mask: Tensor
    durations: np.ndarray | None = None
    text_embedding: Tensor | None = None
    latent: Tensor | None = None
    latent_mask: Tensor | None = None
    waveform: np.ndarray | None = None


class SynthesisOrchestrator:
    """Run duration, text encoding, denoising and vocoding for each chunk."""

    def __init__(
        self,
        models: ModelSet,
        indexer: VocabularyIndexer,
        model_config: ModelConfig,
        noise_sampler: NoiseSampler | None = None,
        chunker: TextChunker | None = None,
        assembler: AudioAssembler | None = None,
        run_logger: RunLogger | None = None,
        stage_callback: Callable[[int, ChunkStage], None] | None = None,
        concurrent_encoders: bool = False,
    ) -> None:
        """Initialize stage collaborators and optional logging/progress hooks."""

        self.models = models
        self.indexer = indexer
        self.model_config = model_config
        self.noise_sampler = noise_sampler or NoiseSampler()
        self.chunker = chunker or TextChunker()
        self.assembler = assembler or AudioAssembler()
        self._run_logger = run_logger
        self._stage_callback = stage_callback
        self._concurrent_encoders = concurrent_encoders

    def plan_chunks(self, text: str, language: str) -> list[TextChunk]:
        """Split text into chunks bounded by the language's chunk length."""

        return self.chunker.chunk(text, max_chunk_length(language))

    def synthesize(
        self,
        text: str,
        language: str,
        style: VoiceStyle,
        config: SynthesisConfig,
    ) -> SynthesisResult:
        """Synthesize all chunks of `text` in order and assemble the result.

        The first failing chunk aborts the call; audio from earlier chunks is
        discarded.
        """

        config.validate()
        chunks = self.plan_chunks(text, language)
        if not chunks:
            raise InvalidConfigurationError(
                stage="chunk",
                detail="Input text is empty after trimming; nothing to synthesize.",
            )
        if self._run_logger is not None:
            self._run_logger.log_event(
                "chunk", "planned", chunks=len(chunks), language=language, voice=style.code
            )

        results = [self.synthesize_chunk(chunk, language, style, config) for chunk in chunks]
        return self.assembler.assemble_chunks(
            results,
            silence_duration=config.silence_duration,
            sample_rate=self.model_config.sample_rate,
        )

    def synthesize_chunk(
        self,
        chunk: TextChunk,
        language: str,
        style: VoiceStyle,
        config: SynthesisConfig,
    ) -> ChunkSynthesis:
        """Run one chunk through every stage and return its waveform and duration."""

        token_ids, text_mask = self._run_stage(
            "encode", chunk.index, self.indexer.encode, [chunk.text], [language]
        )
        state = ChunkState(
            chunk=chunk,
            stage=ChunkStage.ENCODED,
            token_ids=token_ids,
            text_mask=text_mask,
        )
        self._notify(state)

        if self._concurrent_encoders:
            with ThreadPoolExecutor(max_workers=2) as pool:
                durations_future = pool.submit(
                    self._run_stage,
                    "duration",
                    chunk.index,
                    self.predict_durations,
                    token_ids,
                    text_mask,
                    style,
                    config.speech_speed,
                )
                embedding_future = pool.submit(
                    self._run_stage,
                    "text_encoding",
                    chunk.index,
                    self.encode_text,
                    token_ids,
                    text_mask,
                    style,
                )
                durations = durations_future.result()
                text_embedding = embedding_future.result()
        else:
            durations = self._run_stage(
                "duration",
                chunk.index,
                self.predict_durations,
                token_ids,
                text_mask,
                style,
                config.speech_speed,
            )
            text_embedding = None

        state.durations = durations
        state.stage = ChunkStage.DURATION_PREDICTED
        self._notify(state)

        if text_embedding is None:
            text_embedding = self._run_stage(
                "text_encoding", chunk.index, self.encode_text, token_ids, text_mask, style
            )
        state.text_embedding = text_embedding
        state.stage = ChunkStage.TEXT_ENCODED
        self._notify(state)

        latent, latent_mask = self._run_stage(
            "noise", chunk.index, self.noise_sampler.sample_for, durations, self.model_config
        )
        state.latent = latent
        state.latent_mask = latent_mask
        state.stage = ChunkStage.DENOISING
        self._notify(state)
        state.latent = self._run_stage(
            "denoise",
            chunk.index,
            self.denoise,
            latent,
            latent_mask,
            text_embedding,
            text_mask,
            style,
            config.denoising_steps,
        )

        state.waveform = self._run_stage("vocode", chunk.index, self.vocode, state.latent)
        state.stage = ChunkStage.VOCODED
        self._notify(state)

        result = ChunkSynthesis(
            index=chunk.index,
            waveform=state.waveform,
            duration=float(durations[0]),
        )
        state.latent = None
        state.stage = ChunkStage.DONE
        self._notify(state)
        return result

    def predict_durations(
        self,
        token_ids: Tensor,
        text_mask: Tensor,
        style: VoiceStyle,
        speech_speed: float,
    ) -> np.ndarray:
        """Predict per-row durations in seconds and divide them by `speech_speed`."""

        outputs = self.models.duration_predictor.run(
            {"text_ids": token_ids, "style_dp": style.dp, "text_mask": text_mask}
        )
        raw = first_output(outputs, "duration")
        batch = token_ids.shape[0]
        if raw.size != batch:
            raise ModelExecutionError(
                stage="duration",
                detail=f"Duration predictor returned shape {list(raw.shape)} for batch {batch}.",
            )
        return raw.flat().astype(np.float64) / speech_speed

    def encode_text(self, token_ids: Tensor, text_mask: Tensor, style: VoiceStyle) -> Tensor:
        """Compute the text embedding conditioning the denoiser."""

        outputs = self.models.text_encoder.run(
            {"text_ids": token_ids, "style_ttl": style.ttl, "text_mask": text_mask}
        )
        embedding = first_output(outputs, "text_encoding")
        if embedding.dtype != np.float32 or embedding.shape[:1] != token_ids.shape[:1]:
            raise ModelExecutionError(
                stage="text_encoding",
                detail=(
                    f"Text encoder returned {embedding.dtype} shape {list(embedding.shape)} "
                    f"for batch {token_ids.shape[0]}."
                ),
            )
        return embedding

    def denoise(
        self,
        latent: Tensor,
        latent_mask: Tensor,
        text_embedding: Tensor,
        text_mask: Tensor,
        style: VoiceStyle,
        total_steps: int,
    ) -> Tensor:
        """Refine the latent for `total_steps` steps; zero steps returns it unchanged.

        The vector estimator returns the next latent state itself, which
        replaces the current latent before the following step.
        """

        batch = latent.shape[0]
        total_step_tensor = Tensor.float32(np.full(batch, total_steps, dtype=np.float32))
        current = latent
        for step in range(total_steps):
            outputs = self.models.vector_estimator.run(
                {
                    "noisy_latent": current,
                    "text_emb": text_embedding,
                    "style_ttl": style.ttl,
                    "text_mask": text_mask,
                    "latent_mask": latent_mask,
                    "total_step": total_step_tensor,
                    "current_step": Tensor.float32(np.full(batch, step, dtype=np.float32)),
                }
            )
            next_latent = first_output(outputs, "denoise")
            if next_latent.shape != latent.shape or next_latent.dtype != np.float32:
                raise ModelExecutionError(
                    stage="denoise",
                    detail=(
                        f"Vector estimator step {step} returned {next_latent.dtype} "
                        f"shape {list(next_latent.shape)}; expected float32 {list(latent.shape)}."
                    ),
                )
            current = next_latent
        return current

    def vocode(self, latent: Tensor) -> np.ndarray:
        """Decode the final latent into waveform samples for the first batch row."""

        outputs = self.models.vocoder.run({"latent": latent})
        waveform = first_output(outputs, "vocode")
        batch = latent.shape[0]
        if waveform.size == 0 or waveform.size % batch != 0:
            raise ModelExecutionError(
                stage="vocode",
                detail=f"Vocoder returned shape {list(waveform.shape)} for batch {batch}.",
            )
        return waveform.flat().astype(np.float32).reshape(batch, -1)[0]

    def _notify(self, state: ChunkState) -> None:
        """Report a stage transition to the optional progress callback."""

        if self._stage_callback is not None:
            self._stage_callback(state.chunk.index, state.stage)

    def _run_stage(
        self,
        stage: str,
        chunk_index: int,
        action: Callable[..., _StageResult],
        *args: object,
    ) -> _StageResult:
        """Run one stage with logging and stage-scoped error conversion."""

        if self._run_logger is not None:
            self._run_logger.log_stage_start(stage, chunk=chunk_index)
        try:
            result = action(*args)
        except ModelExecutionError as exc:
            self._log_failure(stage, chunk_index, exc)
            if exc.stage != stage:
                raise ModelExecutionError(stage=stage, detail=exc.detail, hint=exc.hint) from exc
            raise
        except PipelineStageError as exc:
            self._log_failure(stage, chunk_index, exc)
            raise
        except Exception as exc:
            self._log_failure(stage, chunk_index, exc)
            raise ModelExecutionError(
                stage=stage,
                detail=f"Stage `{stage}` failed for chunk {chunk_index}: {exc}",
            ) from exc
        if self._run_logger is not None:
            self._run_logger.log_stage_complete(stage, chunk=chunk_index)
        return result

    def _log_failure(self, stage: str, chunk_index: int, exc: Exception) -> None:
        if self._run_logger is not None:
            self._run_logger.log_stage_failure(stage, type(exc).__name__, chunk=chunk_index)
