"""Configuration models and loaders for Supertonic TTS.

Responsibilities:
- Define per-call synthesis settings as an immutable validated dataclass.
- Load model geometry constants from `tts.json` with documented defaults.
- Provide file- and environment-based loaders for CLI runtime defaults.

Key types:
- `SynthesisConfig`: denoising steps, speech speed, and inter-chunk silence.
- `ModelConfig`: sample rate and latent geometry for the loaded models.
- `RuntimeSettings`: CLI-level defaults (asset paths, language, voice, config).
- `ConfigLoader`: static construction helpers for `RuntimeSettings`.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
import json
import math
import os
from pathlib import Path
from typing import Any, Mapping

import yaml

from .errors import AssetLoadError, InvalidConfigurationError
from .parsing import normalize_optional_string, parse_optional_float, parse_optional_int

DEFAULT_DENOISING_STEPS = 5
DEFAULT_SPEECH_SPEED = 1.05
DEFAULT_SILENCE_DURATION = 0.3

DEFAULT_SAMPLE_RATE = 24000
DEFAULT_BASE_CHUNK_SIZE = 512
DEFAULT_CHUNK_COMPRESS_FACTOR = 2
DEFAULT_LATENT_DIM = 512

DEFAULT_MODEL_DIR = Path("assets/onnx")
DEFAULT_VOICE_STYLE_DIR = Path("assets/voice_styles")


def _is_finite_number(value: object) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


@dataclass(frozen=True, slots=True)
class SynthesisConfig:
    """Per-call synthesis settings.

    Attributes:
        denoising_steps: Number of denoising iterations; 0 vocodes raw noise.
        speech_speed: Inverse scale applied to predicted durations.
        silence_duration: Pause in seconds inserted between chunks.
    """

    denoising_steps: int = DEFAULT_DENOISING_STEPS
    speech_speed: float = DEFAULT_SPEECH_SPEED
    silence_duration: float = DEFAULT_SILENCE_DURATION

    def validate(self) -> None:
        """Validate ranges before the values reach the pipeline."""

        if isinstance(self.denoising_steps, bool) or not isinstance(self.denoising_steps, int):
            raise InvalidConfigurationError(
                stage="config",
                detail="`denoising_steps` must be an integer.",
            )
        if self.denoising_steps < 0:
            raise InvalidConfigurationError(
                stage="config",
                detail=f"`denoising_steps` must be >= 0, got {self.denoising_steps}.",
            )
        if not _is_finite_number(self.speech_speed) or self.speech_speed <= 0:
            raise InvalidConfigurationError(
                stage="config",
                detail=f"`speech_speed` must be a positive number, got {self.speech_speed}.",
            )
        if not _is_finite_number(self.silence_duration) or self.silence_duration < 0:
            raise InvalidConfigurationError(
                stage="config",
                detail=(
                    "`silence_duration` must be a non-negative number, "
                    f"got {self.silence_duration}."
                ),
            )

    def with_overrides(
        self,
        denoising_steps: int | None = None,
        speech_speed: float | None = None,
        silence_duration: float | None = None,
    ) -> SynthesisConfig:
        """Return a copy with explicitly provided fields replaced."""

        changes: dict[str, Any] = {}
        if denoising_steps is not None:
            changes["denoising_steps"] = denoising_steps
        if speech_speed is not None:
            changes["speech_speed"] = speech_speed
        if silence_duration is not None:
            changes["silence_duration"] = silence_duration
        return replace(self, **changes)


@dataclass(frozen=True, slots=True)
class ModelConfig:
    """Model geometry constants read from `tts.json`.

    Attributes:
        sample_rate: Output sample rate in Hz (`ae.sample_rate`).
        base_chunk_size: Waveform samples per base latent frame (`ae.base_chunk_size`).
        chunk_compress_factor: Latent frames folded per step (`ttl.chunk_compress_factor`).
        latent_dim: Base latent channel count (`ttl.latent_dim`).
    """

    sample_rate: int = DEFAULT_SAMPLE_RATE
    base_chunk_size: int = DEFAULT_BASE_CHUNK_SIZE
    chunk_compress_factor: int = DEFAULT_CHUNK_COMPRESS_FACTOR
    latent_dim: int = DEFAULT_LATENT_DIM

    @property
    def chunk_size(self) -> int:
        """Waveform samples covered by one latent time step."""

        return self.base_chunk_size * self.chunk_compress_factor

    @property
    def latent_channels(self) -> int:
        """Channel count of the compressed latent."""

        return self.latent_dim * self.chunk_compress_factor

    @staticmethod
    def from_payload(payload: object, source_label: str = "Model config") -> ModelConfig:
        """Build a config from decoded `tts.json` content, using defaults for absent keys."""

        if not isinstance(payload, Mapping):
            raise AssetLoadError(
                stage="config",
                detail=f"{source_label} must contain a top-level JSON object.",
            )
        autoencoder = ModelConfig._section(payload, "ae", source_label)
        text_to_latent = ModelConfig._section(payload, "ttl", source_label)
        return ModelConfig(
            sample_rate=ModelConfig._positive_int(
                autoencoder, "sample_rate", DEFAULT_SAMPLE_RATE, source_label
            ),
            base_chunk_size=ModelConfig._positive_int(
                autoencoder, "base_chunk_size", DEFAULT_BASE_CHUNK_SIZE, source_label
            ),
            chunk_compress_factor=ModelConfig._positive_int(
                text_to_latent,
                "chunk_compress_factor",
                DEFAULT_CHUNK_COMPRESS_FACTOR,
                source_label,
            ),
            latent_dim=ModelConfig._positive_int(
                text_to_latent, "latent_dim", DEFAULT_LATENT_DIM, source_label
            ),
        )

    @staticmethod
    def from_file(path: Path) -> ModelConfig:
        """Load model geometry from a `tts.json` file."""

        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError as exc:
            raise AssetLoadError(
                stage="config",
                detail=f"Model config not found: `{path}`.",
                hint="Check that the model directory contains `tts.json`.",
            ) from exc
        except (OSError, ValueError) as exc:
            raise AssetLoadError(
                stage="config",
                detail=f"Model config `{path}` is not readable JSON: {exc}",
            ) from exc
        return ModelConfig.from_payload(payload, source_label=f"Model config `{path}`")

    @staticmethod
    def _section(payload: Mapping[str, Any], key: str, source_label: str) -> Mapping[str, Any]:
        """Return a nested section or an empty mapping when absent."""

        section = payload.get(key)
        if section is None:
            return {}
        if not isinstance(section, Mapping):
            raise AssetLoadError(
                stage="config",
                detail=f"{source_label} section `{key}` must be an object.",
            )
        return section

    @staticmethod
    def _positive_int(
        section: Mapping[str, Any], key: str, default: int, source_label: str
    ) -> int:
        """Read a positive integer field or return its documented default."""

        if key not in section or section[key] is None:
            return default
        value = section[key]
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            raise AssetLoadError(
                stage="config",
                detail=f"{source_label} field `{key}` must be a positive integer, got `{value}`.",
            )
        return value


@dataclass(slots=True)
class RuntimeSettings:
    """CLI-level defaults for one synthesis run.

    Attributes:
        model_dir: Directory with ONNX models, `tts.json`, and `unicode_indexer.json`.
        voice_style_dir: Directory with one `<voice>.json` style file per voice.
        language: Language code for synthesis.
        voice: Voice code for synthesis.
        synthesis: Per-call synthesis settings.
        seed: Optional noise seed for reproducible output.
    """

    model_dir: Path = DEFAULT_MODEL_DIR
    voice_style_dir: Path = DEFAULT_VOICE_STYLE_DIR
    language: str = "en"
    voice: str = "M1"
    synthesis: SynthesisConfig = field(default_factory=SynthesisConfig)
    seed: int | None = None

    def validate(self) -> None:
        """Validate runtime settings before engine construction."""

        if not self.language.strip():
            raise InvalidConfigurationError(stage="config", detail="`language` must be non-empty.")
        if not self.voice.strip():
            raise InvalidConfigurationError(stage="config", detail="`voice` must be non-empty.")
        self.synthesis.validate()


class ConfigLoader:
    """Factory methods for creating `RuntimeSettings` from external sources."""

    _SUPPORTED_YAML_KEYS = frozenset(
        {
            "model_dir",
            "voice_style_dir",
            "language",
            "voice",
            "denoising_steps",
            "speech_speed",
            "silence_duration",
            "seed",
        }
    )
    _ENV_KEYS = {
        "model_dir": "SUPERTONIC_MODEL_DIR",
        "voice_style_dir": "SUPERTONIC_VOICE_STYLE_DIR",
        "language": "SUPERTONIC_LANGUAGE",
        "voice": "SUPERTONIC_VOICE",
        "denoising_steps": "SUPERTONIC_DENOISING_STEPS",
        "speech_speed": "SUPERTONIC_SPEECH_SPEED",
        "silence_duration": "SUPERTONIC_SILENCE_DURATION",
        "seed": "SUPERTONIC_SEED",
    }

    @staticmethod
    def from_yaml(path: Path, base: RuntimeSettings | None = None) -> RuntimeSettings:
        """Create validated settings from a YAML file layered over `base`."""

        raw_text = path.read_text(encoding="utf-8")
        payload = yaml.safe_load(raw_text)
        if payload is None:
            payload = {}
        if not isinstance(payload, Mapping):
            raise ValueError(f"YAML config `{path}` must contain a top-level mapping/object.")

        unknown = sorted(set(payload).difference(ConfigLoader._SUPPORTED_YAML_KEYS))
        if unknown:
            key_list = ", ".join(str(key) for key in unknown)
            raise ValueError(f"YAML `{path}` includes unsupported key(s): {key_list}.")

        return ConfigLoader._build(payload, base or RuntimeSettings(), f"YAML `{path}`")

    @staticmethod
    def from_env(
        env: Mapping[str, str] | None = None, base: RuntimeSettings | None = None
    ) -> RuntimeSettings:
        """Create validated settings from `SUPERTONIC_*` environment variables."""

        env_map: Mapping[str, str] = os.environ if env is None else env
        payload = {
            key: env_map[env_key]
            for key, env_key in ConfigLoader._ENV_KEYS.items()
            if env_key in env_map
        }
        return ConfigLoader._build(payload, base or RuntimeSettings(), "Environment")

    @staticmethod
    def _build(
        payload: Mapping[str, Any], base: RuntimeSettings, source_label: str
    ) -> RuntimeSettings:
        """Layer normalized payload values over base settings and validate."""

        def _field(key: str) -> str:
            return f"{source_label} field `{key}`"

        model_dir = normalize_optional_string(payload.get("model_dir"))
        voice_style_dir = normalize_optional_string(payload.get("voice_style_dir"))
        language = normalize_optional_string(payload.get("language"))
        voice = normalize_optional_string(payload.get("voice"))

        synthesis = base.synthesis.with_overrides(
            denoising_steps=parse_optional_int(
                payload.get("denoising_steps"), _field("denoising_steps")
            ),
            speech_speed=parse_optional_float(payload.get("speech_speed"), _field("speech_speed")),
            silence_duration=parse_optional_float(
                payload.get("silence_duration"), _field("silence_duration")
            ),
        )
        seed = parse_optional_int(payload.get("seed"), _field("seed"))

        settings = RuntimeSettings(
            model_dir=Path(model_dir) if model_dir is not None else base.model_dir,
            voice_style_dir=(
                Path(voice_style_dir) if voice_style_dir is not None else base.voice_style_dir
            ),
            language=language or base.language,
            voice=voice or base.voice,
            synthesis=synthesis,
            seed=seed if seed is not None else base.seed,
        )
        settings.validate()
        return settings
