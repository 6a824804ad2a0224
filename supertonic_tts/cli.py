"""Command-line interface for Supertonic TTS.

Responsibilities:
- Expose user-facing commands for synthesis and catalog inspection.
- Resolve settings from CLI options, YAML config, and environment.

Key public functions:
- `app`: Typer application instance.
- `main`: invoke the Typer application.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from .cli_rendering import (
    echo_chunk_plan,
    echo_language_list,
    echo_synthesis_summary,
    echo_voice_list,
    exit_with_command_error,
)
from .config import ConfigLoader, RuntimeSettings
from .engine import SupertonicTTS
from .errors import InvalidConfigurationError, PipelineStageError
from .parsing import normalize_optional_string
from .telemetry.logger import RunLogger
from .text.chunking import TextChunker
from .text.languages import (
    SUPPORTED_LANGUAGES,
    language_for_code,
    max_chunk_length,
    require_supported_language,
    sample_text,
)
from .text.normalizer import TextNormalizer
from .tts.voices import DEFAULT_VOICE_CODE, VOICE_PROFILES, resolve_voice

app = typer.Typer(
    name="supertonic-tts",
    no_args_is_help=True,
    help="Supertonic TTS CLI.",
)


def _load_settings(config_path: Path | None) -> RuntimeSettings:
    """Load env defaults, layer an optional YAML file, and map failures to stage errors."""

    try:
        settings = ConfigLoader.from_env()
        if config_path is None:
            return settings
        return ConfigLoader.from_yaml(config_path, base=settings)
    except FileNotFoundError as exc:
        raise PipelineStageError(
            stage="config",
            detail=f"Config file not found: `{config_path}`.",
            hint="Provide an existing path via `--config <path.yaml>`.",
        ) from exc
    except PipelineStageError:
        raise
    except ValueError as exc:
        raise PipelineStageError(
            stage="config",
            detail=f"Invalid configuration: {exc}",
            hint="Fix config values and rerun.",
        ) from exc


def _resolve_settings(
    config_path: Path | None,
    model_dir: Path | None,
    voice_style_dir: Path | None,
    language: str | None,
    voice: str | None,
    steps: int | None,
    speed: float | None,
    silence: float | None,
    seed: int | None,
) -> RuntimeSettings:
    """Apply explicit CLI options over YAML/env settings."""

    loaded = _load_settings(config_path)
    settings = RuntimeSettings(
        model_dir=model_dir if model_dir is not None else loaded.model_dir,
        voice_style_dir=voice_style_dir if voice_style_dir is not None else loaded.voice_style_dir,
        language=normalize_optional_string(language) or loaded.language,
        voice=normalize_optional_string(voice) or loaded.voice,
        synthesis=loaded.synthesis.with_overrides(
            denoising_steps=steps,
            speech_speed=speed,
            silence_duration=silence,
        ),
        seed=seed if seed is not None else loaded.seed,
    )
    settings.validate()
    return settings


def _read_input_text(
    text: str | None,
    text_file: Path | None,
    demo_language: str | None,
    short_demo: bool = False,
) -> str:
    """Return input text from the argument, a UTF-8 text file, or a demo sentence."""

    if short_demo and demo_language is None:
        raise InvalidConfigurationError(
            stage="input",
            detail="`--short` only applies together with `--demo`.",
        )
    if demo_language is not None:
        if text is not None or text_file is not None:
            raise InvalidConfigurationError(
                stage="input",
                detail="`--demo` cannot be combined with `TEXT` or `--text-file`.",
            )
        return sample_text(demo_language, short=short_demo)
    if text is not None and text_file is not None:
        raise InvalidConfigurationError(
            stage="input",
            detail="Pass either `TEXT` or `--text-file`, not both.",
        )
    if text_file is not None:
        try:
            return text_file.read_text(encoding="utf-8")
        except OSError as exc:
            raise InvalidConfigurationError(
                stage="input",
                detail=f"Failed to read text file `{text_file}`: {exc}",
            ) from exc
    if text is None or not text.strip():
        raise InvalidConfigurationError(
            stage="input",
            detail="No input text provided.",
            hint="Pass `TEXT`, `--text-file <path>`, or `--demo`.",
        )
    return text


@app.command("synthesize")
def synthesize_command(
    text: Annotated[
        str | None,
        typer.Argument(help="Text to synthesize. Required unless `--text-file` is provided."),
    ] = None,
    text_file: Annotated[
        Path | None,
        typer.Option("--text-file", help="Read input text from a UTF-8 file."),
    ] = None,
    out: Annotated[
        Path,
        typer.Option("--out", help="Output WAV file path."),
    ] = Path("output.wav"),
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to YAML config file with command defaults."),
    ] = None,
    model_dir: Annotated[
        Path | None,
        typer.Option("--model-dir", help="Directory with ONNX models and `tts.json`."),
    ] = None,
    voice_style_dir: Annotated[
        Path | None,
        typer.Option("--voice-style-dir", help="Directory with `<voice>.json` style files."),
    ] = None,
    language: Annotated[
        str | None,
        typer.Option("--language", help="Language code: en, ko, es, pt, or fr."),
    ] = None,
    voice: Annotated[
        str | None,
        typer.Option("--voice", help="Voice code (M1-M5, F1-F5); unknown codes use M1."),
    ] = None,
    steps: Annotated[
        int | None,
        typer.Option("--steps", help="Denoising steps; higher is slower and cleaner."),
    ] = None,
    speed: Annotated[
        float | None,
        typer.Option("--speed", help="Speech speed multiplier."),
    ] = None,
    silence: Annotated[
        float | None,
        typer.Option("--silence", help="Silence between chunks in seconds."),
    ] = None,
    seed: Annotated[
        int | None,
        typer.Option("--seed", help="Noise seed for reproducible output."),
    ] = None,
    demo: Annotated[
        bool,
        typer.Option("--demo", help="Synthesize the demo sentence for the selected language."),
    ] = False,
    short: Annotated[
        bool,
        typer.Option("--short", help="Use the short demo sentence with `--demo`."),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Log per-chunk stage events."),
    ] = False,
) -> None:
    """Synthesize text and write a 16-bit PCM WAV file."""

    try:
        settings = _resolve_settings(
            config_path=config_file,
            model_dir=model_dir,
            voice_style_dir=voice_style_dir,
            language=language,
            voice=voice,
            steps=steps,
            speed=speed,
            silence=silence,
            seed=seed,
        )
        input_text = _read_input_text(
            text, text_file, settings.language if demo else None, short_demo=short
        )
        run_logger = RunLogger(level="DEBUG" if verbose else "INFO")
        engine = SupertonicTTS(run_logger=run_logger, seed=settings.seed)
        engine.initialize(settings.model_dir, settings.voice_style_dir)
        result = engine.synthesize(
            input_text,
            language=settings.language,
            voice_code=settings.voice,
            config=settings.synthesis,
        )
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_bytes(result.to_wav_bytes())
    except Exception as exc:
        exit_with_command_error("synthesize", exc)

    echo_synthesis_summary(
        result,
        out,
        resolve_voice(settings.voice).code,
        language_for_code(settings.language),
    )


@app.command("chunks")
def chunks_command(
    text: Annotated[str, typer.Argument(help="Text to normalize and chunk.")],
    language: Annotated[
        str,
        typer.Option("--language", help="Language code: en, ko, es, pt, or fr."),
    ] = "en",
) -> None:
    """Print the normalized chunk plan for text without loading models."""

    try:
        require_supported_language(language)
        normalizer = TextNormalizer()
        chunks = TextChunker().chunk(text, max_chunk_length(language))
        utterances = [normalizer.normalize(chunk.text, language) for chunk in chunks]
    except Exception as exc:
        exit_with_command_error("chunks", exc)

    echo_chunk_plan(utterances)


@app.command("voices")
def voices_command() -> None:
    """List available voice codes."""

    echo_voice_list(VOICE_PROFILES, DEFAULT_VOICE_CODE)


@app.command("languages")
def languages_command() -> None:
    """List supported language codes."""

    echo_language_list(SUPPORTED_LANGUAGES)


def main() -> None:
    """Run the Supertonic TTS CLI."""

    app()
