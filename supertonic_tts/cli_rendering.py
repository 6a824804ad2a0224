"""CLI output and error rendering helpers.

This module centralizes user-facing CLI presentation for command diagnostics,
catalog listings, chunk plans, and synthesis summaries.
"""

from __future__ import annotations

from pathlib import Path
from typing import NoReturn, Sequence

import typer

from .errors import PipelineStageError
from .models.datatypes import NormalizedUtterance, SynthesisResult
from .text.languages import Language
from .tts.voices import VoiceProfile


def exit_with_command_error(command_name: str, exc: Exception) -> NoReturn:
    """Print concise diagnostics for command failures and exit with code 1."""

    if isinstance(exc, PipelineStageError):
        typer.secho(
            f"{command_name} failed at stage `{exc.stage}`: {exc.detail}",
            fg=typer.colors.RED,
            err=True,
        )
        if exc.hint:
            typer.secho(f"Hint: {exc.hint}", fg=typer.colors.YELLOW, err=True)
    else:
        typer.secho(f"{command_name} failed: {exc}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1) from exc


def echo_synthesis_summary(
    result: SynthesisResult, output_path: Path, voice: str, language: Language
) -> None:
    """Print output location and audio statistics for a finished synthesis."""

    typer.echo(f"Output: {output_path}")
    typer.echo(f"Voice: {voice}")
    typer.echo(f"Language: {language.name}")
    typer.echo(f"Chunks: {result.chunk_count}")
    typer.echo(f"Duration (s): {result.duration:.2f}")
    typer.echo(f"Sample rate (Hz): {result.sample_rate}")
    typer.echo(f"Samples: {result.sample_count}")


def echo_chunk_plan(utterances: Sequence[NormalizedUtterance]) -> None:
    """Print one tagged, normalized line per chunk."""

    for index, utterance in enumerate(utterances, start=1):
        typer.echo(f"{index}. {utterance.tagged()}")


def echo_voice_list(profiles: Sequence[VoiceProfile], default_code: str) -> None:
    """Print voice catalog rows, marking the default voice."""

    for profile in profiles:
        marker = " (default)" if profile.code == default_code else ""
        typer.echo(f"{profile.code}{marker}: {profile.description}")
        typer.echo(f"    Use cases: {profile.use_cases}")


def echo_language_list(languages: Sequence[Language]) -> None:
    """Print supported language rows."""

    for language in languages:
        typer.echo(f"{language.code}: {language.name} ({language.native_name})")
