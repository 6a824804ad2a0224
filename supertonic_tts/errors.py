"""Domain exceptions for synthesis pipeline and CLI diagnostics."""

from __future__ import annotations


class PipelineStageError(RuntimeError):
    """Raised when a specific synthesis stage fails."""

    def __init__(
        self,
        *,
        stage: str,
        detail: str,
        hint: str | None = None,
    ) -> None:
        """Initialize a stage-scoped pipeline error."""

        super().__init__(detail)
        self.stage = stage
        self.detail = detail
        self.hint = hint


class NotInitializedError(PipelineStageError):
    """Raised when synthesis is requested before the engine is initialized."""

    def __init__(self, detail: str = "Engine is not initialized.") -> None:
        super().__init__(
            stage="initialize",
            detail=detail,
            hint="Call `initialize(model_dir, voice_style_dir)` first.",
        )


class AssetLoadError(PipelineStageError):
    """Raised when configuration, vocabulary, voice style, or model data is unusable."""


class InvalidConfigurationError(PipelineStageError):
    """Raised when out-of-range configuration values reach the pipeline."""


class ModelExecutionError(PipelineStageError):
    """Raised when a model executor call fails or returns unexpected tensors."""
