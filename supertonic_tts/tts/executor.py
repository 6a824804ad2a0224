"""Model executor interfaces and ONNX Runtime-backed implementation.

Responsibilities:
- Define the protocol for running one neural network on named tensors.
- Load the four pipeline networks from a model directory.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Protocol, Sequence

import onnxruntime

from ..errors import AssetLoadError, ModelExecutionError
from ..models.datatypes import Tensor

DURATION_PREDICTOR = "duration_predictor"
TEXT_ENCODER = "text_encoder"
VECTOR_ESTIMATOR = "vector_estimator"
VOCODER = "vocoder"
MODEL_NAMES = (DURATION_PREDICTOR, TEXT_ENCODER, VECTOR_ESTIMATOR, VOCODER)


class ModelExecutor(Protocol):
    """Protocol for opaque network runners."""

    def run(self, inputs: Mapping[str, Tensor]) -> Mapping[str, Tensor]:
        """Run the network and return outputs in declaration order."""


class OnnxModelExecutor:
    """Run one ONNX network through an `onnxruntime.InferenceSession`."""

    def __init__(self, model_path: Path, providers: Sequence[str] | None = None) -> None:
        """Create the inference session for `model_path`."""

        if not model_path.is_file():
            raise AssetLoadError(
                stage="model",
                detail=f"Model file not found: `{model_path}`.",
                hint="Check that the model directory contains all four `.onnx` networks.",
            )
        self.model_path = model_path
        try:
            self._session = onnxruntime.InferenceSession(
                str(model_path),
                providers=list(providers) if providers else ["CPUExecutionProvider"],
            )
        except Exception as exc:
            raise AssetLoadError(
                stage="model",
                detail=f"Failed to load model `{model_path}`: {exc}",
            ) from exc
        self.output_names = [output.name for output in self._session.get_outputs()]

    def run(self, inputs: Mapping[str, Tensor]) -> Mapping[str, Tensor]:
        feeds = {name: tensor.array for name, tensor in inputs.items()}
        try:
            outputs = self._session.run(None, feeds)
        except Exception as exc:
            raise ModelExecutionError(
                stage=self.model_path.stem,
                detail=f"Inference failed for `{self.model_path.name}`: {exc}",
            ) from exc
        return {
            name: Tensor.from_array(value)
            for name, value in zip(self.output_names, outputs)
        }


@dataclass(frozen=True, slots=True)
class ModelSet:
    """The four networks driven by the synthesis orchestrator."""

    duration_predictor: ModelExecutor
    text_encoder: ModelExecutor
    vector_estimator: ModelExecutor
    vocoder: ModelExecutor


ExecutorFactory = Callable[[Path], ModelExecutor]


def load_model_set(model_dir: Path, factory: ExecutorFactory | None = None) -> ModelSet:
    """Load `<model_dir>/<name>.onnx` for each pipeline network."""

    build = factory or OnnxModelExecutor
    executors = {name: build(model_dir / f"{name}.onnx") for name in MODEL_NAMES}
    return ModelSet(**executors)


def first_output(outputs: Mapping[str, Tensor], stage: str) -> Tensor:
    """Return the positional first output of an executor call."""

    for tensor in outputs.values():
        return tensor
    raise ModelExecutionError(stage=stage, detail=f"`{stage}` returned no outputs.")
