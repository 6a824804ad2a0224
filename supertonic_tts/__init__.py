"""Top-level package for Supertonic TTS.

This package turns text into speech with a four-stage ONNX pipeline:
duration prediction, text encoding, latent denoising and vocoding. The main
entry point is `SupertonicTTS`.
"""

from .config import SynthesisConfig
from .engine import SupertonicTTS
from .models.datatypes import SynthesisResult

__all__ = ["SupertonicTTS", "SynthesisConfig", "SynthesisResult", "__version__"]

__version__ = "0.1.0"
