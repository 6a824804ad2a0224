"""Model execution, voice style, and latent noise components.

This package contains the executor protocol, the ONNX-backed executor, voice
catalog and style cache, and the initial noise sampler used by the pipeline.
"""

from .executor import ModelExecutor, ModelSet, OnnxModelExecutor, load_model_set
from .noise import NoiseSampler
from .style_cache import VoiceStyleCache, VoiceStyleFileLoader, parse_voice_style
from .voices import DEFAULT_VOICE_CODE, VOICE_PROFILES, VoiceProfile, resolve_voice

__all__ = [
    "ModelExecutor",
    "ModelSet",
    "OnnxModelExecutor",
    "load_model_set",
    "NoiseSampler",
    "VoiceStyleCache",
    "VoiceStyleFileLoader",
    "parse_voice_style",
    "VoiceProfile",
    "VOICE_PROFILES",
    "DEFAULT_VOICE_CODE",
    "resolve_voice",
]
