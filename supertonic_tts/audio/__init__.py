"""Audio assembly and serialization components."""

from .assembler import AudioAssembler
from .wav import WavEncoder, decode_wav_bytes

__all__ = ["AudioAssembler", "WavEncoder", "decode_wav_bytes"]
