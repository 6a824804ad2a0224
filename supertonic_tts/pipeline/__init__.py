"""Synthesis stage orchestration."""

from .orchestrator import ChunkStage, ChunkState, SynthesisOrchestrator

__all__ = ["SynthesisOrchestrator", "ChunkStage", "ChunkState"]
