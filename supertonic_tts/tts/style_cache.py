"""Voice style loading and process-lifetime caching.

Responsibilities:
- Parse persisted voice style JSON into batch-1 float32 tensors.
- Memoize styles per voice code with at most one load per code, even when
  several threads request the same code for the first time.
"""

from __future__ import annotations

from collections.abc import Callable
from concurrent.futures import Future
import json
from pathlib import Path
import threading
from typing import Any, Mapping

import numpy as np

from ..errors import AssetLoadError, ModelExecutionError
from ..models.datatypes import Tensor, VoiceStyle
from ..telemetry.logger import RunLogger

_STYLE_KEYS = ("style_ttl", "style_dp")


def _style_tensor(payload: Mapping[str, Any], key: str, source_label: str) -> Tensor:
    """Read one `{dims, data}` entry as a float32 tensor of shape [1, X, Y]."""

    entry = payload.get(key)
    if not isinstance(entry, Mapping):
        raise AssetLoadError(stage="voice_style", detail=f"{source_label} is missing `{key}`.")

    dims = entry.get("dims")
    if (
        not isinstance(dims, list)
        or len(dims) != 3
        or not all(isinstance(dim, int) and not isinstance(dim, bool) for dim in dims)
    ):
        raise AssetLoadError(
            stage="voice_style",
            detail=f"{source_label} field `{key}.dims` must list three integers.",
        )

    try:
        values = np.asarray(entry.get("data"), dtype=np.float32).reshape(-1)
        return Tensor.float32(values, shape=(1, dims[1], dims[2]))
    except (TypeError, ValueError, ModelExecutionError) as exc:
        raise AssetLoadError(
            stage="voice_style",
            detail=f"{source_label} field `{key}.data` does not match dims {dims}: {exc}",
        ) from exc


def parse_voice_style(payload: object, code: str, source_label: str = "Voice style") -> VoiceStyle:
    """Build a `VoiceStyle` from decoded style JSON, forcing batch dimension 1."""

    if not isinstance(payload, Mapping):
        raise AssetLoadError(
            stage="voice_style",
            detail=f"{source_label} must contain a top-level JSON object.",
        )
    ttl, dp = (_style_tensor(payload, key, source_label) for key in _STYLE_KEYS)
    return VoiceStyle(code=code, ttl=ttl, dp=dp)


class VoiceStyleFileLoader:
    """Load `<voice_style_dir>/<code>.json` style files."""

    def __init__(self, voice_style_dir: Path, run_logger: RunLogger | None = None) -> None:
        self.voice_style_dir = voice_style_dir
        self._run_logger = run_logger

    def __call__(self, code: str) -> VoiceStyle:
        path = self.voice_style_dir / f"{code}.json"
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError as exc:
            raise AssetLoadError(
                stage="voice_style",
                detail=f"Voice style file not found: `{path}`.",
                hint="Check `voice_style_dir` and the requested voice code.",
            ) from exc
        except (OSError, ValueError) as exc:
            raise AssetLoadError(
                stage="voice_style",
                detail=f"Voice style file `{path}` is not readable JSON: {exc}",
            ) from exc

        style = parse_voice_style(payload, code, source_label=f"Voice style `{path}`")
        if self._run_logger is not None:
            self._run_logger.log_event("voice_style", "loaded", voice=code)
        return style


class VoiceStyleCache:
    """Thread-safe memo of voice styles keyed by voice code.

    Each code maps to a one-shot future: the first caller runs the loader and
    later callers wait on the same future, so concurrent first requests
    coalesce into one load and all receive the identical `VoiceStyle`.
    A failed load is evicted so a later call can retry.
    """

    def __init__(self, loader: Callable[[str], VoiceStyle]) -> None:
        self._loader = loader
        self._lock = threading.Lock()
        self._entries: dict[str, Future[VoiceStyle]] = {}

    def get(self, code: str) -> VoiceStyle:
        """Return the cached style for `code`, loading it on first request."""

        with self._lock:
            future = self._entries.get(code)
            is_owner = future is None
            if future is None:
                future = Future()
                self._entries[code] = future

        if not is_owner:
            return future.result()

        try:
            style = self._loader(code)
        except BaseException as exc:
            with self._lock:
                if self._entries.get(code) is future:
                    del self._entries[code]
            future.set_exception(exc)
            raise
        future.set_result(style)
        return style

    def clear(self) -> None:
        """Drop all cached styles; in-flight loads still complete for their waiters."""

        with self._lock:
            self._entries.clear()

    def __contains__(self, code: object) -> bool:
        with self._lock:
            future = self._entries.get(code)  # type: ignore[arg-type]
        return future is not None and future.done() and future.exception() is None

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
