"""Module entrypoint for running Supertonic TTS as ``python -m supertonic_tts``."""

from __future__ import annotations

from supertonic_tts.cli import main


if __name__ == "__main__":
    main()
