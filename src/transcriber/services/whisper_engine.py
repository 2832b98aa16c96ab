"""Whisper (faster-whisper) loader + mock mode."""

from __future__ import annotations

import logging
import threading
from typing import Iterable, Protocol

import numpy as np

from ..settings import Settings

LOGGER = logging.getLogger("transcriber.whisper")


class SpeechEngine(Protocol):
    def invoke(self, chunk: np.ndarray) -> str:
        """Return the text spoken in one mono 16 kHz chunk."""


class WhisperEngine:
    """Holds one Whisper model for the lifetime of the process."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self._lock = threading.Lock()
        self._model = None
        self._mock = settings.whisper_mock_transcriber
        if self._mock:
            LOGGER.warning(
                "Whisper mock mode enabled (set WHISPER_USE_MOCK=0 to enable real transcription)."
            )

    @property
    def is_loaded(self) -> bool:
        return self._mock or self._model is not None

    def load(self) -> "WhisperEngine":
        if self._mock:
            return self
        if self._model is None:
            with self._lock:
                if self._model is None:
                    from faster_whisper import WhisperModel

                    LOGGER.info("Loading Whisper model '%s'...", self.settings.whisper_model)
                    try:
                        self._model = WhisperModel(
                            self.settings.whisper_model,
                            device=self.settings.whisper_device,
                            compute_type=self.settings.whisper_compute_type,
                        )
                    except Exception as exc:  # pragma: no cover - hardware/env dep
                        LOGGER.error(
                            "Failed to load Whisper model '%s': %s",
                            self.settings.whisper_model,
                            exc,
                        )
                        raise
        return self

    def invoke(self, chunk: np.ndarray) -> str:
        if self._mock:
            return f"[mock transcript {len(chunk)} samples]"
        if self._model is None:
            raise RuntimeError("Whisper model is not loaded")
        segments, _info = self._model.transcribe(
            audio=np.asarray(chunk, dtype=np.float32),
            language=self.settings.whisper_language,
            beam_size=5,
        )
        return _join_segments(segments)


def _join_segments(segments: Iterable) -> str:
    pieces = [segment.text.strip() for segment in segments]
    return " ".join(piece for piece in pieces if piece).strip()
