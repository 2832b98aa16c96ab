"""Chunked transcription of a normalized waveform."""

from __future__ import annotations

import asyncio
import logging
import re
import time

from ..audio.chunker import CHUNK_SAMPLES, chunk_count, iter_chunks
from ..audio.types import Waveform
from ..metrics import CHUNK_DURATION, TRANSCRIBE_DURATION
from .whisper_engine import SpeechEngine

LOGGER = logging.getLogger("transcriber.transcription")

_WHITESPACE = re.compile(r"\s+")


class TranscriptionError(RuntimeError):
    pass


def normalize_whitespace(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()


def join_transcripts(pieces: list[str]) -> str:
    return normalize_whitespace(" ".join(pieces))


class Transcriber:
    """Feeds a waveform to the engine one chunk at a time."""

    def __init__(self, engine: SpeechEngine, chunk_samples: int = CHUNK_SAMPLES) -> None:
        self.engine = engine
        self.chunk_samples = chunk_samples

    async def transcribe(self, waveform: Waveform) -> str:
        if len(waveform) == 0:
            LOGGER.info("Empty waveform, nothing to transcribe")
            return ""

        total = chunk_count(len(waveform), self.chunk_samples)
        LOGGER.info("Transcribing %.1fs of audio in %d chunk(s)", waveform.duration_seconds, total)
        started = time.perf_counter()
        pieces: list[str] = []
        for chunk in iter_chunks(waveform, self.chunk_samples):
            LOGGER.debug("Processing chunk %d/%d", chunk.index + 1, total)
            chunk_started = time.perf_counter()
            try:
                text = await asyncio.to_thread(self.engine.invoke, chunk.samples)
            except Exception as exc:
                raise TranscriptionError(
                    f"Engine failed on chunk {chunk.index + 1}/{total}: {exc}"
                ) from exc
            CHUNK_DURATION.observe(time.perf_counter() - chunk_started)
            pieces.append(text or "")
        TRANSCRIBE_DURATION.observe(time.perf_counter() - started)
        return join_transcripts(pieces)


__all__ = ["Transcriber", "TranscriptionError", "join_transcripts", "normalize_whitespace"]
