"""Split waveforms into the fixed windows the engine accepts."""

from __future__ import annotations

import math
from typing import Iterator

from .types import SAMPLE_RATE, AudioChunk, Waveform

# Whisper consumes at most 30 seconds of audio per call.
CHUNK_SECONDS = 30
CHUNK_SAMPLES = CHUNK_SECONDS * SAMPLE_RATE


def chunk_count(total_samples: int, chunk_samples: int = CHUNK_SAMPLES) -> int:
    if chunk_samples <= 0:
        raise ValueError("chunk_samples must be positive")
    return math.ceil(total_samples / chunk_samples)


def iter_chunks(waveform: Waveform, chunk_samples: int = CHUNK_SAMPLES) -> Iterator[AudioChunk]:
    """Yield consecutive non-empty chunks covering ``waveform`` exactly once.

    Chunks are views into the waveform buffer, not copies.
    """

    total = len(waveform)
    for index in range(chunk_count(total, chunk_samples)):
        start = index * chunk_samples
        end = min(start + chunk_samples, total)
        yield AudioChunk(index=index, start=start, end=end, samples=waveform.samples[start:end])


__all__ = ["CHUNK_SAMPLES", "CHUNK_SECONDS", "chunk_count", "iter_chunks"]
