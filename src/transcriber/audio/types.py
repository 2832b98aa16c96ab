"""Dataclasses shared across audio helpers."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

SAMPLE_RATE = 16_000


@dataclass(slots=True)
class Waveform:
    """Mono float32 samples at the engine sample rate."""

    samples: np.ndarray
    sample_rate: int = SAMPLE_RATE

    def __post_init__(self) -> None:
        samples = np.asarray(self.samples, dtype=np.float32)
        if samples.ndim != 1:
            raise ValueError(f"Waveform must be mono, got shape {samples.shape}")
        self.samples = samples

    def __len__(self) -> int:
        return int(self.samples.shape[0])

    @property
    def duration_seconds(self) -> float:
        return len(self) / float(self.sample_rate)


@dataclass(slots=True)
class AudioChunk:
    """Contiguous slice ``[start, end)`` of a waveform."""

    index: int
    start: int
    end: int
    samples: np.ndarray

    def __len__(self) -> int:
        return self.end - self.start
