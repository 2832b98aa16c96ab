"""Turn arbitrary recordings into the mono 16 kHz waveform Whisper expects."""

from __future__ import annotations

import asyncio
import logging
import math
from pathlib import Path

import librosa
import numpy as np
import soundfile as sf

from .types import SAMPLE_RATE, Waveform

LOGGER = logging.getLogger("transcriber.audio")

CANONICAL_SUFFIX = ".wav"
# mono = sqrt(2) * sum(channels) / n; for stereo sqrt(2) * (a + b) / 2.
CHANNEL_MERGE_SCALE = math.sqrt(2)


class NormalizationError(RuntimeError):
    pass


class AudioNormalizer:
    def __init__(self, sample_rate: int = SAMPLE_RATE, ffmpeg_binary: str = "ffmpeg") -> None:
        self.sample_rate = sample_rate
        self.ffmpeg_binary = ffmpeg_binary

    def needs_transcode(self, path: Path) -> bool:
        return path.suffix.lower() != CANONICAL_SUFFIX

    async def transcode(self, input_path: Path) -> Path:
        """Convert ``input_path`` into a sibling WAV file at the target rate."""

        output_path = input_path.with_suffix(CANONICAL_SUFFIX)
        cmd = [
            self.ffmpeg_binary,
            "-i",
            str(input_path),
            "-ar",
            str(self.sample_rate),
            "-map_metadata",
            "-1",
            "-y",
            str(output_path),
            "-loglevel",
            "error",
        ]
        LOGGER.info("Converting %s to WAV", input_path.name)
        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise NormalizationError(f"Could not start ffmpeg: {exc}") from exc
        _, stderr = await proc.communicate()
        if proc.returncode != 0 or not output_path.exists():
            message = stderr.decode("utf-8", errors="replace").strip() or "ffmpeg failed to convert audio"
            raise NormalizationError(message)
        return output_path

    async def normalize(self, input_path: Path) -> Waveform:
        """Transcode when needed, then load ``input_path`` as a mono waveform.

        The intermediate WAV produced by ffmpeg is removed once loaded; the
        original input is left for the caller to clean up.
        """

        input_path = Path(input_path)
        if not self.needs_transcode(input_path):
            return await self.load(input_path)
        wav_path = await self.transcode(input_path)
        try:
            return await self.load(wav_path)
        finally:
            wav_path.unlink(missing_ok=True)

    async def load(self, input_path: Path) -> Waveform:
        try:
            audio, source_rate = await asyncio.to_thread(
                sf.read, str(input_path), dtype="float32", always_2d=True
            )
        except (RuntimeError, OSError) as exc:
            raise NormalizationError(f"Unreadable audio file {input_path.name}: {exc}") from exc
        mono = merge_channels(audio)
        if source_rate != self.sample_rate:
            LOGGER.debug("Resampling %s from %s Hz", input_path.name, source_rate)
            mono = resample(mono, source_rate, self.sample_rate)
        return Waveform(samples=mono, sample_rate=self.sample_rate)


def merge_channels(audio: np.ndarray) -> np.ndarray:
    """Collapse ``(frames, channels)`` audio to mono with loudness scaling."""

    data = np.asarray(audio, dtype=np.float32)
    if data.ndim == 1:
        return data
    channels = data.shape[1]
    if channels == 1:
        return data[:, 0]
    merged = CHANNEL_MERGE_SCALE * data.sum(axis=1, dtype=np.float64) / channels
    return merged.astype(np.float32)


def resample(samples: np.ndarray, source_rate: int, target_rate: int) -> np.ndarray:
    if source_rate == target_rate or samples.size == 0:
        return samples.astype(np.float32, copy=False)
    resampled = librosa.resample(
        np.asarray(samples, dtype=np.float32), orig_sr=source_rate, target_sr=target_rate
    )
    return resampled.astype(np.float32, copy=False)


__all__ = ["AudioNormalizer", "NormalizationError", "merge_channels", "resample"]
