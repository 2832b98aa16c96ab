"""Per-file processing: normalize, transcribe, deliver."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol

from .audio.normalizer import AudioNormalizer
from .delivery.router import DeliveryRouter
from .services.transcription import Transcriber

LOGGER = logging.getLogger("transcriber.pipeline")


class FileProcessor(Protocol):
    async def process(self, path: Path, timestamp: datetime | None) -> None: ...


def utc_now() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class TranscriptionPipeline:
    """Runs one downloaded recording through to its destination.

    Any failure propagates so the watcher leaves the source file unarchived.
    """

    def __init__(
        self,
        normalizer: AudioNormalizer,
        transcriber: Transcriber,
        router: DeliveryRouter,
    ) -> None:
        self.normalizer = normalizer
        self.transcriber = transcriber
        self.router = router

    async def process(self, path: Path, timestamp: datetime | None) -> None:
        LOGGER.info("🎵 Processing file: %s", path.name)
        waveform = await self.normalizer.normalize(path)
        transcript = await self.transcriber.transcribe(waveform)
        await self.router.deliver(transcript, timestamp or utc_now())
        LOGGER.info("Successfully processed: %s", path.name)
