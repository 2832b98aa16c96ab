"""Wire settings, engine, store and destination into a running pipeline."""

from __future__ import annotations

import asyncio
import logging
import signal
from pathlib import Path

from .audio.normalizer import AudioNormalizer
from .coordinator import PollingCoordinator
from .delivery.router import DeliveryRouter
from .pipeline import TranscriptionPipeline
from .services.drive import DriveClient, ServiceAccountAuth
from .services.transcription import Transcriber
from .services.whisper_engine import WhisperEngine
from .settings import Settings, resolve_service_account_file
from .watcher import DriveWatcher

LOGGER = logging.getLogger("transcriber.app")


class TranscriberApp:
    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.coordinator: PollingCoordinator | None = None

    def _install_signal_handlers(self) -> None:
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, self.stop)
            except (NotImplementedError, RuntimeError):  # pragma: no cover - non-POSIX loops
                LOGGER.debug("Signal handler for %s not supported", sig)

    def stop(self) -> None:
        if self.coordinator is not None:
            LOGGER.info("Stop requested")
            self.coordinator.stop()

    async def run(self, *, once: bool = False) -> None:
        settings = self.settings
        LOGGER.info("Transcribing to: %s", settings.transcription_target)

        LOGGER.info("Initializing whisper model...")
        engine = await asyncio.to_thread(WhisperEngine(settings).load)

        auth = ServiceAccountAuth(resolve_service_account_file(settings.google_service_account_file))
        store = DriveClient(auth)
        router = DeliveryRouter.from_settings(settings)
        pipeline = TranscriptionPipeline(AudioNormalizer(), Transcriber(engine), router)
        watcher = DriveWatcher(
            store,
            pipeline,
            folder_id=settings.google_drive_folder_id,
            archive_folder_id=settings.google_drive_processed_folder_id,
            scratch_dir=Path(settings.temp_dir) if settings.temp_dir else None,
        )
        self.coordinator = PollingCoordinator(watcher, settings.polling_interval_seconds)
        try:
            if once:
                await self.coordinator.tick()
                return
            self._install_signal_handlers()
            LOGGER.info("Starting Google Drive polling...")
            await self.coordinator.run()
        finally:
            await store.aclose()
            await router.aclose()
