"""Discover new recordings in the source folder and drive them to the archive."""

from __future__ import annotations

import logging
import tempfile
from pathlib import Path
from typing import List

from .filename import parse_timestamp_from_filename
from .metrics import FILE_COUNTER
from .pipeline import FileProcessor
from .schemas import RemoteFile
from .services.drive import FileStore

LOGGER = logging.getLogger("transcriber.watcher")


def default_scratch_dir() -> Path:
    return Path(tempfile.gettempdir()) / "audio-transcriber"


def order_for_processing(files: List[RemoteFile]) -> List[RemoteFile]:
    """Names embed the recording time, so name order is chronological order."""

    return sorted(files, key=lambda item: item.name)


class DriveWatcher:
    def __init__(
        self,
        store: FileStore,
        processor: FileProcessor,
        *,
        folder_id: str,
        archive_folder_id: str,
        scratch_dir: Path | None = None,
    ) -> None:
        self.store = store
        self.processor = processor
        self.folder_id = folder_id
        self.archive_folder_id = archive_folder_id
        self.scratch_dir = Path(scratch_dir) if scratch_dir else default_scratch_dir()

    async def poll_once(self) -> int:
        """Process every eligible file once, in name order.

        Returns the number of files archived in this cycle.
        """

        files = await self.store.list_audio_files(self.folder_id)
        if not files:
            LOGGER.info("No new audio files")
            return 0
        LOGGER.info("Found %d audio files to check...", len(files))

        archived = 0
        for file in order_for_processing(files):
            if not file.id:
                continue
            if await self.handle_file(file):
                archived += 1
        return archived

    async def handle_file(self, file: RemoteFile) -> bool:
        LOGGER.info("Found new file: %s (ID: %s)", file.name, file.id)
        timestamp = parse_timestamp_from_filename(file.name)
        LOGGER.debug("Parsed timestamp from filename: %s", timestamp)

        self.scratch_dir.mkdir(parents=True, exist_ok=True)
        local_path = self.scratch_dir / Path(file.name).name
        try:
            await self.store.download(file, local_path)
            await self.processor.process(local_path, timestamp)
            await self.store.move_to_folder(file.id, self.archive_folder_id)
        except Exception:
            LOGGER.exception("Error processing file %s", file.name)
            FILE_COUNTER.labels(status="error").inc()
            return False
        finally:
            try:
                local_path.unlink(missing_ok=True)
            except OSError as exc:
                LOGGER.error("Error removing temporary file %s: %s", local_path, exc)
        FILE_COUNTER.labels(status="archived").inc()
        return True
