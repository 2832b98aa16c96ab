import asyncio
from datetime import datetime, timezone

import numpy as np
import pytest
import soundfile as sf

from src.transcriber.audio.normalizer import AudioNormalizer, NormalizationError
from src.transcriber.delivery.base import DeliveryError, Destination
from src.transcriber.delivery.router import DeliveryRouter
from src.transcriber.pipeline import TranscriptionPipeline
from src.transcriber.schemas import RemoteFile
from src.transcriber.services.transcription import Transcriber
from src.transcriber.watcher import DriveWatcher


class EchoEngine:
    def __init__(self, fail=False):
        self.fail = fail
        self.calls = 0

    def invoke(self, chunk):
        self.calls += 1
        if self.fail:
            raise RuntimeError("inference failed")
        return f"chunk{self.calls}"


class MemoryDestination(Destination):
    name = "memory"

    def __init__(self, fail=False):
        self.fail = fail
        self.entries = []

    async def deliver(self, transcript, timestamp):
        if self.fail:
            raise DeliveryError("remote said no")
        self.entries.append((transcript, timestamp))


class LocalStore:
    """Serves WAV fixtures from a dict and records archive moves."""

    def __init__(self, sources):
        self.sources = sources
        self.moved = []

    async def list_audio_files(self, folder_id):
        return [RemoteFile(id=name, name=name, mimeType="audio/wav") for name in self.sources]

    async def download(self, file, destination):
        destination.write_bytes(self.sources[file.name].read_bytes())
        return destination

    async def move_to_folder(self, file_id, folder_id):
        self.moved.append(file_id)


def _wav(path, seconds):
    sf.write(str(path), np.zeros(int(16_000 * seconds), dtype=np.float32), 16_000)
    return path


def _pipeline(engine, destination, chunk_samples=16_000):
    return TranscriptionPipeline(
        AudioNormalizer(),
        Transcriber(engine, chunk_samples=chunk_samples),
        DeliveryRouter(destination),
    )


def test_process_delivers_with_parsed_timestamp(tmp_path):
    destination = MemoryDestination()
    when = datetime(2025, 6, 15, 13, 7)
    asyncio.run(_pipeline(EchoEngine(), destination).process(_wav(tmp_path / "a.wav", 2.5), when))
    assert destination.entries == [("chunk1 chunk2 chunk3", when)]


def test_process_substitutes_current_time(tmp_path):
    destination = MemoryDestination()
    before = datetime.now(timezone.utc).replace(tzinfo=None, second=0, microsecond=0)
    asyncio.run(_pipeline(EchoEngine(), destination).process(_wav(tmp_path / "a.wav", 0.5), None))
    (_, stamp), = destination.entries
    assert stamp.tzinfo is None
    assert stamp >= before


def test_unreadable_file_fails_before_delivery(tmp_path):
    destination = MemoryDestination()
    bad = tmp_path / "bad.wav"
    bad.write_bytes(b"garbage")
    with pytest.raises(NormalizationError):
        asyncio.run(_pipeline(EchoEngine(), destination).process(bad, None))
    assert destination.entries == []


def test_transcription_failure_is_never_archived(tmp_path):
    store = LocalStore({"2025-06-15T09-00.wav": _wav(tmp_path / "one.wav", 1)})
    destination = MemoryDestination()
    watcher = DriveWatcher(
        store,
        _pipeline(EchoEngine(fail=True), destination),
        folder_id="in",
        archive_folder_id="done",
        scratch_dir=tmp_path / "scratch",
    )
    assert asyncio.run(watcher.poll_once()) == 0
    assert store.moved == []
    assert destination.entries == []


def test_delivery_failure_does_not_block_next_file(tmp_path):
    class FlakyDestination(MemoryDestination):
        async def deliver(self, transcript, timestamp):
            if not self.entries and not getattr(self, "failed_once", False):
                self.failed_once = True
                raise DeliveryError("first delivery rejected")
            await super().deliver(transcript, timestamp)

    store = LocalStore(
        {
            "2025-06-15T10-00.wav": _wav(tmp_path / "b.wav", 1),
            "2025-06-15T09-00.wav": _wav(tmp_path / "a.wav", 1),
        }
    )
    destination = FlakyDestination()
    watcher = DriveWatcher(
        store,
        _pipeline(EchoEngine(), destination),
        folder_id="in",
        archive_folder_id="done",
        scratch_dir=tmp_path / "scratch",
    )

    assert asyncio.run(watcher.poll_once()) == 1
    assert store.moved == ["2025-06-15T10-00.wav"]
    assert [stamp for _, stamp in destination.entries] == [datetime(2025, 6, 15, 10, 0)]
