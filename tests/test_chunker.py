import math

import numpy as np
import pytest

from src.transcriber.audio.chunker import CHUNK_SAMPLES, chunk_count, iter_chunks
from src.transcriber.audio.types import Waveform


@pytest.mark.parametrize("length,size", [(10, 3), (9, 3), (1, 5), (CHUNK_SAMPLES * 2 + 7, CHUNK_SAMPLES)])
def test_chunks_cover_waveform_exactly(length, size):
    samples = np.arange(length, dtype=np.float32)
    chunks = list(iter_chunks(Waveform(samples), size))

    assert len(chunks) == math.ceil(length / size) == chunk_count(length, size)
    assert all(len(chunk) == size for chunk in chunks[:-1])
    assert 0 < len(chunks[-1]) <= size
    assert [chunk.index for chunk in chunks] == list(range(len(chunks)))
    for previous, current in zip(chunks, chunks[1:]):
        assert previous.end == current.start
    np.testing.assert_array_equal(np.concatenate([chunk.samples for chunk in chunks]), samples)


def test_empty_waveform_has_no_chunks():
    assert list(iter_chunks(Waveform(np.array([], dtype=np.float32)))) == []


def test_default_chunk_is_thirty_seconds():
    assert CHUNK_SAMPLES == 30 * 16_000


def test_waveform_rejects_multichannel():
    with pytest.raises(ValueError):
        Waveform(np.zeros((10, 2), dtype=np.float32))
