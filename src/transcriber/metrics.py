"""Prometheus metrics helpers."""

from __future__ import annotations

import logging

from prometheus_client import Counter, Histogram, Summary, start_http_server

LOGGER = logging.getLogger("transcriber.metrics")

POLL_CYCLE_COUNTER = Counter(
    "transcriber_poll_cycles_total",
    "Poll ticks by outcome",
    labelnames=("outcome",),
)

FILE_COUNTER = Counter(
    "transcriber_files_total",
    "Files handled by the watcher",
    labelnames=("status",),
)

DELIVERY_COUNTER = Counter(
    "transcriber_deliveries_total",
    "Transcript deliveries by destination",
    labelnames=("target", "status"),
)

TRANSCRIBE_DURATION = Histogram(
    "transcriber_transcription_seconds",
    "Time spent transcribing one recording",
    buckets=(1, 5, 15, 30, 60, 120, 300, 600, 1800),
)

CHUNK_DURATION = Summary(
    "transcriber_chunk_inference_seconds",
    "Engine inference time per chunk",
)


def start_metrics_server(port: int | None) -> bool:
    if not port:
        return False
    start_http_server(port)
    LOGGER.info("Serving Prometheus metrics on port %s", port)
    return True
