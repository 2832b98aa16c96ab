"""Pick the configured destination once and route every transcript to it."""

from __future__ import annotations

import logging
from datetime import datetime

from ..metrics import DELIVERY_COUNTER
from ..settings import Settings
from .base import Destination
from .fabric import FabricDestination
from .journal import JournalDestination
from .tana import TanaDestination

LOGGER = logging.getLogger("transcriber.delivery")


def build_destination(settings: Settings) -> Destination:
    target = settings.transcription_target
    if target == "fabric":
        return FabricDestination(settings.fabric_api_key)
    if target == "tana":
        return TanaDestination(settings.tana_api_token, settings.tana_supertag_id)
    if target == "obsidian":
        return JournalDestination(settings.obsidian_vault_root)
    raise ValueError(f"Unknown transcription target: {target}")


class DeliveryRouter:
    def __init__(self, destination: Destination) -> None:
        self.destination = destination

    @classmethod
    def from_settings(cls, settings: Settings) -> "DeliveryRouter":
        return cls(build_destination(settings))

    @property
    def target(self) -> str:
        return self.destination.name

    async def deliver(self, transcript: str, timestamp: datetime) -> None:
        """Single attempt; failures propagate to the caller."""

        try:
            await self.destination.deliver(transcript, timestamp)
        except Exception:
            DELIVERY_COUNTER.labels(target=self.target, status="error").inc()
            raise
        DELIVERY_COUNTER.labels(target=self.target, status="success").inc()

    async def aclose(self) -> None:
        await self.destination.aclose()
