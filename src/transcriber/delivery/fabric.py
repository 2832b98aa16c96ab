"""Create a Fabric notepad per transcript."""

from __future__ import annotations

import logging
import re
from datetime import datetime

import httpx

from ..schemas import CreateNotepadRequest, CreateNotepadResponse
from .base import SPEECH_EMOJI, DeliveryError, HttpDestination, format_time

LOGGER = logging.getLogger("transcriber.delivery.fabric")

FABRIC_API_BASE = "https://api.fabric.so"
INBOX_ALIAS = "@alias::inbox"
MAX_TITLE_LENGTH = 100

_FIRST_SENTENCE = re.compile(r"^[^.!?]+[.!?]")


def extract_title(text: str) -> str:
    """First sentence without its terminal mark, else the first 100 characters."""

    trimmed = text.strip()
    match = _FIRST_SENTENCE.match(trimmed)
    sentence = match.group(0).strip() if match else ""
    if 0 < len(sentence) <= MAX_TITLE_LENGTH:
        return sentence[:-1] if sentence[-1] in ".!?" else sentence
    return trimmed[:MAX_TITLE_LENGTH]


class FabricDestination(HttpDestination):
    name = "fabric"

    def __init__(
        self,
        api_key: str | None,
        *,
        base_url: str = FABRIC_API_BASE,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        super().__init__(timeout=timeout, client=client)
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")

    async def deliver(self, transcript: str, timestamp: datetime) -> None:
        if not self.api_key:
            raise DeliveryError("FABRIC_API_KEY is not configured")

        title = extract_title(transcript)
        request = CreateNotepadRequest(
            parentId=INBOX_ALIAS,
            name=title or None,
            text=f"{format_time(timestamp)} {SPEECH_EMOJI} {transcript}",
        )
        response = await self._post(
            f"{self.base_url}/v2/notepads",
            headers={"X-Api-Key": self.api_key},
            payload=request.model_dump(),
            action="create notepad in Fabric",
        )
        try:
            created = CreateNotepadResponse.model_validate(response.json())
        except ValueError:
            LOGGER.info("Created notepad in Fabric")
            return
        LOGGER.info("Created notepad in Fabric: %s", created.url or created.id)
