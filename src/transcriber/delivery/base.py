"""Shared pieces for transcript destinations."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

import httpx

SPEECH_EMOJI = "🗣️"


class DeliveryError(Exception):
    pass


class Destination(ABC):
    name: str = ""

    @abstractmethod
    async def deliver(self, transcript: str, timestamp: datetime) -> None:
        """Write ``transcript`` to the destination or raise ``DeliveryError``."""

    async def aclose(self) -> None:
        return None


def format_time(timestamp: datetime) -> str:
    """Hours and minutes the way de-DE renders them (``13:07``)."""

    return timestamp.strftime("%H:%M")


def raise_for_delivery(response: httpx.Response, action: str) -> None:
    if response.is_success:
        return
    raise DeliveryError(
        f"Failed to {action}: {response.status_code} {response.reason_phrase} - {response.text}"
    )


class HttpDestination(Destination):
    """Destination that performs a single authenticated HTTP write."""

    def __init__(self, *, timeout: float = 30.0, client: httpx.AsyncClient | None = None) -> None:
        self.timeout = timeout
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def _post(self, url: str, *, headers: dict, payload: dict, action: str) -> httpx.Response:
        try:
            response = await self._client.post(url, headers=headers, json=payload)
        except httpx.HTTPError as exc:
            raise DeliveryError(f"Failed to {action}: {exc}") from exc
        raise_for_delivery(response, action)
        return response

    async def aclose(self) -> None:
        await self._client.aclose()
