"""Send transcripts to the Tana inbox as nodes."""

from __future__ import annotations

import logging
from datetime import datetime

import httpx

from ..schemas import SupertagRef, TanaNode, TanaPayload
from .base import DeliveryError, HttpDestination

LOGGER = logging.getLogger("transcriber.delivery.tana")

TANA_API_ENDPOINT = "https://europe-west1-tagr-prod.cloudfunctions.net/addToNodeV2"
TANA_INBOX = "INBOX"


class TanaDestination(HttpDestination):
    name = "tana"

    def __init__(
        self,
        api_token: str | None,
        supertag_id: str | None = None,
        *,
        endpoint: str = TANA_API_ENDPOINT,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        super().__init__(timeout=timeout, client=client)
        self.api_token = api_token
        self.supertag_id = supertag_id
        self.endpoint = endpoint

    def build_payload(self, transcript: str) -> TanaPayload:
        node = TanaNode(name=transcript)
        if self.supertag_id:
            node.supertags = [SupertagRef(id=self.supertag_id)]
        return TanaPayload(targetNodeId=TANA_INBOX, nodes=[node])

    async def deliver(self, transcript: str, timestamp: datetime) -> None:  # noqa: ARG002
        if not self.api_token:
            raise DeliveryError("TANA_API_TOKEN is not configured")

        payload = self.build_payload(transcript)
        await self._post(
            self.endpoint,
            headers={"Authorization": f"Bearer {self.api_token}"},
            payload=payload.model_dump(exclude_none=True),
            action="create node in Tana",
        )
        LOGGER.info("Created node in Tana inbox")
