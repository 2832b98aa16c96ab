"""Google Drive v3 client for listing, downloading and archiving recordings."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol

import httpx
from google.auth.transport.requests import Request
from google.oauth2 import service_account

from ..schemas import FileListResponse, RemoteFile

LOGGER = logging.getLogger("transcriber.drive")

DRIVE_API_BASE = "https://www.googleapis.com/drive/v3"
DRIVE_SCOPES = (
    "https://www.googleapis.com/auth/drive",
    "https://www.googleapis.com/auth/drive.file",
)

AUDIO_MIME_TYPES = (
    "audio/mpeg",
    "audio/wav",
    "audio/x-wav",
    "audio/x-m4a",
    "audio/mp4",
    "application/octet-stream",
)


class StoreError(Exception):
    pass


class FileStore(Protocol):
    async def list_audio_files(self, folder_id: str) -> List[RemoteFile]: ...

    async def download(self, file: RemoteFile, destination: Path) -> Path: ...

    async def move_to_folder(self, file_id: str, folder_id: str) -> None: ...


def build_audio_query(folder_id: str, mime_types: tuple[str, ...] = AUDIO_MIME_TYPES) -> str:
    mime_query = " or ".join(f"mimeType='{mime}'" for mime in mime_types)
    return f"'{folder_id}' in parents and ({mime_query}) and trashed=false"


class ServiceAccountAuth:
    """Bearer tokens for a service account, refreshed when expired."""

    def __init__(self, key_file: Path) -> None:
        self.key_file = Path(key_file)
        self._credentials = None
        self._lock = asyncio.Lock()

    async def token(self) -> str:
        async with self._lock:
            if self._credentials is None:
                self._credentials = service_account.Credentials.from_service_account_file(
                    str(self.key_file), scopes=list(DRIVE_SCOPES)
                )
            if not self._credentials.valid:
                await asyncio.to_thread(self._credentials.refresh, Request())
            return self._credentials.token


class DriveClient:
    def __init__(
        self,
        auth: Any,
        *,
        timeout: float = 60.0,
        client: Optional[httpx.AsyncClient] = None,
        base_url: str = DRIVE_API_BASE,
    ) -> None:
        self.auth = auth
        self.timeout = timeout
        self.base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {await self.auth.token()}"}

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            resp = await self._client.request(
                method, f"{self.base_url}{path}", headers=await self._headers(), **kwargs
            )
        except httpx.HTTPError as exc:
            raise StoreError(f"Drive request failed: {exc}") from exc
        if not resp.is_success:
            raise StoreError(f"Drive API error {resp.status_code}: {resp.text}")
        return resp

    async def list_audio_files(self, folder_id: str) -> List[RemoteFile]:
        if not folder_id:
            raise StoreError("GOOGLE_DRIVE_FOLDER_ID is not set")
        query = build_audio_query(folder_id)
        LOGGER.debug("Querying Google Drive for new files: %s", query)
        files: List[RemoteFile] = []
        page_token: str | None = None
        while True:
            params = {
                "q": query,
                "fields": "nextPageToken, files(id, name, createdTime, mimeType)",
                "orderBy": "createdTime desc",
            }
            if page_token:
                params["pageToken"] = page_token
            resp = await self._request("GET", "/files", params=params)
            page = FileListResponse.model_validate(resp.json())
            files.extend(page.files)
            page_token = page.next_page_token
            if not page_token:
                return files

    async def download(self, file: RemoteFile, destination: Path) -> Path:
        destination = Path(destination)
        destination.parent.mkdir(parents=True, exist_ok=True)
        LOGGER.info("Downloading file: %s", file.name)
        try:
            async with self._client.stream(
                "GET",
                f"{self.base_url}/files/{file.id}",
                params={"alt": "media"},
                headers=await self._headers(),
            ) as resp:
                if not resp.is_success:
                    body = (await resp.aread()).decode("utf-8", errors="replace")
                    raise StoreError(f"Download of {file.name} failed {resp.status_code}: {body}")
                with destination.open("wb") as handle:
                    async for block in resp.aiter_bytes():
                        await asyncio.to_thread(handle.write, block)
        except httpx.HTTPError as exc:
            destination.unlink(missing_ok=True)
            raise StoreError(f"Download of {file.name} failed: {exc}") from exc
        return destination

    async def move_to_folder(self, file_id: str, folder_id: str) -> None:
        # Fail before touching the file if the archive folder is unreachable.
        await self._request("GET", f"/files/{folder_id}", params={"fields": "id, name"})
        current = (await self._request("GET", f"/files/{file_id}", params={"fields": "parents, name"})).json()
        previous_parents = ",".join(current.get("parents") or [])
        LOGGER.debug("Moving %s out of %s", current.get("name", file_id), previous_parents or "(no parents)")
        await self._request(
            "PATCH",
            f"/files/{file_id}",
            params={
                "addParents": folder_id,
                "removeParents": previous_parents,
                "fields": "id, parents",
            },
            json={},
        )
        LOGGER.info("Moved file %s to processed folder", file_id)

    async def aclose(self) -> None:
        await self._client.aclose()
