"""Pydantic schemas for remote API contracts."""

from __future__ import annotations

from datetime import datetime
from typing import List

from pydantic import BaseModel, Field


class RemoteFile(BaseModel):
    id: str
    name: str
    created_time: datetime | None = Field(default=None, alias="createdTime")
    mime_type: str | None = Field(default=None, alias="mimeType")

    model_config = {"populate_by_name": True, "frozen": True}


class FileListResponse(BaseModel):
    files: List[RemoteFile] = Field(default_factory=list)
    next_page_token: str | None = Field(default=None, alias="nextPageToken")


class CreateNotepadRequest(BaseModel):
    parentId: str
    name: str | None = None
    text: str


class CreateNotepadResponse(BaseModel):
    id: str
    kind: str = "notepad"
    name: str | None = None
    url: str | None = None


class SupertagRef(BaseModel):
    id: str


class TanaNode(BaseModel):
    name: str
    supertags: List[SupertagRef] | None = None


class TanaPayload(BaseModel):
    targetNodeId: str
    nodes: List[TanaNode]
