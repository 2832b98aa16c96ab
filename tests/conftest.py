"""Pytest configuration helpers."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest


def _ensure_repo_on_path() -> None:
    """Allow tests to import ``src.transcriber`` without installing the package."""
    repo_root = Path(__file__).resolve().parents[1]
    path_str = str(repo_root)
    if path_str not in sys.path:
        sys.path.insert(0, path_str)


_ensure_repo_on_path()


@pytest.fixture()
def make_settings(tmp_path):
    from src.transcriber.settings import Settings

    def _make(**overrides) -> Settings:
        values = dict(
            obsidian_vault_root=str(tmp_path / "vault"),
            polling_interval_ms=1000,
            google_service_account_file="key.json",
            google_drive_folder_id="inbox",
            google_drive_processed_folder_id="archive",
        )
        values.update(overrides)
        return Settings(**values)

    return _make
