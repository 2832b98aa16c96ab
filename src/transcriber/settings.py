"""Pipeline settings resolved from the environment."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal, Mapping

from pydantic import BaseModel, Field, model_validator

TranscriptionTarget = Literal["obsidian", "fabric", "tana"]

DOCKER_SERVICE_ACCOUNT_PATH = Path("config") / "service-account-key.json"


class Settings(BaseModel):
    transcription_target: TranscriptionTarget = Field(default="obsidian")
    obsidian_vault_root: str | None = None
    fabric_api_key: str | None = None
    tana_api_token: str | None = None
    tana_supertag_id: str | None = None
    polling_interval_ms: int = Field(gt=0)

    google_service_account_file: str
    google_drive_folder_id: str = Field(min_length=1)
    google_drive_processed_folder_id: str = Field(min_length=1)

    whisper_model: str = Field(default="medium")
    whisper_device: str = Field(default="cpu")
    whisper_compute_type: str = Field(default="int8")
    whisper_language: str | None = None
    whisper_mock_transcriber: bool = False

    temp_dir: str | None = None
    log_level: str = Field(default="INFO")
    metrics_port: int | None = None

    @model_validator(mode="after")
    def _check_target_credentials(self) -> "Settings":
        if self.transcription_target == "obsidian" and not self.obsidian_vault_root:
            raise ValueError("OBSIDIAN_VAULT_ROOT is required when TRANSCRIPTION_TARGET is 'obsidian'")
        if self.transcription_target == "fabric" and not self.fabric_api_key:
            raise ValueError("FABRIC_API_KEY is required when TRANSCRIPTION_TARGET is 'fabric'")
        if self.transcription_target == "tana" and not self.tana_api_token:
            raise ValueError("TANA_API_TOKEN is required when TRANSCRIPTION_TARGET is 'tana'")
        return self

    @property
    def polling_interval_seconds(self) -> float:
        return self.polling_interval_ms / 1000.0

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        env = os.environ if environ is None else environ
        raw = {
            "transcription_target": _get(env, "TRANSCRIPTION_TARGET"),
            "obsidian_vault_root": _get(env, "OBSIDIAN_VAULT_ROOT"),
            "fabric_api_key": _get(env, "FABRIC_API_KEY"),
            "tana_api_token": _get(env, "TANA_API_TOKEN"),
            "tana_supertag_id": _get(env, "TANA_SUPERTAG_ID"),
            "polling_interval_ms": _get(env, "POLLING_INTERVAL_MS"),
            "google_service_account_file": _get(env, "GOOGLE_SERVICE_ACCOUNT_FILE"),
            "google_drive_folder_id": _get(env, "GOOGLE_DRIVE_FOLDER_ID"),
            "google_drive_processed_folder_id": _get(env, "GOOGLE_DRIVE_PROCESSED_FOLDER_ID"),
            "whisper_model": _get(env, "WHISPER_MODEL"),
            "whisper_device": _get(env, "WHISPER_DEVICE"),
            "whisper_compute_type": _get(env, "WHISPER_COMPUTE_TYPE"),
            "whisper_language": _get(env, "WHISPER_LANGUAGE"),
            "whisper_mock_transcriber": _flag(env, "WHISPER_USE_MOCK"),
            "temp_dir": _get(env, "TRANSCRIBER_TEMP_DIR"),
            "log_level": _get(env, "LOG_LEVEL"),
            "metrics_port": _get(env, "METRICS_PORT"),
        }
        # Unset variables fall back to the field defaults (or fail if required).
        return cls(**{key: value for key, value in raw.items() if value is not None})


def resolve_service_account_file(configured: str, cwd: Path | None = None) -> Path:
    """Absolute paths win; otherwise prefer the key mounted under ./config."""

    path = Path(configured)
    if path.is_absolute():
        return path
    docker_path = (cwd or Path.cwd()) / DOCKER_SERVICE_ACCOUNT_PATH
    if docker_path.exists():
        return docker_path
    return path


def _get(env: Mapping[str, str], key: str) -> str | None:
    value = env.get(key)
    if value is None:
        return None
    value = value.strip()
    return value or None


def _flag(env: Mapping[str, str], key: str) -> bool | None:
    value = _get(env, key)
    if value is None:
        return None
    return value.lower() in {"1", "true", "yes"}

