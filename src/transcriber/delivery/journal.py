"""Append transcripts to the Obsidian daily journal note."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from pathlib import Path

from .base import SPEECH_EMOJI, DeliveryError, Destination, format_time

LOGGER = logging.getLogger("transcriber.delivery.journal")

GERMAN_MONTHS = (
    "Januar",
    "Februar",
    "März",
    "April",
    "Mai",
    "Juni",
    "Juli",
    "August",
    "September",
    "Oktober",
    "November",
    "Dezember",
)

JOURNAL_DIR = "01 - Journal"
TEMPLATE_PATH = Path("09 - Templates") / "Daily Note.md"


def daily_note_path(vault_root: Path, date: datetime) -> Path:
    """``<vault>/01 - Journal/YYYY/MM - Month/DD. Month YYYY.md``"""

    month_name = GERMAN_MONTHS[date.month - 1]
    return (
        Path(vault_root)
        / JOURNAL_DIR
        / str(date.year)
        / f"{date.month:02d} - {month_name}"
        / f"{date.day:02d}. {month_name} {date.year}.md"
    )


def format_entry(text: str, timestamp: datetime) -> str:
    return f"- [ ] {format_time(timestamp)} {SPEECH_EMOJI} {text}"


class JournalDestination(Destination):
    name = "obsidian"

    def __init__(self, vault_root: str | None) -> None:
        self.vault_root = vault_root

    def _vault(self) -> Path:
        if not self.vault_root:
            raise DeliveryError(
                "OBSIDIAN_VAULT_ROOT is not configured. Set TRANSCRIPTION_TARGET to 'obsidian' "
                "and provide OBSIDIAN_VAULT_ROOT."
            )
        return Path(self.vault_root)

    async def deliver(self, transcript: str, timestamp: datetime) -> None:
        vault = self._vault()
        try:
            note_path = await asyncio.to_thread(self._append, vault, transcript, timestamp)
        except (OSError, UnicodeDecodeError) as exc:
            raise DeliveryError(f"Failed to append to daily note: {exc}") from exc
        LOGGER.info("Appended transcript to %s", note_path)

    def _append(self, vault: Path, transcript: str, timestamp: datetime) -> Path:
        note_path = daily_note_path(vault, timestamp)
        note_path.parent.mkdir(parents=True, exist_ok=True)

        if note_path.exists():
            content = note_path.read_text(encoding="utf-8")
        else:
            template = vault / TEMPLATE_PATH
            if template.exists():
                content = template.read_text(encoding="utf-8")
                note_path.write_text(content, encoding="utf-8")
            else:
                content = ""

        needs_newline = bool(content) and not content.endswith("\n")
        with note_path.open("a", encoding="utf-8") as handle:
            handle.write(("\n" if needs_newline else "") + format_entry(transcript, timestamp))
        return note_path
