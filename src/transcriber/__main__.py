"""Command-line entry point: ``python -m src.transcriber``."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv
from pydantic import ValidationError

from .app import TranscriberApp
from .coordinator import run_with_retry
from .log_config import setup_logging
from .metrics import start_metrics_server
from .settings import Settings

LOGGER = logging.getLogger("transcriber")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Transcribe voice memos from Google Drive")
    parser.add_argument("--once", action="store_true", help="Run a single poll cycle and exit.")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL.")
    parser.add_argument(
        "--env-file",
        type=Path,
        default=Path.cwd() / "config" / ".env",
        help="dotenv file to load before reading the environment.",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    load_dotenv(args.env_file)

    try:
        settings = Settings.from_env()
    except ValidationError as exc:
        setup_logging(args.log_level or "INFO")
        LOGGER.error("Invalid environment variables: %s", exc)
        return 1

    setup_logging(args.log_level or settings.log_level)
    start_metrics_server(settings.metrics_port)

    app = TranscriberApp(settings)
    return asyncio.run(run_with_retry(lambda: app.run(once=args.once)))


if __name__ == "__main__":
    sys.exit(main())
