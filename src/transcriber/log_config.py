"""Console logging for the pipeline process."""

from __future__ import annotations

import logging
import sys
from datetime import datetime


class RepeatFilter(logging.Filter):
    """Collapse consecutive identical messages into ``message (xN)``."""

    def __init__(self) -> None:
        super().__init__()
        self._last: tuple[str, int, str] | None = None
        self._count = 0

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        key = (record.name, record.levelno, message)
        if key == self._last:
            self._count += 1
            record.msg = f"{message} (x{self._count})"
            record.args = None
        else:
            self._last = key
            self._count = 1
        return True


class ConsoleFormatter(logging.Formatter):
    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, use_color: bool = True) -> None:
        super().__init__()
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        level = record.levelname
        if self.use_color:
            level = f"{self.COLORS.get(record.levelname, '')}{level}{self.RESET}"
        line = f"{timestamp} [{level}] {record.name}: {record.getMessage()}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def setup_logging(level: str = "INFO") -> logging.Logger:
    logger = logging.getLogger("transcriber")
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(ConsoleFormatter(use_color=sys.stdout.isatty()))
    handler.addFilter(RepeatFilter())
    logger.addHandler(handler)
    logger.propagate = False
    return logger
