"""Recording timestamps embedded in uploaded file names."""

from __future__ import annotations

import re
from datetime import datetime

# e.g. "2025-06-15T 13-07 1.m4a": date before the T, the last HH-MM after it.
_FILENAME_TIMESTAMP = re.compile(
    r"(?P<year>\d{4})-(?P<month>\d{2})-(?P<day>\d{2})T.*(?P<hours>\d{2})-(?P<minutes>\d{2})"
)


def parse_timestamp_from_filename(filename: str) -> datetime | None:
    """Return the naive (UTC) recording time encoded in ``filename``, if any."""

    match = _FILENAME_TIMESTAMP.search(filename)
    if not match:
        return None
    parts = {key: int(value) for key, value in match.groupdict().items()}
    try:
        return datetime(
            parts["year"],
            parts["month"],
            parts["day"],
            parts["hours"],
            parts["minutes"],
        )
    except ValueError:
        return None
