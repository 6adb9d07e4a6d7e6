from __future__ import annotations

import re
from datetime import datetime, tzinfo

from src.domain.exceptions import TimeParseError

_VENDOR_FORMAT = "%Y-%m-%dT%H:%M:%S%z"

# The vendor sometimes emits "-04:00" and sometimes "-0400".
_OFFSET_COLON = re.compile(r":(?=\d{2}$)")
_SHAPE = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}[+-]\d{4}$")


def _parse(raw: str) -> datetime:
    if not isinstance(raw, str):
        raise TimeParseError(f"Timestamp must be a string, got {type(raw).__name__}")

    value = _OFFSET_COLON.sub("", raw.strip(), count=1)
    if not _SHAPE.match(value):
        raise TimeParseError(f"Malformed vendor timestamp: {raw!r}")
    try:
        return datetime.strptime(value, _VENDOR_FORMAT)
    except ValueError as exc:
        raise TimeParseError(f"Malformed vendor timestamp: {raw!r}") from exc


def parse_epoch(raw: str) -> int:
    """Parse a vendor timestamp (YYYY-MM-DDTHH:mm:ss±HHMM) into epoch seconds."""

    return int(_parse(raw).timestamp())


def format_clock_time(raw: str, tz: tzinfo | None = None) -> str:
    """Render a vendor timestamp as a zero-padded 24h HH:MM:SS clock time.

    The wall clock of the timestamp's own offset is used unless `tz` is given.
    """

    dt = _parse(raw)
    if tz is not None:
        dt = dt.astimezone(tz)
    return dt.strftime("%H:%M:%S")
