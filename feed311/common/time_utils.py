"""UTC-focused helpers for run metadata and feed timestamps."""

from __future__ import annotations

from datetime import datetime, timezone


def utc_timestamp_iso() -> str:
    return datetime.now(tz=timezone.utc).isoformat(timespec="milliseconds")


def parse_instant(value: str | None) -> datetime | None:
    """Parse a feed timestamp into an aware datetime.

    Naive values are read as UTC. Returns None for missing or unparsable input.
    """
    if not value:
        return None
    text = value.strip()
    # Needs 3.11+ fromisoformat for "+00" offsets and short or long fractions.
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_date_label(value: str | None, *, with_time: bool = False) -> str:
    if not value:
        return "N/A"
    parsed = parse_instant(value)
    if parsed is None:
        return value
    if with_time:
        return parsed.strftime("%b %d, %Y, %H:%M")
    return parsed.date().isoformat()
