"""Date utilities."""

from __future__ import annotations

from datetime import UTC, datetime

RELEASE_TIMESTAMP_FORMATS = ("%Y-%m-%dT%H:%M:%SZ", "%Y-%m-%dT%H:%M:%S.%fZ")


def parse_timestamp(s: str | None) -> datetime | None:
    """Parse a GitHub ``YYYY-MM-DDTHH:MM:SS[.fff]Z`` timestamp, returning None on failure."""
    for fmt in RELEASE_TIMESTAMP_FORMATS:
        try:
            return datetime.strptime(s, fmt).replace(tzinfo=UTC)
        except (ValueError, TypeError):
            continue
    return None


def now_utc() -> datetime:
    """Return the current time in UTC."""
    return datetime.now(UTC)


def to_epoch_millis(when: datetime) -> int:
    """Convert a datetime to whole seconds since the epoch, expressed in milliseconds."""
    return int(when.timestamp()) * 1000


def release_millis(created_at: str | None, now: datetime | None = None) -> int:
    """Return the release time in epoch milliseconds, falling back to ``now``."""
    parsed = parse_timestamp(created_at)
    if parsed is None:
        parsed = now if now is not None else now_utc()
    return to_epoch_millis(parsed)
