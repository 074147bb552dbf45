"""UTC timestamp helpers producing the ``YYYY-MM-DDTHH:MM:SS.mmmZ`` wire format."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(UTC)


def to_iso8601z(value: datetime) -> str:
    """Render ``value`` in UTC with millisecond precision and a ``Z`` suffix."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_iso8601(text: str) -> datetime:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC.

    Raises ``ValueError`` for anything ``datetime.fromisoformat`` rejects.
    """
    parsed = datetime.fromisoformat(text.strip())
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def now_iso8601z(clock: Clock | None = None) -> str:
    return to_iso8601z((clock or utc_now)())


__all__ = ["Clock", "now_iso8601z", "parse_iso8601", "to_iso8601z", "utc_now"]
