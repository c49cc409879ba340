"""Parsing of ``Retry-After`` backpressure headers."""

from datetime import datetime, timedelta, timezone
from email.utils import parsedate_to_datetime

_MILLISECOND = timedelta(milliseconds=1)


def _parse_instant(value: str) -> datetime | None:
    try:
        instant = parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError):
        try:
            instant = datetime.fromisoformat(value)
        except ValueError:
            return None
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return instant


def parse_retry_after_ms(value: str | None, now: datetime | None = None) -> int | None:
    """Convert a Retry-After header value into a wait in milliseconds.

    Accepts delay-seconds (``"120"``) or an HTTP-date. Dates already in the
    past clamp to zero. Returns None when the header is absent or
    unparseable so the caller can fall back to exponential backoff.
    """
    if not value:
        return None
    value = value.strip()
    if value.isascii() and value.isdigit():
        return int(value) * 1000

    instant = _parse_instant(value)
    if instant is None:
        return None
    now = now or datetime.now(timezone.utc)
    return max(0, (instant - now) // _MILLISECOND)
