from __future__ import annotations

import time
from datetime import datetime, timezone

MS_PER_DAY: int = 86_400_000


def now_epoch_ms() -> int:
    """Return current time as integer milliseconds since the Unix epoch."""
    return time.time_ns() // 1_000_000


def days_to_ms(days: float) -> int:
    return int(days * MS_PER_DAY)


def parse_rfc3339(value: str) -> datetime:
    """
    Parse RFC3339 timestamp string into tz-aware UTC datetime.

    Accepts strings like:
      - 2025-01-01T12:34:56Z
      - 2025-01-01T12:34:56.123Z
      - 2025-01-01T12:34:56+09:00
    """
    if not isinstance(value, str) or not value:
        raise ValueError("RFC3339 value must be a non-empty string")

    s = value.strip()
    # Python's fromisoformat doesn't accept 'Z' in 3.9/3.10, so normalize.
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"

    dt = datetime.fromisoformat(s)  # raises ValueError if invalid
    if dt.tzinfo is None:
        raise ValueError("naive datetime is not allowed; timezone-aware required")
    return dt.astimezone(timezone.utc)


def to_rfc3339(dt: datetime) -> str:
    """Convert tz-aware datetime to RFC3339 (UTC, with 'Z')."""
    if dt.tzinfo is None:
        raise ValueError("naive datetime is not allowed; timezone-aware required")
    s = dt.astimezone(timezone.utc).isoformat(timespec="milliseconds")
    return s.replace("+00:00", "Z")
