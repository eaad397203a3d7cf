"""Clock helpers. Components take a clock callable so tests can control time."""

import time
from datetime import datetime, timezone
from typing import Callable

# Returns the current instant as an aware UTC datetime
Clock = Callable[[], datetime]

# Returns wall-clock milliseconds
MillisClock = Callable[[], float]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def wall_clock_ms() -> float:
    return time.time() * 1000.0


def ensure_aware(dt: datetime) -> datetime:
    """Treat naive datetimes read back from storage as UTC."""
    return dt if dt.tzinfo is not None else dt.replace(tzinfo=timezone.utc)
