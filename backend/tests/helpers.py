"""Time helpers shared by the test modules."""

from datetime import datetime

import pytz

UTC = pytz.UTC

# Fixed "now" for lifecycle stamps and stats classification.
NOW = datetime(2025, 3, 1, 9, 0, tzinfo=UTC)
TUTOR_RATE = 10000


def at(hour: int, minute: int = 0, day: int = 2) -> datetime:
    """Aware UTC datetime on March ``day`` 2025."""
    return datetime(2025, 3, day, hour, minute, tzinfo=UTC)


def iso(value: datetime) -> str:
    return value.astimezone(UTC).isoformat().replace("+00:00", "Z")
