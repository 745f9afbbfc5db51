"""Sources of the current time."""

from datetime import datetime, timezone
from typing import Protocol


def as_utc(value: datetime) -> datetime:
    """Treat a naive datetime as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class Clock(Protocol):
    """Protocol defining a source of the current time."""

    def now(self) -> datetime:
        """Return the current time; naive values are read as UTC."""
        ...


class SystemClock:
    """Wall clock time in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock:
    """Always returns the same instant."""

    def __init__(self, at: datetime):
        self.at = as_utc(at)

    def now(self) -> datetime:
        return self.at
