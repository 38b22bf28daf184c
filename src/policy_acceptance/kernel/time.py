"""
Time provider abstraction for deterministic status resolution

Status resolution compares deadlines against "now". Injecting the clock
keeps every evaluation referentially transparent under test.
"""

from datetime import datetime, timedelta, timezone
from typing import Protocol


class TimeProvider(Protocol):
    """Protocol for time providers - allows deterministic testing"""

    def now(self) -> datetime:
        """Return current UTC datetime"""
        ...


class RealTimeProvider:
    """Production time provider using system clock"""

    def now(self) -> datetime:
        """Return current UTC time from system clock"""
        return datetime.now(timezone.utc)


class TestTimeProvider:
    """
    Controllable time provider for deterministic tests

    Allows tests to freeze time and step it across deadlines.
    """

    __test__ = False  # not a pytest test class

    def __init__(self, initial_time: datetime | None = None) -> None:
        self._current_time = initial_time or datetime(1970, 1, 1, tzinfo=timezone.utc)

    def now(self) -> datetime:
        return self._current_time

    def set_time(self, dt: datetime) -> None:
        """Set current time to specific value"""
        self._current_time = dt

    def advance_days(self, days: int) -> None:
        """Advance time by specified days"""
        self._current_time += timedelta(days=days)


class FixedTimeProvider:
    """Clock pinned to one instant, for point-in-time reports"""

    def __init__(self, at: datetime) -> None:
        self._at = ensure_utc(at)

    def now(self) -> datetime:
        return self._at


def ensure_utc(dt: datetime) -> datetime:
    """Treat naive datetimes as UTC so deadline comparisons never mix kinds"""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def to_iso(dt: datetime) -> str:
    """ISO-8601 with a ``Z`` suffix, the format acceptance records travel in"""
    return ensure_utc(dt).astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


# Global default time provider
default_time_provider: TimeProvider = RealTimeProvider()
