"""
Injectable time source for the lifecycles and the ledger.

Which ledger year an approval posts to, and every submitted_at, reviewed_at
and created_at stamp, is read from a Clock handed to the service.  Nothing
in the kernel calls ``datetime.now()`` or ``date.today()`` itself, so tests
can pin the year and step time forward.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime, timedelta, timezone


class Clock(ABC):
    """``now()`` is always timezone-aware UTC."""

    @abstractmethod
    def now(self) -> datetime:
        ...

    def today(self) -> date:
        return self.now().date()

    def current_year(self) -> int:
        """Ledger year for balance checks and approval deductions."""
        return self.now().year


class SystemClock(Clock):
    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class DeterministicClock(Clock):
    """
    Clock that only moves when told to.

    Starts on Monday 2025-03-03 09:00 UTC unless given another instant.
    A naive ``fixed_time`` is taken to be UTC.
    """

    DEFAULT_START = datetime(2025, 3, 3, 9, 0, 0, tzinfo=timezone.utc)

    def __init__(self, fixed_time: datetime | None = None):
        self._current = self._as_utc(fixed_time or self.DEFAULT_START)

    @staticmethod
    def _as_utc(value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def now(self) -> datetime:
        return self._current

    def set_time(self, time: datetime) -> None:
        self._current = self._as_utc(time)

    def advance(self, seconds: int = 1, *, days: int = 0) -> datetime:
        """Move forward and return the new instant."""
        self._current += timedelta(days=days, seconds=seconds)
        return self._current
