"""
Clock -- injectable time source.

Transfers, deposits, spends, completions and cancellations are stamped
with ``clock.now()``, and the reporting windows ("last 30 days") are
measured from it.  Services receive a Clock at construction and hand it to
the ledger functions, so a test can pin every timestamp.

SystemClock is the only place in the ledger that reads the wall clock.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone


class Clock(ABC):
    """Source of timezone-aware UTC timestamps."""

    @abstractmethod
    def now(self) -> datetime:
        ...


class SystemClock(Clock):

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class DeterministicClock(Clock):
    """
    Clock frozen at a given instant until moved with ``advance()``.

    A naive start time is taken as UTC.
    """

    DEFAULT_START = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)

    def __init__(self, start: datetime | None = None):
        start = start or self.DEFAULT_START
        if start.tzinfo is None:
            start = start.replace(tzinfo=timezone.utc)
        self._now = start

    def now(self) -> datetime:
        return self._now

    def advance(self, delta: timedelta | float = 1) -> datetime:
        """Move forward by ``delta`` (a timedelta or seconds) and return the new time."""
        if not isinstance(delta, timedelta):
            delta = timedelta(seconds=delta)
        self._now += delta
        return self._now
