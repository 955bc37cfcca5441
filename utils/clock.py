"""Clock abstractions supplying the current instant to the refresh scheduler."""

from __future__ import annotations

import datetime
from threading import Lock
from typing import Protocol, runtime_checkable


@runtime_checkable
class Clock(Protocol):
    """Protocol implemented by clock providers."""

    def now(self) -> datetime.datetime:
        """Return the current timezone-aware instant."""


class SystemClock:
    """Clock backed by the system wall clock, in UTC."""

    def now(self) -> datetime.datetime:
        return datetime.datetime.now(datetime.timezone.utc)


class FixedClock:
    """Deterministic clock used for tests.

    Time only moves when :meth:`advance` or :meth:`set` is called.
    """

    def __init__(self, start: datetime.datetime) -> None:
        if start.tzinfo is None:
            raise ValueError("start must be timezone-aware")
        self._current = start
        self._lock = Lock()

    def now(self) -> datetime.datetime:
        with self._lock:
            return self._current

    def set(self, instant: datetime.datetime) -> None:
        with self._lock:
            self._current = instant

    def advance(self, delta: datetime.timedelta) -> datetime.datetime:
        """Advance the clock by ``delta`` (must be non-negative)."""
        if delta < datetime.timedelta(0):
            raise ValueError("delta must be non-negative")
        with self._lock:
            self._current = self._current + delta
            return self._current
