"""Injectable clock.

Services never call ``timezone.now()`` directly: they receive a
``Clock`` so that validity and mutability checks are deterministic in
tests.  ``today()`` and ``local_now()`` are expressed in the project
time zone (``settings.TIME_ZONE``).
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Protocol

from django.utils import timezone


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    """Wall-clock time, timezone-aware."""

    def now(self) -> datetime:
        return timezone.now()


class FixedClock:
    """Clock frozen at a given instant; ``advance`` moves it forward."""

    def __init__(self, instant: datetime) -> None:
        self._instant = instant

    def now(self) -> datetime:
        return self._instant

    def set(self, instant: datetime) -> None:
        self._instant = instant

    def advance(self, **kwargs: float) -> datetime:
        self._instant = self._instant + timedelta(**kwargs)
        return self._instant


def to_local(moment: datetime) -> datetime:
    """Convert an aware datetime to local time; naive values pass through."""
    if timezone.is_aware(moment):
        return timezone.localtime(moment)
    return moment


def local_today(clock: Clock) -> date:
    return to_local(clock.now()).date()
