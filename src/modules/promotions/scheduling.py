"""Weekly time windows and conflict detection for recurring promotions.

A recurring promotion is redeemable during a set of weekly windows
(day of week + start/end time).  Windows on the same day must not
overlap; back-to-back windows (``end == next.start``) are allowed.

Conflict detection groups windows by day, sorts each day by start time
and sweeps once comparing each window's end with the next one's start,
so a day with *n* windows costs O(n log n).
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import time
from typing import Any, Dict, Iterable, Iterator, List, Optional

from modules.promotions.constants import DayOfWeek
from modules.promotions.exceptions import ConflictingWeeklyRules, InvalidTimeWindow


@dataclass(frozen=True)
class TimeWindow:
    day: str
    start: Optional[time]
    end: Optional[time]

    @classmethod
    def from_rule(cls, rule: Any) -> "TimeWindow":
        """Build a window from anything exposing ``day_of_week``/``start_time``/``end_time``."""
        return cls(day=str(rule.day_of_week), start=rule.start_time, end=rule.end_time)

    @property
    def is_complete(self) -> bool:
        return self.start is not None and self.end is not None

    @property
    def is_well_formed(self) -> bool:
        return self.is_complete and self.start < self.end

    def overlaps(self, other: "TimeWindow") -> bool:
        if self.day != other.day or not (self.is_complete and other.is_complete):
            return False
        return self.start < other.end and other.start < self.end

    def contains(self, day: str, moment: time) -> bool:
        """Inclusive on both ends: ``start <= moment <= end``."""
        if self.day != day or not self.is_complete:
            return False
        return self.start <= moment <= self.end

    def __str__(self) -> str:
        return f"{_fmt(self.start)}-{_fmt(self.end)}"


@dataclass(frozen=True)
class RuleConflict:
    day: str
    first: TimeWindow
    second: TimeWindow

    def describe(self) -> str:
        return f"Conflicting weekly rules on {self.day}: {self.first} overlaps {self.second}"


class WeeklyRuleSet:
    """Immutable collection of ``TimeWindow`` owned by one promotion."""

    def __init__(self, windows: Iterable[TimeWindow] = ()) -> None:
        self._windows: tuple[TimeWindow, ...] = tuple(windows)

    @classmethod
    def from_rules(cls, rules: Iterable[Any]) -> "WeeklyRuleSet":
        return cls(TimeWindow.from_rule(rule) for rule in rules)

    def __iter__(self) -> Iterator[TimeWindow]:
        return iter(self._windows)

    def __len__(self) -> int:
        return len(self._windows)

    def __bool__(self) -> bool:
        return bool(self._windows)

    def by_day(self) -> Dict[str, List[TimeWindow]]:
        """Windows grouped by day, days in calendar order."""
        grouped: Dict[str, List[TimeWindow]] = defaultdict(list)
        for window in self._windows:
            grouped[window.day].append(window)
        order = {day.value: index for index, day in enumerate(DayOfWeek)}
        return dict(sorted(grouped.items(), key=lambda item: order.get(item[0], len(order))))

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def invalid_windows(self) -> List[TimeWindow]:
        return [w for w in self._windows if w.is_complete and not w.is_well_formed]

    def validate_windows(self) -> None:
        """Raise ``InvalidTimeWindow`` for the first window with ``start >= end``."""
        for window in self.invalid_windows():
            raise InvalidTimeWindow(
                f"Start time must be before end time on {window.day} ({window})."
            )

    def find_conflict(self) -> Optional[RuleConflict]:
        for day, windows in self.by_day().items():
            if len(windows) < 2:
                continue
            # Windows without both bounds cannot be placed on the timeline.
            ordered = sorted((w for w in windows if w.is_complete), key=lambda w: w.start)
            for current, following in zip(ordered, ordered[1:]):
                if current.end > following.start:
                    return RuleConflict(day=day, first=current, second=following)
        return None

    def validate(self) -> None:
        """Check every window, then check for same-day overlaps.

        Raises:
            InvalidTimeWindow: a window does not start before it ends.
            ConflictingWeeklyRules: two windows on the same day overlap.
        """
        self.validate_windows()
        conflict = self.find_conflict()
        if conflict is not None:
            raise ConflictingWeeklyRules(conflict.describe())

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def is_active_at(self, day: str, moment: time) -> bool:
        return any(w.contains(day, moment) for w in self._windows)


def _fmt(value: Optional[time]) -> str:
    return value.strftime("%H:%M") if value is not None else "?"
