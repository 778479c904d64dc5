"""Unit tests for weekly time windows and conflict detection.

Covers:
- TimeWindow overlap and inclusive containment.
- Same-day overlap detection; back-to-back windows allowed.
- Different days never conflict.
- Windows with a missing bound are ignored by the overlap sweep.
- validate() checks start < end before looking for overlaps.
"""

from __future__ import annotations

from datetime import time
from types import SimpleNamespace

import pytest

from modules.promotions.constants import DayOfWeek
from modules.promotions.exceptions import ConflictingWeeklyRules, InvalidTimeWindow
from modules.promotions.scheduling import TimeWindow, WeeklyRuleSet

pytestmark = pytest.mark.unit

MON = DayOfWeek.MONDAY.value
TUE = DayOfWeek.TUESDAY.value


def window(day: str, start: str | None, end: str | None) -> TimeWindow:
    return TimeWindow(
        day=day,
        start=time.fromisoformat(start) if start else None,
        end=time.fromisoformat(end) if end else None,
    )


class TestTimeWindow:
    def test_from_rule_reads_rule_attributes(self):
        rule = SimpleNamespace(day_of_week=DayOfWeek.FRIDAY, start_time=time(17), end_time=time(19))
        built = TimeWindow.from_rule(rule)
        assert built == window("FRIDAY", "17:00", "19:00")

    def test_str_uses_hours_and_minutes(self):
        assert str(window(MON, "09:00", "10:30")) == "09:00-10:30"

    def test_overlapping_windows_on_same_day(self):
        assert window(MON, "10:00", "12:00").overlaps(window(MON, "11:00", "13:00"))

    def test_back_to_back_windows_do_not_overlap(self):
        assert not window(MON, "10:00", "12:00").overlaps(window(MON, "12:00", "14:00"))

    def test_different_days_never_overlap(self):
        assert not window(MON, "10:00", "12:00").overlaps(window(TUE, "10:00", "12:00"))

    def test_contains_is_inclusive_on_both_ends(self):
        w = window(MON, "10:00", "12:00")
        assert w.contains(MON, time(10, 0))
        assert w.contains(MON, time(12, 0))
        assert w.contains(MON, time(11, 15))
        assert not w.contains(MON, time(12, 0, 1))
        assert not w.contains(TUE, time(11, 0))

    def test_incomplete_window_contains_nothing(self):
        assert not window(MON, "10:00", None).contains(MON, time(10, 0))

    def test_well_formed_requires_start_before_end(self):
        assert window(MON, "10:00", "12:00").is_well_formed
        assert not window(MON, "12:00", "12:00").is_well_formed
        assert not window(MON, "13:00", "12:00").is_well_formed


class TestConflictDetection:
    def test_overlap_on_same_day_is_reported(self):
        rules = WeeklyRuleSet([window(MON, "10:00", "12:00"), window(MON, "11:00", "13:00")])
        conflict = rules.find_conflict()
        assert conflict is not None
        assert conflict.day == MON
        assert conflict.describe() == "Conflicting weekly rules on MONDAY: 10:00-12:00 overlaps 11:00-13:00"

    def test_back_to_back_windows_are_allowed(self):
        rules = WeeklyRuleSet([window(MON, "10:00", "12:00"), window(MON, "12:00", "14:00")])
        assert rules.find_conflict() is None

    def test_same_hours_on_different_days_are_allowed(self):
        rules = WeeklyRuleSet([window(MON, "10:00", "12:00"), window(TUE, "10:00", "12:00")])
        assert rules.find_conflict() is None

    def test_detection_does_not_depend_on_input_order(self):
        rules = WeeklyRuleSet(
            [window(MON, "15:00", "17:00"), window(MON, "08:00", "09:00"), window(MON, "16:30", "18:00")]
        )
        conflict = rules.find_conflict()
        assert conflict is not None
        assert str(conflict.first) == "15:00-17:00"
        assert str(conflict.second) == "16:30-18:00"

    def test_contained_window_conflicts(self):
        rules = WeeklyRuleSet([window(MON, "09:00", "18:00"), window(MON, "12:00", "13:00")])
        assert rules.find_conflict() is not None

    def test_windows_missing_a_bound_are_skipped(self):
        rules = WeeklyRuleSet([window(MON, "10:00", "12:00"), window(MON, None, "11:00")])
        assert rules.find_conflict() is None

    def test_single_window_per_day_never_conflicts(self):
        rules = WeeklyRuleSet([window(day.value, "10:00", "12:00") for day in DayOfWeek])
        assert rules.find_conflict() is None

    def test_empty_rule_set(self):
        rules = WeeklyRuleSet()
        assert not rules
        assert len(rules) == 0
        assert rules.find_conflict() is None


class TestValidate:
    def test_invalid_window_raises_before_overlap_check(self):
        rules = WeeklyRuleSet([window(MON, "12:00", "10:00"), window(MON, "09:00", "11:00")])
        with pytest.raises(InvalidTimeWindow):
            rules.validate()

    def test_equal_start_and_end_is_invalid(self):
        with pytest.raises(InvalidTimeWindow):
            WeeklyRuleSet([window(TUE, "10:00", "10:00")]).validate()

    def test_overlap_raises_conflict(self):
        rules = WeeklyRuleSet([window(MON, "10:00", "12:00"), window(MON, "11:59", "13:00")])
        with pytest.raises(ConflictingWeeklyRules, match="MONDAY"):
            rules.validate()

    def test_valid_rules_pass(self):
        WeeklyRuleSet([window(MON, "10:00", "12:00"), window(MON, "12:00", "14:00")]).validate()


class TestQueries:
    def test_by_day_groups_in_calendar_order(self):
        rules = WeeklyRuleSet(
            [window("SUNDAY", "10:00", "11:00"), window(MON, "10:00", "11:00"), window(MON, "14:00", "15:00")]
        )
        grouped = rules.by_day()
        assert list(grouped) == ["MONDAY", "SUNDAY"]
        assert len(grouped["MONDAY"]) == 2

    def test_is_active_at(self):
        rules = WeeklyRuleSet([window(MON, "10:00", "12:00"), window(TUE, "18:00", "20:00")])
        assert rules.is_active_at(MON, time(11, 0))
        assert rules.is_active_at(TUE, time(20, 0))
        assert not rules.is_active_at(MON, time(19, 0))
        assert not rules.is_active_at(TUE, time(17, 59))
