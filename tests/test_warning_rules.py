"""Tests for nextboard.engine.warning_rules — rule selection and flash windows."""

from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from nextboard.engine.warning_rules import NO_ALERT, AlertState, evaluate, select_rule
from nextboard.reminder.models import WarningRule

OCCURRENCE = datetime(2024, 1, 2, 9, 0)


def _rule(minutes: int, **kwargs) -> WarningRule:
    return WarningRule(minutes=minutes, **kwargs)


def _at(minutes_before: float) -> datetime:
    return OCCURRENCE - timedelta(minutes=minutes_before)


class TestSelection:
    RULES = (_rule(10, color="orange"), _rule(60, color="yellow"), _rule(0, color="red"))

    @pytest.mark.parametrize("diff, expected", [
        (90, None),
        (60, 60),
        (30, 60),
        (10, 10),
        (5, 10),
        (0, 0),
    ])
    def test_most_urgent_applicable_rule(self, diff, expected):
        state = evaluate(OCCURRENCE, _at(diff), self.RULES)
        if expected is None:
            assert state == NO_ALERT
        else:
            assert state.active_rule.minutes == expected

    def test_empty_rules(self):
        assert evaluate(OCCURRENCE, _at(5), ()) == AlertState(None, False)

    def test_ties_keep_storage_order(self):
        first, second = _rule(10, color="first"), _rule(10, color="second")
        assert select_rule(5, [first, second]) is first
        assert select_rule(5, [second, first]) is second


class TestFlashWindow:
    RULE = _rule(10, flash=True, flash_duration=5)

    def test_flashes_at_trigger_instant(self):
        assert evaluate(OCCURRENCE, _at(10), [self.RULE]) == AlertState(self.RULE, True)

    def test_flashes_until_just_before_duration(self):
        state = evaluate(OCCURRENCE, _at(10) + timedelta(minutes=4, seconds=59), [self.RULE])
        assert state.flash_active is True

    @pytest.mark.parametrize("since_trigger", [5, 6, 9])
    def test_stops_flashing_but_rule_stays_active(self, since_trigger):
        state = evaluate(OCCURRENCE, _at(10 - since_trigger), [self.RULE])
        assert state.active_rule is self.RULE
        assert state.flash_active is False

    def test_non_flashing_rule(self):
        rule = _rule(10, flash=False)
        assert evaluate(OCCURRENCE, _at(10), [rule]) == AlertState(rule, False)

    def test_zero_duration_never_flashes(self):
        rule = _rule(10, flash=True, flash_duration=0)
        assert evaluate(OCCURRENCE, _at(10), [rule]).flash_active is False

    def test_more_urgent_rule_takes_over_with_its_own_window(self):
        warning = _rule(30, flash=True, flash_duration=5)
        urgent = _rule(0, flash=True, flash_duration=3)
        rules = [warning, urgent]

        assert evaluate(OCCURRENCE, _at(28), rules) == AlertState(warning, True)
        assert evaluate(OCCURRENCE, _at(20), rules) == AlertState(warning, False)
        assert evaluate(OCCURRENCE, _at(0), rules) == AlertState(urgent, True)

    def test_default_duration_applies(self):
        rule = WarningRule.from_dict({"minutes": 10, "flash": True})
        assert rule.flash_duration == 5
        assert evaluate(OCCURRENCE, _at(6), [rule]).flash_active is True
        assert evaluate(OCCURRENCE, _at(5), [rule]).flash_active is False
