"""Tests for nextboard.engine.ranker — board ordering and filtering."""

from __future__ import annotations

import json
from datetime import datetime

from config.settings import FlashMode, Theme
from nextboard.engine.ranker import rank
from nextboard.reminder.models import BoardSettings, Reminder

NOW = datetime(2024, 1, 2, 8, 50)  # Tuesday


def _reminder(rid: str, target_time: str, **record) -> Reminder:
    data = {"id": rid, "title": f"Task {rid}", "targetTime": target_time,
            "recurrenceType": "daily"}
    data.update(record)
    return Reminder.from_dict(data)


class TestOrdering:
    def test_soonest_first_with_top_and_up_next(self):
        reminders = [
            _reminder("late", "11:00"),
            _reminder("soon", "09:00"),
            _reminder("mid", "10:00"),
        ]
        state = rank(reminders, NOW)

        assert [e.reminder.id for e in state.entries] == ["soon", "mid", "late"]
        assert state.top.reminder.id == "soon"
        assert state.top.minutes_until == 10
        assert [e.reminder.id for e in state.up_next] == ["mid", "late"]

    def test_equal_lead_times_keep_input_order(self):
        first, second = _reminder("a", "09:30"), _reminder("b", "09:30")
        assert [e.reminder.id for e in rank([first, second], NOW).entries] == ["a", "b"]
        assert [e.reminder.id for e in rank([second, first], NOW).entries] == ["b", "a"]

    def test_passed_daily_reminder_ranks_as_tomorrow(self):
        state = rank([_reminder("tomorrow", "08:00"), _reminder("today", "23:00")], NOW)
        assert [e.reminder.id for e in state.entries] == ["today", "tomorrow"]


class TestFiltering:
    def test_passed_one_time_reminder_disappears(self):
        reminder = _reminder("gone", "08:49", recurrenceType="none")
        assert rank([reminder], NOW).entries == ()

    def test_due_minute_is_still_shown(self):
        reminder = _reminder("due", "08:50", recurrenceType="none")
        state = rank([reminder], NOW.replace(second=59))
        assert state.top.minutes_until == 0

    def test_inactive_and_unresolvable_are_skipped(self):
        reminders = [
            _reminder("off", "09:00", active=False),
            _reminder("broken", "09:00", recurrenceType="weekly", weekDays=[]),
            _reminder("bad-time", "nine", recurrenceType="daily"),
            _reminder("ok", "09:00"),
        ]
        assert [e.reminder.id for e in rank(reminders, NOW).entries] == ["ok"]

    def test_nothing_to_show(self):
        state = rank([], NOW)
        assert state.top is None
        assert state.up_next == ()
        assert state.to_dict()["top"] is None


class TestAlertAttachment:
    RULES = [
        {"minutes": 60, "color": "yellow"},
        {"minutes": 10, "color": "red", "flash": True, "flashSpeed": "fast"},
    ]

    def test_rule_and_flash_attached(self):
        state = rank([_reminder("r", "09:00", warningRules=self.RULES)], NOW)
        assert state.top.active_rule.color == "red"
        assert state.top.flash_active is True

    def test_no_rules_means_neutral(self):
        state = rank([_reminder("r", "09:00")], NOW)
        assert state.top.active_rule is None
        assert state.top.flash_active is False


class TestOutput:
    def test_settings_passed_through(self):
        board_settings = BoardSettings(theme=Theme.LIGHT, flash_mode=FlashMode.SCREEN)
        state = rank([], NOW, board_settings)
        assert state.to_dict()["settings"] == {"theme": "light", "flashMode": "screen"}

    def test_entry_view(self):
        reminder = _reminder("r", "09:00", recurrenceType="weekly", weekDays=[2, 4],
                             description="Bring slides")
        view = rank([reminder], NOW).top.to_dict()
        assert view["minutesUntil"] == 10
        assert view["occurrence"] == "2024-01-02T09:00:00"
        assert view["recurrenceLabel"] == "Tue, Thu"
        assert view["activeRule"] is None
        assert view["description"] == "Bring slides"

    def test_idempotent(self):
        reminders = [
            _reminder("a", "09:00", warningRules=TestAlertAttachment.RULES),
            _reminder("b", "12:00", recurrenceType="monthly", monthDays=[1, 15]),
            _reminder("c", "09:00"),
        ]
        board_settings = BoardSettings()
        first = rank(reminders, NOW, board_settings)
        second = rank(reminders, NOW, board_settings)

        assert first == second
        assert json.dumps(first.to_dict()) == json.dumps(second.to_dict())
