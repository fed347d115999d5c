"""Tests for nextboard.reminder.models — record ingestion."""

from __future__ import annotations

import pytest

from config.settings import FlashMode, FlashSpeed, Theme
from nextboard.reminder.models import BoardSettings, Reminder, WarningRule
from nextboard.reminder.recurrence import Daily, Weekly


class TestWarningRule:
    def test_from_dict_defaults(self):
        rule = WarningRule.from_dict({"minutes": 15})
        assert rule == WarningRule(minutes=15)
        assert rule.flash_duration == 5
        assert rule.flash_speed == FlashSpeed.NORMAL

    def test_unknown_flash_speed_falls_back(self):
        assert WarningRule.from_dict({"minutes": 1, "flashSpeed": "warp"}).flash_speed == FlashSpeed.NORMAL

    @pytest.mark.parametrize("data", [
        {},
        {"minutes": None},
        {"minutes": -5},
        {"minutes": "soon"},
        {"minutes": 5, "flashDuration": -1},
        {"minutes": float("inf")},
        {"minutes": 5, "flashDuration": float("-inf")},
    ])
    def test_invalid(self, data):
        with pytest.raises(ValueError):
            WarningRule.from_dict(data)

    def test_round_trip(self):
        rule = WarningRule(minutes=10, color="red", flash=True, flash_speed=FlashSpeed.FAST,
                           flash_duration=2, sound_url="beep.wav")
        assert WarningRule.from_dict(rule.to_dict()) == rule


class TestReminder:
    def test_from_store_record(self):
        reminder = Reminder.from_dict({
            "_id": "65f0c1",
            "title": "Lunch",
            "targetTime": "12:00",
            "recurrenceType": "weekly",
            "weekDays": [1, 3],
            "warningRules": [{"minutes": 5, "flash": True}],
        })
        assert reminder.id == "65f0c1"
        assert reminder.recurrence == Weekly((1, 3))
        assert reminder.active is True
        assert reminder.warning_rules[0].flash is True
        assert reminder.recurrence_label == "Mon, Wed"

    def test_malformed_rules_dropped(self):
        reminder = Reminder.from_dict({
            "id": 1, "title": "x", "targetTime": "10:00", "recurrenceType": "daily",
            "warningRules": [{"minutes": "?"}, "junk", {"minutes": 3}],
        })
        assert [r.minutes for r in reminder.warning_rules] == [3]

    def test_infinite_rule_dropped(self):
        reminder = Reminder.from_dict({
            "id": 1, "title": "x", "targetTime": "10:00", "recurrenceType": "daily",
            "warningRules": [{"minutes": float("inf")}, {"minutes": 3}],
        })
        assert [r.minutes for r in reminder.warning_rules] == [3]

    def test_legacy_days_kept_for_label(self):
        reminder = Reminder.from_dict({
            "id": "l", "title": "Old", "targetTime": "10:00",
            "type": "Recurring", "days": ["Daily"],
        })
        assert reminder.recurrence == Daily()
        assert reminder.recurrence_label == "Daily"
        assert reminder.legacy_days == ("Daily",)

    @pytest.mark.parametrize("missing", ["id", "title", "targetTime"])
    def test_required_fields(self, missing):
        data = {"id": "r", "title": "t", "targetTime": "10:00"}
        del data[missing]
        with pytest.raises(ValueError):
            Reminder.from_dict(data)

    def test_to_dict_uses_new_style_fields(self):
        reminder = Reminder.from_dict({
            "id": "l", "title": "Old", "targetTime": "10:00",
            "type": "Recurring", "days": ["Tue"],
        })
        data = reminder.to_dict()
        assert data["recurrenceType"] == "weekly"
        assert data["weekDays"] == [2]
        assert "days" not in data


class TestBoardSettings:
    def test_defaults(self):
        assert BoardSettings.from_dict(None) == BoardSettings(Theme.DARK, FlashMode.CARD)

    def test_invalid_values_fall_back(self):
        board_settings = BoardSettings.from_dict({"theme": "neon", "flashMode": "screen"})
        assert board_settings == BoardSettings(Theme.DARK, FlashMode.SCREEN)
