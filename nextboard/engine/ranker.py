"""
Display ranker.

Turns a snapshot of reminders into the ordered board: soonest first, with
the head entry as the hero and the rest as "up next".
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional, Tuple

from nextboard.engine.resolver import resolve
from nextboard.engine.timing import minutes_between
from nextboard.engine.warning_rules import evaluate
from nextboard.reminder.models import BoardSettings, Reminder, WarningRule


@dataclass(frozen=True)
class DisplayEntry:
    """A reminder placed on the board."""

    reminder: Reminder
    occurrence: datetime
    minutes_until: int
    active_rule: Optional[WarningRule]
    flash_active: bool

    @property
    def recurrence_label(self) -> str:
        return self.reminder.recurrence_label

    def to_dict(self) -> dict:
        """JSON-safe view for the rendering surface."""
        return {
            'id': self.reminder.id,
            'title': self.reminder.title,
            'description': self.reminder.description,
            'imageUrl': self.reminder.image_url,
            'targetTime': self.reminder.target_time,
            'occurrence': self.occurrence.isoformat(),
            'minutesUntil': self.minutes_until,
            'activeRule': self.active_rule.to_dict() if self.active_rule else None,
            'flashActive': self.flash_active,
            'recurrenceLabel': self.recurrence_label
        }


@dataclass(frozen=True)
class DisplayState:
    """Ranked board for one instant."""

    entries: Tuple[DisplayEntry, ...]
    settings: BoardSettings
    now: datetime

    @property
    def top(self) -> Optional[DisplayEntry]:
        """The hero entry, or None when nothing is due."""
        return self.entries[0] if self.entries else None

    @property
    def up_next(self) -> Tuple[DisplayEntry, ...]:
        return self.entries[1:]

    def to_dict(self) -> dict:
        return {
            'now': self.now.isoformat(),
            'settings': self.settings.to_dict(),
            'top': self.top.to_dict() if self.top else None,
            'upNext': [entry.to_dict() for entry in self.up_next]
        }


def rank(reminders: Iterable[Reminder], now: datetime,
         settings: Optional[BoardSettings] = None) -> DisplayState:
    """
    Rank reminders for display.

    Inactive and unresolvable reminders are skipped, as is any reminder whose
    occurrence has already passed (minutes_until < 0). The sort is stable, so
    equal lead times keep their input order.

    Args:
        reminders: Reminder snapshot
        now: Current local civil time
        settings: Board settings passed through to the output

    Returns:
        DisplayState with entries ordered by ascending minutes_until
    """
    entries = []
    for reminder in reminders:
        if not reminder.active:
            continue

        occurrence = resolve(reminder, now)
        if occurrence is None:
            continue

        minutes_until = minutes_between(occurrence, now)
        if minutes_until < 0:
            continue

        alert = evaluate(occurrence, now, reminder.warning_rules)
        entries.append(DisplayEntry(
            reminder=reminder,
            occurrence=occurrence,
            minutes_until=minutes_until,
            active_rule=alert.active_rule,
            flash_active=alert.flash_active
        ))

    entries.sort(key=lambda entry: entry.minutes_until)
    return DisplayState(
        entries=tuple(entries),
        settings=settings or BoardSettings(),
        now=now
    )
