"""
Data models for reminders, warning rules and board settings.
"""

from dataclasses import dataclass, field
from typing import Any, Optional, Tuple

from config.logging_config import get_logger
from config.settings import (
    DEFAULT_FLASH_DURATION,
    DEFAULT_FLASH_MODE,
    DEFAULT_THEME,
    FlashMode,
    FlashSpeed,
    Theme,
)
from nextboard.reminder.recurrence import (
    Recurrence,
    Unresolvable,
    describe,
    normalize_recurrence,
    to_record,
)

logger = get_logger(__name__)


def _non_negative_int(value: Any, name: str) -> int:
    if isinstance(value, bool) or value is None:
        raise ValueError(f"{name} must be a number, got {value!r}")
    try:
        number = int(value)
    except OverflowError:
        raise ValueError(f"{name} must be finite, got {value!r}")
    if number < 0:
        raise ValueError(f"{name} must be non-negative, got {number}")
    return number


@dataclass(frozen=True)
class WarningRule:
    """Lead-time threshold paired with a visual/audio escalation."""

    minutes: int
    color: str = ""
    flash: bool = False
    flash_speed: FlashSpeed = FlashSpeed.NORMAL
    flash_duration: int = DEFAULT_FLASH_DURATION
    sound_url: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            'minutes': self.minutes,
            'color': self.color,
            'flash': self.flash,
            'flashSpeed': self.flash_speed.value,
            'flashDuration': self.flash_duration,
            'soundUrl': self.sound_url
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'WarningRule':
        """
        Create from dictionary.

        Raises:
            ValueError: If minutes or flashDuration are missing or invalid
        """
        try:
            flash_speed = FlashSpeed(data.get('flashSpeed') or FlashSpeed.NORMAL.value)
        except ValueError:
            flash_speed = FlashSpeed.NORMAL

        flash_duration = data.get('flashDuration')
        return cls(
            minutes=_non_negative_int(data.get('minutes'), 'minutes'),
            color=data.get('color') or "",
            flash=bool(data.get('flash', False)),
            flash_speed=flash_speed,
            flash_duration=(
                DEFAULT_FLASH_DURATION if flash_duration is None
                else _non_negative_int(flash_duration, 'flashDuration')
            ),
            sound_url=data.get('soundUrl') or None
        )


@dataclass(frozen=True)
class Reminder:
    """Reminder data model, as read from the store."""

    id: str
    title: str
    target_time: str  # HH:mm
    recurrence: Recurrence = field(default_factory=lambda: Unresolvable("unset"))
    description: Optional[str] = None
    image_url: Optional[str] = None
    warning_rules: Tuple[WarningRule, ...] = ()
    active: bool = True
    legacy_days: Tuple[str, ...] = ()

    def __str__(self) -> str:
        """String representation."""
        status = "●" if self.active else "○"
        return f"{status} {self.title} @ {self.target_time} ({self.recurrence_label})"

    @property
    def recurrence_label(self) -> str:
        """Display label for the recurrence pattern."""
        return describe(self.recurrence, self.legacy_days)

    def to_dict(self) -> dict:
        """Convert to dictionary (new-style recurrence fields only)."""
        data = {
            'id': self.id,
            'title': self.title,
            'description': self.description,
            'imageUrl': self.image_url,
            'targetTime': self.target_time,
            'warningRules': [rule.to_dict() for rule in self.warning_rules],
            'active': self.active
        }
        data.update(to_record(self.recurrence))
        return data

    @classmethod
    def from_dict(cls, data: dict) -> 'Reminder':
        """
        Create from a raw store record, normalizing its recurrence.

        Malformed warning rules are dropped with a warning.

        Raises:
            ValueError: If id, title or targetTime is missing
        """
        reminder_id = data.get('id', data.get('_id'))
        if reminder_id is None or not data.get('title') or not data.get('targetTime'):
            raise ValueError(f"Reminder record missing id/title/targetTime: {data!r}")

        rules = []
        for raw_rule in data.get('warningRules') or []:
            try:
                rules.append(WarningRule.from_dict(raw_rule))
            except (AttributeError, TypeError, ValueError) as e:
                logger.warning(f"Dropping malformed warning rule on reminder {reminder_id}: {e}")

        recurrence = normalize_recurrence(data)
        legacy_days = ()
        if data.get('recurrenceType') is None and not data.get('weekDays') and not data.get('monthDays'):
            legacy_days = tuple(str(token) for token in data.get('days') or ())

        return cls(
            id=str(reminder_id),
            title=data['title'],
            target_time=str(data['targetTime']),
            recurrence=recurrence,
            description=data.get('description') or None,
            image_url=data.get('imageUrl') or None,
            warning_rules=tuple(rules),
            active=bool(data.get('active', True)),
            legacy_days=legacy_days
        )


@dataclass(frozen=True)
class BoardSettings:
    """Global display settings (rendering policy only)."""

    theme: Theme = DEFAULT_THEME
    flash_mode: FlashMode = DEFAULT_FLASH_MODE

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            'theme': self.theme.value,
            'flashMode': self.flash_mode.value
        }

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> 'BoardSettings':
        """Create from dictionary; unknown or missing values fall back to defaults."""
        data = data or {}
        try:
            theme = Theme(data.get('theme') or DEFAULT_THEME.value)
        except ValueError:
            theme = DEFAULT_THEME
        try:
            flash_mode = FlashMode(data.get('flashMode') or DEFAULT_FLASH_MODE.value)
        except ValueError:
            flash_mode = DEFAULT_FLASH_MODE
        return cls(theme=theme, flash_mode=flash_mode)
