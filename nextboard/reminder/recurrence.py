"""
Canonical recurrence representation.

Stored reminders come in two shapes: the current one (recurrenceType plus
weekDays/monthDays/date) and a legacy one (a type tag plus day-name tokens).
normalize_recurrence() collapses both into one of the variants below at
ingestion time, so the resolver only ever handles a single representation.
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Iterable, Optional, Tuple, Union

from dateutil import parser as date_parser

from config.logging_config import get_logger
from config.settings import RecurrenceType

logger = get_logger(__name__)

WEEKDAY_NAMES = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")

_FULL_WEEKDAY_NAMES = (
    "sunday", "monday", "tuesday", "wednesday", "thursday", "friday", "saturday"
)

LEGACY_RECURRING = "Recurring"
LEGACY_ONE_TIME = "OneTime"
LEGACY_DAILY_TOKEN = "Daily"


@dataclass(frozen=True)
class OneTime:
    """Occurs once, on a specific date or (when unset) today."""
    on: Optional[date] = None


@dataclass(frozen=True)
class Daily:
    """Occurs every day."""


@dataclass(frozen=True)
class Weekly:
    """Occurs on the given weekdays (0=Sunday), sorted ascending."""
    days: Tuple[int, ...]


@dataclass(frozen=True)
class Monthly:
    """Occurs on the given days of the month (1-31), sorted ascending."""
    days: Tuple[int, ...]


@dataclass(frozen=True)
class Unresolvable:
    """Recurrence data that cannot produce an occurrence."""
    reason: str


Recurrence = Union[OneTime, Daily, Weekly, Monthly, Unresolvable]


def _day_set(values: Optional[Iterable[Any]], low: int, high: int) -> Tuple[int, ...]:
    """Deduplicate, range-filter and sort a list of day numbers."""
    days = set()
    for value in values or ():
        if isinstance(value, bool):
            continue
        try:
            day = int(value)
        except (TypeError, ValueError):
            continue
        if low <= day <= high:
            days.add(day)
    return tuple(sorted(days))


def parse_date(value: Any) -> Optional[date]:
    """
    Parse a stored calendar date.

    Accepts date/datetime objects and anything dateutil can read ("2024-03-05",
    "2024-03-05T00:00:00.000Z", "Tue Mar 05 2024"). A time part, if any, is
    ignored; no time-zone conversion is performed.

    Returns:
        The date, or None if absent

    Raises:
        ValueError: If a value is present but cannot be read as a date
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date_parser.parse(str(value)).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"unparseable date: {value!r}") from e


def _one_time(value: Any) -> Recurrence:
    try:
        return OneTime(parse_date(value))
    except ValueError as e:
        logger.debug(f"One-time reminder has no usable date: {e}")
        return Unresolvable(str(e))


def weekday_index(token: str) -> Optional[int]:
    """Map a day-name token ("Mon", "monday", ...) to 0=Sunday..6=Saturday."""
    name = str(token).strip().lower()
    if len(name) < 3:
        return None
    for index, full_name in enumerate(_FULL_WEEKDAY_NAMES):
        if full_name.startswith(name) and (len(name) == 3 or name == full_name):
            return index
    return None


def _normalize_legacy(record: dict) -> Recurrence:
    legacy_type = record.get("type")
    tokens = record.get("days") or []

    if legacy_type == LEGACY_ONE_TIME:
        return _one_time(record.get("date"))

    if legacy_type != LEGACY_RECURRING:
        return Unresolvable("no recurrence data")

    if not tokens:
        return Unresolvable("legacy recurring reminder without days")

    if any(str(token).strip() == LEGACY_DAILY_TOKEN for token in tokens):
        return Daily()

    indices = [weekday_index(token) for token in tokens]
    days = _day_set([i for i in indices if i is not None], 0, 6)
    if not days:
        return Unresolvable(f"unrecognized legacy days: {tokens}")
    return Weekly(days)


def normalize_recurrence(record: dict) -> Recurrence:
    """
    Build the canonical recurrence for a raw reminder record.

    New-style fields take precedence; the legacy type/days pair is only
    consulted when recurrenceType, weekDays and monthDays are all unset.

    Args:
        record: Raw reminder record (camelCase keys)

    Returns:
        One of OneTime, Daily, Weekly, Monthly or Unresolvable
    """
    raw_type = record.get("recurrenceType")
    week_days = record.get("weekDays")
    month_days = record.get("monthDays")

    if raw_type is None:
        if week_days:
            raw_type = RecurrenceType.WEEKLY.value
        elif month_days:
            raw_type = RecurrenceType.MONTHLY.value
        else:
            return _normalize_legacy(record)

    try:
        recurrence_type = RecurrenceType(raw_type)
    except ValueError:
        return Unresolvable(f"unknown recurrence type: {raw_type!r}")

    if recurrence_type == RecurrenceType.NONE:
        return _one_time(record.get("date"))

    if recurrence_type == RecurrenceType.DAILY:
        return Daily()

    if recurrence_type == RecurrenceType.WEEKLY:
        days = _day_set(week_days, 0, 6)
        return Weekly(days) if days else Unresolvable("weekly without weekDays")

    days = _day_set(month_days, 1, 31)
    return Monthly(days) if days else Unresolvable("monthly without monthDays")


def describe(recurrence: Recurrence, legacy_days: Optional[Iterable[str]] = None) -> str:
    """
    Human-readable recurrence label for the display.

    Args:
        recurrence: Canonical recurrence
        legacy_days: Original legacy day tokens, shown verbatim when present

    Returns:
        Label such as "Daily", "Mon, Wed" or "Monthly (1, 15)"
    """
    if legacy_days:
        return ", ".join(str(token) for token in legacy_days)

    if isinstance(recurrence, OneTime):
        if recurrence.on is not None:
            return f"One Time ({recurrence.on.isoformat()})"
        return "One Time"
    if isinstance(recurrence, Daily):
        return "Daily"
    if isinstance(recurrence, Weekly):
        return ", ".join(WEEKDAY_NAMES[d] for d in recurrence.days) or "Weekly"
    if isinstance(recurrence, Monthly):
        return f"Monthly ({', '.join(str(d) for d in recurrence.days)})"
    return "Unscheduled"


def to_record(recurrence: Recurrence) -> dict:
    """Render a canonical recurrence back to new-style record fields."""
    if isinstance(recurrence, OneTime):
        return {
            "recurrenceType": RecurrenceType.NONE.value,
            "date": recurrence.on.isoformat() if recurrence.on else None,
        }
    if isinstance(recurrence, Daily):
        return {"recurrenceType": RecurrenceType.DAILY.value}
    if isinstance(recurrence, Weekly):
        return {"recurrenceType": RecurrenceType.WEEKLY.value, "weekDays": list(recurrence.days)}
    if isinstance(recurrence, Monthly):
        return {"recurrenceType": RecurrenceType.MONTHLY.value, "monthDays": list(recurrence.days)}
    return {"recurrenceType": None}
