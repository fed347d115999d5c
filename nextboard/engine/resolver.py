"""
Recurrence resolver.

Computes the next occurrence of a reminder's target time-of-day from its
canonical recurrence and the current instant. Nothing is cached: the result
is recomputed from scratch on every clock tick.
"""

from datetime import date, datetime, timedelta
from typing import Optional, Tuple

from dateutil.relativedelta import relativedelta

from config.logging_config import get_logger
from config.settings import MONTH_END_POLICY, MonthEndPolicy
from nextboard.engine.timing import minutes_between, parse_target_time
from nextboard.reminder.models import Reminder
from nextboard.reminder.recurrence import Daily, Monthly, OneTime, Unresolvable, Weekly

logger = get_logger(__name__)


def sunday_based_weekday(day: date) -> int:
    """Weekday index with Sunday=0 .. Saturday=6."""
    return (day.weekday() + 1) % 7


def _not_passed(target: datetime, now: datetime) -> bool:
    return minutes_between(target, now) >= 0


def _next_weekly(days: Tuple[int, ...], target_today: datetime, now: datetime) -> datetime:
    current = sunday_based_weekday(now.date())

    if current in days and _not_passed(target_today, now):
        return target_today

    later = [d for d in days if d > current]
    next_day = later[0] if later else days[0]
    if next_day > current:
        offset = next_day - current
    else:
        offset = 7 - current + next_day
    return target_today + timedelta(days=offset)


def _wrap_to_next_month(target_today: datetime, day: int,
                        policy: MonthEndPolicy) -> datetime:
    """Occurrence on day-of-month in the month after target_today's."""
    if policy == MonthEndPolicy.CLAMP:
        return target_today + relativedelta(months=+1, day=day)
    # Rollover past the month end, the way lenient date arithmetic does
    return target_today + relativedelta(months=+1, day=1) + timedelta(days=day - 1)


def _next_monthly(days: Tuple[int, ...], target_today: datetime, now: datetime,
                  policy: MonthEndPolicy) -> datetime:
    today = now.day
    days_in_month = (now + relativedelta(day=31)).day

    if today in days and _not_passed(target_today, now):
        return target_today

    later = [d for d in days if today < d <= days_in_month]
    if later:
        return target_today + timedelta(days=later[0] - today)

    return _wrap_to_next_month(target_today, days[0], policy)


def resolve(reminder: Reminder, now: datetime,
            month_end: MonthEndPolicy = MONTH_END_POLICY) -> Optional[datetime]:
    """
    Resolve the next occurrence of a reminder.

    One-time reminders resolve to their date (or today) even when that is in
    the past; the ranker drops negative lead times.

    Args:
        reminder: Reminder with canonical recurrence
        now: Current local civil time
        month_end: Handling of monthly days missing from the wrapped-to month

    Returns:
        Occurrence instant, or None if the reminder cannot be resolved
    """
    target_clock = parse_target_time(reminder.target_time)
    if target_clock is None:
        logger.debug(f"Reminder {reminder.id}: malformed targetTime {reminder.target_time!r}")
        return None

    target_today = datetime.combine(now.date(), target_clock, tzinfo=now.tzinfo)
    recurrence = reminder.recurrence

    if isinstance(recurrence, OneTime):
        if recurrence.on is None:
            return target_today
        return datetime.combine(recurrence.on, target_clock, tzinfo=now.tzinfo)

    if isinstance(recurrence, Daily):
        if _not_passed(target_today, now):
            return target_today
        return target_today + timedelta(days=1)

    if isinstance(recurrence, Weekly) and recurrence.days:
        return _next_weekly(recurrence.days, target_today, now)

    if isinstance(recurrence, Monthly) and recurrence.days:
        return _next_monthly(recurrence.days, target_today, now, month_end)

    reason = recurrence.reason if isinstance(recurrence, Unresolvable) else "empty day set"
    logger.debug(f"Reminder {reminder.id}: no occurrence ({reason})")
    return None
