"""
Warning rule evaluator.

A rule applies for its whole lead-time window (diff <= rule.minutes), but
only flashes for flash_duration minutes after its trigger instant
(occurrence - rule.minutes).
"""

from datetime import datetime, timedelta
from typing import NamedTuple, Optional, Sequence

from nextboard.engine.timing import minutes_between
from nextboard.reminder.models import WarningRule


class AlertState(NamedTuple):
    """Evaluator output for one reminder."""
    active_rule: Optional[WarningRule]
    flash_active: bool


NO_ALERT = AlertState(None, False)


def select_rule(diff: int, rules: Sequence[WarningRule]) -> Optional[WarningRule]:
    """
    Most urgent applicable rule: smallest minutes with diff <= minutes.

    Rules are considered in ascending minutes order; ties keep storage order.
    """
    for rule in sorted(rules, key=lambda r: r.minutes):
        if diff <= rule.minutes:
            return rule
    return None


def is_flashing(rule: WarningRule, occurrence: datetime, now: datetime) -> bool:
    """Whether now falls inside the rule's flash window."""
    if not rule.flash:
        return False
    trigger = occurrence - timedelta(minutes=rule.minutes)
    since_trigger = minutes_between(now, trigger)
    return 0 <= since_trigger < rule.flash_duration


def evaluate(occurrence: datetime, now: datetime,
             rules: Sequence[WarningRule]) -> AlertState:
    """
    Evaluate which warning rule is active and whether it is flashing.

    Args:
        occurrence: Resolved occurrence (not in the past)
        now: Current local civil time
        rules: Warning rules in storage order

    Returns:
        AlertState(active_rule, flash_active)
    """
    if not rules:
        return NO_ALERT

    rule = select_rule(minutes_between(occurrence, now), rules)
    if rule is None:
        return NO_ALERT

    return AlertState(rule, is_flashing(rule, occurrence, now))
