"""
Civil-time helpers shared by the resolver, evaluator and ranker.
"""

from datetime import datetime, time, timedelta
from typing import Optional

_ONE_MINUTE_US = 60 * 1_000_000


def minutes_between(later: datetime, earlier: datetime) -> int:
    """
    Whole minutes in (later - earlier), truncated toward zero.

    Examples:
        09:00:00 - 08:59:30 -> 0
        09:00:00 - 09:00:45 -> 0
        09:00:00 - 09:01:00 -> -1
    """
    micros = (later - earlier) // timedelta(microseconds=1)
    minutes = abs(micros) // _ONE_MINUTE_US
    return minutes if micros >= 0 else -minutes


def parse_target_time(value: str) -> Optional[time]:
    """
    Parse an HH:mm time of day.

    Returns:
        The time, or None if the value is malformed
    """
    try:
        return datetime.strptime(str(value).strip(), "%H:%M").time()
    except ValueError:
        return None
