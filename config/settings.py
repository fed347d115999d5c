"""
Configuration settings for the nextboard display engine.
All constants and configuration values centralized here.
"""

from enum import Enum
from pathlib import Path
import os

# Project paths
PROJECT_ROOT = Path(__file__).parent.parent
DATA_DIR = Path(os.getenv("NEXTBOARD_DATA_DIR", PROJECT_ROOT / "data"))
LOGS_DIR = Path(os.getenv("NEXTBOARD_LOGS_DIR", PROJECT_ROOT / "logs"))
DB_PATH = Path(os.getenv("NEXTBOARD_DB_PATH", DATA_DIR / "nextboard.db"))
SOUND_CACHE_DIR = DATA_DIR / "sounds"

# Ensure directories exist
DATA_DIR.mkdir(parents=True, exist_ok=True)
LOGS_DIR.mkdir(parents=True, exist_ok=True)
SOUND_CACHE_DIR.mkdir(exist_ok=True)

# Clock Configuration
CLOCK_TICK_SECONDS = 1.0  # Re-rank and re-evaluate flash state
REFRESH_INTERVAL_SECONDS = 60.0  # Re-fetch reminders/settings from the store

# Warning Rule Configuration
DEFAULT_FLASH_DURATION = 5  # Minutes a rule keeps flashing after its trigger

# Alert Sound Configuration
SOUND_REPEAT_INTERVAL = 30.0  # Seconds between replays of a looping alert
SOUND_FETCH_TIMEOUT = 10.0  # Seconds
OUTPUT_CHUNK_SIZE = 1024

# LED Configuration
LED_GPIO_PIN = 17  # BCM pin numbering
ENABLE_HARDWARE_GPIO = os.getenv("NEXTBOARD_GPIO", "true").lower() == "true"

# Scheduler Configuration
SCHEDULER_MISFIRE_GRACE_TIME = 5  # Seconds; a late tick is still worth running
SCHEDULER_COALESCE = True  # Merge multiple pending executions
SCHEDULER_MAX_INSTANCES = 1  # Never overlap two ticks of the same job

# System Configuration
DEBUG_MODE = os.getenv("DEBUG", "false").lower() == "true"


# Enums for type safety
class RecurrenceType(Enum):
    """Recurrence pattern stored on a reminder."""
    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class FlashSpeed(Enum):
    """Flash speed of a warning rule."""
    SLOW = "slow"
    NORMAL = "normal"
    FAST = "fast"


class Theme(Enum):
    """Display theme."""
    LIGHT = "light"
    DARK = "dark"
    SYSTEM = "system"


class FlashMode(Enum):
    """Whether flashing applies to the hero card or the whole screen."""
    CARD = "card"
    SCREEN = "screen"


class MonthEndPolicy(Enum):
    """How a monthly day that does not exist in the wrapped-to month resolves."""
    ROLLOVER = "rollover"  # Day 31 in a 30-day month becomes day 1 of the next
    CLAMP = "clamp"  # Day 31 in a 30-day month becomes day 30


class EventType(Enum):
    """Event bus event types."""
    DISPLAY_UPDATED = "display_updated"
    TOP_CHANGED = "top_changed"
    FLASH_STARTED = "flash_started"
    FLASH_STOPPED = "flash_stopped"
    DATA_REFRESHED = "data_refreshed"
    REFRESH_FAILED = "refresh_failed"


# Blink rates in Hz (one full on/off cycle per 3s, 2s and 0.5s)
FLASH_BLINK_RATES = {
    FlashSpeed.SLOW: 1 / 3,
    FlashSpeed.NORMAL: 0.5,
    FlashSpeed.FAST: 2.0,
}

DEFAULT_THEME = Theme.DARK
DEFAULT_FLASH_MODE = FlashMode.CARD
MONTH_END_POLICY = MonthEndPolicy(os.getenv("NEXTBOARD_MONTH_END", "rollover"))
