"""
Alert clock driver.

Two APScheduler interval jobs drive the board: a fine clock tick that
re-ranks the held snapshot against the current time, and a coarse refresh
that re-reads reminders/settings from the store and swaps the snapshot.
The driver owns the only mutable reference to that snapshot.
"""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Iterable, Optional, Tuple

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from apscheduler.events import EVENT_JOB_ERROR

from config.logging_config import get_logger
from config import settings
from config.settings import EventType
from nextboard.audio.alert_sound import AlertSoundLoop
from nextboard.core.event_bus import EventBus, RefreshFailure, RefreshResult, TopChange
from nextboard.engine.ranker import DisplayEntry, DisplayState, rank
from nextboard.hardware.flash_indicator import FlashIndicator
from nextboard.reminder.models import BoardSettings, Reminder

logger = get_logger(__name__)

CLOCK_TICK_JOB = "clock_tick"
DATA_REFRESH_JOB = "data_refresh"

SnapshotSource = Callable[[], Tuple[Iterable[Reminder], BoardSettings]]


@dataclass(frozen=True)
class BoardSnapshot:
    """Reminders and settings as of the last successful refresh."""
    reminders: Tuple[Reminder, ...] = ()
    settings: BoardSettings = field(default_factory=BoardSettings)
    fetched_at: Optional[datetime] = None


def _top_key(state: Optional[DisplayState]):
    top = state.top if state else None
    return (top.reminder.id, top.occurrence) if top else None


def _flash_key(state: Optional[DisplayState]):
    top = state.top if state else None
    if top is None or not top.flash_active:
        return None
    return (top.reminder.id, top.occurrence, top.active_rule.minutes)


class AlertClockDriver:
    """
    Periodic harness around the ranking engine.
    Publishes board state and drives the alert sound and flash indicator.
    """

    def __init__(self, source: SnapshotSource,
                 event_bus: Optional[EventBus] = None,
                 sound_loop: Optional[AlertSoundLoop] = None,
                 flash_indicator: Optional[FlashIndicator] = None,
                 clock: Callable[[], datetime] = datetime.now,
                 tick_seconds: float = None,
                 refresh_seconds: float = None):
        """
        Initialize the driver.

        Args:
            source: Blocking callable returning (reminders, settings)
            event_bus: Bus for board updates (a private one if omitted)
            sound_loop: Alert sound loop, or None for silent operation
            flash_indicator: LED indicator, or None
            clock: Source of the current local time
            tick_seconds: Clock tick interval (default from settings)
            refresh_seconds: Data refresh interval (default from settings)
        """
        self.source = source
        self.event_bus = event_bus or EventBus()
        self.sound_loop = sound_loop
        self.flash_indicator = flash_indicator
        self.clock = clock
        self.tick_seconds = tick_seconds or settings.CLOCK_TICK_SECONDS
        self.refresh_seconds = refresh_seconds or settings.REFRESH_INTERVAL_SECONDS

        self.snapshot = BoardSnapshot()
        self.state: Optional[DisplayState] = None
        self.running = False

        self.scheduler = AsyncIOScheduler(
            job_defaults={
                'coalesce': settings.SCHEDULER_COALESCE,
                'max_instances': settings.SCHEDULER_MAX_INSTANCES,
                'misfire_grace_time': settings.SCHEDULER_MISFIRE_GRACE_TIME
            }
        )
        self.scheduler.add_listener(self._job_error, EVENT_JOB_ERROR)

        logger.info(
            f"AlertClockDriver initialized (tick={self.tick_seconds}s, "
            f"refresh={self.refresh_seconds}s)"
        )

    async def start(self) -> None:
        """Load data, render once, then start both periodic jobs."""
        if self.running:
            logger.warning("Clock driver already running")
            return

        await self.refresh()
        await self.tick()

        self.scheduler.add_job(
            self.tick,
            trigger=IntervalTrigger(seconds=self.tick_seconds),
            id=CLOCK_TICK_JOB,
            replace_existing=True
        )
        self.scheduler.add_job(
            self.refresh,
            trigger=IntervalTrigger(seconds=self.refresh_seconds),
            id=DATA_REFRESH_JOB,
            replace_existing=True
        )

        if not self.scheduler.running:
            self.scheduler.start()

        self.running = True
        logger.info("Clock driver started")

    async def stop(self) -> None:
        """Cancel both jobs and release the sound loop and indicator."""
        self.running = False

        self.scheduler.remove_all_jobs()
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)

        if self.sound_loop:
            await self.sound_loop.stop()

        if self.flash_indicator:
            self.flash_indicator.stop()

        logger.info("Clock driver stopped")

    async def refresh(self) -> bool:
        """
        Re-read reminders and settings and swap the held snapshot.

        A failed read keeps the previous snapshot; the clock keeps ticking.

        Returns:
            True if the snapshot was replaced
        """
        try:
            reminders, board_settings = await asyncio.to_thread(self.source)
            snapshot = BoardSnapshot(
                reminders=tuple(reminders),
                settings=board_settings,
                fetched_at=self.clock()
            )

        except Exception as e:
            logger.error(f"Data refresh failed, keeping last snapshot: {e}", exc_info=True)
            await self.event_bus.publish(EventType.REFRESH_FAILED, RefreshFailure(str(e)))
            return False

        self.snapshot = snapshot
        logger.debug(f"Snapshot refreshed: {len(snapshot.reminders)} reminders")

        await self.event_bus.publish(
            EventType.DATA_REFRESHED,
            RefreshResult(len(snapshot.reminders), snapshot.fetched_at)
        )
        return True

    async def tick(self, now: Optional[datetime] = None) -> DisplayState:
        """
        Recompute the board for the current instant and publish it.

        Args:
            now: Instant to evaluate (default: the driver clock)

        Returns:
            The new display state
        """
        now = now or self.clock()
        snapshot = self.snapshot

        state = rank(snapshot.reminders, now, snapshot.settings)
        previous, self.state = self.state, state

        await self._publish_changes(previous, state)
        await self._drive_outputs(state.top)
        return state

    async def _publish_changes(self, previous: Optional[DisplayState],
                               state: DisplayState) -> None:
        await self.event_bus.publish(EventType.DISPLAY_UPDATED, state)

        if _top_key(previous) != _top_key(state):
            await self.event_bus.publish(
                EventType.TOP_CHANGED,
                TopChange(previous.top if previous else None, state.top)
            )

        if _flash_key(previous) != _flash_key(state):
            if _flash_key(previous) is not None:
                await self.event_bus.publish(EventType.FLASH_STOPPED, previous.top)
            if _flash_key(state) is not None:
                await self.event_bus.publish(EventType.FLASH_STARTED, state.top)

    async def _drive_outputs(self, top: Optional[DisplayEntry]) -> None:
        rule = top.active_rule if top else None
        flashing = rule is not None and top.flash_active

        if self.sound_loop:
            if flashing and rule.sound_url:
                key = (top.reminder.id, top.occurrence, rule.minutes, rule.sound_url)
                await self.sound_loop.update(key, rule.sound_url)
            elif rule is not None and not rule.flash and rule.sound_url:
                # Non-flashing rules chime once when they become active
                key = (top.reminder.id, top.occurrence, rule.minutes, rule.sound_url)
                await self.sound_loop.update(key, rule.sound_url, repeat=False)
            else:
                await self.sound_loop.update(None, None)

        if self.flash_indicator:
            await self.flash_indicator.show(rule.flash_speed if flashing else None)

    def _job_error(self, event) -> None:
        """
        Event listener for job errors.

        Args:
            event: Job error event
        """
        logger.error(
            f"Job error: {event.job_id}, "
            f"exception: {event.exception}",
            exc_info=event.exception
        )
