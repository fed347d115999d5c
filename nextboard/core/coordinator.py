"""
Main application coordinator.
Wires the store, clock driver and alert outputs, and logs board changes.
"""

import asyncio
from typing import Optional

from config.logging_config import get_logger
from config.settings import EventType
from nextboard.audio.alert_sound import AlertSoundLoop
from nextboard.core.clock_driver import AlertClockDriver
from nextboard.core.event_bus import BoardEvent, EventBus
from nextboard.hardware.flash_indicator import FlashIndicator
from nextboard.reminder.repository import ReminderRepository

logger = get_logger(__name__)


class BoardCoordinator:
    """
    Main application coordinator.
    Initializes components, starts the clock and consumes board events.
    """

    def __init__(self, db_path: str = None, enable_sound: bool = True,
                 enable_gpio: bool = True):
        """
        Initialize coordinator.

        Args:
            db_path: SQLite store path (default from settings)
            enable_sound: Play alert sounds
            enable_gpio: Drive the LED flash indicator through GPIO
        """
        logger.info("Initializing BoardCoordinator")

        self.db_path = db_path
        self.enable_sound = enable_sound
        self.enable_gpio = enable_gpio

        self.event_bus: Optional[EventBus] = None
        self.repository: Optional[ReminderRepository] = None
        self.sound_player = None
        self.sound_loop: Optional[AlertSoundLoop] = None
        self.flash_indicator: Optional[FlashIndicator] = None
        self.driver: Optional[AlertClockDriver] = None

        self.running = False
        self.sink_task: Optional[asyncio.Task] = None

    async def initialize(self) -> bool:
        """
        Initialize all components in dependency order.

        Returns:
            True if all required components initialized successfully
        """
        try:
            logger.info("Initializing components...")

            self.event_bus = EventBus()
            self.repository = ReminderRepository(self.db_path)

            # Sound is optional; the board keeps working silently without it
            if self.enable_sound:
                try:
                    from nextboard.audio.sound_player import SoundPlayer
                    self.sound_player = SoundPlayer()
                    self.sound_loop = AlertSoundLoop(self.sound_player)
                except Exception as e:
                    logger.warning(f"Alert sound not available: {e}")
                    self.sound_player = None
                    self.sound_loop = None

            self.flash_indicator = FlashIndicator(simulate=not self.enable_gpio)

            self.driver = AlertClockDriver(
                source=self.repository.fetch_snapshot,
                event_bus=self.event_bus,
                sound_loop=self.sound_loop,
                flash_indicator=self.flash_indicator
            )

            logger.info("All components initialized successfully")
            return True

        except Exception as e:
            logger.error(f"Initialization failed: {e}", exc_info=True)
            return False

    async def start(self) -> None:
        """Start consuming events, then start the clock."""
        if self.running:
            logger.warning("Coordinator already running")
            return

        queue = await self.event_bus.subscribe(
            EventType.TOP_CHANGED,
            EventType.FLASH_STARTED,
            EventType.FLASH_STOPPED,
            EventType.DATA_REFRESHED,
            EventType.REFRESH_FAILED
        )
        self.sink_task = asyncio.create_task(self._log_sink(queue))

        await self.driver.start()
        self.running = True

        logger.info("Coordinator started")

    async def stop(self) -> None:
        """Stop the coordinator."""
        logger.info("Stopping coordinator...")

        self.running = False

        if self.driver:
            await self.driver.stop()

        if self.sink_task:
            self.sink_task.cancel()
            try:
                await self.sink_task
            except asyncio.CancelledError:
                pass

        await self._cleanup()

        logger.info("Coordinator stopped")

    async def _cleanup(self) -> None:
        """Clean up all components."""
        logger.info("Cleaning up components...")

        if self.event_bus:
            await self.event_bus.clear_all()

        if self.flash_indicator:
            self.flash_indicator.cleanup()

        if self.sound_player:
            self.sound_player.audio_output.cleanup()

        logger.info("Cleanup complete")

    async def _log_sink(self, queue: asyncio.Queue) -> None:
        """Log hero changes, flash transitions and refresh failures."""
        try:
            while True:
                event: BoardEvent = await queue.get()
                self._log_event(event)

        except asyncio.CancelledError:
            logger.debug("Log sink cancelled")

    def _log_event(self, event: BoardEvent) -> None:
        if event.event_type == EventType.TOP_CHANGED:
            top = event.data.current
            if top is None:
                logger.info("No active reminders for today.")
            else:
                logger.info(
                    f"Now showing: {top.reminder.title} at {top.reminder.target_time} "
                    f"(in {top.minutes_until} minutes, {top.recurrence_label})"
                )

        elif event.event_type == EventType.FLASH_STARTED:
            logger.info(
                f"Flashing: {event.data.reminder.title} "
                f"({event.data.active_rule.minutes} min rule, "
                f"{event.data.active_rule.flash_speed.value})"
            )

        elif event.event_type == EventType.FLASH_STOPPED:
            logger.info(f"Flash ended: {event.data.reminder.title}")

        elif event.event_type == EventType.DATA_REFRESHED:
            logger.debug(f"Board data refreshed ({event.data.count} reminders)")

        elif event.event_type == EventType.REFRESH_FAILED:
            logger.debug(f"Board keeps last snapshot after refresh failure: {event.data.error}")
