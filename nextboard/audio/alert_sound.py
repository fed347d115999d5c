"""
Alert sound.
At most one alert sound is active at a time, either looping or played once;
switching keys stops the old one first.
"""

import asyncio
from typing import Hashable, Optional, Protocol

from config.logging_config import get_logger
from config import settings

logger = get_logger(__name__)


class Player(Protocol):
    async def play(self, sound_url: str) -> None: ...

    def stop(self) -> None: ...


class AlertSoundLoop:
    """
    Replays one alert sound every repeat interval until told otherwise,
    or plays it a single time for alerts that do not repeat.
    Playback errors are logged and never stop the loop or the caller.
    """

    def __init__(self, player: Player, repeat_interval: float = None):
        """
        Initialize the sound loop.

        Args:
            player: Object with async play(url) and stop()
            repeat_interval: Seconds between replays (default from settings)
        """
        self.player = player
        self.repeat_interval = (
            settings.SOUND_REPEAT_INTERVAL if repeat_interval is None else repeat_interval
        )

        self.current_key: Optional[Hashable] = None
        self.repeat = True
        self.loop_task: Optional[asyncio.Task] = None

    @property
    def is_looping(self) -> bool:
        return self.repeat and self.is_playing

    @property
    def is_playing(self) -> bool:
        return self.loop_task is not None and not self.loop_task.done()

    async def update(self, key: Optional[Hashable], sound_url: Optional[str],
                     repeat: bool = True) -> None:
        """
        Make the given sound the active alert sound.

        A key that is already active is left alone, so a one-shot sound
        plays once per key however often it is requested.

        Args:
            key: Identity of the alert owning the sound (None = silence)
            sound_url: Sound to play (None = silence)
            repeat: Loop the sound instead of playing it once
        """
        if key is None or not sound_url:
            await self.stop()
            return

        if key == self.current_key and self.loop_task is not None:
            return

        await self.stop()

        self.current_key = key
        self.repeat = repeat
        self.loop_task = asyncio.create_task(self._play_worker(sound_url, repeat))
        logger.info(f"Alert sound started: {sound_url} ({'loop' if repeat else 'once'})")

    async def stop(self) -> None:
        """Stop the current sound, if any, and silence the player."""
        task = self.loop_task
        self.loop_task = None
        self.current_key = None

        if task is None:
            return

        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

        try:
            await asyncio.to_thread(self.player.stop)
        except Exception as e:
            logger.warning(f"Failed to silence alert sound: {e}")

        logger.info("Alert sound stopped")

    async def _play_worker(self, sound_url: str, repeat: bool) -> None:
        """
        Worker coroutine playing the sound.

        Args:
            sound_url: Sound to play
            repeat: Keep replaying every repeat interval
        """
        try:
            while True:
                try:
                    await self.player.play(sound_url)
                except asyncio.CancelledError:
                    raise
                except Exception as e:
                    logger.warning(f"Alert sound failed ({sound_url}): {e}")

                if not repeat:
                    return

                await asyncio.sleep(self.repeat_interval)

        except asyncio.CancelledError:
            logger.debug("Alert sound cancelled")
