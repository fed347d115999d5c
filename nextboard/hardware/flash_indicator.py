"""
GPIO LED flash indicator.
Mirrors the hero reminder's flash state: blinks at the rule's flash speed
while its flash window is open, dark otherwise.
"""

import asyncio
from typing import Optional

from config.logging_config import get_logger
from config import settings
from config.settings import FlashSpeed

logger = get_logger(__name__)

# Import RPi.GPIO only if available and hardware is enabled
GPIO_AVAILABLE = False
GPIO = None

if settings.ENABLE_HARDWARE_GPIO:
    try:
        import RPi.GPIO as GPIO
        GPIO_AVAILABLE = True
    except ImportError:
        logger.warning("RPi.GPIO not available, flash indicator will be simulated")


class FlashIndicator:
    """
    LED flash indicator using GPIO.
    Falls back to simulation mode if GPIO is not available.
    """

    def __init__(self, pin: int = None, simulate: bool = False):
        """
        Initialize flash indicator.

        Args:
            pin: GPIO pin number (BCM mode) (default from settings)
            simulate: Force simulation mode even if GPIO is present
        """
        self.pin = pin or settings.LED_GPIO_PIN
        self.simulation_mode = simulate or not GPIO_AVAILABLE

        self.is_on = False
        self.speed: Optional[FlashSpeed] = None
        self.blink_task: Optional[asyncio.Task] = None

        if not self.simulation_mode:
            self._initialize_gpio()
        else:
            logger.info(f"Flash indicator in SIMULATION mode (pin {self.pin})")

    @property
    def is_flashing(self) -> bool:
        return self.blink_task is not None and not self.blink_task.done()

    def _initialize_gpio(self) -> None:
        """Initialize GPIO for LED control."""
        try:
            GPIO.setmode(GPIO.BCM)
            GPIO.setwarnings(False)
            GPIO.setup(self.pin, GPIO.OUT)
            GPIO.output(self.pin, GPIO.LOW)

            logger.info(f"Flash indicator initialized on GPIO pin {self.pin}")

        except Exception as e:
            logger.error(f"Failed to initialize GPIO: {e}", exc_info=True)
            self.simulation_mode = True
            logger.info("Falling back to simulation mode")

    def _write(self, on: bool) -> None:
        if not self.simulation_mode:
            GPIO.output(self.pin, GPIO.HIGH if on else GPIO.LOW)
        self.is_on = on

    async def show(self, speed: Optional[FlashSpeed]) -> None:
        """
        Flash at the given speed, or go dark when speed is None.

        Calling again with the current speed keeps the running blink.

        Args:
            speed: Flash speed of the active rule (None = not flashing)
        """
        if speed is None:
            self.stop()
            return

        if self.is_flashing and speed == self.speed:
            return

        self.stop()
        self.speed = speed
        rate = settings.FLASH_BLINK_RATES[speed]
        self.blink_task = asyncio.create_task(self._blink_worker(rate))

        logger.debug(f"Flash indicator: BLINK {speed.value} ({rate:.2f}Hz)")

    def stop(self) -> None:
        """Stop blinking and turn the LED off."""
        if self.blink_task is not None:
            self.blink_task.cancel()
            self.blink_task = None
            logger.debug("Flash indicator: OFF")

        self.speed = None
        self._write(False)

    async def _blink_worker(self, rate: float) -> None:
        """
        Worker coroutine for blinking.

        Args:
            rate: Blink rate in Hz
        """
        interval = 1.0 / (rate * 2)  # Divide by 2 for on/off cycle

        try:
            while True:
                self._write(not self.is_on)
                await asyncio.sleep(interval)

        except asyncio.CancelledError:
            logger.debug("Blink worker cancelled")

        finally:
            self._write(False)

    def cleanup(self) -> None:
        """Clean up GPIO resources."""
        self.stop()

        if not self.simulation_mode and GPIO_AVAILABLE:
            try:
                GPIO.cleanup(self.pin)
                logger.info("Flash indicator GPIO cleanup complete")
            except Exception as e:
                logger.error(f"GPIO cleanup error: {e}")
