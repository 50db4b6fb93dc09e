"""
Button pins read through RPi.GPIO.
"""
import logging
from typing import Set

from core.ui_logic.pin_reader import PinReader

logger = logging.getLogger(__name__)


class GpioPinReader(PinReader):
    """PinReader using BCM pin numbers."""

    def __init__(self, pull: str = "off", gpio=None) -> None:
        """
        Initialize reader.

        Args:
            pull: Internal resistor mode, "off", "up" or "down"
            gpio: RPi.GPIO compatible module, imported when not given
        """
        if gpio is None:
            import RPi.GPIO as gpio
        self.gpio = gpio
        self.gpio.setwarnings(False)
        self.gpio.setmode(self.gpio.BCM)
        self.pull_mode = {
            "off": self.gpio.PUD_OFF,
            "up": self.gpio.PUD_UP,
            "down": self.gpio.PUD_DOWN,
        }[pull]
        self.pins: Set[int] = set()

    def configure_as_input(self, pin: int) -> None:
        self.gpio.setup(pin, self.gpio.IN, pull_up_down=self.pull_mode)
        self.pins.add(pin)

    def read_level(self, pin: int) -> bool:
        return self.gpio.input(pin) == self.gpio.HIGH

    def close(self) -> None:
        if self.pins:
            self.gpio.cleanup(list(self.pins))
            logger.debug("Released GPIO pins %s", sorted(self.pins))
            self.pins.clear()
