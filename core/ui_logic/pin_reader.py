"""
Digital input interface for the front panel buttons.
"""
from abc import ABC, abstractmethod


class PinReader(ABC):
    """Samples the level of digital input pins."""

    @abstractmethod
    def configure_as_input(self, pin: int) -> None:
        """Prepare a pin for reading. Called once per pin at startup."""

    @abstractmethod
    def read_level(self, pin: int) -> bool:
        """Return True if the pin reads high."""

    def close(self) -> None:
        """Release the pins."""


class IdlePinReader(PinReader):
    """Reader for running without buttons: every pin sits at one level."""

    def __init__(self, level: bool = False) -> None:
        self.level = level
        self.pins: set[int] = set()

    def configure_as_input(self, pin: int) -> None:
        self.pins.add(pin)

    def read_level(self, pin: int) -> bool:
        return self.level
