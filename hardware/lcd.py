"""
HD44780 character LCD behind a PCF8574 I2C backpack.

The backpack maps its eight outputs to RS, RW, EN, backlight and the upper
data nibble, so every byte goes out as two 4-bit transfers.
"""
import logging
import time
from typing import Sequence

from smbus2 import SMBus

from core.ui_logic.display_device import DisplayDevice, DisplayError, GlyphBitmap

logger = logging.getLogger(__name__)

# PCF8574 bits
RS = 0b0000_0001
ENABLE = 0b0000_0100
BACKLIGHT = 0b0000_1000

# Commands
CLEAR_DISPLAY = 0x01
ENTRY_MODE_INCREMENT = 0x06
DISPLAY_ON = 0x0C
FUNCTION_SET_4BIT_2LINE = 0x28
SET_CGRAM_ADDRESS = 0x40
SET_DDRAM_ADDRESS = 0x80

ROW_OFFSETS = (0x00, 0x40, 0x14, 0x54)


class I2CCharacterDisplay(DisplayDevice):
    """DisplayDevice driving a 16x2 LCD through an SMBus handle."""

    def __init__(self, bus, address: int = 0x27, rows: int = 2, columns: int = 16,
                 backlight: bool = True) -> None:
        self.bus = bus
        self.address = address
        self.rows = rows
        self.columns = columns
        self._backlight = BACKLIGHT if backlight else 0

    def _write_raw(self, value: int) -> None:
        try:
            self.bus.write_byte(self.address, value | self._backlight)
        except OSError as e:
            raise DisplayError(f"I2C write to {self.address:#04x} failed: {e}") from e

    def _pulse(self, value: int) -> None:
        self._write_raw(value | ENABLE)
        self._write_raw(value & ~ENABLE)

    def _write_nibble(self, value: int) -> None:
        self._write_raw(value)
        self._pulse(value)

    def _send(self, value: int, mode: int = 0) -> None:
        self._write_nibble(mode | (value & 0xF0))
        self._write_nibble(mode | ((value << 4) & 0xF0))

    def command(self, value: int) -> None:
        self._send(value)

    def initialize(self) -> None:
        """
        Run the 4-bit power-on sequence and clear the screen.

        Raises:
            DisplayError: if the backpack does not answer
        """
        time.sleep(0.05)
        for _ in range(3):
            self._write_nibble(0x30)
            time.sleep(0.005)
        self._write_nibble(0x20)
        self.command(FUNCTION_SET_4BIT_2LINE)
        self.command(DISPLAY_ON)
        self.clear()
        self.command(ENTRY_MODE_INCREMENT)
        logger.info("LCD initialized at I2C address %#04x", self.address)

    def goto(self, row: int, col: int) -> None:
        if not (0 <= row < self.rows and 0 <= col < self.columns):
            raise DisplayError(f"Cursor position ({row}, {col}) outside {self.rows}x{self.columns}")
        self.command(SET_DDRAM_ADDRESS | (ROW_OFFSETS[row] + col))

    def write_text(self, text: str) -> None:
        for char in text:
            code = ord(char)
            self.write_byte(code if code < 0x100 else ord("?"))

    def write_byte(self, value: int) -> None:
        self._send(value & 0xFF, RS)

    def load_custom_glyphs(self, bitmaps: Sequence[GlyphBitmap]) -> None:
        if len(bitmaps) > 8:
            raise DisplayError(f"At most 8 custom glyphs, got {len(bitmaps)}")
        self.command(SET_CGRAM_ADDRESS)
        for bitmap in bitmaps:
            for row in bitmap:
                self.write_byte(row & 0x1F)
        # Leave CGRAM mode so following writes land on the screen
        self.goto(0, 0)

    def clear(self) -> None:
        self.command(CLEAR_DISPLAY)
        time.sleep(0.002)

    def close(self) -> None:
        """Close the bus"""
        try:
            self.bus.close()
        except OSError as e:
            logger.error("Error closing I2C bus: %s", e)


def open_i2c_display(bus_number: int = 1, address: int = 0x27) -> I2CCharacterDisplay:
    """
    Open the I2C bus and initialize the LCD.

    Raises:
        DisplayError: if the bus cannot be opened or the LCD does not answer
    """
    try:
        bus = SMBus(bus_number)
    except OSError as e:
        raise DisplayError(f"Cannot open I2C bus {bus_number}: {e}") from e
    display = I2CCharacterDisplay(bus, address)
    try:
        display.initialize()
    except DisplayError:
        display.close()
        raise
    return display
