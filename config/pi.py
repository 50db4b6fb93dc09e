"""
Raspberry Pi settings: LCD addressing and button wiring.
"""
from dataclasses import dataclass
from typing import Dict

from core.data_models import ButtonId

from .base import BaseConfiguration, ConfigurationError, _env_bool, _env_int, _env_str

PULL_MODES = ("off", "up", "down")


@dataclass
class PiConfiguration(BaseConfiguration):
    """Settings for the I2C LCD and GPIO buttons."""

    lcd_i2c_bus: int = 1
    lcd_i2c_address: int = 0x27

    # BCM numbering
    pin_play_pause: int = 23
    pin_forward: int = 24
    pin_backward: int = 25
    pin_heart: int = 16
    button_pull: str = "off"

    simulate: bool = False

    @classmethod
    def _read_env(cls) -> dict:
        values = super()._read_env()
        defaults = cls()
        values.update({
            "lcd_i2c_bus": _env_int("LCD_I2C_BUS", defaults.lcd_i2c_bus),
            "lcd_i2c_address": _env_int("LCD_I2C_ADDRESS", defaults.lcd_i2c_address),
            "pin_play_pause": _env_int("PIN_PLAY_PAUSE", defaults.pin_play_pause),
            "pin_forward": _env_int("PIN_FORWARD", defaults.pin_forward),
            "pin_backward": _env_int("PIN_BACKWARD", defaults.pin_backward),
            "pin_heart": _env_int("PIN_HEART", defaults.pin_heart),
            "button_pull": _env_str("BUTTON_PULL", defaults.button_pull).lower(),
            "simulate": _env_bool("SIMULATE", defaults.simulate),
        })
        return values

    def validate(self) -> None:
        super().validate()
        if not 0x03 <= self.lcd_i2c_address <= 0x77:
            raise ConfigurationError(f"LCD_I2C_ADDRESS out of range: {self.lcd_i2c_address:#x}")
        if self.button_pull not in PULL_MODES:
            raise ConfigurationError(f"BUTTON_PULL must be one of {', '.join(PULL_MODES)}")
        pins = list(self.button_pins.values())
        if any(not 0 <= pin <= 27 for pin in pins):
            raise ConfigurationError(f"Button pins must be BCM 0-27, got {pins}")
        if len(set(pins)) != len(pins):
            raise ConfigurationError(f"Button pins must be distinct, got {pins}")

    @property
    def button_pins(self) -> Dict[ButtonId, int]:
        """BCM pin for each button."""
        return {
            ButtonId.PLAY_PAUSE: self.pin_play_pause,
            ButtonId.FORWARD: self.pin_forward,
            ButtonId.BACKWARD: self.pin_backward,
            ButtonId.HEART: self.pin_heart,
        }
