"""
Raspberry Pi entry point.

Loads the configuration, sets up logging, opens the LCD and the button pins
and runs the coordinator until interrupted. With SIMULATE=1 the display is
kept in memory and logged after every frame, and the buttons stay idle.
"""
import logging
import signal
import sys
from typing import Optional

from config import ConfigurationError, PiConfiguration
from core.coordinator import NowPlayingCoordinator
from core.data_models import PlaybackSnapshot
from core.media_source import create_media_source
from core.ui_logic.display_device import DisplayDevice, DisplayError, MemoryDisplay
from core.ui_logic.pin_reader import IdlePinReader, PinReader
from mqtt_logging import setup_logging

logger = logging.getLogger(__name__)


def open_display(config: PiConfiguration) -> DisplayDevice:
    if config.simulate:
        return MemoryDisplay()
    from .lcd import open_i2c_display

    return open_i2c_display(config.lcd_i2c_bus, config.lcd_i2c_address)


def open_pin_reader(config: PiConfiguration) -> PinReader:
    if config.simulate:
        return IdlePinReader(level=config.buttons_normally_closed)
    from .gpio import GpioPinReader

    return GpioPinReader(pull=config.button_pull)


def log_memory_display(display: MemoryDisplay):
    """Build a frame listener that logs the simulated screen."""
    def on_frame(snapshot: Optional[PlaybackSnapshot]) -> None:
        top, bottom = display.printable_lines()
        logger.info("[%s] [%s]", top, bottom)
    return on_frame


def main() -> int:
    try:
        config = PiConfiguration.from_env()
    except ConfigurationError as e:
        logging.basicConfig(level=logging.INFO)
        logger.error("Invalid configuration: %s", e)
        return 2

    setup_logging(config)
    logger.info("Starting with settings: %s", config.summary())

    try:
        display = open_display(config)
    except DisplayError as e:
        logger.error("Cannot open display: %s", e)
        return 1

    try:
        pin_reader = open_pin_reader(config)
    except (ImportError, RuntimeError) as e:
        logger.error("Cannot open GPIO: %s", e)
        display.close()
        return 1

    media_source = create_media_source(config)
    coordinator = NowPlayingCoordinator.from_config(config, media_source, display, pin_reader)
    if isinstance(display, MemoryDisplay):
        coordinator.add_listener(log_memory_display(display))

    signal.signal(signal.SIGTERM, lambda signum, frame: coordinator.request_stop())

    try:
        coordinator.run_forever()
    except DisplayError as e:
        logger.error("Display setup failed: %s", e)
        return 1
    finally:
        coordinator.cleanup()
    return 0


if __name__ == "__main__":
    sys.exit(main())
