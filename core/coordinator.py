import logging
import threading
import time
from typing import Callable, Dict, List, Optional

from .data_models import ButtonId, PlaybackSnapshot
from .media_source import LockedMediaSource, MediaSource, MediaSourceError
from .ui_logic.debounce import Debouncer
from .ui_logic.display_device import DisplayDevice, DisplayError
from .ui_logic.glyphs import GlyphTable
from .ui_logic.input_dispatcher import InputDispatcher
from .ui_logic.pin_reader import PinReader
from .ui_logic.renderer import Renderer

logger = logging.getLogger(__name__)

FrameListener = Callable[[Optional[PlaybackSnapshot]], None]


class NowPlayingCoordinator:
    """Drives the display from the media source and the media source from the buttons.

    Two threads run for the life of the process: the poll thread queries the
    player and renders a frame every ``poll_interval`` seconds, and the
    sampling thread reads the button pins every ``sample_period`` seconds.
    They share nothing but the locked display and the locked media source.
    """

    def __init__(
        self,
        media_source: MediaSource,
        display: DisplayDevice,
        pin_reader: PinReader,
        button_pins: Dict[ButtonId, int],
        *,
        poll_interval: float = 1.0,
        sample_period: float = 0.003,
        frame_delay: float = 0.03,
        settle_delay: float = 0.48,
        normally_closed: bool = False,
        hold_off: float = 0.0,
        glyphs: Optional[GlyphTable] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.media_source = LockedMediaSource(media_source)
        self.display = display
        self.pin_reader = pin_reader
        self.button_pins = dict(button_pins)
        self.poll_interval = poll_interval
        self.sample_period = sample_period

        self.display_lock = threading.RLock()
        self.glyphs = glyphs or GlyphTable()
        self.renderer = Renderer(
            display,
            lock=self.display_lock,
            frame_delay=frame_delay,
            settle_delay=settle_delay,
            sleep=sleep,
        )
        self.debouncer = Debouncer(normally_closed=normally_closed, hold_off=hold_off)
        self.dispatcher = InputDispatcher(self.media_source)
        self.dispatcher.bind(self.debouncer)

        self.last_snapshot: Optional[PlaybackSnapshot] = None
        self._listeners: List[FrameListener] = []
        self._shutdown_event = threading.Event()
        self._threads: List[threading.Thread] = []

    @classmethod
    def from_config(cls, config, media_source: MediaSource, display: DisplayDevice,
                    pin_reader: PinReader) -> "NowPlayingCoordinator":
        """Build a coordinator from a PiConfiguration."""
        return cls(
            media_source,
            display,
            pin_reader,
            config.button_pins,
            poll_interval=config.poll_interval,
            sample_period=config.sample_period,
            frame_delay=config.frame_delay,
            settle_delay=config.settle_delay,
            normally_closed=config.buttons_normally_closed,
            hold_off=config.debounce_hold_off,
        )

    # ------------------------------------------------------------------
    def add_listener(self, callback: FrameListener) -> None:
        if callback not in self._listeners:
            self._listeners.append(callback)

    def remove_listener(self, callback: FrameListener) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    def _notify_listeners(self, snapshot: Optional[PlaybackSnapshot]) -> None:
        for callback in list(self._listeners):
            try:
                callback(snapshot)
            except Exception as exc:
                logger.error("Listener error: %s", exc)

    # ------------------------------------------------------------------
    def setup(self) -> None:
        """
        Prepare hardware before the loops start.

        Raises:
            DisplayError: if the glyphs could not be uploaded
        """
        for button, pin in self.button_pins.items():
            self.pin_reader.configure_as_input(pin)
            logger.debug("Button %s on pin %d", button.value, pin)
        self.glyphs.load(self.display, self.display_lock)

    def query(self) -> Optional[PlaybackSnapshot]:
        """Fetch the current snapshot, None if the player is unreachable or idle."""
        try:
            return self.media_source.query()
        except MediaSourceError as exc:
            logger.warning("Cannot get player status: %s", exc)
            return None

    def tick(self) -> Optional[PlaybackSnapshot]:
        """Query the player and render one frame."""
        snapshot = self.query()
        self._log_track_change(snapshot)
        self.last_snapshot = snapshot
        try:
            self.renderer.render(snapshot)
        except DisplayError as exc:
            logger.error("Display write failed: %s", exc)
            return snapshot
        self._notify_listeners(snapshot)
        return snapshot

    def _log_track_change(self, snapshot: Optional[PlaybackSnapshot]) -> None:
        previous = self.last_snapshot
        if snapshot is None:
            if previous is not None:
                logger.info("Playback stopped or player unreachable")
            return
        if previous is None or previous.track_name != snapshot.track_name:
            logger.info("Now playing %s", snapshot)
        elif previous.is_playing != snapshot.is_playing:
            logger.info("Playback %s", "resumed" if snapshot.is_playing else "paused")

    def sample(self) -> None:
        """Read every button pin once and feed the debouncer."""
        for button, pin in self.button_pins.items():
            self.debouncer.update(button, self.pin_reader.read_level(pin))

    # ------------------------------------------------------------------
    def _poll_loop(self) -> None:
        next_tick = time.monotonic()
        while not self._shutdown_event.is_set():
            try:
                self.tick()
            except Exception as exc:
                logger.error("Poll loop error: %s", exc)

            next_tick += self.poll_interval
            now = time.monotonic()
            if next_tick < now:
                # Frame overran its slot, drop the missed ticks
                skipped = int((now - next_tick) // self.poll_interval) + 1
                next_tick += skipped * self.poll_interval
            self._shutdown_event.wait(next_tick - now)

    def _sample_loop(self) -> None:
        while not self._shutdown_event.wait(self.sample_period):
            try:
                self.sample()
            except Exception as exc:
                logger.error("Sampling loop error: %s", exc)

    def start(self) -> None:
        """Set up the hardware and start both loops."""
        if self.is_running:
            logger.warning("Coordinator already running")
            return

        self.setup()
        self._shutdown_event.clear()
        self._threads = [
            threading.Thread(target=self._poll_loop, name="poll", daemon=True),
            threading.Thread(target=self._sample_loop, name="sample", daemon=True),
        ]
        for thread in self._threads:
            thread.start()
        logger.info(
            "Coordinator started (poll every %.3fs, sample every %.3fs)",
            self.poll_interval, self.sample_period,
        )

    def request_stop(self) -> None:
        """Ask the loops to finish without waiting (safe from signal handlers)."""
        self._shutdown_event.set()

    def stop(self, timeout: float = 5.0) -> None:
        """Signal both loops to finish and wait for them."""
        self._shutdown_event.set()
        for thread in self._threads:
            if thread.is_alive():
                thread.join(timeout=timeout)
        self._threads = []
        logger.info("Coordinator stopped")

    def run_forever(self) -> None:
        """Start the loops and block until interrupted."""
        self.start()
        try:
            while not self._shutdown_event.wait(1.0):
                pass
        except KeyboardInterrupt:
            logger.info("Interrupted")
        finally:
            self.stop()

    def cleanup(self) -> None:
        """Stop the loops and release every collaborator."""
        self.stop()
        for resource in (self.media_source, self.display, self.pin_reader):
            try:
                resource.close()
            except Exception as exc:
                logger.error("Error during cleanup: %s", exc)

    @property
    def is_running(self) -> bool:
        return any(thread.is_alive() for thread in self._threads)
