"""
Now playing frame renderer.

Turns a playback snapshot into one frame of display writes: the scrolling
title on row 0, the animated progress bar on row 1 and the play/pause glyph
at the end of row 0. Owns the marquee offset and all animation timing.
"""
import logging
import threading
import time
import unicodedata
from typing import Callable, Optional

from ..data_models import PlaybackSnapshot
from .display_device import DisplayDevice
from .glyphs import PAUSE_GLYPH, PLAY_GLYPH, SOLID_BLOCK, STATUS_BACKGROUND

logger = logging.getLogger(__name__)

WINDOW_WIDTH = 14
BAR_COLUMNS = 14
PERCENT_PER_BLOCK = 6
STATUS_COLUMN = 14

FALLBACK_LINES = ("Cannot connect, ", "Try play a song.")


def to_display_text(text: str) -> str:
    """Reduce text to the ASCII subset the character ROM can show."""
    decomposed = unicodedata.normalize("NFKD", text)
    return decomposed.encode("ascii", "ignore").decode("ascii")


def progress_percent(progress_ms: float, duration_ms: float) -> int:
    """
    Whole percentage of the track played.

    Callers must check ``duration_ms > 0`` first.
    """
    percent = int((progress_ms / duration_ms) * 100)
    return max(0, min(100, percent))


def bar_length(percent: int) -> int:
    """Number of solid blocks for a percentage, 0 to 16."""
    return percent // PERCENT_PER_BLOCK


class ScrollCursor:
    """Marquee offset into the track title.

    The wrap test runs before the window is cut, so a name of length N shows
    N - 13 distinct windows. Names shorter than the window make the bound
    negative and wrap on every call, which keeps them still.
    """

    def __init__(self, width: int = WINDOW_WIDTH) -> None:
        self.width = width
        self.offset = 0

    def next_window(self, name: str) -> str:
        """Return the visible slice of ``name`` and advance by one."""
        if self.offset >= len(name) - (self.width - 1):
            self.offset = 0
        window = name[self.offset:self.offset + self.width].ljust(self.width)
        self.offset += 1
        return window


class Renderer:
    """
    Writes one frame per scheduler tick.

    Playing frames wipe and refill the progress bar one cell at a time with
    ``frame_delay`` between cells. Paused frames draw the same cells at once
    and hold for ``settle_delay`` before and after the bar.
    """

    def __init__(
        self,
        display: DisplayDevice,
        *,
        lock: Optional[threading.RLock] = None,
        frame_delay: float = 0.03,
        settle_delay: float = 0.48,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.display = display
        self.lock = lock or threading.RLock()
        self.frame_delay = frame_delay
        self.settle_delay = settle_delay
        self.sleep = sleep
        self.cursor = ScrollCursor()

    def render(self, snapshot: Optional[PlaybackSnapshot]) -> None:
        """
        Draw one frame.

        Args:
            snapshot: Current playback state, None when nothing is playing

        Raises:
            DisplayError: if a display write failed
        """
        with self.lock:
            if snapshot is None or not snapshot.has_duration:
                logger.debug("No active track, showing fallback")
                self._render_fallback()
                return

            paused = not snapshot.is_playing
            self._render_title(snapshot.track_name)
            self._render_progress(progress_percent(snapshot.progress_ms, snapshot.duration_ms), paused)
            self._render_status(paused)

    def _render_fallback(self) -> None:
        for row, line in enumerate(FALLBACK_LINES):
            self.display.goto(row, 0)
            self.display.write_text(line)

    def _render_title(self, name: str) -> None:
        self.display.goto(0, 0)
        self.display.write_text(self.cursor.next_window(to_display_text(name)))

    def _render_progress(self, percent: int, paused: bool) -> None:
        blocks = bar_length(percent)

        self.display.goto(1, 0)
        if paused:
            self.display.write_text(" " * BAR_COLUMNS)
            self.sleep(self.settle_delay)
        else:
            for _ in range(BAR_COLUMNS):
                self.display.write_text(" ")
                self.sleep(self.frame_delay)

        self.display.goto(1, 0)
        for _ in range(blocks):
            self.display.write_byte(SOLID_BLOCK)
            if not paused:
                self.sleep(self.frame_delay)
        if paused:
            self.sleep(self.settle_delay)

    def _render_status(self, paused: bool) -> None:
        self.display.goto(0, STATUS_COLUMN)
        self.display.write_byte(STATUS_BACKGROUND)
        self.display.write_byte(PAUSE_GLYPH if paused else PLAY_GLYPH)
