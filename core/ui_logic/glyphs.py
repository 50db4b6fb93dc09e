"""
Custom 5x8 glyphs for the character display.

Bitmaps follow the HD44780 CGRAM layout: one byte per pixel row, low five
bits used, top row first.
"""
import logging
import threading
from typing import Optional, Sequence, Tuple

from .display_device import DisplayDevice, GlyphBitmap

logger = logging.getLogger(__name__)

PLAY_GLYPH = 0x00
PAUSE_GLYPH = 0x01

# Drawn in front of the play/pause glyph at row 0, column 14 ('|')
STATUS_BACKGROUND = 0b01111100

SOLID_BLOCK = 0xFF

DEFAULT_GLYPHS: Tuple[GlyphBitmap, ...] = (
    (0x08, 0x0C, 0x0E, 0x0F, 0x0E, 0x0C, 0x08, 0x00),  # play
    (0x00, 0x0A, 0x0A, 0x0A, 0x0A, 0x0A, 0x00, 0x00),  # pause
    (0x00, 0x00, 0x0A, 0x0A, 0x0A, 0x0A, 0x00, 0x00),  # pause, short
    (0x0E, 0x1B, 0x11, 0x11, 0x11, 0x1F, 0x1F, 0x00),  # battery 1/5
    (0x0E, 0x1B, 0x11, 0x11, 0x1F, 0x1F, 0x1F, 0x00),
    (0x0E, 0x1B, 0x11, 0x1F, 0x1F, 0x1F, 0x1F, 0x00),
    (0x0E, 0x1B, 0x1F, 0x1F, 0x1F, 0x1F, 0x1F, 0x00),
    (0x0E, 0x1F, 0x1F, 0x1F, 0x1F, 0x1F, 0x1F, 0x00),  # battery 5/5
)


class GlyphTable:
    """Static set of custom glyphs, uploaded once before rendering starts."""

    def __init__(self, bitmaps: Sequence[GlyphBitmap] = DEFAULT_GLYPHS) -> None:
        self.bitmaps: Tuple[GlyphBitmap, ...] = tuple(tuple(b) for b in bitmaps)
        self._validate()
        self.loaded = False

    def _validate(self) -> None:
        if len(self.bitmaps) != 8:
            raise ValueError(f"Expected 8 glyphs, got {len(self.bitmaps)}")
        for index, bitmap in enumerate(self.bitmaps):
            if len(bitmap) != 8:
                raise ValueError(f"Glyph {index} has {len(bitmap)} rows, expected 8")
            if any(not 0 <= row <= 0x1F for row in bitmap):
                raise ValueError(f"Glyph {index} has a row wider than 5 pixels")

    def load(self, display: DisplayDevice, lock: Optional[threading.RLock] = None) -> None:
        """
        Upload the glyphs into the display's character memory.

        Args:
            display: Target display
            lock: Display lock to hold while writing, if shared

        Raises:
            DisplayError: if the upload failed
        """
        if lock is None:
            display.load_custom_glyphs(self.bitmaps)
        else:
            with lock:
                display.load_custom_glyphs(self.bitmaps)
        self.loaded = True
        logger.info("Loaded %d custom glyphs", len(self.bitmaps))
