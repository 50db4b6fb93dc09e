"""
Character display interface.

Abstract two-row character display with custom glyph support, plus an
in-memory implementation used for simulation and tests. No hardware
dependencies - the I2C driver lives in the hardware package.
"""
import logging
from abc import ABC, abstractmethod
from typing import List, Sequence, Tuple

logger = logging.getLogger(__name__)

GlyphBitmap = Tuple[int, ...]


class DisplayError(Exception):
    """Raised when the display cannot be written."""


class DisplayDevice(ABC):
    """HD44780-style character display."""

    rows: int = 2
    columns: int = 16

    @abstractmethod
    def goto(self, row: int, col: int) -> None:
        """Move the cursor to a row and column."""

    @abstractmethod
    def write_text(self, text: str) -> None:
        """Print text at the cursor, advancing it."""

    @abstractmethod
    def write_byte(self, value: int) -> None:
        """Write one raw character code at the cursor, advancing it."""

    @abstractmethod
    def load_custom_glyphs(self, bitmaps: Sequence[GlyphBitmap]) -> None:
        """Upload up to 8 custom 5x8 glyphs into character codes 0-7."""

    @abstractmethod
    def clear(self) -> None:
        """Blank the display and home the cursor."""

    def close(self) -> None:
        """Release the underlying bus."""


class MemoryDisplay(DisplayDevice):
    """
    Display that keeps its contents in memory.

    Raw bytes are stored as the matching character code, so custom glyphs
    show up as ``chr(0)`` to ``chr(7)`` in :meth:`lines`. Every operation is
    also appended to :attr:`operations` for inspection.
    """

    def __init__(self, rows: int = 2, columns: int = 16) -> None:
        self.rows = rows
        self.columns = columns
        self.glyphs: List[GlyphBitmap] = []
        self.operations: List[Tuple] = []
        self._buffer = [[" "] * columns for _ in range(rows)]
        self._row = 0
        self._col = 0

    def goto(self, row: int, col: int) -> None:
        if not (0 <= row < self.rows and 0 <= col < self.columns):
            raise DisplayError(f"Cursor position ({row}, {col}) outside {self.rows}x{self.columns}")
        self._row, self._col = row, col
        self.operations.append(("goto", row, col))

    def _put(self, char: str) -> None:
        # Writes past the last column are dropped
        if self._col < self.columns:
            self._buffer[self._row][self._col] = char
        self._col += 1

    def write_text(self, text: str) -> None:
        for char in text:
            self._put(char)
        self.operations.append(("text", text))

    def write_byte(self, value: int) -> None:
        if not 0 <= value <= 0xFF:
            raise DisplayError(f"Byte out of range: {value}")
        self._put(chr(value))
        self.operations.append(("byte", value))

    def load_custom_glyphs(self, bitmaps: Sequence[GlyphBitmap]) -> None:
        if len(bitmaps) > 8:
            raise DisplayError(f"At most 8 custom glyphs, got {len(bitmaps)}")
        self.glyphs = [tuple(bitmap) for bitmap in bitmaps]
        self.operations.append(("glyphs", len(bitmaps)))

    def clear(self) -> None:
        self._buffer = [[" "] * self.columns for _ in range(self.rows)]
        self._row = self._col = 0
        self.operations.append(("clear",))

    def lines(self) -> List[str]:
        """Current contents, one string per row."""
        return ["".join(row) for row in self._buffer]

    def printable_lines(self) -> List[str]:
        """Contents with glyph codes and 0xFF blocks replaced for logging."""
        table = {0: ">", 1: "=", 2: "=", 0xFF: "#"}
        return [
            "".join(table.get(ord(c), "?") if ord(c) < 8 or ord(c) == 0xFF else c for c in line)
            for line in self.lines()
        ]
