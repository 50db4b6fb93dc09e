"""
UI logic package - portable across platforms.

Frame rendering, custom glyphs, button debouncing and command dispatch.
No hardware dependencies: displays and pins are reached through the
DisplayDevice and PinReader interfaces.
"""
from .debounce import Debouncer, DebounceState
from .display_device import DisplayDevice, DisplayError, MemoryDisplay
from .glyphs import GlyphTable, DEFAULT_GLYPHS, PLAY_GLYPH, PAUSE_GLYPH
from .input_dispatcher import InputDispatcher, BUTTON_ACTIONS
from .pin_reader import PinReader, IdlePinReader
from .renderer import Renderer, ScrollCursor, FALLBACK_LINES

__all__ = [
    'Debouncer',
    'DebounceState',
    'DisplayDevice',
    'DisplayError',
    'MemoryDisplay',
    'GlyphTable',
    'DEFAULT_GLYPHS',
    'PLAY_GLYPH',
    'PAUSE_GLYPH',
    'InputDispatcher',
    'BUTTON_ACTIONS',
    'PinReader',
    'IdlePinReader',
    'Renderer',
    'ScrollCursor',
    'FALLBACK_LINES'
]
