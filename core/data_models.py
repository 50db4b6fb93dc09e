"""Core data structures for the now playing controller.

Contains the value types shared by the media sources, the renderer and the
input handling. No hardware or network dependencies.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


@dataclass(frozen=True, slots=True)
class PlaybackSnapshot:
    """State of the player at one poll instant.

    "Nothing playing" is not a snapshot: sources return ``None`` instead.
    """
    is_playing: bool
    progress_ms: float
    duration_ms: float
    track_name: str
    track_id: Optional[str] = None
    artists: Tuple[str, ...] = ()
    album: Optional[str] = None
    device_name: Optional[str] = None

    @property
    def has_duration(self) -> bool:
        """True if a progress ratio can be computed for this snapshot."""
        return self.duration_ms > 0

    def __str__(self) -> str:
        state = "playing" if self.is_playing else "paused"
        if self.artists:
            return f"'{self.track_name}' by {', '.join(self.artists)} ({state})"
        return f"'{self.track_name}' ({state})"


class ButtonId(Enum):
    """Physical buttons on the front panel."""
    PLAY_PAUSE = "play_pause"
    FORWARD = "forward"
    BACKWARD = "backward"
    HEART = "heart"


class MediaAction(Enum):
    """Transport commands understood by every media source."""
    TOGGLE = "toggle"
    NEXT = "next"
    PREVIOUS = "previous"
    SAVE = "save"
