"""
Media player access for the controller.

Defines the MediaSource interface used by the coordinator and the input
dispatcher, the parser for the player's status envelope, and the reference
implementation that drives the ``spotify`` command line client.
"""
import json
import logging
import math
import subprocess
import threading
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence

from .data_models import MediaAction, PlaybackSnapshot

logger = logging.getLogger(__name__)


class MediaSourceError(Exception):
    """Raised when the player cannot be queried or commanded."""


class MediaSource(ABC):
    """Query and control the currently playing track."""

    @abstractmethod
    def query(self) -> Optional[PlaybackSnapshot]:
        """
        Fetch the current playback state.

        Returns:
            Snapshot of the active track, or None when nothing is playing

        Raises:
            MediaSourceError: if the player could not be reached or answered
                with something unreadable
        """

    @abstractmethod
    def command(self, action: MediaAction) -> None:
        """
        Issue a transport command.

        Raises:
            MediaSourceError: if the command failed
        """

    def close(self) -> None:
        """Release any resources held by the source."""


class LockedMediaSource(MediaSource):
    """Serializes every call into a wrapped source.

    The poll thread queries and the sampling thread issues commands; the
    wrapped source only ever sees one call at a time.
    """

    def __init__(self, source: MediaSource) -> None:
        self.source = source
        self._lock = threading.Lock()

    def query(self) -> Optional[PlaybackSnapshot]:
        with self._lock:
            return self.source.query()

    def command(self, action: MediaAction) -> None:
        with self._lock:
            self.source.command(action)

    def close(self) -> None:
        with self._lock:
            self.source.close()


def _milliseconds(container: Dict[str, Any], key: str) -> float:
    """Read a finite millisecond count, null meaning 0."""
    value = container.get(key)
    if value is None:
        return 0.0
    # bool is an int subclass
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MediaSourceError(f"{key} is not a number: {value!r}")
    try:
        number = float(value)
    except OverflowError as e:
        raise MediaSourceError(f"{key} is out of range") from e
    if not math.isfinite(number):
        raise MediaSourceError(f"{key} is not finite: {value!r}")
    return number


def parse_status_payload(data: Any) -> Optional[PlaybackSnapshot]:
    """
    Build a snapshot from a decoded currently-playing envelope.

    The same envelope is printed by ``spotify status --raw`` and returned by
    the Web API.

    Args:
        data: Decoded JSON document

    Returns:
        PlaybackSnapshot, or None if no track is active

    Raises:
        MediaSourceError: if the document does not have the expected shape
    """
    if data is None:
        return None
    if not isinstance(data, dict):
        raise MediaSourceError(f"Unexpected status document: {type(data).__name__}")

    item = data.get("item")
    if not item:
        return None
    if not isinstance(item, dict):
        raise MediaSourceError("Status item is not an object")

    name = item.get("name")
    if name is None:
        name = ""
    if not isinstance(name, str):
        raise MediaSourceError(f"Track name is not a string: {name!r}")

    is_playing = data.get("is_playing", False)
    if not isinstance(is_playing, bool):
        raise MediaSourceError(f"is_playing is not a boolean: {is_playing!r}")

    duration_ms = _milliseconds(item, "duration_ms")
    progress_ms = _milliseconds(data, "progress_ms")

    artists: List[str] = []
    for artist in item.get("artists") or []:
        if isinstance(artist, dict) and artist.get("name"):
            artists.append(str(artist["name"]))

    album = item.get("album") or {}
    device = data.get("device") or {}

    return PlaybackSnapshot(
        is_playing=is_playing,
        progress_ms=progress_ms,
        duration_ms=duration_ms,
        track_name=name,
        track_id=item.get("id"),
        artists=tuple(artists),
        album=album.get("name") if isinstance(album, dict) else None,
        device_name=device.get("name") if isinstance(device, dict) else None,
    )


class SpotifyCliSource(MediaSource):
    """
    Media source backed by the ``spotify`` command line client.

    Every call runs the executable synchronously. Without a timeout a hung
    process blocks the calling thread until it exits.
    """

    COMMAND_ARGS: Dict[MediaAction, Sequence[str]] = {
        MediaAction.TOGGLE: ("toggle",),
        MediaAction.NEXT: ("next",),
        MediaAction.PREVIOUS: ("previous",),
        MediaAction.SAVE: ("save", "--track", ".", "-y"),
    }

    def __init__(self, executable: str = "spotify", timeout: Optional[float] = None) -> None:
        self.executable = executable
        self.timeout = timeout

    def _run(self, *args: str) -> str:
        argv = [self.executable, *args]
        try:
            result = subprocess.run(
                argv,
                capture_output=True,
                text=True,
                check=True,
                timeout=self.timeout,
            )
        except subprocess.CalledProcessError as e:
            stderr = (e.stderr or "").strip()
            raise MediaSourceError(f"{' '.join(argv)} exited with {e.returncode}: {stderr}") from e
        except subprocess.TimeoutExpired as e:
            raise MediaSourceError(f"{' '.join(argv)} timed out after {self.timeout}s") from e
        except OSError as e:
            raise MediaSourceError(f"Cannot run {self.executable}: {e}") from e
        return result.stdout

    def query(self) -> Optional[PlaybackSnapshot]:
        output = self._run("status", "--raw").strip()
        if not output:
            return None
        try:
            data = json.loads(output)
        except json.JSONDecodeError as e:
            raise MediaSourceError(f"Status output is not JSON: {e}") from e
        return parse_status_payload(data)

    def command(self, action: MediaAction) -> None:
        self._run(*self.COMMAND_ARGS[action])
        logger.debug("Sent %s to %s", action.value, self.executable)


def create_media_source(config) -> MediaSource:
    """
    Build the media source selected by the configuration.

    Args:
        config: BaseConfiguration instance

    Returns:
        Unlocked MediaSource implementation
    """
    if config.media_source == "web":
        from .api_client import SpotifyWebClient

        return SpotifyWebClient(
            client_id=config.spotify_client_id,
            client_secret=config.spotify_client_secret,
            refresh_token=config.spotify_refresh_token,
            timeout=config.spotify_api_timeout,
        )
    return SpotifyCliSource(config.spotify_cli, timeout=config.spotify_cli_timeout)
