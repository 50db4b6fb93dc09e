"""
Test the status envelope parser and the spotify CLI media source
"""
import json
import subprocess
import threading
from types import SimpleNamespace

import pytest

from core.coordinator import NowPlayingCoordinator
from core.data_models import MediaAction
from core.media_source import (
    LockedMediaSource,
    MediaSource,
    MediaSourceError,
    SpotifyCliSource,
    create_media_source,
    parse_status_payload,
)
from core.ui_logic.display_device import MemoryDisplay
from core.ui_logic.pin_reader import IdlePinReader
from core.ui_logic.renderer import FALLBACK_LINES

STATUS = {
    "is_playing": True,
    "progress_ms": 30000,
    "device": {"name": "Kitchen"},
    "item": {
        "id": "4BP3uh0hFLFRb5cjsgLqDh",
        "name": "Fortunate Son",
        "duration_ms": 140000,
        "album": {"name": "Willy and the Poor Boys"},
        "artists": [{"name": "Creedence Clearwater Revival"}],
    },
}


class FakeRun:
    """Stands in for subprocess.run and records every argv."""

    def __init__(self, stdout="", returncode=0, error=None):
        self.stdout = stdout
        self.returncode = returncode
        self.error = error
        self.calls = []

    def __call__(self, argv, **kwargs):
        self.calls.append((argv, kwargs))
        if self.error is not None:
            raise self.error
        if self.returncode != 0 and kwargs.get("check"):
            raise subprocess.CalledProcessError(self.returncode, argv, output="", stderr="No active device")
        return subprocess.CompletedProcess(argv, self.returncode, stdout=self.stdout, stderr="")


@pytest.fixture
def fake_run(monkeypatch):
    run = FakeRun()
    monkeypatch.setattr(subprocess, "run", run)
    return run


def test_parse_full_payload():
    snapshot = parse_status_payload(STATUS)

    assert snapshot.is_playing
    assert snapshot.progress_ms == 30000
    assert snapshot.duration_ms == 140000
    assert snapshot.track_name == "Fortunate Son"
    assert snapshot.track_id == "4BP3uh0hFLFRb5cjsgLqDh"
    assert snapshot.artists == ("Creedence Clearwater Revival",)
    assert snapshot.album == "Willy and the Poor Boys"
    assert snapshot.device_name == "Kitchen"
    assert str(snapshot) == "'Fortunate Son' by Creedence Clearwater Revival (playing)"


@pytest.mark.parametrize("payload", [None, {}, {"is_playing": False, "item": None}])
def test_parse_without_item_is_nothing_playing(payload):
    assert parse_status_payload(payload) is None


def test_parse_rejects_non_object():
    with pytest.raises(MediaSourceError):
        parse_status_payload(["not", "a", "status"])


def test_parse_rejects_bad_numbers():
    payload = {"progress_ms": "soon", "item": {"name": "x", "duration_ms": 1000}}
    with pytest.raises(MediaSourceError):
        parse_status_payload(payload)


def status_with(**changes):
    payload = json.loads(json.dumps(STATUS))
    for key, value in changes.items():
        if key in ("name", "duration_ms"):
            payload["item"][key] = value
        else:
            payload[key] = value
    return payload


@pytest.mark.parametrize("changes", [
    {"is_playing": "false"},
    {"is_playing": 1},
    {"name": 42},
    {"name": ["Fortunate Son"]},
    {"progress_ms": True},
    {"progress_ms": "1000"},
    {"duration_ms": False},
    {"duration_ms": "140000"},
    {"progress_ms": float("inf")},
    {"duration_ms": float("nan")},
    {"duration_ms": 10 ** 400},
])
def test_parse_rejects_wrong_types(changes):
    with pytest.raises(MediaSourceError):
        parse_status_payload(status_with(**changes))


def test_parse_paused_track_keeps_flag():
    snapshot = parse_status_payload(status_with(is_playing=False, progress_ms=None))
    assert snapshot.is_playing is False
    assert snapshot.progress_ms == 0.0


def test_cli_infinite_progress_shows_fallback(fake_run):
    fake_run.stdout = json.dumps(STATUS).replace('"progress_ms": 30000', '"progress_ms": Infinity')
    display = MemoryDisplay()
    coordinator = NowPlayingCoordinator(
        SpotifyCliSource(), display, IdlePinReader(), {}, sleep=lambda seconds: None,
    )

    with pytest.raises(MediaSourceError, match="not finite"):
        SpotifyCliSource().query()
    assert coordinator.tick() is None
    assert display.lines() == list(FALLBACK_LINES)


def test_cli_query_runs_status_raw(fake_run):
    fake_run.stdout = json.dumps(STATUS) + "\n"

    snapshot = SpotifyCliSource().query()

    argv, kwargs = fake_run.calls[0]
    assert argv == ["spotify", "status", "--raw"]
    assert kwargs["timeout"] is None
    assert snapshot.track_name == "Fortunate Son"


@pytest.mark.parametrize("stdout", ["", "   \n", "null"])
def test_cli_query_without_output_is_nothing_playing(fake_run, stdout):
    fake_run.stdout = stdout
    assert SpotifyCliSource().query() is None


def test_cli_query_rejects_garbage(fake_run):
    fake_run.stdout = "Error: not logged in"
    with pytest.raises(MediaSourceError):
        SpotifyCliSource().query()


def test_cli_nonzero_exit_raises(fake_run):
    fake_run.returncode = 1
    with pytest.raises(MediaSourceError, match="No active device"):
        SpotifyCliSource().query()


def test_cli_missing_executable_raises(fake_run):
    fake_run.error = FileNotFoundError(2, "No such file or directory")
    with pytest.raises(MediaSourceError, match="Cannot run"):
        SpotifyCliSource("/opt/spotify").command(MediaAction.NEXT)


def test_cli_timeout_raises(fake_run):
    fake_run.error = subprocess.TimeoutExpired(["spotify"], 2.0)
    with pytest.raises(MediaSourceError, match="timed out"):
        SpotifyCliSource(timeout=2.0).query()


@pytest.mark.parametrize("action,args", [
    (MediaAction.TOGGLE, ["toggle"]),
    (MediaAction.NEXT, ["next"]),
    (MediaAction.PREVIOUS, ["previous"]),
    (MediaAction.SAVE, ["save", "--track", ".", "-y"]),
])
def test_cli_commands(fake_run, action, args):
    SpotifyCliSource().command(action)
    assert fake_run.calls[0][0] == ["spotify", *args]


def test_locked_source_delegates():
    class Inner(MediaSource):
        def __init__(self):
            self.calls = []

        def query(self):
            self.calls.append("query")
            return None

        def command(self, action):
            self.calls.append(action)

        def close(self):
            self.calls.append("close")

    inner = Inner()
    locked = LockedMediaSource(inner)

    assert locked.query() is None
    locked.command(MediaAction.SAVE)
    locked.close()

    assert inner.calls == ["query", MediaAction.SAVE, "close"]


def test_locked_source_blocks_command_during_query():
    class SlowQuery(MediaSource):
        def __init__(self):
            self.entered = threading.Event()
            self.release = threading.Event()
            self.events = []

        def query(self):
            self.entered.set()
            self.release.wait(2.0)
            self.events.append("query done")
            return None

        def command(self, action):
            self.events.append(action)

    inner = SlowQuery()
    locked = LockedMediaSource(inner)

    poller = threading.Thread(target=locked.query)
    poller.start()
    assert inner.entered.wait(2.0)

    clicker = threading.Thread(target=locked.command, args=(MediaAction.NEXT,))
    clicker.start()
    clicker.join(0.1)
    assert clicker.is_alive()
    assert inner.events == []

    inner.release.set()
    poller.join(2.0)
    clicker.join(2.0)

    assert inner.events == ["query done", MediaAction.NEXT]


def test_create_media_source_defaults_to_cli():
    config = SimpleNamespace(media_source="cli", spotify_cli="spt", spotify_cli_timeout=5.0)
    source = create_media_source(config)

    assert isinstance(source, SpotifyCliSource)
    assert source.executable == "spt"
    assert source.timeout == 5.0


def test_create_media_source_web():
    from core.api_client import SpotifyWebClient

    config = SimpleNamespace(
        media_source="web",
        spotify_client_id="id",
        spotify_client_secret="secret",
        spotify_refresh_token="refresh",
        spotify_api_timeout=3.0,
    )
    source = create_media_source(config)

    assert isinstance(source, SpotifyWebClient)
    assert source.timeout == 3.0
    source.close()
