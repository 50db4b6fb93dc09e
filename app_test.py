"""
Test the entry point wiring in simulation mode
"""
import logging
from unittest.mock import MagicMock

import pytest

from config import PiConfiguration
from core.data_models import PlaybackSnapshot
from core.ui_logic.display_device import DisplayError, MemoryDisplay
from core.ui_logic.pin_reader import IdlePinReader
from core.ui_logic.renderer import Renderer
from hardware import app


@pytest.fixture
def app_env(env, monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(app, "setup_logging", MagicMock())
    monkeypatch.setattr(app.signal, "signal", MagicMock())
    return env


def test_simulated_hardware():
    config = PiConfiguration(simulate=True, buttons_normally_closed=True)

    assert isinstance(app.open_display(config), MemoryDisplay)
    reader = app.open_pin_reader(config)
    assert isinstance(reader, IdlePinReader)
    assert reader.read_level(23) is True


def test_memory_display_listener_logs_screen(caplog):
    display = MemoryDisplay()
    snapshot = PlaybackSnapshot(
        is_playing=True, progress_ms=100000, duration_ms=200000, track_name="Fortunate Son",
    )
    Renderer(display, sleep=lambda seconds: None).render(snapshot)

    with caplog.at_level(logging.INFO):
        app.log_memory_display(display)(snapshot)

    assert "[Fortunate Son |>] [########" in caplog.text


def test_main_rejects_bad_configuration(app_env):
    app_env["LOG_LEVEL"] = "chatty"
    assert app.main() == 2


def test_main_runs_until_stopped(app_env, monkeypatch):
    app_env["SIMULATE"] = "1"
    run_forever = MagicMock()
    monkeypatch.setattr(app.NowPlayingCoordinator, "run_forever", run_forever)

    assert app.main() == 0
    run_forever.assert_called_once()
    app.signal.signal.assert_called_once()


def test_main_fails_on_display_setup_error(app_env, monkeypatch):
    app_env["SIMULATE"] = "1"
    monkeypatch.setattr(
        app.NowPlayingCoordinator, "run_forever",
        MagicMock(side_effect=DisplayError("no ack")),
    )

    assert app.main() == 1


def test_main_fails_when_display_cannot_open(app_env, monkeypatch):
    monkeypatch.setattr(app, "open_display", MagicMock(side_effect=DisplayError("no bus")))
    assert app.main() == 1
