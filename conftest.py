import os

import pytest

SETTING_PREFIXES = (
    "MEDIA_SOURCE", "SPOTIFY_", "POLL_INTERVAL", "SAMPLE_PERIOD", "FRAME_DELAY", "SETTLE_DELAY",
    "BUTTON", "DEBOUNCE_", "LOG_LEVEL", "MQTT_", "LCD_", "PIN_", "SIMULATE",
)


@pytest.fixture
def env(monkeypatch):
    """Isolated process environment; dotenv writes land here too."""
    environ = {key: value for key, value in os.environ.items()
               if not key.startswith(SETTING_PREFIXES)}
    monkeypatch.setattr(os, "environ", environ)
    return environ
