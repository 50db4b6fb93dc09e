"""
Test environment and dotenv configuration loading
"""
import pytest

from config import ConfigurationError, PiConfiguration
from core.data_models import ButtonId


@pytest.fixture
def env_file(tmp_path):
    return tmp_path / ".env"


def test_defaults(env, env_file):
    config = PiConfiguration.from_env(env_file=str(env_file))

    assert config.media_source == "cli"
    assert config.spotify_cli == "spotify"
    assert config.spotify_cli_timeout is None
    assert config.poll_interval == 1.0
    assert config.sample_period == 0.003
    assert config.lcd_i2c_address == 0x27
    assert config.button_pins == {
        ButtonId.PLAY_PAUSE: 23,
        ButtonId.FORWARD: 24,
        ButtonId.BACKWARD: 25,
        ButtonId.HEART: 16,
    }
    assert not config.simulate


def test_values_from_dotenv_file(env, env_file):
    env_file.write_text("POLL_INTERVAL=2.5\nLCD_I2C_ADDRESS=0x3f\nSIMULATE=yes\nLOG_LEVEL=debug\n")

    config = PiConfiguration.from_env(env_file=str(env_file))

    assert config.poll_interval == 2.5
    assert config.lcd_i2c_address == 0x3F
    assert config.simulate
    assert config.log_level == "DEBUG"


def test_process_environment_wins_over_dotenv(env, env_file):
    env_file.write_text("POLL_INTERVAL=2.5\n")
    env["POLL_INTERVAL"] = "0.75"

    assert PiConfiguration.from_env(env_file=str(env_file)).poll_interval == 0.75


def test_overrides_win_over_environment(env, env_file):
    env["SIMULATE"] = "0"
    assert PiConfiguration.from_env(env_file=str(env_file), simulate=True).simulate


def test_web_source_needs_credentials(env, env_file):
    env["MEDIA_SOURCE"] = "web"
    with pytest.raises(ConfigurationError, match="SPOTIFY_CLIENT_ID"):
        PiConfiguration.from_env(env_file=str(env_file))

    env.update({
        "SPOTIFY_CLIENT_ID": "id",
        "SPOTIFY_CLIENT_SECRET": "secret",
        "SPOTIFY_REFRESH_TOKEN": "refresh",
    })
    config = PiConfiguration.from_env(env_file=str(env_file))
    assert config.media_source == "web"

    summary = config.summary()
    assert summary["spotify_client_secret"] == "***"
    assert summary["spotify_refresh_token"] == "***"
    assert summary["spotify_client_id"] == "id"


@pytest.mark.parametrize("key,value", [
    ("POLL_INTERVAL", "fast"),
    ("POLL_INTERVAL", "0"),
    ("SAMPLE_PERIOD", "-0.001"),
    ("FRAME_DELAY", "-1"),
    ("SPOTIFY_CLI_TIMEOUT", "0"),
    ("MEDIA_SOURCE", "mpd"),
    ("LOG_LEVEL", "verbose"),
    ("MQTT_LOG_PORT", "70000"),
    ("LCD_I2C_ADDRESS", "0x80"),
    ("LCD_I2C_BUS", "one"),
    ("BUTTON_PULL", "sideways"),
    ("PIN_FORWARD", "40"),
    ("PIN_HEART", "23"),
    ("SIMULATE", "maybe"),
])
def test_invalid_values(env, env_file, key, value):
    env[key] = value
    with pytest.raises(ConfigurationError):
        PiConfiguration.from_env(env_file=str(env_file))


def test_blank_values_fall_back_to_defaults(env, env_file):
    env["SPOTIFY_CLI"] = "   "
    env["PIN_HEART"] = ""
    config = PiConfiguration.from_env(env_file=str(env_file))

    assert config.spotify_cli == "spotify"
    assert config.pin_heart == 16
