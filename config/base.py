"""
Platform independent settings.

Values come from the process environment, optionally seeded from a ``.env``
file. Platform specific subclasses add their own hardware settings.
"""
import os
from dataclasses import dataclass, fields
from typing import Optional

from dotenv import load_dotenv


MEDIA_SOURCES = ("cli", "web")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConfigurationError(Exception):
    """Raised when a setting is missing or invalid."""


def _env_str(name: str, default: Optional[str]) -> Optional[str]:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return value.strip()


def _env_bool(name: str, default: bool) -> bool:
    value = _env_str(name, None)
    if value is None:
        return default
    lowered = value.lower()
    if lowered in ("1", "true", "yes", "on"):
        return True
    if lowered in ("0", "false", "no", "off"):
        return False
    raise ConfigurationError(f"{name} must be a boolean, got '{value}'")


def _env_int(name: str, default: int) -> int:
    value = _env_str(name, None)
    if value is None:
        return default
    try:
        return int(value, 0)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be an integer, got '{value}'") from e


def _env_float(name: str, default: Optional[float]) -> Optional[float]:
    value = _env_str(name, None)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number, got '{value}'") from e


@dataclass
class BaseConfiguration:
    """Settings shared by every platform."""

    # Media source
    media_source: str = "cli"
    spotify_cli: str = "spotify"
    spotify_cli_timeout: Optional[float] = None
    spotify_client_id: Optional[str] = None
    spotify_client_secret: Optional[str] = None
    spotify_refresh_token: Optional[str] = None
    spotify_api_timeout: float = 10.0

    # Timing
    poll_interval: float = 1.0
    sample_period: float = 0.003
    frame_delay: float = 0.03
    settle_delay: float = 0.48

    # Buttons
    buttons_normally_closed: bool = False
    debounce_hold_off: float = 0.0

    # Logging
    log_level: str = "INFO"
    mqtt_log_host: Optional[str] = None
    mqtt_log_port: int = 1883
    mqtt_log_topic: str = "nowplaying/log"

    @classmethod
    def from_env(cls, env_file: Optional[str] = None, **overrides):
        """
        Build configuration from the environment.

        Args:
            env_file: Path of a dotenv file, None to search upwards for ``.env``
            overrides: Field values that win over the environment

        Returns:
            Validated configuration

        Raises:
            ConfigurationError: if a value cannot be parsed or is out of range
        """
        load_dotenv(env_file)
        values = cls._read_env()
        values.update(overrides)
        config = cls(**values)
        config.validate()
        return config

    @classmethod
    def _read_env(cls) -> dict:
        defaults = cls()
        return {
            "media_source": _env_str("MEDIA_SOURCE", defaults.media_source).lower(),
            "spotify_cli": _env_str("SPOTIFY_CLI", defaults.spotify_cli),
            "spotify_cli_timeout": _env_float("SPOTIFY_CLI_TIMEOUT", defaults.spotify_cli_timeout),
            "spotify_client_id": _env_str("SPOTIFY_CLIENT_ID", None),
            "spotify_client_secret": _env_str("SPOTIFY_CLIENT_SECRET", None),
            "spotify_refresh_token": _env_str("SPOTIFY_REFRESH_TOKEN", None),
            "spotify_api_timeout": _env_float("SPOTIFY_API_TIMEOUT", defaults.spotify_api_timeout),
            "poll_interval": _env_float("POLL_INTERVAL", defaults.poll_interval),
            "sample_period": _env_float("SAMPLE_PERIOD", defaults.sample_period),
            "frame_delay": _env_float("FRAME_DELAY", defaults.frame_delay),
            "settle_delay": _env_float("SETTLE_DELAY", defaults.settle_delay),
            "buttons_normally_closed": _env_bool(
                "BUTTONS_NORMALLY_CLOSED", defaults.buttons_normally_closed
            ),
            "debounce_hold_off": _env_float("DEBOUNCE_HOLD_OFF", defaults.debounce_hold_off),
            "log_level": _env_str("LOG_LEVEL", defaults.log_level).upper(),
            "mqtt_log_host": _env_str("MQTT_LOG_HOST", None),
            "mqtt_log_port": _env_int("MQTT_LOG_PORT", defaults.mqtt_log_port),
            "mqtt_log_topic": _env_str("MQTT_LOG_TOPIC", defaults.mqtt_log_topic),
        }

    def validate(self) -> None:
        """Check ranges and choices."""
        if self.media_source not in MEDIA_SOURCES:
            raise ConfigurationError(
                f"MEDIA_SOURCE must be one of {', '.join(MEDIA_SOURCES)}, got '{self.media_source}'"
            )
        if self.media_source == "web" and not (
            self.spotify_client_id and self.spotify_client_secret and self.spotify_refresh_token
        ):
            raise ConfigurationError(
                "MEDIA_SOURCE=web needs SPOTIFY_CLIENT_ID, SPOTIFY_CLIENT_SECRET and SPOTIFY_REFRESH_TOKEN"
            )
        for name in ("poll_interval", "sample_period", "spotify_api_timeout"):
            if getattr(self, name) <= 0:
                raise ConfigurationError(f"{name} must be positive")
        for name in ("frame_delay", "settle_delay", "debounce_hold_off"):
            if getattr(self, name) < 0:
                raise ConfigurationError(f"{name} must not be negative")
        if self.spotify_cli_timeout is not None and self.spotify_cli_timeout <= 0:
            raise ConfigurationError("spotify_cli_timeout must be positive")
        if self.log_level not in LOG_LEVELS:
            raise ConfigurationError(f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}")
        if not 0 < self.mqtt_log_port < 65536:
            raise ConfigurationError(f"MQTT_LOG_PORT out of range: {self.mqtt_log_port}")

    def summary(self) -> dict:
        """Settings for the startup log, with secrets masked."""
        masked = {}
        for field in fields(self):
            value = getattr(self, field.name)
            if field.name in ("spotify_client_secret", "spotify_refresh_token") and value:
                value = "***"
            masked[field.name] = value
        return masked
