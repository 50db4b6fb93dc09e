"""
Logging setup for the controller.

Logs go to stdout. When an MQTT broker is configured, every record is also
published to a topic so the operator can follow a headless device remotely.
"""
import logging
import socket
import sys
from typing import Optional

import paho.mqtt.client as mqtt

LOG_FORMAT = '%(asctime)s %(name)s %(levelname)s:%(message)s'


class MqttLogHandler(logging.Handler):
    """Publishes formatted log records to an MQTT topic."""

    def __init__(self, host: str, port: int = 1883, topic: str = "nowplaying/log",
                 client: Optional[mqtt.Client] = None) -> None:
        super().__init__()
        self.topic = topic
        if client is None:
            client = mqtt.Client(
                mqtt.CallbackAPIVersion.VERSION2,
                client_id=f"nowplaying-{socket.gethostname()}",
            )
            client.on_connect = self._on_connect
            client.on_disconnect = self._on_disconnect
            # Connects in the background thread, retrying until the broker answers
            client.connect_async(host, port, keepalive=60)
            client.loop_start()
        self.client = client

    def _on_connect(self, client, userdata, connect_flags, reason_code, properties=None):
        rc = reason_code.value if hasattr(reason_code, 'value') else reason_code
        if rc != 0:
            sys.stderr.write(f"MQTT log connection failed with code {rc}\n")

    def _on_disconnect(self, client, userdata, disconnect_flags, reason_code, properties=None):
        rc = reason_code.value if hasattr(reason_code, 'value') else reason_code
        if rc != 0:
            sys.stderr.write(f"MQTT log connection lost with code {rc}\n")

    def emit(self, record: logging.LogRecord) -> None:
        try:
            result = self.client.publish(self.topic, self.format(record), qos=0)
            # Records are dropped while the broker is unreachable
            if result.rc not in (mqtt.MQTT_ERR_SUCCESS, mqtt.MQTT_ERR_NO_CONN):
                raise OSError(f"MQTT publish failed: {result.rc}")
        except Exception:
            self.handleError(record)

    def close(self) -> None:
        try:
            self.client.loop_stop()
            self.client.disconnect()
        finally:
            super().close()


def setup_logging(config) -> None:
    """
    Configure the root logger from a BaseConfiguration.

    Args:
        config: Configuration providing log_level and the mqtt_log_* settings
    """
    logging.basicConfig(
        stream=sys.stdout,
        level=getattr(logging, config.log_level, logging.INFO),
        format=LOG_FORMAT,
        force=True,
    )

    if config.mqtt_log_host:
        handler = MqttLogHandler(config.mqtt_log_host, config.mqtt_log_port, config.mqtt_log_topic)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logging.getLogger().addHandler(handler)
        logging.getLogger(__name__).info(
            "Forwarding logs to mqtt://%s:%d/%s",
            config.mqtt_log_host, config.mqtt_log_port, config.mqtt_log_topic,
        )
