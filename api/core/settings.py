"""
Environment-driven settings.

Every value is read lazily from `os.environ` so tests can monkeypatch the
environment without reloading modules.
"""

from __future__ import annotations

import logging
import os

DEFAULT_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def env_str(name: str, default: str = "") -> str:
    return os.environ.get(name, default).strip() or default


def env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    return raw not in {"0", "false", "False", "no", "off"}


def mqtt_broker_url() -> str:
    return env_str("MQTT_BROKER_URL", "ws://localhost:8000/mqtt")


def mqtt_topic() -> str:
    return env_str("MQTT_TOPIC", "stm32/demo")


def mqtt_qos() -> int:
    return max(0, min(env_int("MQTT_QOS", 0), 2))


def mqtt_client_id() -> str:
    return env_str("MQTT_CLIENT_ID", "")


def mqtt_enabled() -> bool:
    return env_bool("MQTT_ENABLED", True)


def mqtt_reconnect_delays() -> tuple[int, int]:
    min_delay = max(1, env_int("MQTT_RECONNECT_MIN_DELAY", 1))
    max_delay = max(min_delay, env_int("MQTT_RECONNECT_MAX_DELAY", 60))
    return min_delay, max_delay


def mqtt_log_path() -> str:
    return env_str("MQTT_LOG_PATH", "mqtt_log.json")


def cors_allow_origins() -> list[str]:
    raw = env_str("CORS_ALLOW_ORIGINS", "*")
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def configure_logging() -> None:
    """
    Configure root logging once per process. Level comes from LOG_LEVEL.
    """
    level_name = env_str("LOG_LEVEL", "INFO").upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(level=level, format=DEFAULT_LOG_FORMAT)
