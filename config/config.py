import copy
import json
import os
from typing import Any, Dict, Optional

from loguru import logger

from config.info import CONFIG_FILE, CONFIG_ENV_VAR

DEFAULT_CONFIG: Dict[str, Any] = {
    "logging": {
        "level": "INFO",
        "file": None,
    },
    "network": {
        "availability": {
            "auto_reconnect": True,
            "reconnect_interval": 5,  # seconds
            "max_reconnect_attempts": 0,  # 0 retries forever
        },
        "connectivity": {
            "check_on_startup": False,
        },
    },
}


class ConfigSection:
    """Attribute access over a nested dict: config.network.availability"""

    def __init__(self, data: Dict[str, Any]):
        self._data = data

    def __getattr__(self, name: str) -> Any:
        try:
            value = self._data[name]
        except KeyError:
            raise AttributeError(name) from None
        return ConfigSection(value) if isinstance(value, dict) else value

    def __repr__(self) -> str:
        return f"ConfigSection({self._data!r})"


class ConfigManager:
    def __init__(self, path: Optional[str] = None):
        self.path = path or os.environ.get(CONFIG_ENV_VAR) or CONFIG_FILE
        self._data: Dict[str, Any] = {}
        self.load()

    def load(self) -> None:
        data = copy.deepcopy(DEFAULT_CONFIG)

        if os.path.exists(self.path):
            try:
                with open(self.path) as f:
                    user_data = json.load(f)
                if isinstance(user_data, dict):
                    _merge(data, user_data)
                else:
                    logger.warning(f"Ignoring {self.path}: top level is not an object")
            except (OSError, json.JSONDecodeError) as e:
                logger.warning(f"Failed to read config {self.path}, using defaults: {e}")
        else:
            logger.debug(f"No config at {self.path}, using defaults")

        self._data = data

    def get(self, path: list, default: Any = None) -> Any:
        cursor = self._data
        try:
            for key in path:
                cursor = cursor[key]
            return cursor
        except (KeyError, TypeError):
            return default

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        return getattr(ConfigSection(self._data), name)


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> None:
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _merge(base[key], value)
        else:
            base[key] = value


config = ConfigManager()
