#!/usr/bin/env python3
"""
Configuration manager for the Argon One controller.

Handles loading and accessing configuration from an optional YAML file.
Only the hardware wiring and daemon plumbing are configurable; the control
thresholds are fixed constants of their modules.
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

TEMPERATURE_SOURCES = ("vcgencmd", "sysfs")
PRESS_POLICIES = ("corrected", "verbatim")


class ConfigManager:
    """
    Manages loading and accessing configuration from a YAML file.

    Every property has a default, so a manager created without a path is
    fully usable.
    """

    def __init__(self, config_path: Optional[str] = None):
        """Initialize the configuration manager with a config file path."""
        self.config_path = config_path
        self._config: Dict[str, Any] = {}

        if config_path:
            self.reload()

    def reload(self) -> None:
        """Reload configuration from YAML file."""
        if not self.config_path or not os.path.exists(self.config_path):
            raise FileNotFoundError(f"Configuration file not found: {self.config_path}")

        try:
            with open(self.config_path, "r") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Error loading configuration: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValueError(f"Error loading configuration: expected a mapping in {self.config_path}")
        self._config = data
        self._validate()

    def _validate(self) -> None:
        """Check every typed setting so bad values fail at load time."""
        for name in ("i2c_bus", "fan_address", "button_pin", "temperature_source", "press_policy"):
            getattr(self, name)

    def _int_setting(self, key: str, default: int) -> int:
        """Integer setting; strings may carry a 0x prefix."""
        value = self._config.get(key, default)
        try:
            if isinstance(value, str):
                return int(value, 0)
            if isinstance(value, bool) or not isinstance(value, int):
                raise TypeError(type(value).__name__)
            return value
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid {key}: {value!r}") from e

    @property
    def log_file(self) -> Optional[str]:
        """Log file for daemon output, None to log to the console only."""
        return self._config.get("log_file")

    @property
    def log_level(self) -> str:
        """Default logging level name."""
        return str(self._config.get("log_level", "INFO")).upper()

    @property
    def i2c_bus(self) -> int:
        """Number of the I2C bus the fan controller sits on (/dev/i2c-N)."""
        return self._int_setting("i2c_bus", 1)

    @property
    def fan_address(self) -> int:
        """I2C address of the fan controller."""
        return self._int_setting("fan_address", 0x1A)

    @property
    def button_pin(self) -> int:
        """BCM number of the power button pin."""
        return self._int_setting("button_pin", 4)

    @property
    def temperature_source(self) -> str:
        """Where CPU temperature comes from: 'vcgencmd' or 'sysfs'."""
        source = self._config.get("temperature_source", "vcgencmd")
        if source not in TEMPERATURE_SOURCES:
            raise ValueError(f"Unknown temperature_source: {source!r}")
        return source

    @property
    def thermal_zone_path(self) -> str:
        """Sysfs node read by the 'sysfs' temperature source."""
        return self._config.get("thermal_zone_path", "/sys/class/thermal/thermal_zone0/temp")

    @property
    def press_policy(self) -> str:
        """How button presses are classified: 'corrected' or 'verbatim'."""
        policy = self._config.get("press_policy", "corrected")
        if policy not in PRESS_POLICIES:
            raise ValueError(f"Unknown press_policy: {policy!r}")
        return policy

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value by key."""
        return self._config.get(key, default)


def find_config_file(specified_path: Optional[str] = None) -> Optional[str]:
    """
    Find the configuration file.

    Searches in order: specified path, working directory, /etc, user's config.
    """
    if specified_path:
        return specified_path

    search_paths = [
        Path.cwd() / "config.yaml",
        Path("/etc/argonone/config.yaml"),
        Path.home() / ".config/argonone/config.yaml",
    ]

    for path in search_paths:
        if path.exists():
            return str(path)

    return None
