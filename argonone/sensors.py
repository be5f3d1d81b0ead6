#!/usr/bin/env python3
"""
Temperature reading module.

Reads the SoC temperature either through the firmware's vcgencmd tool or
from the kernel thermal zone in sysfs.
"""

import re
import subprocess
from typing import Callable, Sequence

from .config import ConfigManager

MEASURE_TEMP_COMMAND = ("vcgencmd", "measure_temp")
MEASURE_TEMP_PATTERN = re.compile(r"temp=([-+]?\d+(?:\.\d+)?)'C")


class TemperatureReadError(RuntimeError):
    """The temperature could not be obtained or parsed."""


def parse_measure_temp(text: str) -> float:
    """Extract degrees Celsius from vcgencmd output such as "temp=48.3'C"."""
    match = MEASURE_TEMP_PATTERN.search(text)
    if not match:
        raise TemperatureReadError(f"Unexpected measure_temp output: {text.strip()!r}")
    return float(match.group(1))


class VcgencmdTemperatureSource:
    """Reads temperature by running `vcgencmd measure_temp`."""

    def __init__(self, command: Sequence[str] = MEASURE_TEMP_COMMAND,
                 runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
                 timeout: float = 5.0):
        self.command = list(command)
        self.runner = runner
        self.timeout = timeout

    def read(self) -> float:
        """Return the current temperature in °C."""
        try:
            result = self.runner(self.command, capture_output=True, text=True,
                                 check=True, timeout=self.timeout)
        except (OSError, subprocess.SubprocessError) as exc:
            raise TemperatureReadError(f"{' '.join(self.command)} failed: {exc}") from exc
        return parse_measure_temp(result.stdout)


class SysfsTemperatureSource:
    """Reads temperature from a thermal zone node (millidegrees Celsius)."""

    def __init__(self, path: str = "/sys/class/thermal/thermal_zone0/temp"):
        self.path = path

    def read(self) -> float:
        """Return the current temperature in °C."""
        try:
            with open(self.path) as f:
                return int(f.read().strip()) / 1000.0  # millideg → °C
        except (OSError, ValueError) as exc:
            raise TemperatureReadError(f"Unable to read {self.path}: {exc}") from exc


def make_temperature_source(config: ConfigManager):
    """Build the temperature source selected in the configuration."""
    if config.temperature_source == "sysfs":
        return SysfsTemperatureSource(config.thermal_zone_path)
    return VcgencmdTemperatureSource()
