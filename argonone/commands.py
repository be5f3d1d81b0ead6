#!/usr/bin/env python3
"""
Command pattern implementation for controller actions.

Defines the fan speed write and the two power actions triggered by the
case button.
"""

import logging
import struct
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Sequence

from smbus2 import SMBus

REBOOT_COMMAND = ("reboot",)
SHUTDOWN_COMMAND = ("shutdown", "now")

log = logging.getLogger(__name__)


class FanWriteError(RuntimeError):
    """Writing a speed to the fan controller failed."""


class PowerActionError(RuntimeError):
    """A reboot or power-off command could not be run."""


@dataclass(frozen=True)
class FanCommand:
    """A fan speed in percent."""
    speed: int

    def __post_init__(self):
        if not 0 <= self.speed <= 100:
            raise ValueError(f"Fan speed must be within 0-100, got {self.speed}")

    @property
    def payload(self) -> bytes:
        """Speed encoded as a 4-byte little-endian unsigned integer."""
        return struct.pack("<I", self.speed)


def open_fan_bus(bus_number: int) -> SMBus:
    """Open the I2C bus the fan controller is attached to."""
    return SMBus(bus_number)


class Command(ABC):
    """Base command interface for the Command pattern."""

    @abstractmethod
    def execute(self) -> None:
        """Execute the command."""
        pass


class SetFanSpeedCommand(Command):
    """Command to set the fan speed over SMBus."""

    def __init__(self, bus: SMBus, address: int, speed: int):
        """
        Initialize the command.

        Args:
            bus: Open SMBus handle
            address: I2C address of the fan controller, also used as the
                command register
            speed: Fan speed in percent (0-100)
        """
        self.bus = bus
        self.address = address
        self.fan_command = FanCommand(speed)

    def execute(self) -> None:
        """Write the speed as an SMBus block write."""
        try:
            self.bus.write_block_data(self.address, self.address, list(self.fan_command.payload))
        except OSError as exc:
            raise FanWriteError(f"Unable to set fan speed to {self.fan_command.speed}%: {exc}") from exc
        log.debug("fan speed → %d%%", self.fan_command.speed)


class SystemCommand(Command):
    """Runs an external power-management command."""

    def __init__(self, argv: Sequence[str],
                 runner: Callable[..., subprocess.CompletedProcess] = subprocess.run):
        self.argv = list(argv)
        self.runner = runner

    def execute(self) -> None:
        """Run the command; failures are raised as PowerActionError."""
        try:
            self.runner(self.argv, check=True)
        except (OSError, subprocess.CalledProcessError) as exc:
            raise PowerActionError(f"{' '.join(self.argv)} failed: {exc}") from exc


class RebootCommand(SystemCommand):
    """Command to reboot the machine."""

    def __init__(self, runner: Callable[..., subprocess.CompletedProcess] = subprocess.run):
        super().__init__(REBOOT_COMMAND, runner)


class ShutdownCommand(SystemCommand):
    """Command to power the machine off."""

    def __init__(self, runner: Callable[..., subprocess.CompletedProcess] = subprocess.run):
        super().__init__(SHUTDOWN_COMMAND, runner)
