#!/usr/bin/env python3
"""
Temperature polling and fan control workers.

The poller samples the temperature every few seconds and hands each reading
to the fan controller over a single-slot queue, so a slow fan write never
delays sampling.
"""

import logging
import queue
import threading
import time
from typing import Callable, Optional

from .commands import Command, SetFanSpeedCommand
from .events import TICK_SECONDS, TemperatureReading, Worker

POLL_INTERVAL = 5.0      # seconds between temperature samples
FAN_TRIGGER_TEMP = 50.0  # °C – above this the fan is driven to full speed
FAN_FULL_SPEED = 100


class TemperaturePoller(Worker):
    """
    Samples a temperature source and forwards the readings.

    States:
    - RUNNING: read, forward, sleep POLL_INTERVAL.
    - STOPPED: cancellation observed at the top of the loop.
    - FAILED: the source raised; the error escapes run() and is not retried.
    """

    name = "temperature-poller"

    def __init__(self, source, readings: "queue.Queue[TemperatureReading]",
                 interval: float = POLL_INTERVAL,
                 logger: Optional[logging.Logger] = None,
                 sleep: Callable[[float], None] = time.sleep):
        """
        Initialize the poller.

        Args:
            source: Object with a read() method returning degrees Celsius
            readings: Channel consumed by the fan controller
            interval: Seconds to sleep after each successful reading
            logger: Sink for status messages
            sleep: Sleep function, replaced in tests
        """
        self.source = source
        self.readings = readings
        self.interval = interval
        self.log = logger or logging.getLogger(__name__)
        self.sleep = sleep

    def run(self, cancel: threading.Event) -> None:
        while not cancel.is_set():
            reading = TemperatureReading(self.source.read())
            self.log.debug("temperature %.1f°C", reading.celsius)
            if not self._forward(reading, cancel):
                break
            self.sleep(self.interval)
        self.log.info("%s: cancellation requested", self.name)

    def _forward(self, reading: TemperatureReading, cancel: threading.Event) -> bool:
        """Put the reading on the channel, giving up once cancelled."""
        while not cancel.is_set():
            try:
                self.readings.put(reading, timeout=TICK_SECONDS)
                return True
            except queue.Full:
                continue
        return False


class FanController(Worker):
    """
    Drives the fan from temperature readings.

    The policy is one-directional: a reading above FAN_TRIGGER_TEMP sets the
    fan to full speed, anything else leaves the fan as it is. The fan is
    never slowed down or stopped.
    """

    name = "fan-controller"

    def __init__(self, readings: "queue.Queue[TemperatureReading]",
                 fan_command_factory: Callable[[int], Command],
                 logger: Optional[logging.Logger] = None):
        """
        Initialize the controller.

        Args:
            readings: Channel fed by the temperature poller
            fan_command_factory: Builds the command that sets a given speed
            logger: Sink for status messages
        """
        self.readings = readings
        self.fan_command_factory = fan_command_factory
        self.log = logger or logging.getLogger(__name__)

    @classmethod
    def for_bus(cls, readings, bus, address: int,
                logger: Optional[logging.Logger] = None) -> "FanController":
        """Build a controller writing to the fan controller at address on bus."""
        return cls(readings, lambda speed: SetFanSpeedCommand(bus, address, speed), logger)

    def run(self, cancel: threading.Event) -> None:
        while not cancel.is_set():
            try:
                reading = self.readings.get(timeout=TICK_SECONDS)
            except queue.Empty:
                continue
            if cancel.is_set():
                break
            self.handle(reading)
        self.log.info("%s: cancellation requested", self.name)

    def handle(self, reading: TemperatureReading) -> None:
        """Apply the fan policy to one reading."""
        if reading.celsius > FAN_TRIGGER_TEMP:
            self.log.info("%.1f°C above %.1f°C, fan → %d%%",
                          reading.celsius, FAN_TRIGGER_TEMP, FAN_FULL_SPEED)
            self.fan_command_factory(FAN_FULL_SPEED).execute()
