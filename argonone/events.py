#!/usr/bin/env python3
"""
Messages and channels shared by the controller workers.

Workers share no mutable state. Temperature readings travel over a
single-slot queue, fatal errors over a FailureChannel, and a
threading.Event serves as the process-wide cancellation token.
"""

import queue
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

# Sampling granularity used for cancellation checks and pulse timing.
TICK_SECONDS = 0.1


@dataclass(frozen=True)
class TemperatureReading:
    """A single CPU temperature sample in degrees Celsius."""
    celsius: float


@dataclass(frozen=True)
class FailureEvent:
    """A fatal error raised by a worker, tagged with the worker's name."""
    source: str
    error: BaseException


class FailureChannel:
    """
    Fan-in channel for fatal worker errors.

    Holds a single event. Only the first failure is guaranteed to be
    observed; reports arriving while the slot is taken are dropped.
    """

    def __init__(self):
        self._queue: "queue.Queue[FailureEvent]" = queue.Queue(maxsize=1)

    def report(self, source: str, error: BaseException) -> bool:
        """
        Offer a failure to the channel without blocking.

        Returns:
            True if the event was queued, False if it was dropped.
        """
        try:
            self._queue.put_nowait(FailureEvent(source, error))
        except queue.Full:
            return False
        return True

    def wait(self, timeout: Optional[float] = None) -> Optional[FailureEvent]:
        """Block up to timeout seconds for a failure; None if none arrived."""
        try:
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return None


def new_reading_channel() -> "queue.Queue[TemperatureReading]":
    """Single-slot channel between the temperature poller and the fan controller."""
    return queue.Queue(maxsize=1)


class Worker(ABC):
    """
    One independent control loop.

    run() returning means the worker stopped after cancellation; an
    exception escaping run() means the worker failed.
    """

    name = "worker"

    @abstractmethod
    def run(self, cancel: threading.Event) -> None:
        """Run until cancel is set or a fatal error occurs."""
