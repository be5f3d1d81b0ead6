#!/usr/bin/env python3
"""
Case power button handling.

The button pulls its GPIO line high while pressed. The watcher measures how
long the line stays high after a rising edge and turns the press into a
reboot or power-off.
"""

import logging
import threading
import time
from typing import Callable, List, Mapping, Optional

from .commands import Command
from .events import TICK_SECONDS, Worker
from .pulse import ButtonPulse, PressAction, classify_corrected


class GpioButtonPin:
    """A BCM-numbered input pin with pull-down, driven through RPi.GPIO."""

    def __init__(self, pin: int, gpio=None):
        if gpio is None:
            # Imported here: RPi.GPIO refuses to import on anything but a Pi.
            import RPi.GPIO as gpio

        self.GPIO = GPIO = gpio
        self.pin = pin
        self._edge_detection = False
        GPIO.setmode(GPIO.BCM)
        GPIO.setwarnings(False)
        GPIO.setup(pin, GPIO.IN, pull_up_down=GPIO.PUD_DOWN)

    def arm_rising_edge(self) -> None:
        """
        Arm rising edge detection for the next press.

        Detection is added once and then re-armed by clearing the pending
        edge flag. Recent kernels reject repeated add_event_detect calls.
        """
        if not self._edge_detection:
            self.GPIO.add_event_detect(self.pin, self.GPIO.RISING)
            self._edge_detection = True
        else:
            self.GPIO.event_detected(self.pin)

    def is_high(self) -> bool:
        return self.GPIO.input(self.pin) == self.GPIO.HIGH

    def close(self) -> None:
        if self._edge_detection:
            self.GPIO.remove_event_detect(self.pin)
            self._edge_detection = False
        self.GPIO.cleanup(self.pin)


class ShutdownButtonWatcher(Worker):
    """
    Edge-triggered pulse-duration classifier for the power button.

    Each outer iteration:
    - checks cancellation, then re-arms rising edge detection
    - sleeps one tick, then keeps sleeping a tick at a time while the pin
      reads high, growing the pulse by one tick each time
    - classifies the pulse once the pin reads low and runs the resulting
      actions in order

    A failing action escapes run() and is fatal to the controller.
    """

    name = "button-watcher"

    def __init__(self, pin, actions: Mapping[PressAction, Command],
                 classify: Callable[[float], List[PressAction]] = classify_corrected,
                 logger: Optional[logging.Logger] = None,
                 sleep: Callable[[float], None] = time.sleep):
        """
        Initialize the watcher.

        Args:
            pin: Object with arm_rising_edge() and is_high()
            actions: Command to execute for each PressAction
            classify: Maps a pulse duration in seconds to actions
            logger: Sink for status messages
            sleep: Sleep function, replaced in tests
        """
        self.pin = pin
        self.actions = actions
        self.classify = classify
        self.log = logger or logging.getLogger(__name__)
        self.sleep = sleep

    def run(self, cancel: threading.Event) -> None:
        while not cancel.is_set():
            self.pin.arm_rising_edge()
            pulse = self.measure()
            self.dispatch(pulse)
        self.log.info("%s: cancellation requested", self.name)

    def measure(self) -> ButtonPulse:
        """Wait one tick, then time how long the pin stays high."""
        pulse = ButtonPulse()
        self.sleep(TICK_SECONDS)
        while self.pin.is_high():
            self.sleep(TICK_SECONDS)
            pulse = pulse.extend()
        return pulse

    def dispatch(self, pulse: ButtonPulse) -> List[PressAction]:
        """Run the actions the pulse classifies to, in order."""
        triggered = self.classify(pulse.duration)
        for action in triggered:
            self.log.info("button held %.1fs → %s", pulse.duration, action.value)
            self.actions[action].execute()
        return triggered
