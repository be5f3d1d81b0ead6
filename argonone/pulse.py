#!/usr/bin/env python3
"""
Button pulse classification.

A press is measured in fixed ticks while the button line stays high and
then mapped to the power actions it should trigger.
"""

import enum
from dataclasses import dataclass
from typing import Callable, Dict, List

from .events import TICK_SECONDS

REBOOT_MIN_SECONDS = 2.0
REBOOT_MAX_SECONDS = 3.0
SHUTDOWN_MIN_SECONDS = 4.0


class PressAction(enum.Enum):
    REBOOT = "reboot"
    SHUTDOWN = "shutdown"


@dataclass(frozen=True)
class ButtonPulse:
    """
    How long the button line stayed high after a rising edge.

    The count starts at one tick for the settle delay after arming, so a
    line held high for T further ticks yields T + 1 ticks.
    """
    ticks: int = 1

    def extend(self) -> "ButtonPulse":
        return ButtonPulse(self.ticks + 1)

    @property
    def duration(self) -> float:
        """Pulse length in seconds."""
        return round(self.ticks * TICK_SECONDS, 1)


def classify_verbatim(duration: float) -> List[PressAction]:
    """
    Classify a press the way the first release of the controller did.

    The reboot condition holds for every duration and the two checks are
    independent, so every release reboots and a press of 4s or more asks
    for a reboot followed by a power-off.
    """
    actions = []
    if duration >= REBOOT_MIN_SECONDS or duration <= REBOOT_MAX_SECONDS:
        actions.append(PressAction.REBOOT)
    if duration >= SHUTDOWN_MIN_SECONDS:
        actions.append(PressAction.SHUTDOWN)
    return actions


def classify_corrected(duration: float) -> List[PressAction]:
    """
    Classify a press into at most one action.

    [2s, 3s) reboots, 4s and longer powers off, anything else is ignored.
    """
    if duration >= SHUTDOWN_MIN_SECONDS:
        return [PressAction.SHUTDOWN]
    if REBOOT_MIN_SECONDS <= duration < REBOOT_MAX_SECONDS:
        return [PressAction.REBOOT]
    return []


PRESS_POLICIES: Dict[str, Callable[[float], List[PressAction]]] = {
    "corrected": classify_corrected,
    "verbatim": classify_verbatim,
}
