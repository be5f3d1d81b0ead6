"""
Argon One Pi Controller Package.

Drives the Argon One case fan from the CPU temperature and turns presses of
the case power button into a reboot or a power-off.
"""

__version__ = "0.1.0"

from .config import ConfigManager
from .events import FailureChannel, FailureEvent, TemperatureReading, Worker
from .sensors import SysfsTemperatureSource, TemperatureReadError, VcgencmdTemperatureSource
from .commands import FanCommand, RebootCommand, SetFanSpeedCommand, ShutdownCommand
from .pulse import ButtonPulse, PressAction, classify_corrected, classify_verbatim
from .controller import FanController, TemperaturePoller
from .button import ShutdownButtonWatcher
from .supervisor import Outcome, Supervisor

__all__ = [
    "ConfigManager",
    "FailureChannel", "FailureEvent", "TemperatureReading", "Worker",
    "SysfsTemperatureSource", "TemperatureReadError", "VcgencmdTemperatureSource",
    "FanCommand", "RebootCommand", "SetFanSpeedCommand", "ShutdownCommand",
    "ButtonPulse", "PressAction", "classify_corrected", "classify_verbatim",
    "FanController", "TemperaturePoller",
    "ShutdownButtonWatcher",
    "Outcome", "Supervisor",
    "__version__"
]
