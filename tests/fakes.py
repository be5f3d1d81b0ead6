"""Hardware and process stand-ins shared by the tests."""

import subprocess
import threading
from typing import Iterable, List, Optional


class FakePin:
    """Button pin replaying a fixed sequence of levels, then reading low."""

    def __init__(self, levels: Iterable[bool], cancel: Optional[threading.Event] = None):
        self.levels = list(levels)
        self.cancel = cancel
        self.armed = 0
        self.reads = 0

    def arm_rising_edge(self) -> None:
        self.armed += 1

    def is_high(self) -> bool:
        self.reads += 1
        if not self.levels:
            if self.cancel is not None:
                self.cancel.set()
            return False
        level = self.levels.pop(0)
        if not self.levels and self.cancel is not None:
            self.cancel.set()
        return level


class FakeBus:
    def __init__(self, error: Optional[OSError] = None):
        self.writes: List[tuple] = []
        self.error = error
        self.closed = False

    def write_block_data(self, address: int, register: int, data: List[int]) -> None:
        if self.error is not None:
            raise self.error
        self.writes.append((address, register, list(data)))

    def close(self) -> None:
        self.closed = True


class RecordingCommand:
    def __init__(self, error: Optional[Exception] = None):
        self.calls = 0
        self.error = error

    def execute(self) -> None:
        self.calls += 1
        if self.error is not None:
            raise self.error


class FakeSleep:
    """Records sleeps; sets cancel once limit sleeps have happened."""

    def __init__(self, cancel: Optional[threading.Event] = None, limit: Optional[int] = None):
        self.calls: List[float] = []
        self.cancel = cancel
        self.limit = limit

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)
        if self.limit is not None and len(self.calls) >= self.limit:
            self.cancel.set()


class FakeSource:
    """Temperature source returning values; an Exception instance is raised instead."""

    def __init__(self, values):
        self.values = list(values)
        self.calls = 0

    def read(self) -> float:
        self.calls += 1
        value = self.values.pop(0)
        if isinstance(value, Exception):
            raise value
        return value


class RecordingRunner:
    """Stand-in for subprocess.run."""

    def __init__(self, stdout: str = "", error: Optional[Exception] = None):
        self.calls: List[list] = []
        self.stdout = stdout
        self.error = error

    def __call__(self, argv, **kwargs) -> subprocess.CompletedProcess:
        self.calls.append(list(argv))
        if self.error is not None:
            raise self.error
        return subprocess.CompletedProcess(argv, 0, stdout=self.stdout, stderr="")


class FakeGpio:
    """Records the RPi.GPIO calls a pin makes."""

    BCM = "BCM"
    IN = "IN"
    PUD_DOWN = "PUD_DOWN"
    RISING = "RISING"
    HIGH = 1
    LOW = 0

    def __init__(self, level: int = 0):
        self.calls: List[tuple] = []
        self.level = level

    def __getattr__(self, name):
        def record(*args, **kwargs):
            self.calls.append((name,) + args)
            if name == "input":
                return self.level
            return None
        return record
