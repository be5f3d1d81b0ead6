import subprocess

import pytest

from argonone.commands import (
    FanCommand,
    FanWriteError,
    PowerActionError,
    RebootCommand,
    SetFanSpeedCommand,
    ShutdownCommand,
)
from tests.fakes import FakeBus, RecordingRunner


def test_fan_command_payload_is_little_endian_u32() -> None:
    assert FanCommand(100).payload == b"\x64\x00\x00\x00"
    assert FanCommand(0).payload == b"\x00\x00\x00\x00"


@pytest.mark.parametrize("speed", [-1, 101])
def test_fan_command_range(speed) -> None:
    with pytest.raises(ValueError):
        FanCommand(speed)


def test_set_fan_speed_writes_block() -> None:
    bus = FakeBus()

    SetFanSpeedCommand(bus, 0x1A, 100).execute()

    assert bus.writes == [(0x1A, 0x1A, [100, 0, 0, 0])]


def test_set_fan_speed_failure_is_raised() -> None:
    bus = FakeBus(error=OSError(121, "Remote I/O error"))

    with pytest.raises(FanWriteError):
        SetFanSpeedCommand(bus, 0x1A, 100).execute()


def test_power_commands_run_expected_programs() -> None:
    runner = RecordingRunner()

    RebootCommand(runner).execute()
    ShutdownCommand(runner).execute()

    assert runner.calls == [["reboot"], ["shutdown", "now"]]


@pytest.mark.parametrize("error", [
    PermissionError("not allowed"),
    subprocess.CalledProcessError(1, ["reboot"]),
])
def test_power_command_failure(error) -> None:
    with pytest.raises(PowerActionError):
        RebootCommand(RecordingRunner(error=error)).execute()
