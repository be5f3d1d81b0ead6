import queue

import pytest

from argonone.controller import FAN_FULL_SPEED, FanController, TemperaturePoller
from argonone.events import TemperatureReading
from argonone.sensors import TemperatureReadError
from tests.fakes import FakeBus, FakeSleep, FakeSource, RecordingCommand


class DrainThenCancel(queue.Queue):
    """Reading channel that cancels the consumer once it runs dry."""

    def __init__(self, cancel, readings):
        super().__init__()
        self.cancel = cancel
        for celsius in readings:
            self.put(TemperatureReading(celsius))

    def get(self, block=True, timeout=None):
        if self.empty():
            self.cancel.set()
            raise queue.Empty
        return super().get(block, timeout)


class RecordingFactory:
    def __init__(self):
        self.speeds = []

    def __call__(self, speed):
        self.speeds.append(speed)
        return RecordingCommand()


def drain(channel):
    items = []
    while not channel.empty():
        items.append(channel.get_nowait())
    return items


def test_poller_forwards_every_reading(cancel) -> None:
    readings = queue.Queue()
    sleep = FakeSleep(cancel, limit=3)
    poller = TemperaturePoller(FakeSource([41.0, 52.5, 47.25]), readings, sleep=sleep)

    poller.run(cancel)

    assert [r.celsius for r in drain(readings)] == [41.0, 52.5, 47.25]
    assert sleep.calls == [5.0, 5.0, 5.0]


def test_poller_stops_on_first_read_failure(cancel) -> None:
    readings = queue.Queue()
    source = FakeSource([40.0, 45.0, TemperatureReadError("boom"), 60.0])
    poller = TemperaturePoller(source, readings, sleep=FakeSleep())

    with pytest.raises(TemperatureReadError):
        poller.run(cancel)

    assert [r.celsius for r in drain(readings)] == [40.0, 45.0]
    assert source.calls == 3


def test_poller_does_not_read_after_cancellation(cancel) -> None:
    source = FakeSource([40.0])
    cancel.set()

    TemperaturePoller(source, queue.Queue(), sleep=FakeSleep()).run(cancel)

    assert source.calls == 0


def test_poller_gives_up_on_full_channel_when_cancelled(cancel) -> None:
    readings = queue.Queue(maxsize=1)
    readings.put(TemperatureReading(30.0))
    sleep = FakeSleep()

    class CancellingSource:
        def read(self):
            cancel.set()
            return 70.0

    TemperaturePoller(CancellingSource(), readings, sleep=sleep).run(cancel)

    assert [r.celsius for r in drain(readings)] == [30.0]
    assert sleep.calls == []


@pytest.mark.parametrize("celsius, expected", [
    (50.1, [FAN_FULL_SPEED]),
    (85.0, [FAN_FULL_SPEED]),
    (50.0, []),
    (20.0, []),
])
def test_fan_policy(celsius, expected) -> None:
    factory = RecordingFactory()

    FanController(queue.Queue(), factory).handle(TemperatureReading(celsius))

    assert factory.speeds == expected


def test_fan_is_never_lowered(cancel) -> None:
    factory = RecordingFactory()
    temps = [70.0, 30.0, 55.0, 10.0, 50.0, 90.0, 0.0]

    FanController(DrainThenCancel(cancel, temps), factory).run(cancel)

    assert factory.speeds == [100, 100, 100]


def test_fan_scenario_single_hot_reading(cancel) -> None:
    bus = FakeBus()
    controller = FanController.for_bus(DrainThenCancel(cancel, [30.0, 55.0, 40.0]), bus, 0x1A)

    controller.run(cancel)

    assert bus.writes == [(0x1A, 0x1A, [100, 0, 0, 0])]


def test_fan_ignores_readings_after_cancellation(cancel) -> None:
    factory = RecordingFactory()
    readings = queue.Queue()
    readings.put(TemperatureReading(80.0))
    cancel.set()

    FanController(readings, factory).run(cancel)

    assert factory.speeds == []


def test_fan_write_failure_escapes(cancel) -> None:
    bus = FakeBus(error=OSError(121, "Remote I/O error"))
    controller = FanController.for_bus(DrainThenCancel(cancel, [75.0]), bus, 0x1A)

    with pytest.raises(RuntimeError):
        controller.run(cancel)
