#!/usr/bin/env python3
"""
Worker supervision.

Starts every worker on its own thread and stops them all on the first
fatal error or on a termination signal. There is no in-process recovery;
restarting is left to the service manager.
"""

import logging
import signal
import threading
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from .events import TICK_SECONDS, FailureChannel, Worker

STOP_SIGNALS = (signal.SIGINT, signal.SIGTERM, signal.SIGABRT, signal.SIGHUP)


@dataclass(frozen=True)
class Outcome:
    """How the control loop ended."""
    status: str
    error: Optional[BaseException] = None

    @property
    def exit_code(self) -> int:
        return 0 if self.error is None else 1


class Supervisor:
    """
    Owns the cancellation token and decides the process outcome.

    Blocks until either a stop signal arrives (graceful, exit code 0) or a
    worker reports a failure (exit code 1). Only the first failure is acted
    upon.
    """

    def __init__(self, workers: Sequence[Worker],
                 failures: Optional[FailureChannel] = None,
                 logger: Optional[logging.Logger] = None,
                 join_timeout: float = 6.0):
        """
        Initialize the supervisor.

        Args:
            workers: Workers to run concurrently
            failures: Channel workers' fatal errors are reported on
            logger: Sink for status and error messages
            join_timeout: Seconds to wait for each worker after cancelling
        """
        self.workers = list(workers)
        self.failures = failures or FailureChannel()
        self.log = logger or logging.getLogger(__name__)
        self.join_timeout = join_timeout
        self.cancel = threading.Event()
        self._threads: List[threading.Thread] = []
        self._signal: Optional[int] = None
        self._signal_received = threading.Event()

    def request_stop(self, signum: int, frame=None) -> None:
        """Signal handler: ask the supervisor to stop gracefully."""
        self._signal = signum
        self._signal_received.set()

    def run(self, handle_signals: bool = True) -> Outcome:
        """Run all workers until a stop signal or the first failure."""
        previous = self._install_signal_handlers() if handle_signals else {}
        try:
            self._start_workers()
            outcome = self._wait()
        finally:
            self.cancel.set()
            self._restore_signal_handlers(previous)
        self._join_workers()
        return outcome

    def _wait(self) -> Outcome:
        while True:
            if self._signal_received.is_set():
                self.log.info("Got signal: %s", _signal_name(self._signal))
                self.cancel.set()
                return Outcome("Process finished")

            event = self.failures.wait(timeout=TICK_SECONDS)
            if event is not None:
                self.cancel.set()
                self.log.error("%s failed: %s", event.source, event.error)
                return Outcome(f"failed: {event.source}", event.error)

    def _start_workers(self) -> None:
        for worker in self.workers:
            thread = threading.Thread(target=self._run_worker, args=(worker,),
                                      name=worker.name, daemon=True)
            self._threads.append(thread)
            thread.start()

    def _run_worker(self, worker: Worker) -> None:
        try:
            worker.run(self.cancel)
        except Exception as exc:
            if self.cancel.is_set() or not self.failures.report(worker.name, exc):
                self.log.warning("%s failed after shutdown began: %s", worker.name, exc)

    def _join_workers(self) -> None:
        for thread in self._threads:
            thread.join(self.join_timeout)
            if thread.is_alive():
                self.log.warning("%s did not stop within %.1fs", thread.name, self.join_timeout)

    def _install_signal_handlers(self) -> Dict[int, object]:
        previous = {}
        for signum in STOP_SIGNALS:
            previous[signum] = signal.signal(signum, self.request_stop)
        return previous

    @staticmethod
    def _restore_signal_handlers(previous: Dict[int, object]) -> None:
        for signum, handler in previous.items():
            if handler is not None:
                signal.signal(signum, handler)


def _signal_name(signum: Optional[int]) -> str:
    try:
        return signal.Signals(signum).name
    except (TypeError, ValueError):
        return str(signum)

