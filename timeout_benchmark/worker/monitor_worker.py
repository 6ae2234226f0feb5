"""Live status row rendered while the benchmark runs."""

import time
from typing import Callable, Optional

from rich.console import Console

from ..core.running_signal import RunningSignal
from ..utils.timer import Timer
from .worker_stats import StatsAggregator
from .workload_worker import WorkloadKind, WorkloadWorker

SPINNER = "-\\|/"
MONITOR_INTERVAL_SECONDS = 0.2


class MonitorWorker(WorkloadWorker):
    """
    Overwrites a single terminal line with a spinner, the aggregator's
    status line and the elapsed time, then ends it with a newline once
    the benchmark stops.

    If the row cannot be written the monitor calls ``on_abort`` with the
    error and stops rendering.
    """

    kind = WorkloadKind.MONITOR

    def __init__(self, name: str, running: RunningSignal, stats: StatsAggregator,
                 console: Console, interval_seconds: float = MONITOR_INTERVAL_SECONDS,
                 on_abort: Optional[Callable[[BaseException], None]] = None):
        super().__init__(name, running, stats)
        self.console = console
        self.interval_seconds = interval_seconds
        self.on_abort = on_abort
        self.aborted = False
        self._spinner_index = 0
        self._timer: Optional[Timer] = None

    def run(self):
        try:
            super().run()
            self._write("\n")
        except (OSError, ValueError) as e:
            # ValueError: the console stream was closed.
            self.aborted = True
            self.logger.error(f"{self.name} cannot render progress", exc_info=True)
            if self.on_abort is not None:
                self.on_abort(e)

    def prepare(self):
        self._timer = Timer()

    def render(self) -> str:
        """Build the next status row, advancing the spinner."""
        self._spinner_index = (self._spinner_index + 1) % len(SPINNER)
        return "\r[%s] %s Elapsed=[%d secs]" % (
            SPINNER[self._spinner_index],
            self.stats.status_line(),
            int(self._timer.elapsed_seconds()))

    def run_once(self):
        self._write(self.render())
        time.sleep(self.interval_seconds)

    def record_cycle(self, timer: Timer):
        pass

    def _write(self, text: str):
        stream = self.console.file
        stream.write(text)
        stream.flush()
