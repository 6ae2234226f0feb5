# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
# http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

import threading
from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional
from ..core.running_signal import RunningSignal
from ..utils.logging import LoggerMixin
from ..utils.timer import Timer
from .worker_stats import StatsAggregator


class WorkloadKind(str, Enum):
    """Kinds of synthetic resource pressure."""
    NETWORK = "network"
    CPU = "cpu"
    IO = "io"
    MONITOR = "monitor"


class WorkloadWorker(LoggerMixin, ABC):
    """
    One worker loop running in its own thread.

    The loop checks the shared running signal at the top of every iteration
    only, so an iteration that has started always completes.
    """

    kind: WorkloadKind

    def __init__(self, name: str, running: RunningSignal, stats: StatsAggregator):
        super().__init__()
        self.name = name
        self.running = running
        self.stats = stats
        self.cycles = 0
        self._thread: Optional[threading.Thread] = None

    def start(self) -> 'WorkloadWorker':
        """Start the worker loop in a daemon thread named after the worker."""
        if self._thread is not None:
            raise RuntimeError(f"Worker {self.name} already started")
        # Daemon threads: a worker abandoned after its join timeout must
        # not keep the interpreter alive.
        self._thread = threading.Thread(target=self.run, name=self.name, daemon=True)
        self._thread.start()
        return self

    def join(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for the worker thread to finish.

        :param timeout: Maximum seconds to wait
        :return: True if the thread has finished
        """
        if self._thread is None:
            return True
        self._thread.join(timeout)
        return not self._thread.is_alive()

    def is_alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def run(self):
        """Worker loop."""
        self.logger.debug(f"{self.name} started")
        self.prepare()
        try:
            while self.running.is_set():
                timer = Timer()
                self.run_once()
                self.record_cycle(timer)
                self.cycles += 1
        finally:
            self.close()
            self.logger.debug(f"{self.name} finished after {self.cycles} cycles")

    def prepare(self):
        """Acquire per-worker resources before the first iteration."""
        pass

    def close(self):
        """Release per-worker resources once the loop has ended."""
        pass

    @abstractmethod
    def run_once(self):
        """Perform one unit of work, reporting failures to the aggregator."""
        pass

    @abstractmethod
    def record_cycle(self, timer: Timer):
        """Report the wall time of the iteration that just finished."""
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r}, alive={self.is_alive()})"
