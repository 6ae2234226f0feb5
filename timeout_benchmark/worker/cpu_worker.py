"""CPU workload: an empty timing loop that keeps one core busy."""

from ..utils.timer import Timer
from .workload_worker import WorkloadKind, WorkloadWorker


class CpuWorker(WorkloadWorker):
    """Spins without doing I/O so scheduler contention shows up in cycle counts."""

    kind = WorkloadKind.CPU

    def run_once(self):
        # Tight loop, no work.
        pass

    def record_cycle(self, timer: Timer):
        self.stats.record_cpu_cycle(timer.elapsed_micros())
