"""Disk workload: repeatedly overwrite one scratch file per worker."""

from pathlib import Path
from typing import Optional, Union
from ..core.running_signal import RunningSignal
from ..utils.timer import Timer
from .worker_stats import StatsAggregator
from .workload_worker import WorkloadKind, WorkloadWorker

SCRATCH_FILE_TEMPLATE = "TimeoutBenchmark_{name}.bin"


class IoWorker(WorkloadWorker):
    """Overwrites ``<scratch_dir>/TimeoutBenchmark_<name>.bin`` with the shared payload."""

    kind = WorkloadKind.IO

    def __init__(self, name: str, running: RunningSignal, stats: StatsAggregator,
                 payload: bytes, scratch_dir: Union[str, Path]):
        super().__init__(name, running, stats)
        self.payload = payload
        self.scratch_dir = Path(scratch_dir)
        self.file_path: Optional[Path] = None

    @staticmethod
    def scratch_file_for(scratch_dir: Union[str, Path], name: str) -> Path:
        return Path(scratch_dir) / SCRATCH_FILE_TEMPLATE.format(name=name)

    def prepare(self):
        self.file_path = self.scratch_file_for(self.scratch_dir, self.name)
        try:
            self.scratch_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            # Every write will fail and be counted as an io error.
            self.logger.warning(f"Cannot create scratch directory {self.scratch_dir}: {e}")
        self.logger.debug(f"{self.name} writing to {self.file_path}")

    def run_once(self):
        try:
            with open(self.file_path, 'wb') as f:
                f.write(self.payload)
        except OSError as e:
            self.logger.debug(f"{self.name} write failed: {e}")
            self.stats.record_io_error()

    def record_cycle(self, timer: Timer):
        self.stats.record_io_cycle(timer.elapsed_micros())
