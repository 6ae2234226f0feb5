"""Benchmark orchestrator: runs every workload worker for a fixed duration."""

import threading
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional

from rich.console import Console

from .config import BenchmarkConfig
from .errors import BenchmarkInterrupted, ExitCode
from .monitoring import SystemMonitor, SystemStats
from .running_signal import RunningSignal
from ..utils.config_validator import validate_benchmark_config
from ..utils.logging import LoggerMixin
from ..utils.timer import Timer
from ..worker.cpu_worker import CpuWorker
from ..worker.io_worker import IoWorker
from ..worker.monitor_worker import MonitorWorker
from ..worker.network_worker import NetworkWorker
from ..worker.payload import generate_payload
from ..worker.worker_stats import StatsAggregator, StatsSnapshot
from ..worker.workload_worker import WorkloadWorker


class OrchestratorState(str, Enum):
    """Lifecycle of a benchmark run."""
    CREATED = "created"
    VALIDATING = "validating"
    RUNNING = "running"
    STOPPING = "stopping"
    JOINED = "joined"
    REPORTED = "reported"


@dataclass
class BenchmarkReport:
    """Final outcome of a benchmark run."""
    url: str
    elapsed_seconds: float
    summary: str
    stats: StatsSnapshot
    abandoned_workers: List[str] = field(default_factory=list)
    system_stats: Optional[SystemStats] = None

    @property
    def result_line(self) -> str:
        return f"{self.summary} ({self.url})"


class BenchmarkOrchestrator(LoggerMixin):
    """Spawns the workers, lets them run, stops them and reports."""

    def __init__(
        self,
        config: BenchmarkConfig,
        console: Optional[Console] = None,
        interactive: Optional[bool] = None,
        payload: Optional[bytes] = None,
        payload_factory: Callable[[], bytes] = generate_payload
    ):
        """Initialize the orchestrator.

        Args:
            config: Benchmark configuration
            console: Console receiving progress and the report
            interactive: Whether the console is an interactive terminal;
                detected from the console when omitted
            payload: Pre-generated IO payload
            payload_factory: Builds the IO payload when none is given
        """
        super().__init__()
        self.config = config
        self.console = console if console is not None else Console(highlight=False)
        self.interactive = self.console.is_terminal if interactive is None else interactive
        self.payload = payload
        self.payload_factory = payload_factory

        self.state = OrchestratorState.CREATED
        self.running: Optional[RunningSignal] = None
        self.stats: Optional[StatsAggregator] = None
        self.workers: List[WorkloadWorker] = []
        self.system_monitor: Optional[SystemMonitor] = None

        self._abort = threading.Event()
        self._monitor_error: Optional[BaseException] = None

    def run(self) -> BenchmarkReport:
        """Run the benchmark to completion.

        Returns:
            The final report

        Raises:
            ConfigValidationError: If the configuration is rejected
            BenchmarkInterrupted: If a cancellation wait was interrupted
        """
        self._transition(OrchestratorState.VALIDATING)
        for warning in validate_benchmark_config(self.config):
            self.logger.warning(warning)

        timer = Timer()
        self._progress("Benchmark starting...")
        self._transition(OrchestratorState.RUNNING)

        self.stats = StatsAggregator(
            network_threads=self.config.network_threads,
            cpu_threads=self.config.cpu_threads,
            io_threads=self.config.io_threads
        )
        self.running = RunningSignal()
        if self.config.io_threads > 0 and self.payload is None:
            self.payload = self.payload_factory()

        if self.config.enable_system_monitor:
            self.system_monitor = SystemMonitor(interval=1.0)
            self.system_monitor.start()

        sleep_interruption = None
        try:
            self.workers = self.spawn_workers()
            self._wait_for_duration()
        except KeyboardInterrupt as e:
            self.logger.error("Interrupted while sleeping for the benchmark duration")
            sleep_interruption = e
        finally:
            self._transition(OrchestratorState.STOPPING)
            self.running.stop()

        try:
            abandoned = self.join_workers(self.workers)
        except KeyboardInterrupt as e:
            raise BenchmarkInterrupted(ExitCode.JOIN_INTERRUPTED, "joining workers") from e
        finally:
            system_stats = self._stop_system_monitor()
        self._transition(OrchestratorState.JOINED)

        if self._monitor_error is not None:
            raise BenchmarkInterrupted(
                ExitCode.MONITOR_INTERRUPTED, "rendering progress") from self._monitor_error

        report = BenchmarkReport(
            url=self.config.url,
            elapsed_seconds=timer.elapsed_seconds(),
            summary=self.stats.summary(),
            stats=self.stats.snapshot(),
            abandoned_workers=[worker.name for worker in abandoned],
            system_stats=system_stats
        )
        self._print_report(report)
        self._transition(OrchestratorState.REPORTED)

        if sleep_interruption is not None:
            raise BenchmarkInterrupted(
                ExitCode.SLEEP_INTERRUPTED, "sleeping for the benchmark duration",
                report=report) from sleep_interruption
        return report

    def spawn_workers(self) -> List[WorkloadWorker]:
        """Create and start the monitor (if shown), network, io and cpu workers."""
        workers: List[WorkloadWorker] = []

        if self.config.show_progress and self.interactive:
            workers.append(MonitorWorker(
                "Monitoring-0", self.running, self.stats, self.console,
                interval_seconds=self.config.monitor_interval_seconds,
                on_abort=self._on_monitor_abort
            ).start())

        for i in range(self.config.network_threads):
            workers.append(NetworkWorker(
                f"NetworkThread-{i}", self.running, self.stats, self.config.url,
                timeout_seconds=self.config.network_timeout_seconds
            ).start())

        for i in range(self.config.io_threads):
            workers.append(IoWorker(
                f"IoThread-{i}", self.running, self.stats, self.payload,
                Path(self.config.scratch_dir)
            ).start())

        for i in range(self.config.cpu_threads):
            workers.append(CpuWorker(f"CpuThread-{i}", self.running, self.stats).start())

        self.logger.info(
            f"Started {len(workers)} workers "
            f"(network={self.config.network_threads}, io={self.config.io_threads}, "
            f"cpu={self.config.cpu_threads}) against {self.config.url}"
        )
        return workers

    def join_workers(self, workers: List[WorkloadWorker],
                     timeout: Optional[float] = None) -> List[WorkloadWorker]:
        """Join every worker, waiting at most ``timeout`` seconds for each.

        Workers still running after their timeout are abandoned.

        Returns:
            The abandoned workers
        """
        timeout = self.config.join_timeout_seconds if timeout is None else timeout
        abandoned = []
        for worker in workers:
            if not worker.join(timeout):
                self.logger.warning(f"{worker.name} did not stop within {timeout:.1f}s, abandoning it")
                abandoned.append(worker)
        return abandoned

    def _wait_for_duration(self) -> None:
        """Block for the configured duration, or until the monitor aborts."""
        if self._abort.wait(self.config.duration_seconds):
            self.logger.error("Progress monitor aborted, stopping the benchmark early")

    def _on_monitor_abort(self, error: BaseException) -> None:
        self._monitor_error = error
        self._abort.set()

    def _stop_system_monitor(self) -> Optional[SystemStats]:
        if self.system_monitor is None:
            return None
        self.system_monitor.stop()
        return self.system_monitor.get_stats()

    def _print_report(self, report: BenchmarkReport) -> None:
        self._progress(f"Benchmark finished in [{int(report.elapsed_seconds)} seconds].")
        self._progress("Here are the final results:")
        self._print(report.result_line)

    def _progress(self, message: str) -> None:
        if self.config.show_progress:
            self._print(message)

    def _print(self, message: str) -> None:
        self.console.print(message, markup=False, highlight=False, soft_wrap=True)

    def _transition(self, state: OrchestratorState) -> None:
        self.logger.debug(f"{self.state.value} -> {state.value}")
        self.state = state
