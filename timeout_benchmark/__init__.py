"""Concurrent network, CPU and disk I/O load generator."""

from .core.config import BenchmarkConfig
from .core.errors import BenchmarkInterrupted, ExitCode
from .core.orchestrator import BenchmarkOrchestrator, BenchmarkReport, OrchestratorState
from .worker.worker_stats import StatsAggregator

__version__ = "0.1.0"

__all__ = [
    "BenchmarkConfig",
    "BenchmarkInterrupted",
    "BenchmarkOrchestrator",
    "BenchmarkReport",
    "ExitCode",
    "OrchestratorState",
    "StatsAggregator",
]
