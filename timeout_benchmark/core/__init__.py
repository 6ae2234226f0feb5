"""Core components of the timeout benchmark.

The orchestrator lives in :mod:`timeout_benchmark.core.orchestrator`; it is
not imported here because it depends on the worker package, which in turn
depends on this one.
"""

from .config import BenchmarkConfig, ConfigLoader
from .errors import BenchmarkInterrupted, ExitCode
from .monitoring import SystemMonitor, SystemStats
from .running_signal import RunningSignal

__all__ = [
    "BenchmarkConfig",
    "ConfigLoader",
    "BenchmarkInterrupted",
    "ExitCode",
    "SystemMonitor",
    "SystemStats",
    "RunningSignal",
]
