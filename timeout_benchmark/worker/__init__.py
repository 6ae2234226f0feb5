"""Workload workers and the statistics they report into."""

from .workload_worker import WorkloadKind, WorkloadWorker
from .worker_stats import StatsAggregator, StatsSnapshot, safe_division
from .cpu_worker import CpuWorker
from .io_worker import IoWorker
from .network_worker import NetworkWorker
from .monitor_worker import MonitorWorker
from .error_kind import ErrorKind, classify_request_error
from .payload import generate_payload, PAYLOAD_SIZE_BYTES

__all__ = [
    "WorkloadKind",
    "WorkloadWorker",
    "StatsAggregator",
    "StatsSnapshot",
    "safe_division",
    "CpuWorker",
    "IoWorker",
    "NetworkWorker",
    "MonitorWorker",
    "ErrorKind",
    "classify_request_error",
    "generate_payload",
    "PAYLOAD_SIZE_BYTES",
]
