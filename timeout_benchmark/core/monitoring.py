"""Host resource sampling while the benchmark runs."""

import time
import psutil
import numpy as np
from typing import Dict, List, Optional
from dataclasses import dataclass, field
from threading import Thread, Event
import logging

logger = logging.getLogger("timeout-benchmark.monitoring")

MB = 1024 * 1024


@dataclass
class SystemMetrics:
    """System metrics data point."""
    timestamp: float
    cpu_percent: float
    memory_percent: float
    network_sent_bytes: int
    network_recv_bytes: int
    disk_read_bytes: int
    disk_write_bytes: int


@dataclass
class SystemStats:
    """Aggregated system statistics."""
    samples: int = 0
    cpu: Dict[str, float] = field(default_factory=dict)
    memory: Dict[str, float] = field(default_factory=dict)
    network: Dict[str, float] = field(default_factory=dict)
    disk: Dict[str, float] = field(default_factory=dict)


class SystemMonitor:
    """Samples host CPU, memory, network and disk counters in a background thread."""

    def __init__(self, interval: float = 1.0):
        """Initialize system monitor.

        Args:
            interval: Sampling interval in seconds
        """
        self.interval = interval
        self.metrics: List[SystemMetrics] = []
        self._running = False
        self._stop_event = Event()
        self._monitor_thread: Optional[Thread] = None
        self._initial_net_io = None
        self._initial_disk_io = None

    def start(self) -> None:
        """Start system monitoring."""
        if self._running:
            logger.warning("System monitor is already running")
            return

        self._running = True
        self._stop_event.clear()
        self.metrics.clear()

        self._initial_net_io = psutil.net_io_counters()
        self._initial_disk_io = psutil.disk_io_counters()
        # Prime cpu_percent so the first sample is meaningful
        psutil.cpu_percent(interval=None)

        self._monitor_thread = Thread(target=self._monitor_loop, name="SystemMonitor", daemon=True)
        self._monitor_thread.start()
        logger.debug("System monitoring started")

    def stop(self, timeout: float = 5.0) -> None:
        """Stop system monitoring."""
        if not self._running:
            return

        self._running = False
        self._stop_event.set()

        if self._monitor_thread and self._monitor_thread.is_alive():
            self._monitor_thread.join(timeout=timeout)

        logger.debug(f"System monitoring stopped. Collected {len(self.metrics)} samples")

    def _monitor_loop(self) -> None:
        """Main monitoring loop."""
        start_time = time.time()
        prev_net = self._initial_net_io
        prev_disk = self._initial_disk_io

        while not self._stop_event.wait(self.interval):
            try:
                current_time = time.time()

                cpu_percent = psutil.cpu_percent(interval=None)
                memory = psutil.virtual_memory()

                net_io = psutil.net_io_counters()
                if net_io and prev_net:
                    net_sent = net_io.bytes_sent - prev_net.bytes_sent
                    net_recv = net_io.bytes_recv - prev_net.bytes_recv
                else:
                    net_sent = net_recv = 0
                prev_net = net_io

                # disk_io_counters() returns None on hosts without disks (containers)
                disk_io = psutil.disk_io_counters()
                if disk_io and prev_disk:
                    disk_read = disk_io.read_bytes - prev_disk.read_bytes
                    disk_write = disk_io.write_bytes - prev_disk.write_bytes
                else:
                    disk_read = disk_write = 0
                prev_disk = disk_io

                self.metrics.append(SystemMetrics(
                    timestamp=current_time - start_time,
                    cpu_percent=cpu_percent,
                    memory_percent=memory.percent,
                    network_sent_bytes=net_sent,
                    network_recv_bytes=net_recv,
                    disk_read_bytes=disk_read,
                    disk_write_bytes=disk_write
                ))

            except (psutil.Error, OSError) as e:
                logger.error(f"Error collecting system metrics: {e}")

    def get_stats(self) -> SystemStats:
        """Get aggregated system statistics."""
        metrics = list(self.metrics)
        if not metrics:
            return SystemStats()

        # Rates are per sampling interval
        per_second = 1.0 / self.interval
        cpu_values = [m.cpu_percent for m in metrics]
        memory_values = [m.memory_percent for m in metrics]
        net_sent_values = [m.network_sent_bytes * per_second / MB for m in metrics]
        net_recv_values = [m.network_recv_bytes * per_second / MB for m in metrics]
        disk_read_values = [m.disk_read_bytes * per_second / MB for m in metrics]
        disk_write_values = [m.disk_write_bytes * per_second / MB for m in metrics]

        return SystemStats(
            samples=len(metrics),
            cpu={
                'avg': float(np.mean(cpu_values)),
                'max': float(np.max(cpu_values)),
                'p95': float(np.percentile(cpu_values, 95)),
            },
            memory={
                'avg': float(np.mean(memory_values)),
                'max': float(np.max(memory_values)),
            },
            network={
                'avg_sent_mbps': float(np.mean(net_sent_values)),
                'avg_recv_mbps': float(np.mean(net_recv_values)),
                'max_recv_mbps': float(np.max(net_recv_values)),
            },
            disk={
                'avg_read_mbps': float(np.mean(disk_read_values)),
                'avg_write_mbps': float(np.mean(disk_write_values)),
                'max_write_mbps': float(np.max(disk_write_values)),
            }
        )

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
