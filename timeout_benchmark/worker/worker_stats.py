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
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Dict, List, Tuple


class LongAdder:
    """Thread-safe long adder (equivalent to Java's LongAdder)."""

    def __init__(self):
        self._value = 0
        self._lock = threading.Lock()

    def increment(self):
        with self._lock:
            self._value += 1

    def add(self, value: int):
        with self._lock:
            self._value += value

    def sum(self) -> int:
        with self._lock:
            return self._value


class ExceptionHistogram:
    """
    Error kind -> occurrence count, keeping first-seen order.

    Key insertion is the only step done under the histogram lock; once a key
    exists its count is bumped through the entry's own LongAdder.
    """

    def __init__(self):
        self._counts: 'OrderedDict[str, LongAdder]' = OrderedDict()
        self._lock = threading.Lock()

    def record(self, error_kind: str):
        counter = self._counts.get(error_kind)
        if counter is None:
            with self._lock:
                counter = self._counts.get(error_kind)
                if counter is None:
                    counter = LongAdder()
                    self._counts[error_kind] = counter
        counter.increment()

    def items(self) -> List[Tuple[str, int]]:
        """
        Get (kind, count) pairs in insertion order.
        """
        with self._lock:
            entries = list(self._counts.items())
        return [(kind, counter.sum()) for kind, counter in entries]

    def most_common(self) -> List[Tuple[str, int]]:
        """
        Get (kind, count) pairs sorted by count descending.
        The sort is stable, so ties keep insertion order.
        """
        return sorted(self.items(), key=lambda item: item[1], reverse=True)

    def is_empty(self) -> bool:
        with self._lock:
            return not self._counts

    def __len__(self) -> int:
        with self._lock:
            return len(self._counts)


@dataclass
class StatsSnapshot:
    """Point-in-time copy of every aggregator counter."""
    network_threads: int = 0
    cpu_threads: int = 0
    io_threads: int = 0

    network_calls: int = 0
    network_cycle_millis: int = 0
    network_latency_millis: int = 0
    network_latency_samples: int = 0
    network_errors: int = 0

    cpu_calls: int = 0
    cpu_micros: int = 0

    io_calls: int = 0
    io_micros: int = 0
    io_errors: int = 0

    exceptions: Dict[str, int] = field(default_factory=dict)

    @property
    def network_error_percent(self) -> float:
        return 100 * safe_division(self.network_errors, self.network_calls)

    @property
    def network_mean_latency_millis(self) -> float:
        return safe_division(self.network_latency_millis, self.network_latency_samples)


def safe_division(numerator, denominator) -> float:
    """Divide, yielding 0 instead of failing when the denominator is 0."""
    if denominator == 0:
        return 0.0
    return numerator / float(denominator)


class StatsAggregator:
    """
    Thread-safe statistics shared by every workload worker.

    Every record_* method may be called concurrently from any number of
    worker threads. All counters only ever grow.
    """

    def __init__(self, network_threads: int, cpu_threads: int, io_threads: int):
        """
        Initialize the aggregator.

        :param network_threads: Configured network worker count
        :param cpu_threads: Configured cpu worker count
        :param io_threads: Configured io worker count
        """
        self.network_thread_count = network_threads
        self.cpu_thread_count = cpu_threads
        self.io_thread_count = io_threads

        # Network stats
        self.network_call_count = LongAdder()
        self.network_cycle_millis = LongAdder()
        self.network_latency_millis = LongAdder()
        self.network_latency_millis_count = LongAdder()
        self.network_error_count = LongAdder()

        # Cpu stats
        self.cpu_call_count = LongAdder()
        self.cpu_latency_micros = LongAdder()

        # Io stats
        self.io_call_count = LongAdder()
        self.io_latency_micros = LongAdder()
        self.io_error_count = LongAdder()

        self.exceptions = ExceptionHistogram()

    def record_cpu_cycle(self, duration_micros: int):
        """
        Record one completed cpu cycle.

        :param duration_micros: Cycle wall time in microseconds
        """
        self.cpu_call_count.increment()
        self.cpu_latency_micros.add(duration_micros)

    def record_network_success(self, latency_millis: int):
        """
        Record the round-trip time of a successful request.
        Call counters are left to record_network_cycle.

        :param latency_millis: Request sent to response received, in milliseconds
        """
        self.network_latency_millis.add(latency_millis)
        self.network_latency_millis_count.increment()

    def record_network_cycle(self, cycle_millis: int):
        """
        Record one network attempt, successful or not.

        :param cycle_millis: Iteration wall time in milliseconds
        """
        self.network_call_count.increment()
        self.network_cycle_millis.add(cycle_millis)

    def record_network_error(self, error_kind: str):
        """
        Record a failed network attempt.

        :param error_kind: Error kind identifier used as the histogram key
        """
        self.network_error_count.increment()
        self.exceptions.record(error_kind)

    def record_io_cycle(self, duration_micros: int):
        """
        Record one io cycle, successful or not.

        :param duration_micros: Cycle wall time in microseconds
        """
        self.io_call_count.increment()
        self.io_latency_micros.add(duration_micros)

    def record_io_error(self):
        """Record a failed scratch file write."""
        self.io_error_count.increment()

    def status_line(self) -> str:
        """
        Render the live status line. Only kinds with at least one
        configured thread are shown, in the order Cpu, IO, Network.
        """
        sections = []
        if self.cpu_thread_count > 0:
            sections.append("Cpu=[threads:%d cycles:%d]" % (
                self.cpu_thread_count,
                self.cpu_call_count.sum()))

        if self.io_thread_count > 0:
            sections.append("IO=[threads:%d cycles:%d errors=%d]" % (
                self.io_thread_count,
                self.io_call_count.sum(),
                self.io_error_count.sum()))

        if self.network_thread_count > 0:
            calls = self.network_call_count.sum()
            errors = self.network_error_count.sum()
            sections.append("Network=[threads:%d cycles=%d errors=%d (%.2f%%) latency=%.2fms]" % (
                self.network_thread_count,
                calls,
                errors,
                100 * safe_division(errors, calls),
                safe_division(self.network_latency_millis.sum(),
                              self.network_latency_millis_count.sum())))

        return " ".join(sections)

    def exception_summary(self) -> str:
        """
        Render the error-kind histogram, most frequent first.

        :return: Empty string when no error was recorded
        """
        if self.exceptions.is_empty():
            return ""

        pairs = ["{%s: %d}" % (kind, count) for kind, count in self.exceptions.most_common()]
        return "Exceptions: [" + " ".join(pairs) + "]"

    def summary(self) -> str:
        """Status line followed by the exception summary, if any."""
        summary = self.status_line()
        exception_summary = self.exception_summary()
        if exception_summary:
            summary += " " + exception_summary
        return summary

    def snapshot(self) -> StatsSnapshot:
        """Copy every counter into a StatsSnapshot."""
        return StatsSnapshot(
            network_threads=self.network_thread_count,
            cpu_threads=self.cpu_thread_count,
            io_threads=self.io_thread_count,
            network_calls=self.network_call_count.sum(),
            network_cycle_millis=self.network_cycle_millis.sum(),
            network_latency_millis=self.network_latency_millis.sum(),
            network_latency_samples=self.network_latency_millis_count.sum(),
            network_errors=self.network_error_count.sum(),
            cpu_calls=self.cpu_call_count.sum(),
            cpu_micros=self.cpu_latency_micros.sum(),
            io_calls=self.io_call_count.sum(),
            io_micros=self.io_latency_micros.sum(),
            io_errors=self.io_error_count.sum(),
            exceptions=dict(self.exceptions.items()),
        )

    def __str__(self) -> str:
        return self.summary()
