"""Test the workload workers."""

import io
import time

import pytest
import requests
import urllib3
from rich.console import Console

from timeout_benchmark.core.running_signal import RunningSignal
from timeout_benchmark.utils.timer import Timer
from timeout_benchmark.worker.cpu_worker import CpuWorker
from timeout_benchmark.worker.error_kind import ErrorKind, classify_request_error
from timeout_benchmark.worker.io_worker import IoWorker
from timeout_benchmark.worker.monitor_worker import MonitorWorker
from timeout_benchmark.worker.network_worker import NetworkWorker
from timeout_benchmark.worker.payload import PAYLOAD_SIZE_BYTES, generate_payload
from timeout_benchmark.worker.worker_stats import StatsAggregator

# Connection refused on any sane host
UNREACHABLE_URL = "http://127.0.0.1:1/"


def run_for(worker, seconds: float):
    """Run a worker thread for a while, then stop and join it."""
    worker.start()
    time.sleep(seconds)
    worker.running.stop()
    assert worker.join(timeout=5.0)


class TestRunningSignal:
    """Test the shared running flag."""

    def test_single_transition(self):
        """The flag starts set and clears exactly once."""
        signal = RunningSignal()
        assert signal.is_set()
        assert signal

        assert signal.stop() is True
        assert not signal.is_set()
        assert signal.stop() is False
        assert not signal.is_set()


class TestTimer:
    """Test the timer."""

    def test_elapsed_units(self):
        """Elapsed time is reported in whole micros/millis and float seconds."""
        now = [0]
        timer = Timer(nano_clock=lambda: now[0])
        now[0] = 2_500_000_000

        assert timer.elapsed_micros() == 2_500_000
        assert timer.elapsed_millis() == 2_500
        assert timer.elapsed_seconds() == 2.5

        timer.reset()
        assert timer.elapsed_micros() == 0


class TestCpuWorker:
    """Test the cpu worker."""

    def test_records_cycles(self):
        """The spin loop records one cpu cycle per iteration."""
        stats = StatsAggregator(network_threads=0, cpu_threads=1, io_threads=0)
        worker = CpuWorker("CpuThread-0", RunningSignal(), stats)

        run_for(worker, 0.2)

        snapshot = stats.snapshot()
        assert snapshot.cpu_calls > 0
        assert snapshot.cpu_calls == worker.cycles
        assert not worker.is_alive()

    def test_stopped_signal_runs_no_iteration(self):
        """A worker started after the stop performs no work."""
        stats = StatsAggregator(network_threads=0, cpu_threads=1, io_threads=0)
        running = RunningSignal()
        running.stop()
        worker = CpuWorker("CpuThread-0", running, stats).start()

        assert worker.join(timeout=1.0)
        assert stats.snapshot().cpu_calls == 0

    def test_cannot_start_twice(self):
        """Each worker owns exactly one thread."""
        running = RunningSignal()
        worker = CpuWorker("CpuThread-0", running, StatsAggregator(0, 1, 0)).start()
        try:
            with pytest.raises(RuntimeError):
                worker.start()
        finally:
            running.stop()
            worker.join(timeout=1.0)


class TestPayload:
    """Test the shared io payload."""

    def test_default_size(self):
        """The default payload is just over 10 MiB of bytes."""
        payload = generate_payload()
        assert isinstance(payload, bytes)
        assert len(payload) == PAYLOAD_SIZE_BYTES == 10 * 1024 * 1024 + 1

    def test_negative_size(self):
        """Negative sizes are rejected."""
        with pytest.raises(ValueError):
            generate_payload(-1)


class TestIoWorker:
    """Test the io worker."""

    def test_overwrites_dedicated_file(self, tmp_path):
        """Each cycle overwrites the worker's own scratch file."""
        payload = generate_payload(4096)
        scratch_dir = tmp_path / "scratch"
        stats = StatsAggregator(network_threads=0, cpu_threads=0, io_threads=1)
        worker = IoWorker("IoThread-0", RunningSignal(), stats, payload, scratch_dir)

        run_for(worker, 0.2)

        target = scratch_dir / "TimeoutBenchmark_IoThread-0.bin"
        assert worker.file_path == target
        assert target.read_bytes() == payload
        snapshot = stats.snapshot()
        assert snapshot.io_calls == worker.cycles > 0
        assert snapshot.io_errors == 0

    def test_write_failure_is_counted(self, tmp_path):
        """A failing write bumps the io error counter and the loop goes on."""
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        stats = StatsAggregator(network_threads=0, cpu_threads=0, io_threads=1)
        worker = IoWorker("IoThread-0", RunningSignal(), stats, b"data", blocker / "scratch")

        worker.prepare()
        worker.run_once()
        worker.run_once()

        assert stats.snapshot().io_errors == 2

    def test_files_named_by_worker(self, tmp_path):
        """Distinct worker names map to distinct files."""
        assert IoWorker.scratch_file_for(tmp_path, "IoThread-0") != \
            IoWorker.scratch_file_for(tmp_path, "IoThread-1")


class TestErrorKind:
    """Test request error classification."""

    @pytest.mark.parametrize("error,kind", [
        (requests.exceptions.ConnectTimeout(), ErrorKind.CONNECT_TIMEOUT),
        (requests.exceptions.ReadTimeout(), ErrorKind.READ_TIMEOUT),
        (requests.exceptions.Timeout(), ErrorKind.TIMEOUT),
        (requests.exceptions.SSLError(), ErrorKind.SSL_ERROR),
        (requests.exceptions.ProxyError(), ErrorKind.PROXY_ERROR),
        (requests.exceptions.ConnectionError(), ErrorKind.CONNECTION_ERROR),
        (requests.exceptions.TooManyRedirects(), ErrorKind.TOO_MANY_REDIRECTS),
        (requests.exceptions.MissingSchema(), ErrorKind.INVALID_URL),
        (requests.exceptions.InvalidURL(), ErrorKind.INVALID_URL),
        (requests.exceptions.ChunkedEncodingError(), ErrorKind.PROTOCOL_ERROR),
        (requests.exceptions.ContentDecodingError(), ErrorKind.PROTOCOL_ERROR),
        (requests.exceptions.RequestException(), ErrorKind.TRANSPORT_ERROR),
        (urllib3.exceptions.LocationParseError("a..b"), ErrorKind.TRANSPORT_ERROR),
    ])
    def test_classification(self, error, kind):
        """Each requests or urllib3 exception maps onto its most specific kind."""
        assert classify_request_error(error) is kind


class TestNetworkWorker:
    """Test the network worker."""

    def test_successful_request(self, http_server):
        """A served request records a latency sample and no error."""
        stats = StatsAggregator(network_threads=1, cpu_threads=0, io_threads=0)
        worker = NetworkWorker("NetworkThread-0", RunningSignal(), stats, http_server + "/")

        worker.run_once()
        worker.close()

        snapshot = stats.snapshot()
        assert snapshot.network_latency_samples == 1
        assert snapshot.network_errors == 0
        assert snapshot.network_calls == 0

    def test_http_error_status_is_not_a_failure(self, http_server):
        """A 500 response is still a completed round trip."""
        stats = StatsAggregator(network_threads=1, cpu_threads=0, io_threads=0)
        worker = NetworkWorker("NetworkThread-0", RunningSignal(), stats, http_server + "/error")

        worker.run_once()
        worker.close()

        assert stats.snapshot().network_latency_samples == 1
        assert stats.exception_summary() == ""

    def test_connection_refused(self):
        """An unreachable target is recorded as a ConnectionError."""
        stats = StatsAggregator(network_threads=1, cpu_threads=0, io_threads=0)
        worker = NetworkWorker("NetworkThread-0", RunningSignal(), stats, UNREACHABLE_URL,
                               timeout_seconds=1.0)

        worker.run_once()
        worker.close()

        snapshot = stats.snapshot()
        assert snapshot.network_errors == 1
        assert snapshot.network_latency_samples == 0
        assert snapshot.exceptions == {ErrorKind.CONNECTION_ERROR.value: 1}

    def test_read_timeout(self, http_server):
        """A response slower than the timeout is recorded as a ReadTimeout."""
        stats = StatsAggregator(network_threads=1, cpu_threads=0, io_threads=0)
        worker = NetworkWorker("NetworkThread-0", RunningSignal(), stats, http_server + "/slow",
                               timeout_seconds=0.1)

        worker.run_once()
        worker.close()

        assert stats.snapshot().exceptions == {ErrorKind.READ_TIMEOUT.value: 1}

    def test_unparseable_host_keeps_looping(self):
        """A host urllib3 cannot parse is counted as an error on every attempt."""
        stats = StatsAggregator(network_threads=1, cpu_threads=0, io_threads=0)
        worker = NetworkWorker("NetworkThread-0", RunningSignal(), stats, "http://a..b/",
                               timeout_seconds=1.0)

        worker.start()
        time.sleep(0.3)
        assert worker.is_alive()
        worker.running.stop()
        assert worker.join(timeout=5.0)

        snapshot = stats.snapshot()
        assert snapshot.network_calls == worker.cycles > 0
        assert snapshot.network_errors == snapshot.network_calls
        assert snapshot.network_latency_samples == 0
        assert len(snapshot.exceptions) == 1
        assert set(snapshot.exceptions) <= {ErrorKind.TRANSPORT_ERROR.value,
                                            ErrorKind.INVALID_URL.value}

    def test_timeouts_fixed_at_construction(self):
        """Connect and read timeouts share the configured ceiling."""
        worker = NetworkWorker("NetworkThread-0", RunningSignal(), StatsAggregator(1, 0, 0),
                               UNREACHABLE_URL)
        assert worker.timeout == (3.0, 3.0)
        worker.close()

    def test_loop_counts_every_attempt(self, http_server):
        """The loop records one cycle per attempt."""
        stats = StatsAggregator(network_threads=1, cpu_threads=0, io_threads=0)
        worker = NetworkWorker("NetworkThread-0", RunningSignal(), stats, http_server + "/")

        run_for(worker, 0.3)

        snapshot = stats.snapshot()
        assert snapshot.network_calls == worker.cycles > 0
        assert snapshot.network_latency_samples == snapshot.network_calls


class _BrokenTerminal(io.StringIO):
    """Fails every status row write."""

    def write(self, text):
        if text.startswith("\r"):
            raise OSError("terminal went away")
        return super().write(text)


class TestMonitorWorker:
    """Test the progress monitor."""

    def test_render_rotates_spinner(self, console_output):
        """Each frame advances the spinner glyph."""
        console, _ = console_output
        stats = StatsAggregator(network_threads=0, cpu_threads=1, io_threads=0)
        worker = MonitorWorker("Monitoring-0", RunningSignal(), stats, console)
        worker.prepare()

        frames = [worker.render() for _ in range(4)]

        assert frames[0] == "\r[\\] Cpu=[threads:1 cycles:0] Elapsed=[0 secs]"
        assert [frame[2] for frame in frames] == ["\\", "|", "/", "-"]

    def test_loop_ends_with_newline(self, console_output):
        """The row is rewritten while running and terminated once stopped."""
        console, buffer = console_output
        stats = StatsAggregator(network_threads=0, cpu_threads=1, io_threads=0)
        worker = MonitorWorker("Monitoring-0", RunningSignal(), stats, console,
                               interval_seconds=0.05)

        run_for(worker, 0.2)

        output = buffer.getvalue()
        assert output.count("\r[") >= 2
        assert "Cpu=[threads:1 cycles:0]" in output
        assert output.endswith("\n")
        assert not worker.aborted

    def test_abort_on_write_failure(self):
        """A failing terminal stops the monitor and reports the error."""
        console = Console(file=_BrokenTerminal())
        errors = []
        worker = MonitorWorker("Monitoring-0", RunningSignal(), StatsAggregator(0, 1, 0), console,
                               interval_seconds=0.05, on_abort=errors.append)

        worker.start()
        assert worker.join(timeout=2.0)

        assert worker.aborted
        assert len(errors) == 1
        assert isinstance(errors[0], OSError)
        assert worker.running.is_set()

    def test_abort_on_closed_console(self):
        """A closed console stream aborts the monitor instead of killing it silently."""
        buffer = io.StringIO()
        console = Console(file=buffer, force_terminal=False, color_system=None)
        errors = []
        worker = MonitorWorker("Monitoring-0", RunningSignal(), StatsAggregator(0, 1, 0), console,
                               interval_seconds=0.05, on_abort=errors.append)
        buffer.close()

        worker.start()
        assert worker.join(timeout=2.0)

        assert worker.aborted
        assert len(errors) == 1
        assert isinstance(errors[0], ValueError)
