"""Network workload: one GET to the target per iteration."""

from typing import Optional, Tuple

import requests
import urllib3
from requests.adapters import HTTPAdapter

from ..core.running_signal import RunningSignal
from ..utils.timer import Timer
from .error_kind import classify_request_error
from .worker_stats import StatsAggregator
from .workload_worker import WorkloadKind, WorkloadWorker

NETWORK_TIMEOUT_SECONDS = 3.0
DOWNLOAD_CHUNK_BYTES = 64 * 1024


def create_session() -> requests.Session:
    """Build an HTTP session that never retries."""
    session = requests.Session()
    adapter = HTTPAdapter(max_retries=0)
    session.mount('http://', adapter)
    session.mount('https://', adapter)
    return session


class NetworkWorker(WorkloadWorker):
    """
    Issues GET requests against the target URL.

    Only transport and protocol failures count as errors; any HTTP status
    code received is a successful round trip.
    """

    kind = WorkloadKind.NETWORK

    def __init__(self, name: str, running: RunningSignal, stats: StatsAggregator,
                 url: str, timeout_seconds: float = NETWORK_TIMEOUT_SECONDS,
                 session: Optional[requests.Session] = None):
        super().__init__(name, running, stats)
        self.url = url
        # (connect, read); the read timeout also bounds socket writes.
        self.timeout: Tuple[float, float] = (timeout_seconds, timeout_seconds)
        self.session = session if session is not None else create_session()

    def run_once(self):
        try:
            with self.session.get(self.url, timeout=self.timeout, stream=True) as response:
                # Drain the body so transfer time is part of the cycle.
                for _ in response.iter_content(chunk_size=DOWNLOAD_CHUNK_BYTES):
                    pass
                self.stats.record_network_success(
                    int(response.elapsed.total_seconds() * 1000))
        except (requests.RequestException, urllib3.exceptions.HTTPError) as e:
            # urllib3 URL parsing errors can escape requests unwrapped.
            kind = classify_request_error(e)
            self.logger.debug(f"{self.name} request failed ({kind.value}): {e}")
            self.stats.record_network_error(kind.value)

    def record_cycle(self, timer: Timer):
        self.stats.record_network_cycle(timer.elapsed_millis())

    def close(self):
        self.session.close()
