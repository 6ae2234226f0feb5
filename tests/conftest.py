"""Shared fixtures for the timeout benchmark tests."""

import io
import threading
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest
from rich.console import Console

PROXY_VARIABLES = (
    "HTTP_PROXY", "http_proxy", "HTTPS_PROXY", "https_proxy",
    "ALL_PROXY", "all_proxy", "NO_PROXY", "no_proxy",
)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep proxies and TIMEOUT_BENCHMARK_* overrides out of the tests."""
    for name in PROXY_VARIABLES:
        monkeypatch.delenv(name, raising=False)
    for name in ("URL", "CPU_THREADS", "NETWORK_THREADS", "IO_THREADS", "BENCHMARK_SECONDS",
                 "NETWORK_TIMEOUT_SECONDS", "JOIN_TIMEOUT_SECONDS", "SCRATCH_DIR",
                 "ENABLE_SYSTEM_MONITOR", "LOG_LEVEL", "LOG_FILE"):
        monkeypatch.delenv(f"TIMEOUT_BENCHMARK_{name}", raising=False)


class _TargetHandler(BaseHTTPRequestHandler):
    """Serves / with a 2 KB body, /error with a 500 and /slow after a delay."""

    body = b"ok" * 1024

    def do_GET(self):
        if self.path.startswith("/slow"):
            time.sleep(0.5)
        status = 500 if self.path.startswith("/error") else 200
        self.send_response(status)
        self.send_header("Content-Type", "application/octet-stream")
        self.send_header("Content-Length", str(len(self.body)))
        self.end_headers()
        self.wfile.write(self.body)

    def log_message(self, format, *args):
        pass


@pytest.fixture
def http_server():
    """Local HTTP target; yields its base URL."""
    server = ThreadingHTTPServer(("127.0.0.1", 0), _TargetHandler)
    server.daemon_threads = True
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        host, port = server.server_address[:2]
        yield f"http://{host}:{port}"
    finally:
        server.shutdown()
        server.server_close()


@pytest.fixture
def console_output():
    """Non-terminal console writing into a buffer; yields (console, buffer)."""
    buffer = io.StringIO()
    console = Console(file=buffer, force_terminal=False, width=400, highlight=False)
    return console, buffer
