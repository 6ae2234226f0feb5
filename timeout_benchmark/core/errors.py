"""Fatal error types and reserved process exit codes."""

from enum import IntEnum


class ExitCode(IntEnum):
    """Reserved process exit codes."""
    OK = 0
    ARGUMENT_ERROR = 2
    SLEEP_INTERRUPTED = 3
    JOIN_INTERRUPTED = 4
    MONITOR_INTERRUPTED = 5


class BenchmarkInterrupted(Exception):
    """A cancellation wait was interrupted; the process must terminate.

    ``report`` is set when the final report was still produced before the
    interruption was raised.
    """

    def __init__(self, exit_code: ExitCode, phase: str, report=None):
        super().__init__(f"Benchmark interrupted while {phase}")
        self.exit_code = exit_code
        self.phase = phase
        self.report = report
