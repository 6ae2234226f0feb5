"""Shared cooperative cancellation flag."""

import threading


class RunningSignal:
    """Level-triggered "benchmark is running" flag shared by all workers.

    Starts set and is cleared exactly once by :meth:`stop`. There is no way
    to set it again; a new run needs a new signal.
    """

    def __init__(self):
        self._event = threading.Event()
        self._event.set()
        self._lock = threading.Lock()

    def is_set(self) -> bool:
        return self._event.is_set()

    def stop(self) -> bool:
        """Clear the flag.

        Returns:
            True if this call performed the transition, False if already stopped
        """
        with self._lock:
            if not self._event.is_set():
                return False
            self._event.clear()
            return True

    def __bool__(self) -> bool:
        return self.is_set()

    def __repr__(self) -> str:
        return f"RunningSignal(running={self.is_set()})"
