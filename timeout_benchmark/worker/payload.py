"""Shared random payload written by IO workers."""

import os

# Just over 10 MiB so every write spans an extra page.
PAYLOAD_SIZE_BYTES = 10 * 1024 * 1024 + 1


def generate_payload(size: int = PAYLOAD_SIZE_BYTES) -> bytes:
    """Generate the pseudo-random payload once; bytes are immutable, so
    every IO worker can share the same object without locking."""
    if size < 0:
        raise ValueError("size must be >= 0")
    return os.urandom(size)
