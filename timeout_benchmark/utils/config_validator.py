"""Configuration validation utilities for the timeout benchmark.

Validates a benchmark configuration before any worker is spawned so that
bad input fails fast instead of half-way through a run.
"""

import os
from typing import List
from urllib.parse import urlparse


class ConfigValidationError(Exception):
    """Configuration validation error."""
    pass


SUPPORTED_URL_SCHEMES = ('http', 'https')

THREAD_COUNT_FIELDS = ('network_threads', 'cpu_threads', 'io_threads')


def validate_url(url) -> None:
    """Validate the benchmark target URL.

    Args:
        url: Target URL

    Raises:
        ConfigValidationError: If the URL is missing, empty or not http(s)
    """
    if url is None or not str(url).strip():
        raise ConfigValidationError("A target URL is required")

    try:
        parsed = urlparse(str(url))
    except ValueError as e:
        raise ConfigValidationError(f"Malformed URL {url}: {e}") from e
    if parsed.scheme not in SUPPORTED_URL_SCHEMES:
        raise ConfigValidationError(
            f"Unsupported URL scheme '{parsed.scheme}' in {url}: "
            f"expected one of {', '.join(SUPPORTED_URL_SCHEMES)}"
        )
    if not parsed.netloc:
        raise ConfigValidationError(f"URL {url} has no host")


def validate_benchmark_config(config) -> List[str]:
    """Validate a benchmark configuration.

    Args:
        config: BenchmarkConfig (or any object with the same attributes)

    Returns:
        List of warning messages (empty if no issues)

    Raises:
        ConfigValidationError: On negative thread counts, negative duration
            or a missing/unsupported target
    """
    warnings = []

    for field_name in THREAD_COUNT_FIELDS:
        count = getattr(config, field_name)
        if count is None or count < 0:
            raise ConfigValidationError(f"{field_name} must be >= 0, got {count}")

    if config.duration_seconds is None or config.duration_seconds < 0:
        raise ConfigValidationError(
            f"duration_seconds must be >= 0, got {config.duration_seconds}"
        )

    validate_url(config.url)

    if all(getattr(config, name) == 0 for name in THREAD_COUNT_FIELDS):
        warnings.append("All thread counts are 0: the benchmark will generate no load")

    cpu_count = os.cpu_count()
    if cpu_count and config.cpu_threads > cpu_count:
        warnings.append(
            f"cpu_threads={config.cpu_threads} exceeds the {cpu_count} available cores"
        )

    if config.duration_seconds == 0:
        warnings.append("duration_seconds=0: workers will stop right after starting")

    return warnings
