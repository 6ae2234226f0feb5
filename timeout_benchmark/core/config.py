"""Configuration management for the timeout benchmark."""

import yaml
from typing import Dict, Optional, Any, Union
from pathlib import Path
from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..utils.env import Env


DEFAULT_NETWORK_TIMEOUT_SECONDS = 3.0
DEFAULT_JOIN_TIMEOUT_SECONDS = 1.0
DEFAULT_MONITOR_INTERVAL_SECONDS = 0.2
DEFAULT_SCRATCH_DIR = ".tmp"


class BenchmarkConfig(BaseModel):
    """Benchmark run configuration, constructed once per run."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    # Workload settings
    network_threads: int = Field(alias="networkThreads", default=1, ge=0)
    cpu_threads: int = Field(alias="cpuThreads", default=1, ge=0)
    io_threads: int = Field(alias="ioThreads", default=1, ge=0)
    duration_seconds: int = Field(alias="benchmarkSeconds", default=10, ge=0)
    url: str = Field(..., description="Target URL")
    show_progress: bool = Field(alias="showProgress", default=True)

    # Timeouts
    network_timeout_seconds: float = Field(
        alias="networkTimeoutSeconds", default=DEFAULT_NETWORK_TIMEOUT_SECONDS, gt=0,
        description="Connect/read timeout for every request"
    )
    join_timeout_seconds: float = Field(
        alias="joinTimeoutSeconds", default=DEFAULT_JOIN_TIMEOUT_SECONDS, gt=0,
        description="How long to wait for each worker after stopping"
    )

    # IO settings
    scratch_dir: str = Field(alias="scratchDir", default=DEFAULT_SCRATCH_DIR)

    # Monitoring settings
    monitor_interval_seconds: float = Field(
        alias="monitorIntervalSeconds", default=DEFAULT_MONITOR_INTERVAL_SECONDS, gt=0
    )
    enable_system_monitor: bool = Field(alias="enableSystemMonitor", default=True)

    # Logging settings
    log_level: str = Field(alias="logLevel", default="INFO")
    log_file: Optional[str] = Field(alias="logFile", default=None)

    @field_validator('url', mode='before')
    @classmethod
    def strip_url(cls, v):
        """Reject empty targets."""
        if v is None:
            raise ValueError("url is required")
        v = str(v).strip()
        if not v:
            raise ValueError("url must not be empty")
        return v

    @property
    def total_threads(self) -> int:
        return self.network_threads + self.cpu_threads + self.io_threads


def normalize_config_keys(data: Dict[str, Any]) -> Dict[str, Any]:
    """Map camelCase aliases onto field names, dropping None values."""
    aliases = {
        info.alias: name
        for name, info in BenchmarkConfig.model_fields.items()
        if info.alias
    }
    normalized = {}
    for key, value in data.items():
        if value is None:
            continue
        normalized[aliases.get(key, key)] = value
    return normalized


def merge_config_data(*layers: Dict[str, Any]) -> Dict[str, Any]:
    """Merge configuration layers, later layers taking precedence."""
    merged: Dict[str, Any] = {}
    for layer in layers:
        merged.update(normalize_config_keys(layer or {}))
    return merged


class ConfigLoader:
    """Configuration loader utility."""

    @staticmethod
    def load_data(file_path: Union[str, Path]) -> Dict[str, Any]:
        """Load raw configuration values from a YAML file."""
        with open(file_path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"{file_path}: expected a mapping at the top level")
        return normalize_config_keys(data)

    @staticmethod
    def load_benchmark(file_path: Union[str, Path]) -> BenchmarkConfig:
        """Load benchmark configuration from YAML file."""
        return BenchmarkConfig(**ConfigLoader.load_data(file_path))

    @staticmethod
    def save_config(config: BaseModel, file_path: Union[str, Path]) -> None:
        """Save configuration to YAML file."""
        with open(file_path, 'w', encoding='utf-8') as f:
            data = config.model_dump(by_alias=True, exclude_none=True)
            yaml.dump(data, f, default_flow_style=False, indent=2)


def load_env_config() -> Dict[str, Any]:
    """Load configuration overrides from TIMEOUT_BENCHMARK_* environment variables."""
    return normalize_config_keys({
        'network_threads': Env.get_int('NETWORK_THREADS'),
        'cpu_threads': Env.get_int('CPU_THREADS'),
        'io_threads': Env.get_int('IO_THREADS'),
        'duration_seconds': Env.get_int('BENCHMARK_SECONDS'),
        'url': Env.get_str('URL'),
        'network_timeout_seconds': Env.get_float('NETWORK_TIMEOUT_SECONDS'),
        'join_timeout_seconds': Env.get_float('JOIN_TIMEOUT_SECONDS'),
        'scratch_dir': Env.get_str('SCRATCH_DIR'),
        'enable_system_monitor': Env.get_bool('ENABLE_SYSTEM_MONITOR'),
        'log_level': Env.get_str('LOG_LEVEL'),
        'log_file': Env.get_str('LOG_FILE'),
    })
