"""Command line interface for the timeout benchmark."""

from typing import Any, Dict

import click
import yaml
from click.core import ParameterSource
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from .core.config import BenchmarkConfig, ConfigLoader, load_env_config, merge_config_data
from .core.errors import BenchmarkInterrupted
from .core.orchestrator import BenchmarkOrchestrator, BenchmarkReport
from .utils.config_validator import ConfigValidationError
from .utils.logging import setup_logging
from .worker.worker_stats import safe_division


console = Console(highlight=False)
err_console = Console(stderr=True)

# CLI parameters that map one-to-one onto BenchmarkConfig fields
CONFIG_PARAMETERS = {
    'cpu_threads': 'cpu_threads',
    'network_threads': 'network_threads',
    'io_threads': 'io_threads',
    'benchmark_seconds': 'duration_seconds',
    'url': 'url',
    'network_timeout': 'network_timeout_seconds',
    'join_timeout': 'join_timeout_seconds',
    'scratch_dir': 'scratch_dir',
    'system_monitor': 'enable_system_monitor',
    'log_level': 'log_level',
    'log_file': 'log_file',
}


@click.command(context_settings={'help_option_names': ['-h', '--help']})
@click.option('--cpuThreads', '--cpu-threads', 'cpu_threads', type=click.IntRange(min=0),
              default=1, show_default=True, help='Number of CPU threads.')
@click.option('--networkThreads', '--network-threads', 'network_threads', type=click.IntRange(min=0),
              default=1, show_default=True, help='Number of network threads.')
@click.option('--ioThreads', '--io-threads', 'io_threads', type=click.IntRange(min=0),
              default=1, show_default=True, help='Number of IO threads writing files.')
@click.option('--benchmarkSeconds', '--benchmark-seconds', 'benchmark_seconds', type=click.IntRange(min=0),
              default=10, show_default=True, help='Benchmark duration in seconds.')
@click.option('--url', help='URL to test against (required unless set in --config).')
@click.option('--noShowProgress', '--no-show-progress', 'no_show_progress', is_flag=True,
              help='Switch off progress updates.')
@click.option('--config', 'config_file', type=click.Path(exists=True, dir_okay=False),
              help='YAML file with benchmark settings.')
@click.option('--network-timeout', type=click.FloatRange(min=0, min_open=True), default=3.0,
              show_default=True, help='Connect/read timeout per request, in seconds.')
@click.option('--join-timeout', type=click.FloatRange(min=0, min_open=True), default=1.0,
              show_default=True, help='Seconds to wait for each worker to stop.')
@click.option('--scratch-dir', default='.tmp', show_default=True,
              help='Directory holding the IO worker files.')
@click.option('--system-monitor/--no-system-monitor', default=True, show_default=True,
              help='Sample host CPU, memory, disk and network usage.')
@click.option('--log-level', default='INFO', show_default=True,
              type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'], case_sensitive=False),
              help='Logging level')
@click.option('--log-file', help='Log file path')
@click.pass_context
def cli(ctx, config_file, no_show_progress, **options):
    """Stress network, CPU and disk IO at the same time against URL."""
    config = build_config(ctx, config_file, no_show_progress, options)

    logger = setup_logging(level=config.log_level, log_file=config.log_file, component="cli")

    orchestrator = BenchmarkOrchestrator(config, console=console)
    try:
        report = orchestrator.run()
    except ConfigValidationError as e:
        raise click.UsageError(str(e), ctx=ctx)
    except BenchmarkInterrupted as e:
        err_console.print_exception()
        logger.error(f"{e} (exit code {int(e.exit_code)})")
        ctx.exit(int(e.exit_code))

    if config.show_progress:
        _display_results_summary(report)


def build_config(ctx, config_file, no_show_progress, options: Dict[str, Any]) -> BenchmarkConfig:
    """Merge defaults, environment, config file and explicit options."""
    file_data: Dict[str, Any] = {}
    if config_file:
        try:
            file_data = ConfigLoader.load_data(config_file)
        except (OSError, ValueError, yaml.YAMLError) as e:
            raise click.BadParameter(str(e), ctx=ctx, param_hint="'--config'")

    explicit: Dict[str, Any] = {}
    for param, field_name in CONFIG_PARAMETERS.items():
        if ctx.get_parameter_source(param) is not ParameterSource.DEFAULT:
            explicit[field_name] = options[param]
    if no_show_progress:
        explicit['show_progress'] = False

    data = merge_config_data(load_env_config(), file_data, explicit)
    if not data.get('url'):
        raise click.UsageError("Missing option '--url'.", ctx=ctx)

    try:
        return BenchmarkConfig(**data)
    except ValidationError as e:
        raise click.UsageError(f"Invalid configuration:\n{e}", ctx=ctx)


def _display_results_summary(report: BenchmarkReport):
    """Display the final counters and host statistics."""
    stats = report.stats

    table = Table(title="Workload counters", show_header=True, header_style="bold magenta")
    table.add_column("Workload", style="cyan")
    table.add_column("Threads", justify="right")
    table.add_column("Cycles", justify="right", style="green")
    table.add_column("Errors", justify="right", style="red")
    table.add_column("Mean cycle", justify="right")

    if stats.cpu_threads > 0:
        table.add_row("Cpu", str(stats.cpu_threads), f"{stats.cpu_calls:,}", "-",
                      f"{safe_division(stats.cpu_micros, stats.cpu_calls):.2f}µs")
    if stats.io_threads > 0:
        table.add_row("IO", str(stats.io_threads), f"{stats.io_calls:,}", f"{stats.io_errors:,}",
                      f"{safe_division(stats.io_micros, stats.io_calls) / 1000:.2f}ms")
    if stats.network_threads > 0:
        table.add_row("Network", str(stats.network_threads), f"{stats.network_calls:,}",
                      f"{stats.network_errors:,} ({stats.network_error_percent:.2f}%)",
                      f"{safe_division(stats.network_cycle_millis, stats.network_calls):.2f}ms")
    console.print(table)

    if report.abandoned_workers:
        console.print(f"[yellow]Abandoned workers:[/yellow] {', '.join(report.abandoned_workers)}")

    system_stats = report.system_stats
    if system_stats and system_stats.samples:
        host = Table(title="Host resources", show_header=True, header_style="bold magenta")
        host.add_column("Metric", style="cyan")
        host.add_column("Value", style="green")
        host.add_row("Avg CPU", f"{system_stats.cpu.get('avg', 0):.1f}%")
        host.add_row("Max CPU", f"{system_stats.cpu.get('max', 0):.1f}%")
        host.add_row("Avg Memory", f"{system_stats.memory.get('avg', 0):.1f}%")
        host.add_row("Avg Disk Write", f"{system_stats.disk.get('avg_write_mbps', 0):.2f} MB/s")
        host.add_row("Avg Network Recv", f"{system_stats.network.get('avg_recv_mbps', 0):.2f} MB/s")
        console.print(host)


def main():
    """Entry point for the timeout-benchmark command."""
    cli()


if __name__ == '__main__':
    main()
