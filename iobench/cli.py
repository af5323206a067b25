"""Command line interface for the I/O benchmark."""

import sys
from typing import Optional
import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .core.config import ConfigLoader, RunConfig
from .core.driver import BenchmarkDriver, DriverState
from .core.errors import ConfigurationError, WriteFailureError
from .core.metrics import Phase, PhaseLatencyRecorder
from .core.payload import RandomPayloadGenerator
from .core.pool import WorkerPool
from .core.results import BenchmarkReport
from .core.system import SystemSpecs, check_available_space, collect_system_specs
from .utils.env import Env
from .utils.logging import setup_logging


console = Console()

_PHASE_TITLES = {
    DriverState.WRITING_FILES: "Writing",
    DriverState.DELETING_FILES: "Deleting",
}


class ProgressDisplay:
    """Single overwritten console line showing the progress of the current phase."""

    def __init__(self):
        self.title = ""
        self._open_line = False

    def on_state(self, state: DriverState) -> None:
        if state in _PHASE_TITLES:
            self._end_line()
            self.title = _PHASE_TITLES[state]

    def __call__(self, total: int, completed: int) -> None:
        percent = completed * 100 // total
        click.echo(f"\r {self.title} {percent:3d}% [{completed}/{total}]", nl=False)
        self._open_line = True
        if completed == total:
            self._end_line()

    def _end_line(self) -> None:
        if self._open_line:
            click.echo()
            self._open_line = False


@click.command(context_settings={'help_option_names': ['-h', '--help']})
@click.option('--dir', '-d', 'directory', help='Directory path to write')
@click.option('--size', '-s', type=int,
              help='Number of bytes to write in each file. Default to 104857600, i.e. 100MB')
@click.option('--loops', '-l', 'iterations', type=int, help='Number of files to write. Default to 300')
@click.option('--threads', '-t', type=int,
              help='Number of threads to write in parallel. Default to available CPU cores')
@click.option('--progress-every', 'progress_cadence', type=int,
              help='Report progress every N completed files. Default to 5')
@click.option('--config', '-c', 'config_file', type=click.Path(exists=True, dir_okay=False),
              help='YAML file with run settings; command line options take precedence')
@click.option('--log-level', default=lambda: Env.get_str('LOG_LEVEL', 'INFO'), show_default='INFO',
              type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'], case_sensitive=False),
              help='Logging level')
@click.option('--log-file', help='Log file path')
@click.pass_context
def main(ctx, directory, size, iterations, threads, progress_cadence, config_file, log_level, log_file):
    """Benchmark file create, write, close and delete latency in a directory."""
    setup_logging(level=log_level, log_file=log_file, component="cli")

    try:
        config = ConfigLoader.resolve(
            {
                'directory': directory,
                'size': size,
                'iterations': iterations,
                'threads': threads,
                'progress_cadence': progress_cadence,
            },
            config_file=config_file
        )
        _display_settings(config)
        check_available_space(config.directory, config.expected_bytes)
    except ConfigurationError as e:
        console.print(f"\n[red]Error: {escape(str(e))}[/red]\n", soft_wrap=True)
        click.echo(ctx.get_help())
        ctx.exit(2)

    try:
        report = run_benchmark(config)
    except WriteFailureError as e:
        click.echo()
        console.print(f"[red]✗ Benchmark aborted: {escape(str(e))}[/red]", soft_wrap=True)
        sys.exit(1)

    _display_report(report)
    _display_system_specs(collect_system_specs(config.directory))

    if not report.succeeded:
        console.print(f"[yellow]⚠ {report.failed_deletes} files could not be deleted from "
                      f"'{escape(str(config.directory.absolute()))}'[/yellow]", soft_wrap=True)
        sys.exit(1)


def run_benchmark(config: RunConfig, progress: Optional[ProgressDisplay] = None) -> BenchmarkReport:
    """Generate the payload, run the driver and collect the report."""
    progress = progress if progress is not None else ProgressDisplay()
    payload = RandomPayloadGenerator().generate(config.size)
    recorder = PhaseLatencyRecorder()

    with WorkerPool(config.threads) as pool:
        driver = BenchmarkDriver(
            config.directory,
            payload,
            config.iterations,
            config.threads,
            recorder=recorder,
            progress_reporter=progress,
            progress_cadence=config.progress_cadence,
            state_listener=progress.on_state,
            pool=pool
        )
        elapsed_ms = driver.run()

    return BenchmarkReport.from_run(config, elapsed_ms, recorder, driver.failed_deletes)


def _display_settings(config: RunConfig) -> None:
    console.print(f"Writing to directory: '{escape(str(config.directory.absolute()))}'", soft_wrap=True)
    console.print(f"File Size = {config.size} bytes")
    console.print(f"Loops = {config.iterations}")
    console.print(f"Threads = {config.threads}")


def _display_report(report: BenchmarkReport) -> None:
    """Display per-timer latency statistics."""
    table = Table(title="File Operation Latency (ms)", show_header=True, header_style="bold magenta")
    table.add_column("Timer", style="cyan")
    for column in ("Count", "Rate/s", "Min", "Mean", "Max", "StdDev",
                   "p50", "p75", "p95", "p99", "p99.9"):
        table.add_column(column, justify="right", style="green")

    for phase in Phase:
        snapshot = report.latencies[phase.value]
        table.add_row(
            phase.label,
            f"{snapshot.count:,}",
            f"{report.rates.get(phase.value, 0.0):.2f}",
            f"{snapshot.min_ms:.3f}",
            f"{snapshot.mean_ms:.3f}",
            f"{snapshot.max_ms:.3f}",
            f"{snapshot.stddev_ms:.3f}",
            f"{snapshot.p50_ms:.3f}",
            f"{snapshot.p75_ms:.3f}",
            f"{snapshot.p95_ms:.3f}",
            f"{snapshot.p99_ms:.3f}",
            f"{snapshot.p99_9_ms:.3f}",
        )

    console.print()
    console.print(table)
    console.print(f"\n[green]✓[/green] Test completed in {report.elapsed_seconds:.1f} seconds "
                  f"({report.throughput_mb_per_second:.2f} MB/s written)\n")


def _display_system_specs(specs: SystemSpecs) -> None:
    table = Table(title="System Specs", show_header=False)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("CPU Cores", str(specs.cpu_cores))
    table.add_row("Memory Total", f"{specs.memory_total_gb:.0f} GB")
    table.add_row("Memory Free", f"{specs.memory_free_gb:.2f} GB")
    table.add_row("File Store", f"{specs.file_store.device} on {specs.file_store.mountpoint} "
                                f"(type={specs.file_store.fstype})")
    table.add_row("Diskspace Total", f"{specs.disk_total_gb:.0f} GB")
    table.add_row("Diskspace Available", f"{specs.disk_available_gb:.2f} GB")

    console.print(table)


if __name__ == '__main__':
    main()
