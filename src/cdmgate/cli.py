"""CLI interface for cdmgate using Typer framework.

Each validator and the report aggregator is a separate command so CI can run
them as separate steps; they only share the log files they write and read.
"""

import json as jsonlib
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from cdmgate import __description__, __version__
from cdmgate.config import GateConfig, LogLevel, load_config, resolve_root
from cdmgate.fixtures import write_sample_data
from cdmgate.report import ValidationReport, ValidatorStatus, generate_report
from cdmgate.validation.business_rules import run_business_rules_validation
from cdmgate.validation.framework import BatchResult
from cdmgate.validation.metadata import run_metadata_validation
from cdmgate.validation.schema import run_schema_validation

app = typer.Typer(
    name="cdmgate",
    help=__description__,
    add_completion=False,
    rich_markup_mode="rich"
)

console = Console()
logger = logging.getLogger(__name__)

_log_level_override: str | None = None

_LOG_LEVELS = {
    LogLevel.ERROR.value: logging.ERROR,
    LogLevel.WARN.value: logging.WARNING,
    LogLevel.INFO.value: logging.INFO,
    LogLevel.DEBUG.value: logging.DEBUG,
}

RootOption = Annotated[
    Optional[Path],
    typer.Option("--root", "-r", help="Repository root (default: directory of .cdmgate.json or current directory)")
]
ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Configuration file path (default: search for .cdmgate.json)")
]
FormatOption = Annotated[
    str,
    typer.Option("--format", "-f", help="Output format: table, json (default: table)")
]


def version_callback(value: bool) -> None:
    """Show version information and exit."""
    if value:
        console.print(f"cdmgate version {__version__}")
        raise typer.Exit()


def setup_logging(level: str) -> None:
    """Route library logging through rich at the given level."""
    package_logger = logging.getLogger("cdmgate")
    package_logger.handlers = [RichHandler(console=Console(stderr=True), show_path=False)]
    package_logger.setLevel(_LOG_LEVELS.get(level, logging.INFO))


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option("--version", "-v", callback=version_callback, help="Show version and exit")
    ] = False,
    log_level: Annotated[
        Optional[str],
        typer.Option("--log-level", help="Logging level: error, warn, info, debug (default: from config)")
    ] = None,
) -> None:
    """cdmgate - CDM compliance gate for contact submissions."""
    global _log_level_override

    if log_level is not None and log_level not in _LOG_LEVELS:
        console.print(f"[red]Error:[/red] Invalid log level '{log_level}'. Must be one of: {', '.join(_LOG_LEVELS)}")
        raise typer.Exit(1)
    _log_level_override = log_level


def _load(root: Path | None, config: Path | None) -> tuple[Path, GateConfig]:
    try:
        gate_config = load_config(config)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    setup_logging(_log_level_override or gate_config.logging.level)
    return resolve_root(root, config), gate_config


def _check_format(format: str) -> None:
    valid_formats = ["table", "json"]
    if format not in valid_formats:
        console.print(f"[red]Error:[/red] Invalid format '{format}'. Must be one of: {', '.join(valid_formats)}")
        raise typer.Exit(1)


def _output_batch(result: BatchResult, format: str, log_path: Path) -> None:
    if format == "json":
        console.print(jsonlib.dumps(result.to_dict(), indent=2), markup=False, highlight=False, soft_wrap=True)
        return

    status_color = "green" if result.passed else "red"
    console.print(f"\n[blue]{result.title.removesuffix(' Results')} Summary:[/blue]")

    table = Table()
    table.add_column("Metric", style="cyan")
    table.add_column("Count", style="white", justify="right")
    table.add_row("Total files", str(result.total))
    table.add_row("Valid files", str(result.valid))
    table.add_row("Invalid files", str(result.invalid))
    console.print(table)

    if result.total == 0:
        console.print(f"No {result.subject} files found to validate")
    if result.passed:
        console.print(f"[{status_color}]All validation checks passed![/{status_color}]")
    else:
        console.print(f"[{status_color}]Validation failed! Check {log_path.name} for details.[/{status_color}]")


def _run_validator(
    runner: Callable[..., BatchResult],
    log_name: Callable[[GateConfig], str],
    root: Path | None,
    config: Path | None,
    format: str,
) -> None:
    _check_format(format)
    root_path, gate_config = _load(root, config)

    try:
        result = runner(root_path, gate_config, console=console if format == "table" else None)
    except OSError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    _output_batch(result, format, gate_config.output_path(root_path, log_name(gate_config)))
    raise typer.Exit(result.exit_code)


@app.command()
def schema(
    root: RootOption = None,
    config: ConfigOption = None,
    format: FormatOption = "table",
) -> None:
    """Validate contact files against the CDM contact schema."""
    _run_validator(run_schema_validation, lambda c: c.logs.schema_log, root, config, format)


@app.command("business-rules")
def business_rules(
    root: RootOption = None,
    config: ConfigOption = None,
    format: FormatOption = "table",
) -> None:
    """Validate contact files against the business rules."""
    _run_validator(run_business_rules_validation, lambda c: c.logs.business_rules_log, root, config, format)


@app.command()
def metadata(
    root: RootOption = None,
    config: ConfigOption = None,
    format: FormatOption = "table",
) -> None:
    """Validate submission metadata and its references to contact files."""
    _run_validator(run_metadata_validation, lambda c: c.logs.metadata_log, root, config, format)


def _output_report(report: ValidationReport) -> None:
    results = report.validation_results
    console.print("\n[blue]Validation Summary:[/blue]")
    console.print(f"   Files processed: {results.file_count.total}")

    for key, outcome in results.outcomes().items():
        status = outcome.status
        icon = "✅" if status == ValidatorStatus.PASSED.value else "❌" if status == ValidatorStatus.FAILED.value else "⚠️"
        console.print(f"   {key}: {icon} {str(status).upper()}")

    if report.all_passed:
        console.print("\n[green]All validations passed! Report generated successfully.[/green]")
    else:
        console.print("\n[red]Some validations failed. Check the report for details.[/red]")


@app.command()
def report(
    root: RootOption = None,
    config: ConfigOption = None,
) -> None:
    """Aggregate the validator logs into validation-report.json and .md."""
    root_path, gate_config = _load(root, config)

    try:
        validation_report = generate_report(root_path, gate_config)
    except OSError as e:
        console.print(f"[red]Error generating validation report:[/red] {e}")
        raise typer.Exit(1)

    console.print("[green]Validation report generated:[/green]")
    console.print(f"   - {gate_config.logs.report_json} (machine-readable)")
    console.print(f"   - {gate_config.logs.report_markdown} (human-readable)")
    _output_report(validation_report)
    raise typer.Exit(validation_report.exit_code)


@app.command("validate-all")
def validate_all(
    root: RootOption = None,
    config: ConfigOption = None,
) -> None:
    """Run all three validators, then generate the report."""
    root_path, gate_config = _load(root, config)

    for title, runner in (
        ("CDM Schema Validation", run_schema_validation),
        ("Business Rules Validation", run_business_rules_validation),
        ("Metadata Validation", run_metadata_validation),
    ):
        console.print(f"\n[blue]Starting {title}...[/blue]")
        try:
            result = runner(root_path, gate_config, console=console)
        except OSError as e:
            # The missing log marks this validator as unknown in the report.
            console.print(f"[red]Error:[/red] {title} could not run: {e}")
            continue
        console.print(f"{title}: {result.valid}/{result.total} valid")

    validation_report = generate_report(root_path, gate_config)
    _output_report(validation_report)
    raise typer.Exit(validation_report.exit_code)


@app.command("sample-data")
def sample_data(
    root: RootOption = None,
    config: ConfigOption = None,
    force: Annotated[
        bool,
        typer.Option("--force", help="Overwrite existing sample files")
    ] = False,
) -> None:
    """Write sample valid and invalid submissions for a local trial run."""
    root_path, gate_config = _load(root, config)

    written = write_sample_data(root_path, gate_config, force=force)
    if not written:
        console.print("[yellow]Sample files already exist; use --force to overwrite[/yellow]")
        return

    console.print("[green]Sample data created:[/green]")
    for path in written:
        console.print(f"   - {path.relative_to(root_path).as_posix()}")


if __name__ == "__main__":
    app()
