"""
Command Line Interface for Our Journey.

Admin tooling around the memories sheet: parse and inspect a sheet, check it
for data-quality problems, store it as the current sheet, show the stored
sheet, and generate a blank template.
"""

import json
import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ourjourney import __version__
from ourjourney.config import AppConfig, ConfigError, get_config, load_config
from ourjourney.core.memory import Memory
from ourjourney.output.template import TEMPLATE_FILENAME, generate_template
from ourjourney.parsers.base import FieldWarning, IngestError
from ourjourney.parsers.pipeline import ingest_file, ingest_with_report
from ourjourney.storage.local import LocalMemoryStore
from ourjourney.storage.repository import MemoryRepository, find_missing_media
from ourjourney.utils.logging import level_for, setup_logging

logger = logging.getLogger(__name__)

console = Console()


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================


def print_header(text: str) -> None:
    """Print a styled header."""
    console.print()
    console.print(Panel(text, style="bold blue", expand=False))
    console.print()


def print_success(text: str) -> None:
    """Print green success message."""
    console.print(f"[bold green]✓[/bold green] {text}")


def print_warning(text: str) -> None:
    """Print yellow warning message."""
    console.print(f"[bold yellow]⚠[/bold yellow] {text}")


def print_error(text: str) -> None:
    """Print red error message."""
    console.print(f"[bold red]✗[/bold red] {text}")


def print_memories_table(memories: list[Memory]) -> None:
    """Print parsed memories as a table."""
    table = Table(title=f"Memories ({len(memories)})")
    table.add_column("ID", style="cyan")
    table.add_column("Title")
    table.add_column("Place")
    table.add_column("Date", style="green")
    table.add_column("Categories")
    table.add_column("Media", justify="right")

    for memory in memories:
        table.add_row(
            memory.id or "-",
            memory.title or "-",
            memory.to_display_location(),
            memory.date or "-",
            ", ".join(memory.categories) or "-",
            str(len(memory.all_media_files())),
        )

    console.print(table)


def print_warnings_table(warnings: list[FieldWarning]) -> None:
    """Print field warnings as a table."""
    table = Table(title="Field Warnings")
    table.add_column("Row", justify="right", style="cyan")
    table.add_column("Field", style="yellow")
    table.add_column("Issue")
    table.add_column("Value")

    for warning in warnings:
        row = str(warning.row_number) if warning.row_number is not None else "?"
        value = "" if warning.raw_value is None else str(warning.raw_value)
        table.add_row(row, warning.field, warning.message, value)

    console.print(table)


def _config(ctx: click.Context) -> AppConfig:
    return ctx.obj["config"]


# =============================================================================
# MAIN CLI GROUP
# =============================================================================


@click.group()
@click.version_option(__version__, prog_name="Our Journey")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Custom config file",
)
@click.pass_context
def ourjourney(ctx, verbose, debug, config_path):
    """
    Our Journey - memories sheet tools.

    Parse, check and store the spreadsheet that drives the memories gallery.
    """
    try:
        app_config = load_config(config_path) if config_path else get_config()
    except ConfigError as e:
        raise click.ClickException(str(e))

    setup_logging(
        level_for(app_config.log_level, verbose=verbose, debug=debug),
        log_file=app_config.paths.log_file,
    )

    ctx.ensure_object(dict)
    ctx.obj["config"] = app_config


# =============================================================================
# PARSE COMMAND
# =============================================================================


@ourjourney.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["table", "json"]),
    default="table",
    help="Output format",
)
@click.option("--warnings", "show_warnings", is_flag=True, help="List field warnings")
@click.pass_context
def parse(ctx, file, output_format, show_warnings):
    """
    Parse a memories sheet and show the result.

    Example:
        ourjourney parse memories.xlsx --format json
    """
    config = _config(ctx)
    try:
        result = ingest_file(file, config=config.parsing)
    except IngestError as e:
        print_error(e.message)
        sys.exit(1)

    if output_format == "json":
        click.echo(json.dumps(result.to_envelope(), indent=2, ensure_ascii=False))
        return

    print_memories_table(result.memories)
    print_success(f"Parsed {len(result.memories)} memories from {file.name}")

    if result.warnings:
        if show_warnings:
            print_warnings_table(result.warnings)
        else:
            print_warning(
                f"{len(result.warnings)} field warning(s) in "
                f"{len(result.rows_with_warnings())} row(s); use --warnings to list them"
            )


# =============================================================================
# VALIDATE COMMAND
# =============================================================================


@ourjourney.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--media-dir",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Directory of media files to check references against",
)
@click.option("--strict", is_flag=True, help="Exit with status 1 if any problem is found")
@click.pass_context
def validate(ctx, file, media_dir, strict):
    """
    Check a memories sheet for data-quality problems.

    Reports defaulted fields (bad coordinates, unrecognised dates, ...) and,
    with --media-dir, media files the sheet mentions but that do not exist.
    """
    config = _config(ctx)
    print_header(f"Checking {file.name}")

    try:
        result = ingest_file(file, config=config.parsing)
    except IngestError as e:
        print_error(e.message)
        sys.exit(1)

    console.print(result.to_summary())

    problems = 0
    if result.warnings:
        problems += len(result.warnings)
        print_warnings_table(result.warnings)
    else:
        print_success("No field warnings")

    if media_dir is not None:
        available = sorted(p.name for p in media_dir.iterdir() if p.is_file())
        missing = find_missing_media(result.memories, available)
        if missing:
            problems += len(missing)
            table = Table(title="Missing Media")
            table.add_column("Memory", style="cyan")
            table.add_column("File", style="red")
            for memory_id, filename in missing:
                table.add_row(memory_id or "-", filename)
            console.print(table)
        else:
            print_success("All referenced media files are present")

    if problems:
        print_warning(f"{problems} problem(s) found")
        if strict:
            sys.exit(1)


# =============================================================================
# UPLOAD COMMAND
# =============================================================================


@ourjourney.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--upload-dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Override the configured upload directory",
)
@click.pass_context
def upload(ctx, file, upload_dir):
    """
    Store a memories sheet as the current sheet.

    The sheet is parsed first; a file that cannot be parsed never replaces
    the sheet already in place.
    """
    config = _config(ctx)
    data = file.read_bytes()

    try:
        result = ingest_with_report(data, file.name, config=config.parsing)
    except IngestError as e:
        print_error(e.message)
        sys.exit(1)

    store = LocalMemoryStore(upload_dir or config.paths.upload_dir)
    stored_path = store.save_memories_file(data, file.name)

    print_success(f"Stored {len(result.memories)} memories as {stored_path}")
    if result.warnings:
        print_warning(f"{len(result.warnings)} field warning(s); run 'ourjourney validate' for details")


# =============================================================================
# CURRENT COMMAND
# =============================================================================


@ourjourney.command()
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["table", "json"]),
    default="table",
    help="Output format",
)
@click.pass_context
def current(ctx, output_format):
    """
    Show the memories in the stored sheet.

    Reads the sheet from the configured upload directory the same way the
    gallery does, using the configured cache settings.
    """
    config = _config(ctx)
    repository = MemoryRepository.from_config(config)
    try:
        result = repository.load()
    except IngestError as e:
        print_error(e.message)
        sys.exit(1)

    if output_format == "json":
        click.echo(json.dumps(result.to_envelope(), indent=2, ensure_ascii=False))
        return

    if not result.filename:
        print_warning(f"No memories sheet in {config.paths.upload_dir}")
        return

    print_memories_table(result.memories)
    print_success(f"{len(result.memories)} memories in {result.filename}")


# =============================================================================
# TEMPLATE COMMAND
# =============================================================================


@ourjourney.command()
@click.argument("output", required=False, type=click.Path(path_type=Path))
def template(output):
    """
    Write a blank memories workbook with one example row.
    """
    path = generate_template(output or Path(TEMPLATE_FILENAME))
    print_success(f"Template written to {path}")


if __name__ == "__main__":
    ourjourney()
