"""CLI entry point for streamqc."""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from streamqc import __version__
from streamqc.engine.grading import Grade

console = Console()
app = typer.Typer(
    name="streamqc",
    help="streamqc - sequencing read QC grading\n\nGrade a read aggregate with pass/warn/fail QC modules.",
    add_completion=False,
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)

GRADE_STYLES = {
    Grade.PASS: "green",
    Grade.WARN: "yellow",
    Grade.FAIL: "red",
}


def setup_logging(quiet: bool = False, verbose: bool = False) -> None:
    """Route log records through rich."""
    level = logging.INFO
    if quiet:
        level = logging.WARNING
    elif verbose:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


@app.command()
def run(
    aggregate_file: Annotated[Path, typer.Argument(help="Aggregate JSON written by the accumulator")],
    outdir: Annotated[Optional[Path], typer.Option("--outdir", "-o", help="Directory for the report files")] = None,
    limits: Annotated[Optional[Path], typer.Option("--limits", "-l", help="Custom limits file")] = None,
    adapters: Annotated[Optional[Path], typer.Option("--adapters", "-a", help="Custom adapter list")] = None,
    contaminants: Annotated[Optional[Path], typer.Option("--contaminants", "-c", help="Custom contaminant list")] = None,
    nogroup: Annotated[bool, typer.Option("--nogroup", help="Report every base position separately")] = False,
    threads: Annotated[int, typer.Option("--threads", "-t", min=1, help="Modules to run in parallel")] = 1,
    quiet: Annotated[bool, typer.Option("--quiet", "-q", help="Only log warnings and errors")] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log debug messages")] = False,
):
    """Grade a read aggregate and write the QC report.

    Runs every module enabled in the limits file, prints the grades and
    writes the data file, summary, HTML page and JSON to the output
    directory (default: next to the aggregate file).
    """
    from streamqc.config import load_config
    from streamqc.engine.aggregate import load_aggregate
    from streamqc.engine.executor import ModuleExecutor
    from streamqc.engine.report import QCReport, save_report
    from streamqc.errors import AggregateMismatch, ConfigError

    setup_logging(quiet=quiet, verbose=verbose)

    try:
        aggregate = load_aggregate(aggregate_file)
        config = load_config(
            limits_file=limits,
            adapters_file=adapters,
            contaminants_file=contaminants,
            kmer_size=aggregate.kmer_size,
            nogroup=nogroup,
            threads=threads,
        )
    except (ConfigError, AggregateMismatch) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    results = ModuleExecutor(config).execute(aggregate)
    report = QCReport(filename=aggregate.filename, results=results)

    table = Table(title=f"QC grades for {aggregate.filename}")
    table.add_column("Grade")
    table.add_column("Module")
    table.add_column("Notes", style="dim")
    for result in results:
        style = GRADE_STYLES[result.grade]
        notes = "; ".join(result.errors)
        table.add_row(f"[{style}]{result.grade.value.upper()}[/{style}]", result.module_name, notes)
    if not quiet:
        console.print(table)

    target = outdir or aggregate_file.resolve().parent
    prefix = aggregate_file.name.removesuffix(".json")
    paths = save_report(report, target, prefix=prefix)
    if not quiet:
        console.print(f"\n[bold]Report written to[/bold] {target}")
        for kind, path in paths.items():
            console.print(f"  • {kind}: {path.name}")

    if any(not result.success for result in results):
        raise typer.Exit(2)


@app.command()
def modules():
    """List the analysis modules in report order."""
    from streamqc.engine.modules import registry

    table = Table(title="Analysis modules")
    table.add_column("Key", no_wrap=True)
    table.add_column("Name")
    table.add_column("Limit family")
    table.add_column("Description", style="dim")
    for info in registry.info():
        table.add_row(info["key"], info["name"], info["family"] or "-", info["description"])
    console.print(table)


@app.command()
def serve(
    port: Annotated[int, typer.Option("--port", "-p", help="Port to run the server on")] = 7878,
    host: Annotated[str, typer.Option("--host", help="Host to bind the server to")] = "127.0.0.1",
):
    """Serve the streamqc HTTP API."""
    import uvicorn

    # Suppress verbose uvicorn logs
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    console.print(f"[bold green]streamqc API[/bold green] on http://{host}:{port}")
    uvicorn.run(
        "streamqc.api.main:app",
        host=host,
        port=port,
        log_level="warning",
    )


@app.command()
def version():
    """Show version information."""
    console.print(f"streamqc v{__version__}")


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
