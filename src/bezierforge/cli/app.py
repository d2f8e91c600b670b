"""CLI application entry point for bezierforge.

This module provides the main CLI interface using Typer.
"""

import time
from pathlib import Path
from typing import Annotated

import typer

from bezierforge import __version__
from bezierforge.cli.output import (
    SYM_OK,
    console,
    create_progress,
    format_file_size,
    print_anchor_table,
    print_cancellation_summary,
    print_error,
    print_header,
    print_source_info,
    print_step,
    print_success,
    print_warnings,
)
from bezierforge.config import BezierForgeSettings, ImportConfig, LoggingConfig
from bezierforge.core.engine import BezierEngine, engine_from_json
from bezierforge.exceptions import BezierForgeError, DesignFormatError, ImportCancelledError
from bezierforge.io import decode_path_detailed, encode_path, write_design_file
from bezierforge.io.svg_reader import looks_like_svg
from bezierforge.ports import RecordingNotifier
from bezierforge.utils import configure_logging

# Create the Typer app
app = typer.Typer(
    name="bezierforge",
    help="Convert between SVG documents and cubic Bézier design JSON.",
    add_completion=False,
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold blue]Bezierforge[/bold blue] v{__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    log_file: Annotated[
        Path | None,
        typer.Option(
            "--log-file",
            help="Write detailed logs to file",
        ),
    ] = None,
    log_level: Annotated[
        str,
        typer.Option(
            "--log-level",
            help="Logging level (DEBUG|INFO|WARNING|ERROR)",
        ),
    ] = "WARNING",
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Minimal console output",
        ),
    ] = False,
    _version: Annotated[  # noqa: ARG001
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """Import SVG or design JSON into cubic Bézier objects and export them again."""
    logging_config = LoggingConfig(log_file=log_file, log_level=log_level.upper())
    configure_logging(
        log_file=logging_config.log_file,
        console_level=logging_config.log_level,
        file_level=logging_config.file_log_level,
        quiet=quiet,
    )
    ctx.obj = {"quiet": quiet, "logging": logging_config}


def _is_quiet(ctx: typer.Context) -> bool:
    return bool(ctx.obj and ctx.obj.get("quiet"))


def _read_text(path: Path) -> str:
    if not path.exists():
        print_error(
            f"Input file not found: {path}",
            details=f"The file '{path}' does not exist or is not accessible.",
        )
        raise typer.Exit(code=1)
    if not path.is_file():
        print_error(f"Input path is not a file: {path}")
        raise typer.Exit(code=1)
    try:
        return path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as e:
        print_error(f"Could not read {path}", details=str(e))
        raise typer.Exit(code=1) from e


@app.command("import")
def import_command(
    ctx: typer.Context,
    source: Annotated[
        Path,
        typer.Argument(
            help="SVG document or design JSON to import",
            show_default=False,
        ),
    ],
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Output design JSON (default: {name}.design.json)",
        ),
    ] = None,
    max_objects: Annotated[
        int,
        typer.Option(
            "--max-objects",
            help="Maximum objects to import",
            min=1,
        ),
    ] = 20,
    max_points: Annotated[
        int,
        typer.Option(
            "--max-points",
            help="Maximum anchors kept per object",
            min=2,
        ),
    ] = 20,
    canvas_width: Annotated[
        float,
        typer.Option(
            "--canvas-width",
            help="Canvas width used to fit imported paths",
            min=1.0,
        ),
    ] = 800.0,
    canvas_height: Annotated[
        float,
        typer.Option(
            "--canvas-height",
            help="Canvas height used to fit imported paths",
            min=1.0,
        ),
    ] = 600.0,
    no_normalize: Annotated[
        bool,
        typer.Option(
            "--no-normalize",
            help="Keep SVG coordinates instead of fitting them to the canvas",
        ),
    ] = False,
) -> None:
    """Import an SVG document or design JSON and write design JSON.

    Example:
        bezierforge import logo.svg -o logo.json
    """
    quiet = _is_quiet(ctx)
    text = _read_text(source)
    output_path = output or source.with_name(f"{source.stem}.design.json")

    settings = BezierForgeSettings(
        importing=ImportConfig(
            max_objects=max_objects,
            max_points_per_object=max_points,
            canvas_width=canvas_width,
            canvas_height=canvas_height,
            normalize=not no_normalize,
        ),
    )
    engine = BezierEngine(settings=settings, notifier=RecordingNotifier())

    if not quiet:
        print_header(__version__)
        print_step("Reading source")
        print_source_info(
            str(source), "SVG" if looks_like_svg(text) else "JSON", format_file_size(source)
        )
        print_step("Importing")

    start = time.time()
    try:
        if quiet:
            job = engine.import_paths(text)
            result = job.run_sync()
        else:
            with create_progress() as progress:
                task_id = progress.add_task("Importing", total=1.0)

                def update_progress(fraction: float) -> None:
                    progress.update(task_id, completed=fraction)

                job = engine.import_paths(text, on_progress=update_progress)
                result = job.run_sync()
    except KeyboardInterrupt:
        raise typer.Exit(code=130) from None  # Standard Unix SIGINT exit code

    if result is None:
        error = job.error
        if isinstance(error, ImportCancelledError):
            if not quiet:
                print_cancellation_summary(error.processed_count, error.pending_count)
            raise typer.Exit(code=130)
        print_error("Import failed", details=str(error) if error else None)
        raise typer.Exit(code=1)

    if not quiet:
        print_warnings(result.warnings)

    if result.is_empty:
        print_error("Nothing to write", details="The source produced no objects.")
        raise typer.Exit(code=1)

    try:
        write_design_file(engine.to_design(), output_path)
    except OSError as e:
        print_error(f"Could not write {output_path}", details=str(e))
        raise typer.Exit(code=1) from e

    if not quiet:
        print_success(
            output_path=str(output_path),
            file_size=format_file_size(output_path),
            total_time_s=time.time() - start,
            objects=len(result.objects),
            points=result.stats.point_count,
            errors=result.stats.error_count,
        )


@app.command("export")
def export_command(
    ctx: typer.Context,
    design: Annotated[
        Path,
        typer.Argument(
            help="Design JSON to export",
            show_default=False,
        ),
    ],
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Output SVG path (default: {name}.svg)",
        ),
    ] = None,
    no_background: Annotated[
        bool,
        typer.Option(
            "--no-background",
            help="Omit the background image",
        ),
    ] = False,
    close: Annotated[
        bool,
        typer.Option(
            "--close",
            help="Close every path back to its first anchor",
        ),
    ] = False,
) -> None:
    """Export design JSON as an SVG document.

    Example:
        bezierforge export logo.json -o logo.svg
    """
    quiet = _is_quiet(ctx)
    text = _read_text(design)
    output_path = output or design.with_suffix(".svg")

    start = time.time()
    try:
        engine = engine_from_json(text)
    except DesignFormatError as e:
        print_error("Could not load design", details=e.details)
        raise typer.Exit(code=1) from e

    svg = engine.export_svg(close_paths=close, include_background=not no_background)
    try:
        output_path.write_text(svg, encoding="utf-8")
    except OSError as e:
        print_error(f"Could not write {output_path}", details=str(e))
        raise typer.Exit(code=1) from e

    if not quiet:
        print_success(
            output_path=str(output_path),
            file_size=format_file_size(output_path),
            total_time_s=time.time() - start,
            objects=len(engine.objects),
            points=sum(len(obj.points) for obj in engine.objects),
        )


@app.command("path")
def path_command(
    ctx: typer.Context,
    path_data: Annotated[
        str,
        typer.Argument(
            metavar="D",
            help="SVG path data, e.g. 'M0,0 C10,0 20,10 30,10'",
            show_default=False,
        ),
    ],
    close: Annotated[
        bool,
        typer.Option(
            "--close",
            help="Close the re-encoded path",
        ),
    ] = False,
    precision: Annotated[
        int,
        typer.Option(
            "--precision",
            help="Decimal places in the re-encoded path",
            min=0,
            max=10,
        ),
    ] = 4,
    max_points: Annotated[
        int,
        typer.Option(
            "--max-points",
            help="Maximum anchors decoded",
            min=2,
        ),
    ] = 20,
) -> None:
    """Decode path data into anchors and print the re-encoded path.

    Example:
        bezierforge path "M0,0 Q50,50 100,0"
    """
    quiet = _is_quiet(ctx)
    try:
        decoded = decode_path_detailed(path_data, max_points=max_points)
    except BezierForgeError as e:
        print_error("Could not decode path", details=str(e))
        raise typer.Exit(code=1) from e

    if not decoded.points:
        print_error("No anchors decoded", details="The path data contains no drawable commands.")
        raise typer.Exit(code=1)

    encoded = encode_path(decoded.points, close=close or decoded.closed, precision=precision)
    if quiet:
        console.print(encoded, soft_wrap=True, highlight=False)
        return

    print_step(f"{len(decoded.points)} anchors")
    print_anchor_table(decoded.points)
    if decoded.truncated:
        print_warnings([f"Truncated to {max_points} points"])
    if decoded.dropped_values:
        print_warnings([f"{decoded.dropped_values} malformed values ignored"])
    print_step("Encoded")
    console.print(encoded, soft_wrap=True, highlight=False)
    console.print(f"\n[bold green]{SYM_OK}[/bold green] Done")


def cli() -> None:
    """Entry point for the CLI application."""
    app()


def main() -> None:
    """Entry point for the CLI application (alias for cli)."""
    cli()


if __name__ == "__main__":
    cli()
