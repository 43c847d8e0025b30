"""CLI application entry point for image-extrude.

This module provides the main CLI interface using Typer.
"""

from pathlib import Path
from typing import Annotated

import typer
from pydantic import ValidationError

from image_extrude import __version__
from image_extrude.cli.output import (
    console,
    print_error,
    print_header,
    print_source_info,
    print_step,
    print_success,
    print_warning,
)
from image_extrude.config import (
    DEFAULT_IMAGE_DATA_URL,
    DEFAULT_IMAGE_FILE_NAME,
    ExtrusionParameters,
    ImageExtrudeSettings,
    LoggingConfig,
)
from image_extrude.core.pipeline import ImageExtruder
from image_extrude.domain import FailurePolicy, ImageSource, InlineData, ProcessingMode, RemoteUrl
from image_extrude.exceptions import ImageExtrudeError
from image_extrude.io import ExportFormat, guess_mime_type, load_file, parse_data_url, write_output
from image_extrude.utils import configure_logging

# Create the Typer app
app = typer.Typer(
    name="image-extrude",
    help="Extrude 3D solids from SVG or bitmap images.",
    add_completion=False,
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold blue]Image Extrude[/bold blue] v{__version__}")
        raise typer.Exit()


def _build_source(image: Path | None, url: str | None) -> ImageSource:
    """Pick the image source from the command-line options."""
    if image is not None:
        return load_file(image)
    if url is not None:
        return RemoteUrl(url=url, mime_type=guess_mime_type(url))
    default = parse_data_url(DEFAULT_IMAGE_DATA_URL)
    return InlineData(data=default.data, mime_type=default.mime_type, file_name=DEFAULT_IMAGE_FILE_NAME)


def _describe(source: ImageSource) -> tuple[str, str | None, int | None]:
    if isinstance(source, RemoteUrl):
        return source.url, source.mime_type, None
    return source.file_name or "inline image", source.mime_type, len(source.data)


@app.command()
def extrude(
    output: Annotated[
        Path,
        typer.Argument(
            help="Output file (.glb or .3mf)",
            show_default=False,
        ),
    ],
    image: Annotated[
        Path | None,
        typer.Option(
            "--image",
            "-i",
            help="Path to image file (SVG, PNG, JPG); default: built-in star",
        ),
    ] = None,
    url: Annotated[
        str | None,
        typer.Option(
            "--url",
            help="Fetch the image from a URL instead of a file",
        ),
    ] = None,
    height: Annotated[
        float,
        typer.Option(
            "--height",
            "-h",
            help="Extrusion height in mm",
        ),
    ] = 1.0,
    max_width: Annotated[
        float,
        typer.Option(
            "--max-width",
            "-w",
            help="Width of the result in mm",
        ),
    ] = 50.0,
    mode: Annotated[
        str | None,
        typer.Option(
            "--mode",
            "-m",
            help="Processing mode (trace|sample); default: sample for SVG, trace otherwise",
        ),
    ] = None,
    despeckle: Annotated[
        float,
        typer.Option(
            "--despeckle",
            "-d",
            help="Discard traced specks up to this area in pixels",
        ),
    ] = 2.0,
    threshold: Annotated[
        int,
        typer.Option(
            "--threshold",
            "-t",
            help="Brightness threshold 1-255 for tracing (0 = automatic)",
        ),
    ] = 0,
    invert: Annotated[
        bool,
        typer.Option(
            "--invert",
            help="Trace light shapes on a dark background",
        ),
    ] = False,
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
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Verbose console output",
        ),
    ] = False,
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
    """Extrude an image into a 3D solid and write it as GLB or 3MF.

    SVG input is sampled by default; bitmaps (and SVG in trace mode) are
    traced. Without --image or --url a built-in star is used.

    Example:
        image-extrude logo.glb --image logo.svg --height 2
    """
    # Validate mutually exclusive options
    if verbose and quiet:
        print_error("Cannot use --verbose and --quiet together")
        raise typer.Exit(code=1)

    if image is not None and url is not None:
        print_error("Cannot use --image and --url together")
        raise typer.Exit(code=1)

    try:
        export_format = ExportFormat.from_path(output)
    except ImageExtrudeError:
        print_error(
            f"Unsupported output file: {output}",
            details="Output file must end in .glb or .3mf",
        )
        raise typer.Exit(code=1)

    if image is not None and not image.is_file():
        print_error(
            f"Input file not found: {image}",
            details=f"The file '{image}' does not exist or is not accessible.",
        )
        raise typer.Exit(code=1)

    requested_mode: ProcessingMode | None = None
    if mode is not None:
        try:
            requested_mode = ProcessingMode(mode.lower())
        except ValueError:
            print_error(f"Invalid mode: {mode}", details="Valid values: trace, sample")
            raise typer.Exit(code=1)

    try:
        params = ExtrusionParameters(
            height_mm=height,
            max_width_mm=max_width,
            despeckle_area_px=despeckle,
            brightness_threshold=threshold,
            invert_polarity=invert,
        )
    except ValidationError as e:
        details = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in e.errors()
        )
        print_error("Invalid parameters", details=details)
        raise typer.Exit(code=1)

    settings = ImageExtrudeSettings(
        logging=LoggingConfig(
            log_file=log_file,
            log_level="DEBUG" if verbose else log_level,
        ),
    )
    configure_logging(
        log_file=settings.logging.log_file,
        console_level=settings.logging.log_level,
        file_level=settings.logging.file_log_level,
        quiet=quiet,
    )

    if not quiet:
        print_header(__version__)

    try:
        source = _build_source(image, url)

        if not quiet:
            print_step("Loading image")
            print_source_info(*_describe(source))
            print_step("Extruding")

        extruder = ImageExtruder(settings)
        result = extruder.run(source, requested_mode, params, FailurePolicy.PROPAGATE)

        if result.coerced and not quiet:
            print_warning("Sample mode needs SVG input; traced instead")

        if not quiet:
            print_step(f"Writing {export_format.name}")
        size_bytes = write_output(output, [result.solid], settings.export)

        if not quiet:
            lo, hi = result.solid.bounds()
            print_success(
                output_path=str(output),
                size_bytes=size_bytes,
                total_time_s=result.stats.duration_seconds,
                mode=result.mode.value if result.mode else "unknown",
                triangles=result.solid.num_triangles,
                dimensions=(hi[0] - lo[0], hi[1] - lo[1], hi[2] - lo[2]),
                stage_times_ms=result.stats.stage_durations_ms if verbose else None,
            )

    except ImageExtrudeError as e:
        print_error(str(e), details=f"Stage: {e.stage}")
        raise typer.Exit(code=1)
    except typer.Exit:
        # Re-raise typer.Exit to allow clean exits
        raise
    except Exception as e:
        print_error(f"Unexpected error: {e}")
        raise typer.Exit(code=1)


def cli() -> None:
    """Entry point for the CLI application."""
    app()


def main() -> None:
    """Entry point for the CLI application (alias for cli)."""
    cli()


if __name__ == "__main__":
    cli()
