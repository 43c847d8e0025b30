"""Rich console output helpers for the CLI.

This module provides user-friendly console output using Rich library
with formatted step, summary and error messages.
"""

from rich.console import Console
from rich.text import Text

console = Console()

# Unicode symbols for consistent visual language
SYM_STEP = "▸"  # Step indicator
SYM_OK = "✓"  # Success
SYM_ERR = "✗"  # Error
SYM_WARN = "!"  # Warning
SYM_DOT = "·"  # Separator/secondary info


def print_header(version: str) -> None:
    """Print application header.

    Args:
        version: Application version string
    """
    console.print(f"\n[bold]Image Extrude[/bold] v{version}")
    console.print("─" * 44)


def print_step(message: str) -> None:
    """Print a processing step indicator.

    Args:
        message: Step description message
    """
    console.print(f"\n{SYM_STEP} {message}")


def print_source_info(name: str, mime_type: str | None, size_bytes: int | None = None) -> None:
    """Print image source information.

    Args:
        name: File name, URL or a description of built-in content
        mime_type: Declared or detected MIME type
        size_bytes: Payload size, if already known
    """
    # Use Text to safely handle paths with special characters
    line = Text("  ")
    line.append(name)
    line.append(f" ({mime_type or 'unknown type'})")
    console.print(line)
    if size_bytes is not None:
        console.print(f"  {_format_size(size_bytes)}")


def print_warning(message: str) -> None:
    """Print a warning line."""
    console.print(f"  [yellow]{SYM_WARN} {message}[/yellow]")


def _format_time(seconds: float) -> str:
    """Format seconds into human-readable time string."""
    if seconds < 1:
        return f"{seconds * 1000:.0f}ms"
    elif seconds < 60:
        return f"{seconds:.1f}s"
    else:
        mins = int(seconds // 60)
        secs = seconds % 60
        return f"{mins}m {secs:.1f}s"


def _format_size(size_bytes: int) -> str:
    """Format a byte count (e.g., "428 KB")."""
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.0f} KB"
    else:
        return f"{size_bytes / (1024 * 1024):.1f} MB"


def print_success(
    output_path: str,
    size_bytes: int,
    total_time_s: float,
    mode: str,
    triangles: int,
    dimensions: tuple[float, float, float],
    stage_times_ms: dict[str, float] | None = None,
) -> None:
    """Print success message with summary.

    Args:
        output_path: Path to output file
        size_bytes: Output file size
        total_time_s: Total processing time in seconds
        mode: Effective processing mode
        triangles: Triangle count of the solid
        dimensions: Solid extent (x, y, z) in millimeters
        stage_times_ms: Optional per-stage durations
    """
    time_str = _format_time(total_time_s)

    # Success header
    console.print(f"\n[bold green]{SYM_OK} Complete[/bold green] in {time_str}")

    # Output file info
    line = Text("  ")
    line.append(output_path, style="bold")
    line.append(f" ({_format_size(size_bytes)})")
    console.print(line)

    width, depth, height = dimensions
    console.print(
        f"  {mode} {SYM_DOT} {triangles:,} triangles {SYM_DOT} "
        f"{width:.2f} × {depth:.2f} × {height:.2f} mm"
    )

    if stage_times_ms:
        timing = f" {SYM_DOT} ".join(
            f"{stage} {duration:.1f}ms" for stage, duration in stage_times_ms.items()
        )
        console.print(f"  {timing}")


def print_error(message: str, details: str | None = None) -> None:
    """Print error message.

    Args:
        message: Main error message
        details: Optional detailed error information
    """
    console.print(f"\n[bold red]{SYM_ERR} Error:[/bold red] {message}")
    if details:
        console.print(f"  {details}")
