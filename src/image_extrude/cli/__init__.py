"""Command-line interface for image-extrude.

This module provides the CLI using Typer with rich output for
user-friendly feedback.

Key features:
- GLB or 3MF output chosen by file extension
- Trace or sample mode with automatic fallback to trace for bitmaps
- Verbose/quiet output modes
- Detailed error reporting with non-zero exit codes
"""

from image_extrude.cli.app import cli, main

__all__ = ["cli", "main"]
