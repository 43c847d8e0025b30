"""Utility functions for image-extrude.

This module provides:

- Logging setup and configuration
- Per-run pipeline statistics
"""

from image_extrude.utils.logging import (
    PipelineLogger,
    PipelineStats,
    configure_logging,
)

__all__ = [
    "PipelineLogger",
    "PipelineStats",
    "configure_logging",
]
