"""Configuration management for image-extrude.

This module provides configuration management using Pydantic models.
Configuration can be provided via CLI arguments, plugin parameters or defaults.

Key classes:
- SamplingConfig: Vector flattening settings
- TracingConfig: Raster tracing settings
- RasterConfig: Vector-to-bitmap rendering settings
- ExportConfig: GLB/3MF packaging settings
- ImageExtrudeSettings: Main application settings
- ExtrusionParameters: Validated per-request parameters
"""

from image_extrude.config.params import (
    DEFAULT_IMAGE_DATA_URL,
    DEFAULT_IMAGE_FILE_NAME,
    DEFAULT_IMAGE_MIME_TYPE,
    ExtrusionParameters,
)
from image_extrude.config.settings import (
    ExportConfig,
    FetchConfig,
    ImageExtrudeSettings,
    LoggingConfig,
    RasterConfig,
    SamplingConfig,
    TracingConfig,
    get_default_settings,
)

__all__ = [
    "DEFAULT_IMAGE_DATA_URL",
    "DEFAULT_IMAGE_FILE_NAME",
    "DEFAULT_IMAGE_MIME_TYPE",
    "ExportConfig",
    "ExtrusionParameters",
    "FetchConfig",
    "ImageExtrudeSettings",
    "LoggingConfig",
    "RasterConfig",
    "SamplingConfig",
    "TracingConfig",
    "get_default_settings",
]
