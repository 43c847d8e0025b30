"""Configuration settings for Image Extrude."""

from pathlib import Path

from pydantic import BaseModel, Field


class SamplingConfig(BaseModel):
    """Configuration for vector sampling.

    The flattening tolerance is expressed in the linear units of the final
    output (millimeters once a target width is applied).
    """

    max_error: float = Field(
        default=0.01,
        gt=0.0,
        le=10.0,
        description="Maximum distance between a curve and its polygonal approximation",
    )


class TracingConfig(BaseModel):
    """Configuration for raster tracing."""

    optimize_curves: bool = Field(
        default=True,
        description="Simplify traced outlines before smoothing",
    )
    alpha_max: float = Field(
        default=1.0,
        ge=0.0,
        le=1.34,
        description="Corner threshold; vertices with a smaller alpha are smoothed",
    )
    opt_tolerance: float = Field(
        default=0.2,
        ge=0.0,
        le=5.0,
        description="Tolerance (px) used when optimizing traced outlines",
    )


class RasterConfig(BaseModel):
    """Configuration for rendering vector content to a bitmap before tracing."""

    default_width_px: int = Field(
        default=1024,
        ge=16,
        description="Bitmap width when no target width is requested",
    )
    pixels_per_mm: float = Field(
        default=20.0,
        gt=0.0,
        description="Bitmap resolution derived from the requested width",
    )
    min_width_px: int = Field(default=64, ge=16, description="Smallest bitmap width")
    max_side_px: int = Field(default=4096, ge=64, description="Largest bitmap side")

    def width_for(self, max_width_mm: float | None) -> int:
        """Get the bitmap width for a requested physical width.

        Args:
            max_width_mm: Requested output width in millimeters, or None

        Returns:
            Bitmap width in pixels
        """
        if max_width_mm is None:
            return self.default_width_px
        width = round(max_width_mm * self.pixels_per_mm)
        return max(self.min_width_px, min(self.max_side_px, width))


class FetchConfig(BaseModel):
    """Configuration for retrieving remote images."""

    timeout_seconds: float = Field(default=30.0, gt=0.0, description="HTTP timeout")
    user_agent: str = Field(default="image-extrude", description="User-Agent header")


class ExportConfig(BaseModel):
    """Configuration for mesh packaging."""

    base_color: tuple[float, float, float, float] = Field(
        default=(0.2, 0.8, 0.6, 1.0),
        description="Constant RGBA colour of the GLB default material",
    )
    title: str = Field(default="Image Extrude", description="3MF Title metadata")
    description: str = Field(
        default="Image Extrude 3MF export",
        description="3MF Description metadata",
    )
    application: str = Field(default="image-extrude", description="3MF Application metadata")
    precision: int = Field(
        default=7,
        ge=1,
        le=17,
        description="Significant digits for 3MF vertex coordinates",
    )
    part_name_prefix: str = Field(default="Part", description="3MF mesh object name prefix")
    assembly_name: str = Field(
        default="ImageExtrude-Assembly",
        description="3MF assembly object name",
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    log_file: Path | None = Field(
        default=None,
        description="Path to log file",
    )
    log_level: str = Field(
        default="WARNING",
        description="Console log level",
    )
    file_log_level: str = Field(
        default="DEBUG",
        description="File log level (more verbose)",
    )


class ImageExtrudeSettings(BaseModel):
    """Main application settings."""

    sampling: SamplingConfig = Field(default_factory=SamplingConfig)
    tracing: TracingConfig = Field(default_factory=TracingConfig)
    raster: RasterConfig = Field(default_factory=RasterConfig)
    fetch: FetchConfig = Field(default_factory=FetchConfig)
    export: ExportConfig = Field(default_factory=ExportConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def get_default_settings() -> ImageExtrudeSettings:
    """Get default application settings."""
    return ImageExtrudeSettings()
