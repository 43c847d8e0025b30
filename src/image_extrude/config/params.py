"""Per-request extrusion parameters."""

import math

from pydantic import BaseModel, Field, field_validator

# Built-in image used when no image is supplied: a five-pointed star
DEFAULT_IMAGE_FILE_NAME = "star.svg"
DEFAULT_IMAGE_MIME_TYPE = "image/svg+xml"
DEFAULT_IMAGE_DATA_URL = (
    "data:image/svg+xml;base64,"
    "PHN2ZyB4bWxucz0iaHR0cDovL3d3dy53My5vcmcvMjAwMC9zdmciIHZpZXdCb3g9IjAgMCAxMDAgMTAwIj48cG9seWdvbiBwb2ludH"
    "M9IjUwLDUgNjEsMzkgOTcsMzkgNjgsMjIgNzksOTUgNTAsNzAgMjEsOTUgMzIsNjIgMywzOSAzOSwzOSIgZmlsbD0iYmxhY2siLz48L3N2Zz4="
)


class ExtrusionParameters(BaseModel):
    """User-supplied parameters for a single extrusion request.

    Attributes:
        height_mm: Extrusion height
        max_width_mm: Target width of the cross-section, None for no constraint
        despeckle_area_px: Traced blobs with an area at or below this are dropped
        brightness_threshold: 0 for automatic (Otsu), otherwise 1-255
        invert_polarity: Trace light content on a dark background
    """

    model_config = {"frozen": True}

    height_mm: float = Field(default=1.0, gt=0.0)
    max_width_mm: float | None = Field(default=50.0, gt=0.0)
    despeckle_area_px: float = Field(default=2.0, ge=0.0)
    brightness_threshold: int = Field(default=0, ge=0, le=255)
    invert_polarity: bool = False

    @field_validator("height_mm", "max_width_mm", "despeckle_area_px")
    @classmethod
    def _require_finite(cls, value: float | None) -> float | None:
        if value is not None and not math.isfinite(value):
            raise ValueError("must be a finite number")
        return value
