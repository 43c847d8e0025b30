"""Abstract base classes for tracing and rasterization backends.

The pipeline depends only on these interfaces, so a backend can be swapped
without touching pipeline logic.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from image_extrude.domain import TraceResult
from image_extrude.domain.trace import format_number


@dataclass(frozen=True, slots=True)
class TraceOptions:
    """Options passed to a tracer backend.

    Attributes:
        threshold: Brightness threshold 1-255, or 0 for automatic (Otsu)
        invert: Trace light content on a dark background
        despeckle_area: Traced regions with an area (px) at or below this are dropped
        optimize_curves: Simplify outlines before smoothing
        alpha_max: Corner threshold for smoothing
        opt_tolerance: Outline optimization tolerance in pixels
    """

    threshold: int = 0
    invert: bool = False
    despeckle_area: float = 2.0
    optimize_curves: bool = True
    alpha_max: float = 1.0
    opt_tolerance: float = 0.2


class TracerBackend(ABC):
    """Converts bitmaps into closed vector paths."""

    name: str = "tracer"

    @abstractmethod
    def trace(self, bitmap: bytes, options: TraceOptions) -> TraceResult:
        """Trace an encoded bitmap.

        Args:
            bitmap: Encoded image bytes (PNG, JPEG, ...)
            options: Threshold, polarity, despeckle and smoothing options

        Returns:
            TraceResult with zero or more closed paths
        """

    def paths_to_vector_content(self, result: TraceResult, size: float = 1.0) -> str:
        """Serialize traced paths to an SVG document.

        Args:
            result: Tracer output
            size: Scale applied to every coordinate

        Returns:
            SVG text with a single even-odd filled path
        """
        width = format_number(result.width * size)
        height = format_number(result.height * size)
        data = "".join(path.to_svg_path_data(size) for path in result.paths)
        return (
            '<svg xmlns="http://www.w3.org/2000/svg" version="1.1" '
            f'width="{width}" height="{height}" viewBox="0 0 {width} {height}">'
            f'<path stroke="none" fill="black" fill-rule="evenodd" d="{data}"/>'
            "</svg>"
        )


class RasterizerBackend(ABC):
    """Renders vector content to a bitmap."""

    name: str = "rasterizer"

    @abstractmethod
    def rasterize(self, content: str, target_width_px: int | None = None) -> bytes:
        """Render SVG content.

        Args:
            content: SVG document text
            target_width_px: Output width in pixels, None for the backend default

        Returns:
            PNG-encoded bitmap
        """
