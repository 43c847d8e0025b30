"""Vector sampling path.

This module turns SVG content into a dimensioned cross-section:
- sample_svg_polygons: SVG -> closed polygons within a flattening tolerance
- svg_to_cross_section: two-pass rescale to a target width
- sample_svg: the above, centered at the origin

Outlines are read with fontTools' svgLib into a RecordingPen and flattened
with the recursive subdivision helpers in ``_bezier``.
"""

import math
from typing import Any

import structlog
from fontTools.pens.basePen import decomposeQuadraticSegment, decomposeSuperBezierSegment
from fontTools.pens.recordingPen import RecordingPen
from fontTools.svgLib import SVGPath

from image_extrude.core._bezier import flatten_cubic, flatten_quadratic
from image_extrude.core.geometry import CrossSection, FillRule, center_cross_section
from image_extrude.exceptions import DecodeError, GeometryError

logger = structlog.get_logger(__name__)

DEFAULT_MAX_ERROR = 0.01

Coordinate = tuple[float, float]
Polygon = list[Coordinate]


def _require_tolerance(max_error: float) -> None:
    if not math.isfinite(max_error) or max_error <= 0.0:
        raise GeometryError("flattening tolerance must be positive", max_error=max_error)


def _record_svg(content: str) -> list[tuple[str, tuple[Any, ...]]]:
    """Draw every shape element of an SVG document into a RecordingPen."""
    pen = RecordingPen()
    try:
        svg = SVGPath.fromstring(content.encode("utf-8"))
        svg.draw(pen)
    except Exception as e:
        raise DecodeError(f"invalid SVG content: {e}", mime_type="image/svg+xml") from e
    return pen.value


def _recording_to_polygons(
    recording: list[tuple[str, tuple[Any, ...]]],
    max_error: float,
) -> list[Polygon]:
    """Convert RecordingPen commands to flattened closed polygons.

    The RecordingPen records drawing commands like:
    - ('moveTo', ((x, y),))
    - ('lineTo', ((x, y),))
    - ('qCurveTo', ((x1, y1), ..., (xn, yn)))  # Quadratic
    - ('curveTo', ((x1, y1), (x2, y2), (x3, y3)))  # Cubic
    - ('closePath', ()) / ('endPath', ())

    Open subpaths are closed implicitly, as fills are.

    Args:
        recording: List of drawing commands from RecordingPen
        max_error: Maximum distance between curves and their approximation

    Returns:
        Polygons with at least three points
    """
    polygons: list[Polygon] = []
    current: Polygon = []

    def finish() -> None:
        nonlocal current
        if len(current) > 1 and current[0] == current[-1]:
            current.pop()
        if len(current) >= 3:
            polygons.append(current)
        current = []

    for command, args in recording:
        if command == "moveTo":
            finish()
            x, y = args[0]
            current.append((float(x), float(y)))

        elif command == "lineTo":
            x, y = args[0]
            current.append((float(x), float(y)))

        elif command == "qCurveTo" and current:
            for control, on_curve in decomposeQuadraticSegment(args):
                current.extend(flatten_quadratic(current[-1], control, on_curve, max_error))

        elif command == "curveTo" and current:
            for c1, c2, on_curve in decomposeSuperBezierSegment(args):
                current.extend(flatten_cubic(current[-1], c1, c2, on_curve, max_error))

        elif command in ("closePath", "endPath"):
            finish()

    finish()
    return polygons


def sample_svg_polygons(
    content: str,
    max_error: float = DEFAULT_MAX_ERROR,
    flip_y: bool = True,
) -> list[Polygon]:
    """Sample SVG content into closed polygons.

    Args:
        content: SVG document text
        max_error: Maximum flattening error in source units
        flip_y: Negate Y so the result is in Y-up modelling space

    Returns:
        Closed polygons (closing point not repeated)

    Raises:
        DecodeError: If the SVG cannot be parsed
        GeometryError: If max_error is not a positive finite number
    """
    _require_tolerance(max_error)
    polygons = _recording_to_polygons(_record_svg(content), max_error)
    if flip_y:
        polygons = [[(x, -y) for x, y in polygon] for polygon in polygons]
    return polygons


def _build_section(content: str, max_error: float) -> CrossSection:
    polygons = sample_svg_polygons(content, max_error)
    return CrossSection.from_polygons(polygons, FillRule.EVEN_ODD).simplify(max_error)


def svg_to_cross_section(
    content: str,
    max_width: float | None = None,
    max_error: float = DEFAULT_MAX_ERROR,
) -> CrossSection:
    """Convert SVG content to a cross-section, optionally scaled to a width.

    When a target width is given the content is sampled twice: once to
    measure it, then again with the tolerance divided by the scale factor so
    the flattening error stays ``max_error`` in the scaled output.

    Args:
        content: SVG document text
        max_width: Target width of the result, None for source units
        max_error: Flattening tolerance in output units

    Returns:
        CrossSection (not centered)

    Raises:
        DecodeError: If the SVG cannot be parsed
        GeometryError: If the content is degenerate or the scale is invalid
    """
    _require_tolerance(max_error)
    section = _build_section(content, max_error)
    if max_width is None:
        return section

    if not math.isfinite(max_width) or max_width <= 0.0:
        raise GeometryError("target width must be positive", max_width=max_width)

    width = section.bounds().width
    if not math.isfinite(width) or width <= 0.0:
        raise GeometryError("cross-section has no width", width=width)

    scale_factor = max_width / width
    scaled_error = max_error / scale_factor
    if not math.isfinite(scaled_error) or scaled_error <= 0.0:
        raise GeometryError(
            "rescaled tolerance is not positive",
            scaled_error=scaled_error,
            scale_factor=scale_factor,
        )

    logger.debug(
        "Rescaling cross-section",
        width=width,
        target_width=max_width,
        scale_factor=scale_factor,
        scaled_error=scaled_error,
    )

    rescaled = _build_section(content, scaled_error)
    return rescaled.scale((scale_factor, scale_factor))


def sample_svg(
    content: str,
    max_width: float | None = None,
    max_error: float = DEFAULT_MAX_ERROR,
) -> CrossSection:
    """Sample SVG content and return a centered cross-section."""
    return center_cross_section(svg_to_cross_section(content, max_width, max_error))
