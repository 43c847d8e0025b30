"""OpenCV implementation of the tracer backend.

Tracing runs in four steps:
1. Decode the bitmap with Pillow and composite it onto opaque white
2. Threshold luminance (explicit value or Otsu) into a foreground mask
3. Extract region boundaries on pixel edges with cv2.findContours, dropping
   regions of at most despeckle_area pixels
4. Smooth each outline into corner and cubic Bezier segments
"""

import importlib
import io
from types import ModuleType

import numpy as np
from PIL import Image, UnidentifiedImageError

from image_extrude.backends.base import TraceOptions, TracerBackend
from image_extrude.core.engine import EngineInitializer
from image_extrude.domain import PathSegment, TracedPath, TraceResult
from image_extrude.exceptions import DecodeError

# Rec. 709 luma weights
LUMA_WEIGHTS = np.array([0.2126, 0.7152, 0.0722])

# Outlines within half a pixel of a straight line are straightened
STRAIGHT_TOLERANCE_PX = 0.5

# Smoothing clamps alpha to this range before placing control points
MIN_SMOOTH_ALPHA = 0.55
MAX_SMOOTH_ALPHA = 1.0

# Mask upsampling factor before contour extraction
UPSAMPLE = 2

# Caps mitre length at sharp turns
MIN_MITER_DENOM = 0.5


def _load_cv2() -> ModuleType:
    return importlib.import_module("cv2")


CV2_ENGINE: EngineInitializer[ModuleType] = EngineInitializer("opencv", _load_cv2)


def composite_luminance(bitmap: bytes) -> np.ndarray:
    """Decode a bitmap and return its luminance over a white background.

    Pixels below full opacity are blended with white before the luminance is
    taken, so transparent regions read as light background.

    Args:
        bitmap: Encoded image bytes

    Returns:
        (height, width) uint8 luminance array

    Raises:
        DecodeError: If the bytes are not a readable image or exceed
            Pillow's decompression bomb limit
    """
    try:
        with Image.open(io.BytesIO(bitmap)) as image:
            rgba = np.asarray(image.convert("RGBA"), dtype=np.float64)
    except Image.DecompressionBombError as e:
        raise DecodeError(f"bitmap too large: {e}") from e
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise DecodeError(f"unreadable bitmap: {e}") from e

    alpha = rgba[..., 3:4] / 255.0
    rgb = 255.0 + (rgba[..., :3] - 255.0) * alpha
    luminance = rgb @ LUMA_WEIGHTS
    return np.clip(np.rint(luminance), 0, 255).astype(np.uint8)


def foreground_mask(
    luminance: np.ndarray,
    options: TraceOptions,
    cv2: ModuleType,
) -> tuple[np.ndarray, int | None]:
    """Split luminance into foreground and background.

    Foreground is every pixel darker than the threshold (lighter when
    inverted). An automatic threshold uses Otsu's method; an image of a
    single luminance has no foreground.

    Returns:
        Tuple of (boolean mask, threshold applied or None when undetermined)
    """
    if options.threshold:
        threshold = int(options.threshold)
    else:
        if luminance.size == 0 or luminance.min() == luminance.max():
            return np.zeros(luminance.shape, dtype=bool), None
        otsu, _ = cv2.threshold(luminance, 0, 255, cv2.THRESH_BINARY | cv2.THRESH_OTSU)
        threshold = int(otsu) + 1

    dark = luminance < threshold
    return (~dark if options.invert else dark), threshold


def _ddenom(p0: np.ndarray, p2: np.ndarray) -> float:
    ry = np.sign(p2[0] - p0[0])
    rx = -np.sign(p2[1] - p0[1])
    return float(ry * (p2[0] - p0[0]) - rx * (p2[1] - p0[1]))


def _dpara(p0: np.ndarray, p1: np.ndarray, p2: np.ndarray) -> float:
    return float((p1[0] - p0[0]) * (p2[1] - p0[1]) - (p2[0] - p0[0]) * (p1[1] - p0[1]))


def _point(p: np.ndarray) -> tuple[float, float]:
    return (float(p[0]), float(p[1]))


def _shoelace(ring: np.ndarray) -> float:
    x, y = ring[:, 0], ring[:, 1]
    return float(np.dot(x, np.roll(y, -1)) - np.dot(np.roll(x, -1), y)) / 2


def pixel_edge_outline(contour: np.ndarray, is_hole: bool) -> np.ndarray:
    """Move a contour from boundary pixel centers onto pixel edges.

    ``findContours`` returns the centers of the boundary pixels of an
    upsampled mask. Each vertex is pushed half a sample away from the
    foreground along the mitred normal of its two edges, then scaled back to
    source pixels. Convex corners land on pixel corners, so a rectangle of
    ``n`` pixels encloses an area of exactly ``n``; each concave corner is
    chamfered by a sixteenth of a pixel.

    Args:
        contour: (n, 2) integer contour in upsampled pixel indices
        is_hole: Whether the contour bounds a hole in the foreground

    Returns:
        (n, 2) float outline in source pixel coordinates
    """
    points = contour.astype(np.float64) + 0.5
    if len(points) < 3:
        # Single-sample strokes cannot occur after upsampling
        return points / UPSAMPLE

    incoming = points - np.roll(points, 1, axis=0)
    outgoing = np.roll(points, -1, axis=0) - points
    n1 = np.column_stack([-incoming[:, 1], incoming[:, 0]])
    n2 = np.column_stack([-outgoing[:, 1], outgoing[:, 0]])
    n1 /= np.maximum(np.linalg.norm(n1, axis=1, keepdims=True), 1e-12)
    n2 /= np.maximum(np.linalg.norm(n2, axis=1, keepdims=True), 1e-12)

    # Left normals point into a positively oriented ring
    direction = -1.0 if _shoelace(points) > 0 else 1.0
    if is_hole:
        direction = -direction

    cosine = np.sum(n1 * n2, axis=1, keepdims=True)
    miter = (n1 + n2) / np.maximum(1.0 + cosine, MIN_MITER_DENOM)
    return (points + 0.5 * direction * miter) / UPSAMPLE


def smooth_polygon(vertices: np.ndarray, alpha_max: float, area: float = 0.0) -> TracedPath:
    """Turn a closed polygon into corner and curve segments.

    Each vertex gets a segment running from the midpoint of its incoming edge
    to the midpoint of its outgoing edge. Its alpha measures how far the
    vertex sticks out relative to its neighbours; vertices with
    ``alpha >= alpha_max`` stay sharp corners, the rest become cubic curves.

    Args:
        vertices: (n, 2) polygon vertices, n >= 3
        alpha_max: Corner threshold
        area: Region area recorded on the path

    Returns:
        TracedPath starting at the midpoint of the last edge
    """
    count = len(vertices)
    segments = []
    for j in range(count):
        prev_vertex = vertices[j - 1]
        vertex = vertices[j]
        next_vertex = vertices[(j + 1) % count]
        end = (vertex + next_vertex) / 2

        denom = _ddenom(prev_vertex, next_vertex)
        if denom != 0.0:
            dd = abs(_dpara(prev_vertex, vertex, next_vertex) / denom)
            alpha = (1 - 1.0 / dd if dd > 1 else 0.0) / 0.75
        else:
            alpha = 4 / 3.0

        if alpha >= alpha_max:
            segments.append(PathSegment.line(_point(vertex)))
            segments.append(PathSegment.line(_point(end)))
            continue

        alpha = min(max(alpha, MIN_SMOOTH_ALPHA), MAX_SMOOTH_ALPHA)
        lam = 0.5 + 0.5 * alpha
        c1 = prev_vertex + lam * (vertex - prev_vertex)
        c2 = next_vertex + lam * (vertex - next_vertex)
        segments.append(PathSegment.cubic(_point(c1), _point(c2), _point(end)))

    start = (vertices[-1] + vertices[0]) / 2
    return TracedPath(start=_point(start), segments=segments, area=area)


class OpenCVTracer(TracerBackend):
    """Traces bitmaps using OpenCV contour extraction.

    Example:
        tracer = OpenCVTracer()
        result = tracer.trace(png_bytes, TraceOptions(despeckle_area=2))
        svg = tracer.paths_to_vector_content(result, size=1)
    """

    name = "opencv"

    def __init__(self, engine: EngineInitializer[ModuleType] | None = None) -> None:
        """Initialize the tracer.

        Args:
            engine: Initializer providing the cv2 module (shared by default)
        """
        self._engine = engine or CV2_ENGINE

    def trace(self, bitmap: bytes, options: TraceOptions) -> TraceResult:
        """Trace an encoded bitmap into closed paths.

        Raises:
            DecodeError: If the bitmap cannot be decoded
            EngineInitError: If OpenCV cannot be loaded
        """
        cv2 = self._engine.get()
        luminance = composite_luminance(bitmap)
        height, width = luminance.shape
        mask, threshold = foreground_mask(luminance, options, cv2)

        result = TraceResult(paths=[], width=width, height=height, threshold=threshold)
        if not mask.any():
            return result

        # Doubled so every region is at least two samples wide
        upsampled = cv2.resize(
            mask.astype(np.uint8),
            (width * UPSAMPLE, height * UPSAMPLE),
            interpolation=cv2.INTER_NEAREST,
        )
        padded = np.pad(upsampled, 1)
        contours, hierarchy = cv2.findContours(padded, cv2.RETR_CCOMP, cv2.CHAIN_APPROX_NONE)

        epsilon = STRAIGHT_TOLERANCE_PX
        if options.optimize_curves:
            epsilon += options.opt_tolerance

        for index, contour in enumerate(contours):
            is_hole = hierarchy[0][index][3] != -1
            outline = pixel_edge_outline(contour.reshape(-1, 2) - 1, is_hole)
            area = abs(_shoelace(outline))
            if area <= options.despeckle_area:
                continue
            simplified = cv2.approxPolyDP(
                outline.astype(np.float32).reshape(-1, 1, 2), epsilon, True
            ).reshape(-1, 2)
            if len(simplified) >= 3:
                outline = simplified.astype(np.float64)
            result.paths.append(smooth_polygon(outline, options.alpha_max, area))

        return result
