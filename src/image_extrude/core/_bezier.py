"""Internal Bezier curve flattening algorithms.

This is an internal module containing helper functions for the vector
sampler. Not intended for public use.
"""

import math

Coordinate = tuple[float, float]

# At most 2**16 segments per curve
MAX_DEPTH = 16


def _distance_to_chord(point: Coordinate, start: Coordinate, end: Coordinate) -> float:
    """Distance from point to the chord segment from start to end.

    Points beside the chord are measured perpendicular to it; points whose
    projection falls beyond an endpoint also count that overhang.
    """
    dx = end[0] - start[0]
    dy = end[1] - start[1]
    length = math.hypot(dx, dy)
    if length == 0.0:
        return math.hypot(point[0] - start[0], point[1] - start[1])
    perpendicular = abs(dx * (start[1] - point[1]) - dy * (start[0] - point[0])) / length
    along = ((point[0] - start[0]) * dx + (point[1] - start[1]) * dy) / length
    overhang = max(-along, along - length, 0.0)
    return max(perpendicular, overhang)


def _mid(a: Coordinate, b: Coordinate) -> Coordinate:
    return ((a[0] + b[0]) / 2, (a[1] + b[1]) / 2)


def flatten_quadratic(
    p0: Coordinate, p1: Coordinate, p2: Coordinate, tolerance: float, depth: int = 0
) -> list[Coordinate]:
    """Flatten a quadratic Bezier curve using recursive subdivision.

    The curve deviates from its chord by at most half the control point's
    distance to the chord, which is the flatness test used here.

    Args:
        p0: Start point
        p1: Control point
        p2: End point
        tolerance: Maximum distance from true curve

    Returns:
        Points approximating the curve, excluding p0
    """
    if depth >= MAX_DEPTH or _distance_to_chord(p1, p0, p2) / 2 <= tolerance:
        return [p2]

    # Subdivide at t=0.5
    q1 = _mid(p0, p1)
    r1 = _mid(p1, p2)
    mid = _mid(q1, r1)

    left = flatten_quadratic(p0, q1, mid, tolerance, depth + 1)
    right = flatten_quadratic(mid, r1, p2, tolerance, depth + 1)
    return left + right


def flatten_cubic(
    p0: Coordinate,
    p1: Coordinate,
    p2: Coordinate,
    p3: Coordinate,
    tolerance: float,
    depth: int = 0,
) -> list[Coordinate]:
    """Flatten a cubic Bezier curve using recursive subdivision.

    Uses De Casteljau's algorithm for subdivision. A cubic stays within 3/4
    of its farthest control point's distance to the chord.

    Args:
        p0: Start point
        p1: First control point
        p2: Second control point
        p3: End point
        tolerance: Maximum distance from true curve

    Returns:
        Points approximating the curve, excluding p0
    """
    spread = max(_distance_to_chord(p1, p0, p3), _distance_to_chord(p2, p0, p3))
    if depth >= MAX_DEPTH or spread * 0.75 <= tolerance:
        return [p3]

    # First level
    q1 = _mid(p0, p1)
    q2 = _mid(p1, p2)
    q3 = _mid(p2, p3)

    # Second level
    r1 = _mid(q1, q2)
    r2 = _mid(q2, q3)

    # Third level (midpoint)
    mid = _mid(r1, r2)

    left = flatten_cubic(p0, q1, r1, mid, tolerance, depth + 1)
    right = flatten_cubic(mid, r2, q3, p3, tolerance, depth + 1)
    return left + right
