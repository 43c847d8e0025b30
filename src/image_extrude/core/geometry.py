"""Geometry adapter over the 2D polygon kernel and extrusion.

This module wraps shapely (2D polygon sets) and trimesh (extrusion) behind a
small CrossSection type with pure transforms:
- Even-odd construction from raw polygon rings
- Bounds, translate, scale, simplify
- Extrusion to a Solid
- Centering and fit-to-size helpers

All operations return new values; nothing is mutated in place.
"""

import math
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

import numpy as np
import shapely
import shapely.affinity
import trimesh
from shapely.geometry.base import BaseGeometry

from image_extrude.domain import Solid
from image_extrude.exceptions import GeometryError

Coordinate = tuple[float, float]
Ring = Sequence[Coordinate]

# Side length and height of the placeholder solid used on fallback
EMPTY_SOLID_SIZE = 0.001


class FillRule(str, Enum):
    """Fill rule used to turn polygon rings into an area."""

    EVEN_ODD = "EvenOdd"
    NON_ZERO = "NonZero"


@dataclass(frozen=True, slots=True)
class Bounds:
    """Axis-aligned bounding box.

    Attributes:
        min: (min_x, min_y)
        max: (max_x, max_y)
    """

    min: Coordinate
    max: Coordinate

    @property
    def width(self) -> float:
        return self.max[0] - self.min[0]

    @property
    def height(self) -> float:
        return self.max[1] - self.min[1]

    @property
    def center(self) -> Coordinate:
        return ((self.min[0] + self.max[0]) / 2, (self.min[1] + self.max[1]) / 2)


def winding_number(x: float, y: float, starts: np.ndarray, ends: np.ndarray) -> int:
    """Signed crossing count of a point against a ring set.

    Casts a horizontal ray from the point to the right and counts crossings
    with every edge of every ring: +1 for upward edges, -1 for downward ones.
    The count is odd exactly when the ray crosses an odd number of edges.

    Args:
        x: X coordinate of the point
        y: Y coordinate of the point
        starts: (n, 2) array of edge start points
        ends: (n, 2) array of edge end points

    Returns:
        Winding number of the ring set around the point
    """
    x1, y1 = starts[:, 0], starts[:, 1]
    x2, y2 = ends[:, 0], ends[:, 1]
    straddles = (y1 > y) != (y2 > y)
    with np.errstate(divide="ignore", invalid="ignore"):
        x_cross = (x2 - x1) * (y - y1) / (y2 - y1) + x1
    hits = straddles & (x < x_cross)
    upward = hits & (y2 > y1)
    return int(np.count_nonzero(upward)) - int(np.count_nonzero(hits & ~upward))


def _is_filled(winding: int, fill_rule: "FillRule") -> bool:
    if fill_rule is FillRule.EVEN_ODD:
        return winding % 2 == 1
    return winding != 0


def _clean_rings(polygons: Sequence[Ring]) -> list[np.ndarray]:
    rings = []
    for polygon in polygons:
        ring = np.asarray(polygon, dtype=float).reshape(-1, 2)
        if len(ring) > 1 and np.array_equal(ring[0], ring[-1]):
            ring = ring[:-1]
        if len(ring) < 3 or not np.isfinite(ring).all():
            continue
        rings.append(ring)
    return rings


def _filled_area(rings: list[np.ndarray], fill_rule: FillRule) -> BaseGeometry:
    """Resolve rings into the area they fill under ``fill_rule``.

    The ring linework is noded and polygonized into faces; a face is kept
    when the winding number at its representative point is filled.
    """
    lines = [shapely.LineString(np.vstack([ring, ring[:1]])) for ring in rings]
    noded = shapely.unary_union(lines)
    faces = shapely.get_parts(shapely.polygonize(shapely.get_parts(noded)))

    starts = np.vstack(rings)
    ends = np.vstack([np.roll(ring, -1, axis=0) for ring in rings])

    kept = []
    for face in faces:
        point = face.representative_point()
        if _is_filled(winding_number(point.x, point.y, starts, ends), fill_rule):
            kept.append(face)

    if not kept:
        return shapely.Polygon()
    return shapely.unary_union(kept)


class CrossSection:
    """A 2D filled shape used as an extrusion profile.

    Example:
        section = CrossSection.from_polygons([[(0, 0), (10, 0), (10, 5), (0, 5)]])
        solid = center_cross_section(section).extrude(2.0)
    """

    def __init__(self, geometry: BaseGeometry) -> None:
        """Initialize from a shapely areal geometry.

        Args:
            geometry: Polygon or MultiPolygon
        """
        self._geometry = geometry

    @classmethod
    def from_polygons(
        cls,
        polygons: Sequence[Ring],
        fill_rule: FillRule = FillRule.EVEN_ODD,
    ) -> "CrossSection":
        """Build a cross-section from closed polygon rings.

        Args:
            polygons: Rings as sequences of (x, y); closing point optional
            fill_rule: How overlapping rings combine

        Returns:
            New CrossSection

        Raises:
            GeometryError: If the rings enclose no area
        """
        rings = _clean_rings(polygons)
        if not rings:
            raise GeometryError("polygon set is empty", ring_count=len(polygons))

        geometry = _filled_area(rings, fill_rule)
        if geometry.is_empty or geometry.area <= 0.0:
            raise GeometryError("polygon set has zero area", ring_count=len(rings))
        return cls(geometry)

    @classmethod
    def square(cls, size: float, center: bool = True) -> "CrossSection":
        """Create an axis-aligned square."""
        offset = size / 2 if center else 0.0
        return cls(shapely.box(-offset, -offset, size - offset, size - offset))

    @property
    def geometry(self) -> BaseGeometry:
        """Underlying shapely geometry."""
        return self._geometry

    @property
    def area(self) -> float:
        return float(self._geometry.area)

    @property
    def is_empty(self) -> bool:
        return bool(self._geometry.is_empty)

    @property
    def polygons(self) -> list[shapely.Polygon]:
        """Disjoint polygons (with holes) making up the shape."""
        return [
            part for part in shapely.get_parts(self._geometry)
            if isinstance(part, shapely.Polygon) and not part.is_empty
        ]

    @property
    def num_polygons(self) -> int:
        return len(self.polygons)

    def bounds(self) -> Bounds:
        """Axis-aligned bounding box; NaN coordinates when empty."""
        min_x, min_y, max_x, max_y = self._geometry.bounds
        return Bounds(min=(min_x, min_y), max=(max_x, max_y))

    def translate(self, offset: Coordinate) -> "CrossSection":
        dx, dy = offset
        return CrossSection(shapely.affinity.translate(self._geometry, xoff=dx, yoff=dy))

    def scale(self, factors: Coordinate) -> "CrossSection":
        """Scale about the origin."""
        sx, sy = factors
        return CrossSection(
            shapely.affinity.scale(self._geometry, xfact=sx, yfact=sy, origin=(0.0, 0.0))
        )

    def simplify(self, tolerance: float) -> "CrossSection":
        """Remove vertices that deviate less than ``tolerance`` from the outline."""
        return CrossSection(self._geometry.simplify(tolerance, preserve_topology=True))

    def extrude(self, height: float) -> Solid:
        """Sweep the shape along +Z.

        Each polygon is triangulated with a constrained Delaunay triangulation
        (holes respected) and turned into a closed prism.

        Args:
            height: Extrusion height

        Returns:
            Solid spanning z = 0 to z = height

        Raises:
            GeometryError: If height is not a positive finite number or the
                shape has nothing to extrude
        """
        if not math.isfinite(height) or height <= 0.0:
            raise GeometryError("extrusion height must be positive", height=height)

        meshes = [
            _extrude_polygon(polygon, height)
            for polygon in self.polygons
            if polygon.area > 0.0
        ]
        meshes = [mesh for mesh in meshes if mesh is not None]
        if not meshes:
            raise GeometryError("nothing to extrude", area=self.area)

        combined = trimesh.util.concatenate(meshes) if len(meshes) > 1 else meshes[0]
        return Solid.from_arrays(combined.vertices, combined.faces)

    def __repr__(self) -> str:
        return f"CrossSection(polygons={self.num_polygons}, area={self.area:.6g})"


def _extrude_polygon(polygon: shapely.Polygon, height: float) -> trimesh.Trimesh | None:
    triangles = shapely.get_parts(shapely.constrained_delaunay_triangles(polygon))
    if len(triangles) == 0:
        return None

    corners = np.array([tri.exterior.coords[:3] for tri in triangles], dtype=float)

    # Counter-clockwise winding so caps face outward after extrusion
    ab = corners[:, 1] - corners[:, 0]
    ac = corners[:, 2] - corners[:, 0]
    cross = ab[:, 0] * ac[:, 1] - ab[:, 1] * ac[:, 0]
    corners = corners[cross != 0.0]
    clockwise = cross[cross != 0.0] < 0.0
    corners[clockwise] = corners[clockwise][:, ::-1]
    if len(corners) == 0:
        return None

    vertices, inverse = np.unique(corners.reshape(-1, 2), axis=0, return_inverse=True)
    faces = np.asarray(inverse).reshape(-1, 3)
    return trimesh.creation.extrude_triangulation(vertices=vertices, faces=faces, height=height)


def center_cross_section(section: CrossSection) -> CrossSection:
    """Center a cross-section at the origin based on its bounding box."""
    center_x, center_y = section.bounds().center
    if not (math.isfinite(center_x) and math.isfinite(center_y)):
        raise GeometryError("cannot center an empty cross-section")
    return section.translate((-center_x, -center_y))


def fit_to_size(section: CrossSection, max_size: float) -> CrossSection:
    """Scale a cross-section so its larger dimension equals ``max_size``.

    Args:
        section: Shape to scale
        max_size: Target size of the larger bounding-box dimension

    Returns:
        Uniformly scaled CrossSection

    Raises:
        GeometryError: If the shape is degenerate or max_size is invalid
    """
    if not math.isfinite(max_size) or max_size <= 0.0:
        raise GeometryError("target size must be positive", max_size=max_size)

    bounds = section.bounds()
    max_dim = max(bounds.width, bounds.height)
    if not math.isfinite(max_dim) or max_dim <= 0.0:
        raise GeometryError("cannot fit a degenerate shape", width=bounds.width, height=bounds.height)

    factor = max_size / max_dim
    return section.scale((factor, factor))


def create_empty_solid() -> Solid:
    """Create the near-zero-volume placeholder solid."""
    return CrossSection.square(EMPTY_SOLID_SIZE).extrude(EMPTY_SOLID_SIZE)
